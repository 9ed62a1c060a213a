# apps/board/views.py

import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.models import Card, Subtask, TaskList
from apps.core.permissions import (
    BoardPermissions, ajax_login_required, ajax_requires_board_access,
    ajax_requires_object_access, json_error, requires_board_access
)
from apps.core.utils import (
    broadcast_board_event, build_month_grid, get_request_data,
    month_bounds, shift_month
)

from .board_service import (
    board_service, parse_ids, serialize_card, serialize_list, serialize_subtask
)

logger = logging.getLogger(__name__)


def _payload(request):
    """Request data or a 400 response"""
    try:
        return get_request_data(request), None
    except ValueError as e:
        return None, json_error(str(e))


# =================== BOARD ===================

@login_required
@requires_board_access
def board_kanban_view(request, board_id):
    """
    Kanban page
    The lists are rendered server side; board.js keeps them in sync
    """
    board = request.board
    board_data = board_service.get_board_data(board)

    context = {
        'title': f'{board.title} - Kanban',
        'board': board,
        'board_data': board_data,
        'lists': board_data['lists'],
        'priorities': Card.PRIORITY_CHOICES,
        'is_owner': BoardPermissions.is_board_owner(request.user, board),
        'can_edit': BoardPermissions.can_edit_board(request.user, board),
        'role': BoardPermissions.get_role(request.user, board),
        'websocket_path': f'/ws/board/{board_id}/',
    }

    return render(request, 'board/kanban.html', context)


@require_GET
@ajax_requires_board_access
def board_state(request, board_id):
    """Full board state as JSON"""
    return JsonResponse({
        'success': True,
        'board': board_service.get_board_data(request.board),
    })


# =================== LISTS ===================

@require_POST
@ajax_requires_board_access
def create_list(request, board_id):
    data, error = _payload(request)
    if error:
        return error

    success, message, task_list = board_service.create_list(request.board, data.get('title'))
    if not success:
        return json_error(message)

    payload = serialize_list(task_list, include_cards=False)
    payload['cards'] = []
    broadcast_board_event(board_id, 'list_created', {'list': payload}, user=request.user)

    return JsonResponse({'success': True, 'list': payload}, status=201)


@require_POST
@ajax_requires_object_access(TaskList, 'list_id')
def rename_list(request, list_id):
    data, error = _payload(request)
    if error:
        return error

    success, message, task_list = board_service.rename_list(request.board_object, data.get('title'))
    if not success:
        return json_error(message)

    payload = serialize_list(task_list, include_cards=False)
    broadcast_board_event(request.board.id, 'list_updated', {'list': payload}, user=request.user)

    return JsonResponse({'success': True, 'list': payload})


@require_http_methods(['POST', 'DELETE'])
@ajax_requires_object_access(TaskList, 'list_id')
def delete_list(request, list_id):
    board_service.delete_list(request.board_object)

    broadcast_board_event(request.board.id, 'list_deleted', {'list_id': list_id}, user=request.user)
    return JsonResponse({'success': True})


@require_POST
@ajax_requires_board_access
def reorder_lists(request, board_id):
    data, error = _payload(request)
    if error:
        return error

    try:
        list_ids = parse_ids(data.get('list_ids'))
    except ValueError as e:
        return json_error(str(e))

    success, message, _ = board_service.reorder_lists(request.board, list_ids)
    if not success:
        return json_error(message)

    broadcast_board_event(board_id, 'lists_reordered', {'list_ids': list_ids}, user=request.user)
    return JsonResponse({'success': True, 'list_ids': list_ids})


# =================== CARDS ===================

@require_POST
@ajax_requires_object_access(TaskList, 'list_id')
def create_card(request, list_id):
    data, error = _payload(request)
    if error:
        return error

    success, message, card = board_service.create_card(
        request.board_object,
        data.get('content'),
        data.get('priority'),
        user=request.user,
    )
    if not success:
        return json_error(message)

    payload = serialize_card(card)
    broadcast_board_event(request.board.id, 'card_created', {'card': payload}, user=request.user)

    return JsonResponse({'success': True, 'card': payload}, status=201)


@require_POST
@ajax_requires_object_access(Card, 'card_id')
def update_card(request, card_id):
    data, error = _payload(request)
    if error:
        return error

    success, message, card = board_service.update_card(request.board_object, data)
    if not success:
        return json_error(message)

    payload = serialize_card(card)
    broadcast_board_event(request.board.id, 'card_updated', {'card': payload}, user=request.user)

    return JsonResponse({'success': True, 'card': payload})


@require_http_methods(['POST', 'DELETE'])
@ajax_requires_object_access(Card, 'card_id')
def delete_card(request, card_id):
    card = request.board_object
    list_id = card.task_list_id

    board_service.delete_card(card)

    broadcast_board_event(
        request.board.id, 'card_deleted', {'card_id': card_id, 'list_id': list_id}, user=request.user
    )
    return JsonResponse({'success': True})


@require_POST
@ajax_requires_object_access(Card, 'card_id')
def move_card(request, card_id):
    """
    Drag-and-drop endpoint
    Body: {"list_id": <target list>, "index": <position in the target>}
    """
    data, error = _payload(request)
    if error:
        return error

    target_list_id = data.get('list_id')
    if target_list_id in (None, ''):
        return json_error('Target list is required')

    success, message, result = board_service.move_card(
        request.board_object, target_list_id, data.get('index', 0)
    )
    if not success:
        status = 404 if message.endswith('not found') else 400
        return json_error(message, status=status)

    card = result['card']
    moved = {
        'card_id': card.id,
        'from_list_id': result['from_list'].id,
        'to_list_id': result['to_list'].id,
        'index': card.order,
        'card_content': card.content,
        'from_list': result['from_list'].title,
        'to_list': result['to_list'].title,
    }
    broadcast_board_event(request.board.id, 'card_moved', dict(moved), user=request.user)

    return JsonResponse({'success': True, **moved})


@require_POST
@ajax_requires_object_access(TaskList, 'list_id')
def reorder_cards(request, list_id):
    data, error = _payload(request)
    if error:
        return error

    try:
        card_ids = parse_ids(data.get('card_ids'))
    except ValueError as e:
        return json_error(str(e))

    success, message, _ = board_service.reorder_cards(request.board_object, card_ids)
    if not success:
        return json_error(message)

    broadcast_board_event(
        request.board.id, 'cards_reordered', {'list_id': list_id, 'card_ids': card_ids}, user=request.user
    )
    return JsonResponse({'success': True, 'card_ids': card_ids})


@require_GET
@ajax_requires_object_access(Card, 'card_id')
def card_detail(request, card_id):
    """Card modal - HTML partial for HTMX, JSON otherwise"""
    card = request.board_object
    details = board_service.get_card_details(card)

    if request.htmx:
        context = {
            'card': card,
            'details': details,
            'subtasks': card.subtasks.order_by('order', 'id'),
            'priorities': Card.PRIORITY_CHOICES,
        }
        return render(request, 'board/partials/card_detail.html', context)

    return JsonResponse({'success': True, 'card': details})


@require_GET
@ajax_requires_board_access
def search_cards(request, board_id):
    success, message, cards = board_service.search_cards(
        request.board,
        request.GET.get('q', ''),
        request.GET.get('priority'),
    )
    if not success:
        return json_error(message)

    results = []
    for card in cards:
        result = serialize_card(card, include_subtasks=False)
        result['list_title'] = card.task_list.title
        results.append(result)

    return JsonResponse({'success': True, 'cards': results, 'count': len(results)})


# =================== SUBTASKS ===================

def _subtask_changed(request, card, action, subtask_data):
    broadcast_board_event(
        request.board.id,
        'subtask_changed',
        {
            'card_id': card.id,
            'action': action,
            'subtask': subtask_data,
            'progress': card.subtask_progress(),
        },
        user=request.user,
    )


@require_POST
@ajax_requires_object_access(Card, 'card_id')
def add_subtask(request, card_id):
    data, error = _payload(request)
    if error:
        return error

    card = request.board_object
    success, message, subtask = board_service.add_subtask(card, data.get('content'))
    if not success:
        return json_error(message)

    payload = serialize_subtask(subtask)
    _subtask_changed(request, card, 'added', payload)

    return JsonResponse({
        'success': True,
        'subtask': payload,
        'progress': card.subtask_progress(),
    }, status=201)


@require_POST
@ajax_requires_object_access(Subtask, 'subtask_id')
def toggle_subtask(request, subtask_id):
    _, _, subtask = board_service.toggle_subtask(request.board_object)
    card = subtask.card

    payload = serialize_subtask(subtask)
    _subtask_changed(request, card, 'toggled', payload)

    return JsonResponse({
        'success': True,
        'subtask': payload,
        'progress': card.subtask_progress(),
    })


@require_POST
@ajax_requires_object_access(Subtask, 'subtask_id')
def update_subtask(request, subtask_id):
    data, error = _payload(request)
    if error:
        return error

    success, message, subtask = board_service.update_subtask(request.board_object, data)
    if not success:
        return json_error(message)

    card = subtask.card
    payload = serialize_subtask(subtask)
    _subtask_changed(request, card, 'updated', payload)

    return JsonResponse({
        'success': True,
        'subtask': payload,
        'progress': card.subtask_progress(),
    })


@require_http_methods(['POST', 'DELETE'])
@ajax_requires_object_access(Subtask, 'subtask_id')
def delete_subtask(request, subtask_id):
    card = request.board_object.card
    board_service.delete_subtask(request.board_object)

    _subtask_changed(request, card, 'deleted', {'id': subtask_id})

    return JsonResponse({'success': True, 'progress': card.subtask_progress()})


# =================== CALENDAR ===================

def _calendar_month(request):
    """Month grid with the user's cards for ?year=&month="""
    first_day = month_bounds(request.GET.get('year'), request.GET.get('month'))
    weeks_template = build_month_grid(first_day, {})
    grid_start = weeks_template[0][0]['date']
    grid_end = weeks_template[-1][-1]['date']

    cards_by_day = {}
    for card in board_service.get_calendar_cards(request.user, grid_start, grid_end):
        cards_by_day.setdefault(card.deadline, []).append(card)

    return first_day, build_month_grid(first_day, cards_by_day)


@login_required
def calendar_view(request):
    first_day, weeks = _calendar_month(request)

    context = {
        'title': 'Calendar',
        'month': first_day,
        'weeks': weeks,
        'prev_month': shift_month(first_day, -1),
        'next_month': shift_month(first_day, 1),
    }

    return render(request, 'board/calendar.html', context)


@require_GET
@ajax_login_required
def calendar_api(request):
    """Calendar grid as JSON"""
    first_day, weeks = _calendar_month(request)
    prev_month = shift_month(first_day, -1)
    next_month = shift_month(first_day, 1)

    return JsonResponse({
        'success': True,
        'year': first_day.year,
        'month': first_day.month,
        'prev': {'year': prev_month.year, 'month': prev_month.month},
        'next': {'year': next_month.year, 'month': next_month.month},
        'weeks': [
            [
                {
                    'date': day['date'].isoformat(),
                    'in_month': day['in_month'],
                    'is_today': day['is_today'],
                    'cards': [
                        {
                            'id': card.id,
                            'content': card.content,
                            'priority': card.priority,
                            'deadline': card.deadline.isoformat(),
                            'board_id': card.task_list.board_id,
                            'board_title': card.task_list.board.title,
                        }
                        for card in day['cards']
                    ],
                }
                for day in week
            ]
            for week in weeks
        ],
    })
