# apps/core/views.py

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.cache import cache
from django.db.models import Case, IntegerField, Value, When
from django.db.models.functions import Lower
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .auth_service import auth_service
from .collaboration_service import collaboration_service
from .forms import BoardFilterForm, BoardForm, InviteForm, LoginForm, SignupForm
from .models import User
from .notification_service import notification_service
from .permissions import (
    BoardPermissions, ajax_login_required, ajax_requires_board_access,
    ajax_requires_board_owner, json_error, requires_board_access
)
from .utils import get_request_data

logger = logging.getLogger(__name__)


# =================== AUTHENTICATION ===================

def login_view(request):
    """
    Login view - the auth rules live in auth_service
    """
    if request.user.is_authenticated:
        return redirect('core:dashboard')

    form = LoginForm()

    if request.method == 'POST':
        form = LoginForm(request.POST)

        if form.is_valid():
            success, message = auth_service.log_in(
                request,
                form.cleaned_data['identifier'],
                form.cleaned_data['password'],
                form.cleaned_data['remember_me']
            )

            if success:
                messages.success(request, message)
                next_url = request.GET.get('next')
                if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
                    return redirect(next_url)
                return redirect('core:dashboard')

            messages.error(request, message)

    context = {
        'title': 'Log in - Taskboard',
        'form': form,
    }

    return render(request, 'core/login.html', context)


def signup_view(request):
    if request.user.is_authenticated:
        return redirect('core:dashboard')

    form = SignupForm()

    if request.method == 'POST':
        form = SignupForm(request.POST)

        if form.is_valid():
            success, message, user = auth_service.register_user({
                'name': form.cleaned_data['name'],
                'email': form.cleaned_data['email'],
                'password': form.cleaned_data['password'],
            })

            if success:
                messages.success(request, message)
                messages.info(request, 'You can log in now and create your first board.')
                return redirect('core:login')

            messages.error(request, message)

    context = {
        'title': 'Sign up - Taskboard',
        'form': form,
    }

    return render(request, 'core/signup.html', context)


def logout_view(request):
    auth_service.log_out(request)
    messages.info(request, 'You have been logged out.')
    return redirect('core:login')


# =================== DASHBOARD ===================

BOARD_SORTS = {
    'title-asc': ['title_lower', 'id'],
    'title-desc': ['-title_lower', '-id'],
    'date-newest': ['-created_at', '-id'],
    'date-oldest': ['created_at', 'id'],
}


def filter_boards(user, q='', board_filter='all', sort='date-newest'):
    """
    Boards the user can access, searched, filtered and sorted

    Each board is annotated with is_owner.
    """
    boards = user.get_accessible_boards().select_related('owner').annotate(
        is_owner=Case(
            When(owner_id=user.id, then=Value(1)),
            default=Value(0),
            output_field=IntegerField(),
        ),
        title_lower=Lower('title'),
    )

    if q:
        boards = boards.filter(title__icontains=q)

    if board_filter == 'owned':
        boards = boards.filter(owner=user)
    elif board_filter == 'shared':
        boards = boards.exclude(owner=user)

    return boards.order_by(*BOARD_SORTS.get(sort, BOARD_SORTS['date-newest']))


def serialize_board(board, user):
    return {
        'id': board.id,
        'title': board.title,
        'description': board.description,
        'owner': board.owner.get_display_name(),
        'is_owner': board.owner_id == user.id,
        'created_at': board.created_at.isoformat(),
        'updated_at': board.updated_at.isoformat(),
    }


@login_required
def dashboard(request):
    """
    Dashboard: my boards, boards shared with me and pending invitations
    """
    filter_form = BoardFilterForm(request.GET or None)
    q, board_filter, sort = filter_form.get_params()

    boards = list(filter_boards(request.user, q, board_filter, sort))
    notifications, unread_count = notification_service.get_notifications(request.user)

    context = {
        'title': 'Dashboard',
        'filter_form': filter_form,
        'board_form': BoardForm(),
        'owned_boards': [b for b in boards if b.is_owner],
        'shared_boards': [b for b in boards if not b.is_owner],
        'pending_invites': collaboration_service.get_pending_invites(request.user),
        'notifications': notifications,
        'unread_count': unread_count,
        'q': q,
        'filter': board_filter,
        'sort': sort,
    }

    if request.htmx:
        return render(request, 'core/partials/board_grid.html', context)

    return render(request, 'core/dashboard.html', context)


@require_GET
@ajax_login_required
def api_boards(request):
    """Boards as JSON (same search/filter/sort as the dashboard)"""
    q, board_filter, sort = BoardFilterForm(request.GET or None).get_params()
    boards = filter_boards(request.user, q, board_filter, sort)

    return JsonResponse({
        'success': True,
        'boards': [serialize_board(board, request.user) for board in boards],
    })


# =================== BOARDS ===================

@login_required
@require_POST
def create_board(request):
    """Creates a board; the signal adds the owner membership and default lists"""
    form = BoardForm(request.POST)

    if not form.is_valid():
        errors = '; '.join(e for field_errors in form.errors.values() for e in field_errors)
        messages.error(request, errors or 'Invalid board data.')
        return redirect('core:dashboard')

    board = form.save(commit=False)
    board.owner = request.user
    board.save()

    messages.success(request, f'Board "{board.title}" created!')
    return redirect('board:kanban', board_id=board.id)


@require_POST
@ajax_requires_board_access
def update_board(request, board_id):
    """Updates title/description (any member)"""
    board = request.board

    try:
        data = get_request_data(request)
    except ValueError as e:
        return json_error(str(e))

    form = BoardForm({
        'title': data.get('title', board.title),
        'description': data.get('description', board.description),
    }, instance=board)

    if not form.is_valid():
        return json_error('; '.join(e for errs in form.errors.values() for e in errs))

    board = form.save()
    return JsonResponse({'success': True, 'board': serialize_board(board, request.user)})


@login_required
@require_POST
@requires_board_access
def delete_board(request, board_id):
    """Deletes a board with everything in it (owner only)"""
    board = request.board

    if not BoardPermissions.can_delete_board(request.user, board):
        messages.error(request, 'Only the owner can delete this board.')
        return redirect('core:dashboard')

    title = board.title
    board.delete()
    logger.info(f"🗑️ Board {board_id} deleted by {request.user.email}")

    messages.success(request, f'Board "{title}" deleted.')
    return redirect('core:dashboard')


# =================== MEMBERS & INVITATIONS ===================

@require_GET
@ajax_requires_board_access
def board_members(request, board_id):
    success, message, members = collaboration_service.get_board_members(request.user, request.board)
    if not success:
        return json_error(message, status=403)

    return JsonResponse({
        'success': True,
        'members': members,
        'is_owner': BoardPermissions.is_board_owner(request.user, request.board),
        'role': BoardPermissions.get_role(request.user, request.board),
    })


@require_POST
@ajax_requires_board_owner
def invite_member(request, board_id):
    try:
        data = get_request_data(request)
    except ValueError as e:
        return json_error(str(e))

    form = InviteForm(data)
    if not form.is_valid():
        return json_error('Invalid email')

    success, message, invitation = collaboration_service.invite_user(
        request.user, request.board, form.cleaned_data['email']
    )
    if not success:
        return json_error(message)

    return JsonResponse({
        'success': True,
        'message': message,
        'invitation': {
            'id': invitation.id,
            'email': invitation.email,
            'expires_at': invitation.expires_at.isoformat(),
        }
    })


@require_POST
@ajax_requires_board_owner
def remove_member(request, board_id, member_id):
    success, message = collaboration_service.remove_member(request.user, request.board, member_id)
    if not success:
        status = 404 if message == 'Member not found' else 400
        return json_error(message, status=status)

    return JsonResponse({'success': True, 'message': message})


@require_GET
@ajax_login_required
def pending_invitations(request):
    invites = collaboration_service.get_pending_invites(request.user)

    return JsonResponse({
        'success': True,
        'invitations': [
            {
                'id': invite.id,
                'board_id': invite.board_id,
                'board_title': invite.board.title,
                'inviter': invite.inviter.get_display_name(),
                'expires_at': invite.expires_at.isoformat(),
            }
            for invite in invites
        ]
    })


@login_required
@require_POST
def accept_invitation(request, invitation_id):
    success, message, board = collaboration_service.accept_invite(request.user, invitation_id)

    if not success:
        messages.error(request, message)
        return redirect('core:dashboard')

    messages.success(request, message)
    return redirect('board:kanban', board_id=board.id)


@login_required
@require_POST
def decline_invitation(request, invitation_id):
    success, message = collaboration_service.decline_invite(request.user, invitation_id)

    if success:
        messages.info(request, message)
    else:
        messages.error(request, message)

    return redirect('core:dashboard')


# =================== NOTIFICATIONS ===================

@require_GET
@ajax_login_required
def notifications_list(request):
    """Latest notifications - HTML partial for HTMX, JSON otherwise"""
    notifications, unread_count = notification_service.get_notifications(request.user)

    if request.htmx:
        return render(request, 'core/partials/notifications.html', {
            'notifications': notifications,
            'unread_count': unread_count,
        })

    return JsonResponse({
        'success': True,
        'notifications': [n.to_dict() for n in notifications],
        'unread_count': unread_count,
    })


@require_POST
@ajax_login_required
def notification_mark_read(request, notification_id):
    success, message = notification_service.mark_as_read(request.user, notification_id)
    if not success:
        return json_error(message, status=404)
    return JsonResponse({'success': True})


@require_POST
@ajax_login_required
def notifications_mark_all_read(request):
    updated = notification_service.mark_all_as_read(request.user)
    return JsonResponse({'success': True, 'updated': updated})


@require_http_methods(['POST', 'DELETE'])
@ajax_login_required
def notification_delete(request, notification_id):
    success, message = notification_service.delete_notification(request.user, notification_id)
    if not success:
        return json_error(message, status=404)
    return JsonResponse({'success': True})


# =================== MONITORING ===================

def health_check(request):
    """
    Health check for monitoring
    """
    try:
        User.objects.exists()
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')
    except Exception as e:
        logger.error(f"❌ Health check failed: {e}")
        return JsonResponse({
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
        }, status=503)

    return JsonResponse({
        'status': 'healthy',
        'database': 'ok',
        'cache': 'ok',
        'timestamp': timezone.now().isoformat(),
    })
