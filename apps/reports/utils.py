# apps/reports/utils.py

from typing import Dict, List

from django.db.models import Count, Q
from django.utils import timezone
from django.utils.text import slugify

from apps.core.models import Board, Card


def board_cards(board: Board):
    """Cards of the board in display order (list position, then card position)"""
    return Card.objects.filter(
        task_list__board=board
    ).select_related('task_list', 'created_by').annotate(
        subtasks_total=Count('subtasks'),
        subtasks_done=Count('subtasks', filter=Q(subtasks__completed=True)),
    ).order_by('task_list__order', 'task_list__id', 'order', 'id')


def card_row(card: Card) -> List:
    """Flat row used by the CSV and Excel exports"""
    return [
        card.id,
        card.content,
        card.description,
        card.task_list.title,
        card.get_priority_display(),
        card.deadline.strftime('%Y-%m-%d') if card.deadline else '',
        'Yes' if card.is_overdue() else 'No',
        f"{card.subtasks_done}/{card.subtasks_total}",
        card.created_by.get_display_name() if card.created_by else '',
        card.created_at.strftime('%Y-%m-%d'),
    ]


CARD_HEADERS = [
    'ID', 'Card', 'Description', 'List', 'Priority', 'Deadline',
    'Overdue', 'Subtasks', 'Created by', 'Created at'
]


def build_board_summary(board: Board) -> Dict:
    """
    Board statistics

    Counts per list and per priority, overdue and due-soon cards,
    and subtask completion across the board.
    """
    today = timezone.localdate()
    cards = Card.objects.filter(task_list__board=board)

    lists = []
    for task_list in board.lists.annotate(cards_total=Count('cards')).order_by('order', 'id'):
        lists.append({
            'id': task_list.id,
            'title': task_list.title,
            'cards': task_list.cards_total,
        })

    priorities = {choice: 0 for choice, _ in Card.PRIORITY_CHOICES}
    for row in cards.order_by().values('priority').annotate(total=Count('id')):
        priorities[row['priority']] = row['total']

    subtasks = cards.aggregate(
        total=Count('subtasks'),
        done=Count('subtasks', filter=Q(subtasks__completed=True)),
    )
    subtasks_total = subtasks['total'] or 0
    subtasks_done = subtasks['done'] or 0

    return {
        'board_id': board.id,
        'title': board.title,
        'total_cards': cards.count(),
        'lists': lists,
        'priorities': priorities,
        'overdue': cards.filter(deadline__lt=today).count(),
        'due_today': cards.filter(deadline=today).count(),
        'members': board.memberships.count(),
        'subtasks': {
            'total': subtasks_total,
            'done': subtasks_done,
            'progress': round(subtasks_done * 100 / subtasks_total) if subtasks_total else 0,
        },
        'generated_at': timezone.now().isoformat(),
    }


def export_filename(board: Board, extension: str) -> str:
    """board_<id>_<slug>.<ext>"""
    slug = slugify(board.title) or 'board'
    return f"board_{board.id}_{slug}.{extension}"
