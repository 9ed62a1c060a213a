# apps/board/board_service.py

"""
Board service - lists, cards, subtasks and their positions

Positions are kept contiguous (0..n-1) inside each board (lists) and
each list (cards). Moves and reorders run inside one transaction with
the affected rows locked; concurrent writers resolve as last write wins.
"""

import logging
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import Prefetch, Q

from apps.core.models import Board, Card, Subtask, TaskList
from apps.core.utils import parse_date

logger = logging.getLogger(__name__)


# =================== SERIALIZATION ===================

def serialize_subtask(subtask: Subtask) -> Dict:
    return {
        'id': subtask.id,
        'content': subtask.content,
        'completed': subtask.completed,
        'order': subtask.order,
    }


def serialize_card(card: Card, include_subtasks: bool = True) -> Dict:
    data = {
        'id': card.id,
        'content': card.content,
        'description': card.description,
        'priority': card.priority,
        'deadline': card.deadline.isoformat() if card.deadline else None,
        'is_overdue': card.is_overdue(),
        'order': card.order,
        'list_id': card.task_list_id,
        'created_by': card.created_by.get_display_name() if card.created_by else None,
    }
    if include_subtasks:
        data['subtasks'] = [serialize_subtask(s) for s in card.subtasks.all()]
        data['progress'] = card.subtask_progress()
    return data


def serialize_list(task_list: TaskList, include_cards: bool = True) -> Dict:
    data = {
        'id': task_list.id,
        'title': task_list.title,
        'order': task_list.order,
        'board_id': task_list.board_id,
    }
    if include_cards:
        data['cards'] = [serialize_card(card) for card in task_list.cards.all()]
    return data


def parse_ids(value) -> List[int]:
    """
    [1, '2'] or '1,2' -> [1, 2]
    Raises ValueError for anything else
    """
    if value is None:
        raise ValueError("Missing ids")
    if isinstance(value, str):
        value = [v for v in value.split(',') if v.strip()]
    if not isinstance(value, (list, tuple)):
        raise ValueError("Ids must be a list")

    try:
        return [int(v) for v in value]
    except (TypeError, ValueError):
        raise ValueError("Ids must be integers")


class BoardService:
    """
    Board content operations

    Public mutating methods return (success, message, obj) tuples;
    authorization is checked by the view decorators before calling them.
    """

    def __init__(self):
        self._search_limit = getattr(settings, 'TASKBOARD_SEARCH_MAX_RESULTS', 20)

    # =================== BOARD ===================

    def get_board_data(self, board: Board) -> Dict:
        """
        Lists ordered by position, each with its cards and subtasks

        A board without lists gets the default lists first.
        """
        if not board.lists.exists():
            logger.info(f"📋 Board {board.id} has no lists, seeding defaults")
            board.create_default_lists()

        lists = board.lists.order_by('order', 'id').prefetch_related(
            Prefetch(
                'cards',
                queryset=Card.objects.select_related('created_by').prefetch_related(
                    Prefetch('subtasks', queryset=Subtask.objects.order_by('order', 'id'))
                ).order_by('order', 'id')
            )
        )

        return {
            'id': board.id,
            'title': board.title,
            'description': board.description,
            'owner_id': board.owner_id,
            'lists': [serialize_list(task_list) for task_list in lists],
        }

    # =================== LISTS ===================

    def create_list(self, board: Board, title: str) -> Tuple[bool, str, Optional[TaskList]]:
        """Appends a list at the end of the board"""
        title = (title or '').strip()
        if not title:
            return False, "List title is required", None

        with transaction.atomic():
            # lock the board row so concurrent appends get distinct positions
            Board.objects.select_for_update().filter(id=board.id).first()
            task_list = TaskList.objects.create(
                title=title[:100],
                board=board,
                order=board.lists.count(),
            )

        return True, "List created", task_list

    def rename_list(self, task_list: TaskList, title: str) -> Tuple[bool, str, Optional[TaskList]]:
        title = (title or '').strip()
        if not title:
            return False, "List title is required", None

        task_list.title = title[:100]
        task_list.save(update_fields=['title'])
        return True, "List renamed", task_list

    def delete_list(self, task_list: TaskList) -> Tuple[bool, str, None]:
        """Deletes the list with its cards; remaining lists are renumbered"""
        board = task_list.board

        with transaction.atomic():
            task_list.delete()
            board.renumber_lists()

        return True, "List deleted", None

    def reorder_lists(self, board: Board, list_ids: List[int]) -> Tuple[bool, str, None]:
        """list_ids must be exactly the board's list ids, in the new order"""
        with transaction.atomic():
            current = list(
                TaskList.objects.select_for_update().filter(board=board).values_list('id', flat=True)
            )
            if len(list_ids) != len(set(list_ids)) or set(list_ids) != set(current):
                return False, "List ids must match the board's lists", None

            for idx, list_id in enumerate(list_ids):
                TaskList.objects.filter(id=list_id).update(order=idx)

        logger.info(f"↔️ Lists of board {board.id} reordered")
        return True, "Lists reordered", None

    # =================== CARDS ===================

    def create_card(self, task_list: TaskList, content: str, priority=None, user=None) -> Tuple[bool, str, Optional[Card]]:
        """Appends a card at the end of the list"""
        content = (content or '').strip()
        if not content:
            return False, "Card content is required", None

        if priority:
            normalized = Card.normalize_priority(priority)
            if normalized is None:
                return False, "Invalid priority", None
        else:
            normalized = Card.PRIORITY_LOW

        with transaction.atomic():
            TaskList.objects.select_for_update().filter(id=task_list.id).first()
            card = Card.objects.create(
                content=content[:500],
                priority=normalized,
                task_list=task_list,
                order=task_list.cards.count(),
                created_by=user if user is not None and user.is_authenticated else None,
            )

        return True, "Card created", card

    def update_card(self, card: Card, data: Dict) -> Tuple[bool, str, Optional[Card]]:
        """
        Partial update of content, description, priority and deadline

        deadline accepts 'YYYY-MM-DD'; an empty value clears it.
        """
        fields = []

        if 'content' in data:
            content = (data.get('content') or '').strip()
            if not content:
                return False, "Card content cannot be empty", None
            card.content = content[:500]
            fields.append('content')

        if 'description' in data:
            card.description = (data.get('description') or '').strip()
            fields.append('description')

        if 'priority' in data:
            priority = Card.normalize_priority(data.get('priority'))
            if priority is None:
                return False, "Invalid priority", None
            card.priority = priority
            fields.append('priority')

        if 'deadline' in data:
            deadline = data.get('deadline')
            if deadline in (None, ''):
                card.deadline = None
            else:
                try:
                    card.deadline = parse_date(deadline)
                except ValueError:
                    return False, "Invalid deadline, use YYYY-MM-DD", None
            fields.append('deadline')

        if fields:
            card.save(update_fields=fields + ['updated_at'])

        return True, "Card updated", card

    def delete_card(self, card: Card) -> Tuple[bool, str, None]:
        """Deletes the card; the remaining cards of its list are renumbered"""
        task_list = card.task_list

        with transaction.atomic():
            card.delete()
            task_list.renumber_cards()

        return True, "Card deleted", None

    def move_card(self, card: Card, target_list_id, new_index) -> Tuple[bool, str, Optional[Dict]]:
        """
        Moves a card to target_list at new_index

        The index is clamped to [0, len(target)]. Within one list this is
        a reorder; across lists both lists end up contiguous.

        Returns (success, message, {'card', 'from_list', 'to_list'})
        """
        try:
            new_index = int(new_index)
        except (TypeError, ValueError):
            return False, "Invalid position", None

        try:
            target_list_id = int(target_list_id)
        except (TypeError, ValueError):
            return False, "Invalid list", None

        with transaction.atomic():
            card = Card.objects.select_for_update().select_related('task_list').filter(id=card.id).first()
            if card is None:
                return False, "Card not found", None

            target = TaskList.objects.select_for_update().filter(id=target_list_id).first()
            if target is None:
                return False, "List not found", None

            source = card.task_list
            if target.board_id != source.board_id:
                return False, "Cards can only move inside the same board", None

            siblings = list(
                Card.objects.select_for_update()
                .filter(task_list=target)
                .exclude(id=card.id)
                .order_by('order', 'id')
            )

            new_index = max(0, min(new_index, len(siblings)))
            siblings.insert(new_index, card)

            card.task_list = target
            for idx, sibling in enumerate(siblings):
                if sibling.id == card.id:
                    sibling.order = idx
                    sibling.save(update_fields=['task_list', 'order', 'updated_at'])
                elif sibling.order != idx:
                    sibling.order = idx
                    sibling.save(update_fields=['order'])

            if source.id != target.id:
                source.renumber_cards()

        logger.info(f"🔀 Card {card.id} moved to list {target.id} at {new_index}")

        return True, "Card moved", {
            'card': card,
            'from_list': source,
            'to_list': target,
        }

    def reorder_cards(self, task_list: TaskList, card_ids: List[int]) -> Tuple[bool, str, None]:
        """card_ids must be exactly the list's card ids, in the new order"""
        with transaction.atomic():
            current = list(
                Card.objects.select_for_update().filter(task_list=task_list).values_list('id', flat=True)
            )
            if len(card_ids) != len(set(card_ids)) or set(card_ids) != set(current):
                return False, "Card ids must match the list's cards", None

            for idx, card_id in enumerate(card_ids):
                Card.objects.filter(id=card_id).update(order=idx)

        logger.info(f"↕️ Cards of list {task_list.id} reordered")
        return True, "Cards reordered", None

    # =================== SUBTASKS ===================

    def add_subtask(self, card: Card, content: str) -> Tuple[bool, str, Optional[Subtask]]:
        content = (content or '').strip()
        if not content:
            return False, "Subtask content is required", None

        subtask = Subtask.objects.create(
            card=card,
            content=content[:300],
            order=card.subtasks.count(),
        )
        return True, "Subtask added", subtask

    def toggle_subtask(self, subtask: Subtask) -> Tuple[bool, str, Subtask]:
        subtask.completed = not subtask.completed
        subtask.save(update_fields=['completed'])
        return True, "Subtask updated", subtask

    def update_subtask(self, subtask: Subtask, data: Dict) -> Tuple[bool, str, Optional[Subtask]]:
        fields = []

        if 'content' in data:
            content = (data.get('content') or '').strip()
            if not content:
                return False, "Subtask content cannot be empty", None
            subtask.content = content[:300]
            fields.append('content')

        if 'completed' in data:
            completed = data.get('completed')
            if isinstance(completed, str):
                completed = completed.lower() in ('1', 'true', 'on', 'yes')
            subtask.completed = bool(completed)
            fields.append('completed')

        if fields:
            subtask.save(update_fields=fields)

        return True, "Subtask updated", subtask

    def delete_subtask(self, subtask: Subtask) -> Tuple[bool, str, None]:
        card = subtask.card

        with transaction.atomic():
            subtask.delete()
            for idx, remaining in enumerate(card.subtasks.order_by('order', 'id')):
                if remaining.order != idx:
                    remaining.order = idx
                    remaining.save(update_fields=['order'])

        return True, "Subtask deleted", None

    # =================== QUERIES ===================

    def get_card_details(self, card: Card) -> Dict:
        """Card with list title, subtasks and progress"""
        data = serialize_card(card)
        data['list_title'] = card.task_list.title
        data['board_id'] = card.task_list.board_id
        data['created_at'] = card.created_at.isoformat()
        data['updated_at'] = card.updated_at.isoformat()
        return data

    def search_cards(self, board: Board, q: str = '', priority=None) -> Tuple[bool, str, List[Card]]:
        """Content/description match with an optional priority filter"""
        cards = Card.objects.filter(task_list__board=board).select_related('task_list', 'created_by')

        q = (q or '').strip()
        if q:
            cards = cards.filter(Q(content__icontains=q) | Q(description__icontains=q))

        if priority:
            normalized = Card.normalize_priority(priority)
            if normalized is None:
                return False, "Invalid priority", []
            cards = cards.filter(priority=normalized)

        cards = cards.order_by('task_list__order', 'order', 'id')[:self._search_limit]
        return True, "", list(cards)

    def get_calendar_cards(self, user, start=None, end=None) -> List[Card]:
        """Cards with a deadline in the boards the user can access"""
        cards = Card.objects.filter(
            deadline__isnull=False,
            task_list__board__in=user.get_accessible_boards(),
        ).select_related('task_list__board')

        if start:
            cards = cards.filter(deadline__gte=start)
        if end:
            cards = cards.filter(deadline__lte=end)

        return list(cards.order_by('deadline', 'task_list__board__title', 'order', 'id'))


board_service = BoardService()
