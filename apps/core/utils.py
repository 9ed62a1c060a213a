# apps/core/utils.py

import calendar
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

FIRST_GRID_MONTH = date(1, 2, 1)
LAST_GRID_MONTH = date(9999, 11, 1)


def avatar_color(seed: str) -> str:
    """
    Stable color derived from a username/email
    Used for avatars when there is no picture
    """
    hash_hex = hashlib.md5(seed.encode()).hexdigest()
    return f"#{hash_hex[:6]}"


def board_group_name(board_id) -> str:
    return f'board_{board_id}'


def user_group_name(user_id) -> str:
    return f'user_{user_id}'


def broadcast(group: str, event_type: str, message: Dict) -> None:
    """
    Sends an event to a channel layer group

    event_type is the consumer handler name (e.g. 'card_moved').
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    message.setdefault('timestamp', timezone.now().isoformat())
    async_to_sync(channel_layer.group_send)(
        group,
        {
            'type': event_type,
            'message': message,
        }
    )
    logger.debug(f"📡 {event_type} -> {group}")


def broadcast_board_event(board_id, event_type: str, message: Dict, user=None) -> None:
    """Board event with the acting user attached"""
    if user is not None:
        message.setdefault('user', user.get_display_name())
        message.setdefault('user_id', user.id)
    broadcast(board_group_name(board_id), 'board_event', {'event': event_type, **message})


def parse_date(value) -> Optional[date]:
    """
    Parses 'YYYY-MM-DD' (or an ISO datetime) into a date
    Raises ValueError for anything else
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    value = str(value).strip()
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValueError(f"Invalid date: {value}")


def month_bounds(year: Optional[int], month: Optional[int]) -> date:
    """First day of the requested month, falling back to the current month"""
    today = timezone.localdate()
    try:
        year = int(year) if year else today.year
        month = int(month) if month else today.month
        first_day = date(year, month, 1)
    except (TypeError, ValueError, OverflowError):
        return today.replace(day=1)

    # the grid spills into the neighbouring months, which must stay representable
    if not FIRST_GRID_MONTH <= first_day <= LAST_GRID_MONTH:
        return today.replace(day=1)
    return first_day


def build_month_grid(first_day: date, cards_by_day: Dict[date, List]) -> List[List[Dict]]:
    """
    Calendar grid for a month

    Weeks start on Sunday; the grid starts at the week containing the 1st
    and ends at the week containing the last day of the month.
    """
    today = timezone.localdate()
    cal = calendar.Calendar(firstweekday=6)

    weeks = []
    for week in cal.monthdatescalendar(first_day.year, first_day.month):
        weeks.append([
            {
                'date': day,
                'in_month': day.month == first_day.month,
                'is_today': day == today,
                'cards': cards_by_day.get(day, []),
            }
            for day in week
        ])
    return weeks


def shift_month(first_day: date, delta: int) -> date:
    """Adds delta months to the first day of a month"""
    month_index = first_day.year * 12 + (first_day.month - 1) + delta
    return date(month_index // 12, month_index % 12 + 1, 1)


def get_request_data(request) -> Dict:
    """
    Request payload from a JSON body or a form POST

    Raises ValueError for a malformed JSON body.
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            raise ValueError("Invalid JSON")
        if not isinstance(data, dict):
            raise ValueError("Invalid JSON")
        return data

    return request.POST.dict()
