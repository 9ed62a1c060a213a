# apps/core/permissions.py

import logging
from functools import wraps

from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect

logger = logging.getLogger(__name__)


class BoardPermissions:
    """
    Board authorization rules

    Every check is a single ownership or membership lookup:
    - owner: full control (delete board, invite and remove members)
    - member: read and edit lists, cards and subtasks
    """

    @staticmethod
    def is_board_owner(user, board):
        """Checks if the user owns the board"""
        return user.is_authenticated and board.owner_id == user.id

    @staticmethod
    def is_board_member(user, board):
        """Checks if the user has a membership row in the board"""
        if not user.is_authenticated:
            return False
        return board.memberships.filter(user_id=user.id).exists()

    @staticmethod
    def has_board_access(user, board):
        """Owner or member"""
        if not user.is_authenticated:
            return False

        if board.owner_id == user.id:
            return True

        return BoardPermissions.is_board_member(user, board)

    @staticmethod
    def can_edit_board(user, board):
        """Any member can edit lists, cards and subtasks"""
        return BoardPermissions.has_board_access(user, board)

    @staticmethod
    def can_manage_members(user, board):
        """Only the owner invites and removes members"""
        return BoardPermissions.is_board_owner(user, board)

    @staticmethod
    def can_delete_board(user, board):
        """Only the owner deletes the board"""
        return BoardPermissions.is_board_owner(user, board)

    @staticmethod
    def get_role(user, board):
        """Returns OWNER, MEMBER or None"""
        from .models import BoardMember

        if BoardPermissions.is_board_owner(user, board):
            return BoardMember.ROLE_OWNER

        membership = board.memberships.filter(user_id=user.id).first() if user.is_authenticated else None
        return membership.role if membership else None


def json_error(message, status=400):
    """Standard JSON error body"""
    return JsonResponse({'success': False, 'error': message}, status=status)


# Path from each board object to its board
_BOARD_PATHS = {
    'Board': None,
    'TaskList': 'board',
    'Card': 'task_list__board',
    'Subtask': 'card__task_list__board',
}


def _resolve_board(obj):
    """Walks from a list/card/subtask to its board"""
    path = _BOARD_PATHS[obj.__class__.__name__]
    if path is None:
        return obj

    for attr in path.split('__'):
        obj = getattr(obj, attr)
    return obj


def _load_object(model, pk):
    path = _BOARD_PATHS[model.__name__]
    queryset = model.objects.all()
    if path:
        queryset = queryset.select_related(path)
    return queryset.filter(pk=pk).first()


# Decorators for views

def requires_board_access(view_func):
    """
    Decorator that checks board access for HTML views
    Expects the view to receive board_id
    """

    @wraps(view_func)
    def wrapped_view(request, board_id, *args, **kwargs):
        from .models import Board

        try:
            board = Board.objects.select_related('owner').get(id=board_id)
        except Board.DoesNotExist:
            messages.error(request, 'Board not found.')
            return redirect('core:dashboard')

        if not BoardPermissions.has_board_access(request.user, board):
            logger.warning(f"❌ {request.user} denied access to board {board_id}")
            messages.error(request, 'You do not have access to this board.')
            return redirect('core:dashboard')

        # Board available to the view
        request.board = board
        return view_func(request, board_id, *args, **kwargs)

    return wrapped_view


def ajax_requires_object_access(model, url_kwarg, owner_only=False):
    """
    Decorator for AJAX/HTMX views acting on a board object

    Loads model[url_kwarg], resolves its board and answers JSON
    401/404/403 instead of redirecting. The object goes to
    request.board_object and its board to request.board.
    """

    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return json_error('Authentication required', status=401)

            obj = _load_object(model, kwargs.get(url_kwarg))
            if obj is None:
                return json_error(f'{model._meta.verbose_name.capitalize()} not found', status=404)

            board = _resolve_board(obj)
            if owner_only:
                allowed = BoardPermissions.is_board_owner(request.user, board)
            else:
                allowed = BoardPermissions.has_board_access(request.user, board)

            if not allowed:
                logger.warning(
                    f"❌ {request.user} denied {view_func.__name__} on board {board.id}"
                )
                message = 'Only the owner can do this' if owner_only else 'You do not have access to this board'
                return json_error(message, status=403)

            request.board_object = obj
            request.board = board
            return view_func(request, *args, **kwargs)

        return wrapped_view

    return decorator


def ajax_requires_board_access(view_func):
    """JSON variant of requires_board_access"""
    from .models import Board
    return ajax_requires_object_access(Board, 'board_id')(view_func)


def ajax_requires_board_owner(view_func):
    """JSON variant restricted to the board owner"""
    from .models import Board
    return ajax_requires_object_access(Board, 'board_id', owner_only=True)(view_func)


def ajax_login_required(view_func):
    """Answers 401 JSON instead of redirecting to the login page"""

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_error('Authentication required', status=401)
        return view_func(request, *args, **kwargs)

    return wrapped_view
