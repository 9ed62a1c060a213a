# apps/core/collaboration_service.py

"""
Collaboration service - invitations and board membership
"""

import logging
from typing import Dict, List, Optional, Tuple

from django.db import transaction
from django.urls import reverse
from django.utils import timezone

from .models import Board, BoardInvitation, BoardMember, Notification, User
from .notification_service import notification_service
from .permissions import BoardPermissions
from .utils import avatar_color, board_group_name, broadcast

logger = logging.getLogger(__name__)


class CollaborationService:
    """
    Invites, pending invitations, acceptance and member management

    Public methods return (success, message[, obj]) tuples.
    """

    # =================== INVITATIONS ===================

    def invite_user(self, inviter: User, board: Board, email: str) -> Tuple[bool, str, Optional[BoardInvitation]]:
        """
        Invites an email address to the board (owner only)

        If an account already exists for the email, it also receives a
        BOARD_INVITATION notification.
        """
        if not BoardPermissions.can_manage_members(inviter, board):
            return False, "Only the board owner can invite members", None

        email = (email or '').strip().lower()
        if not email or '@' not in email:
            return False, "Invalid email", None

        if board.memberships.filter(user__email__iexact=email).exists():
            return False, "User is already a member of this board", None

        if board.invitations.filter(email__iexact=email, expires_at__gt=timezone.now()).exists():
            return False, "There is already a pending invitation for this email", None

        invitation = BoardInvitation.objects.create(
            email=email,
            board=board,
            inviter=inviter,
        )

        invitee = User.objects.filter(email__iexact=email).first()
        if invitee:
            notification_service.create_notification(
                user=invitee,
                type=Notification.TYPE_BOARD_INVITATION,
                title='Board invitation',
                message=f'{inviter.get_display_name()} invited you to join "{board.title}"',
                link=reverse('core:dashboard'),
            )

        logger.info(f"✉️ {inviter.email} invited {email} to board {board.id}")
        return True, f"Invitation sent to {email}", invitation

    def get_pending_invites(self, user: User) -> List[BoardInvitation]:
        """Non-expired invitations addressed to the user's email"""
        return list(
            BoardInvitation.objects.filter(
                email__iexact=user.email,
                expires_at__gt=timezone.now(),
            ).select_related('board', 'inviter').order_by('-created_at')
        )

    def accept_invite(self, user: User, invitation_id) -> Tuple[bool, str, Optional[Board]]:
        """
        Accepts an invitation

        Joining a board the user already belongs to is not an error;
        the invitation is consumed either way.
        """
        invitation, error = self._get_invitation_for(user, invitation_id)
        if error:
            return False, error, None

        board = invitation.board

        with transaction.atomic():
            BoardMember.objects.get_or_create(
                board=board,
                user=user,
                defaults={'role': BoardMember.ROLE_MEMBER},
            )
            inviter = invitation.inviter
            invitation.delete()

        if inviter.id != user.id:
            notification_service.create_notification(
                user=inviter,
                type=Notification.TYPE_INVITATION_ACCEPTED,
                title='Invitation accepted',
                message=f'{user.get_display_name()} joined "{board.title}"',
                link=reverse('board:kanban', args=[board.id]),
            )

        logger.info(f"✅ {user.email} joined board {board.id}")
        return True, f'You joined "{board.title}"', board

    def decline_invite(self, user: User, invitation_id) -> Tuple[bool, str]:
        invitation, error = self._get_invitation_for(user, invitation_id, check_expiry=False)
        if error:
            return False, error

        invitation.delete()
        logger.info(f"🚫 {user.email} declined invitation {invitation_id}")
        return True, "Invitation declined"

    # =================== MEMBERS ===================

    def get_board_members(self, user: User, board: Board) -> Tuple[bool, str, List[Dict]]:
        """Members with name, email, avatar and role (members only)"""
        if not BoardPermissions.has_board_access(user, board):
            return False, "You do not have access to this board", []

        members = []
        for membership in board.memberships.select_related('user').order_by('joined_at', 'id'):
            member = membership.user
            members.append({
                'id': membership.id,
                'user_id': member.id,
                'name': member.get_display_name(),
                'email': member.email,
                'avatar': member.avatar.url if member.avatar else None,
                'color': avatar_color(member.email),
                'role': membership.role,
                'joined_at': membership.joined_at.isoformat(),
            })

        return True, "", members

    def remove_member(self, user: User, board: Board, member_id) -> Tuple[bool, str]:
        """Removes a membership (owner only, never the OWNER row)"""
        if not BoardPermissions.can_manage_members(user, board):
            return False, "Only the board owner can remove members"

        membership = board.memberships.select_related('user').filter(id=member_id).first()
        if membership is None:
            return False, "Member not found"

        if membership.role == BoardMember.ROLE_OWNER or membership.user_id == board.owner_id:
            return False, "The board owner cannot be removed"

        removed_user = membership.user
        membership.delete()

        # open board sockets of the removed user drop out of the group
        broadcast(board_group_name(board.id), 'member_removed', {
            'user_id': removed_user.id,
            'user': removed_user.get_display_name(),
        })

        notification_service.create_notification(
            user=removed_user,
            type=Notification.TYPE_MEMBER_REMOVED,
            title='Removed from board',
            message=f'You were removed from "{board.title}"',
            link=reverse('core:dashboard'),
        )

        logger.info(f"👋 {removed_user.email} removed from board {board.id}")
        return True, f"{removed_user.get_display_name()} removed from the board"

    # =================== PRIVATE METHODS ===================

    def _get_invitation_for(self, user: User, invitation_id, check_expiry: bool = True):
        """Invitation addressed to the user, or an error message"""
        invitation = BoardInvitation.objects.select_related('board', 'inviter').filter(id=invitation_id).first()

        if invitation is None:
            return None, "Invitation not found"

        if invitation.email.lower() != (user.email or '').lower():
            logger.warning(f"❌ {user.email} tried to use invitation {invitation_id}")
            return None, "This invitation is not for you"

        if check_expiry and invitation.is_expired():
            return None, "Invitation has expired"

        return invitation, None


collaboration_service = CollaborationService()
