# apps/core/models.py

import logging
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone
from PIL import Image

logger = logging.getLogger(__name__)


class User(AbstractUser):
    """
    Custom user model

    Login is by email; the username is derived from it at sign-up.
    """

    email = models.EmailField('email address', unique=True)
    display_name = models.CharField(max_length=150, blank=True)
    avatar = models.ImageField(upload_to='avatars/', blank=True, null=True)

    # === METADATA ===
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_account'

    def save(self, *args, **kwargs):
        """
        Save and shrink the avatar to at most 300x300
        """
        super().save(*args, **kwargs)

        if self.avatar:
            try:
                img = Image.open(self.avatar.path)
                if img.height > 300 or img.width > 300:
                    img.thumbnail((300, 300))
                    img.save(self.avatar.path)
            except (OSError, ValueError, NotImplementedError) as e:
                # storages without a local path or unreadable images keep the original
                logger.warning(f"⚠️ Avatar of {self.email} not resized: {e}")

    def get_display_name(self):
        return self.display_name or self.get_full_name() or self.email or self.username

    def get_accessible_boards(self):
        """
        Boards the user owns or has joined
        """
        return Board.objects.filter(
            Q(owner=self) | Q(memberships__user=self)
        ).distinct()

    def __str__(self):
        return self.get_display_name()


class Board(models.Model):
    """Kanban board - owns its lists, members and invitations"""

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='owned_boards'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    def create_default_lists(self):
        """Creates the default lists for a new (or empty) board"""
        default_lists = getattr(settings, 'TASKBOARD_DEFAULT_LISTS', ['To-Do', 'Doing', 'Done'])
        for idx, title in enumerate(default_lists):
            TaskList.objects.create(
                title=title,
                board=self,
                order=idx
            )

    def renumber_lists(self):
        """Keeps list positions contiguous (0..n-1)"""
        for idx, task_list in enumerate(self.lists.order_by('order', 'id')):
            if task_list.order != idx:
                task_list.order = idx
                task_list.save(update_fields=['order'])


class BoardMember(models.Model):
    """Membership of a user in a board, with a role"""

    ROLE_OWNER = 'OWNER'
    ROLE_MEMBER = 'MEMBER'

    ROLE_CHOICES = [
        (ROLE_OWNER, 'Owner'),
        (ROLE_MEMBER, 'Member'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='board_memberships'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'board_member'
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(fields=['board', 'user'], name='unique_board_member'),
        ]

    def __str__(self):
        return f"{self.user} - {self.board} ({self.role})"


class TaskList(models.Model):
    """Ordered list (column) of a board"""

    title = models.CharField(max_length=100)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='lists'
    )
    order = models.IntegerField(default=0)

    class Meta:
        db_table = 'list'
        ordering = ['order', 'id']
        indexes = [
            models.Index(fields=['board', 'order'], name='list_board_order_idx'),
        ]

    def __str__(self):
        return f"{self.title} - {self.board.title}"

    def renumber_cards(self):
        """Keeps card positions contiguous (0..n-1)"""
        for idx, card in enumerate(self.cards.order_by('order', 'id')):
            if card.order != idx:
                card.order = idx
                card.save(update_fields=['order'])


class Card(models.Model):
    """Card (task) inside a list"""

    PRIORITY_LOW = 'LOW'
    PRIORITY_MEDIUM = 'MEDIUM'
    PRIORITY_HIGH = 'HIGH'

    PRIORITY_CHOICES = [
        (PRIORITY_LOW, 'Low'),
        (PRIORITY_MEDIUM, 'Medium'),
        (PRIORITY_HIGH, 'High'),
    ]

    content = models.CharField(max_length=500)
    description = models.TextField(blank=True)
    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=PRIORITY_LOW
    )
    deadline = models.DateField(null=True, blank=True)
    task_list = models.ForeignKey(
        TaskList,
        on_delete=models.CASCADE,
        related_name='cards'
    )
    order = models.IntegerField(default=0)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_cards'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'card'
        ordering = ['order', 'id']
        indexes = [
            models.Index(fields=['task_list', 'order'], name='card_list_order_idx'),
            models.Index(fields=['deadline'], name='card_deadline_idx'),
        ]

    def __str__(self):
        return self.content

    @property
    def board(self):
        return self.task_list.board

    def is_overdue(self):
        """Deadline already passed"""
        if self.deadline:
            return timezone.localdate() > self.deadline
        return False

    def subtask_progress(self):
        """Percentage of completed subtasks (0 when there are none)"""
        subtasks = list(self.subtasks.all())
        if not subtasks:
            return 0
        completed = sum(1 for s in subtasks if s.completed)
        return round(completed * 100 / len(subtasks))

    @classmethod
    def normalize_priority(cls, value):
        """Accepts 'low', 'Low', 'LOW'... returns a valid choice or None"""
        if not value:
            return None
        value = str(value).strip().upper()
        valid = {choice for choice, _ in cls.PRIORITY_CHOICES}
        return value if value in valid else None


class Subtask(models.Model):
    """Checklist item of a card"""

    card = models.ForeignKey(
        Card,
        on_delete=models.CASCADE,
        related_name='subtasks'
    )
    content = models.CharField(max_length=300)
    completed = models.BooleanField(default=False)
    order = models.IntegerField(default=0)

    class Meta:
        db_table = 'subtask'
        ordering = ['order', 'id']

    def __str__(self):
        return self.content


def default_invitation_expiry():
    days = getattr(settings, 'TASKBOARD_INVITATION_EXPIRY_DAYS', 7)
    return timezone.now() + timedelta(days=days)


class BoardInvitation(models.Model):
    """Pending invitation of an email address to a board"""

    email = models.EmailField()
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='invitations'
    )
    inviter = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_invitations'
    )
    token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    expires_at = models.DateTimeField(default=default_invitation_expiry)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'board_invitation'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['email', 'expires_at'], name='invitation_email_exp_idx'),
        ]

    def __str__(self):
        return f"{self.email} -> {self.board.title}"

    def is_expired(self):
        return timezone.now() > self.expires_at


class Notification(models.Model):
    """In-app notification of a user"""

    TYPE_BOARD_INVITATION = 'BOARD_INVITATION'
    TYPE_INVITATION_ACCEPTED = 'INVITATION_ACCEPTED'
    TYPE_MEMBER_REMOVED = 'MEMBER_REMOVED'
    TYPE_DEADLINE_REMINDER = 'DEADLINE_REMINDER'

    TYPE_CHOICES = [
        (TYPE_BOARD_INVITATION, 'Board invitation'),
        (TYPE_INVITATION_ACCEPTED, 'Invitation accepted'),
        (TYPE_MEMBER_REMOVED, 'Removed from board'),
        (TYPE_DEADLINE_REMINDER, 'Deadline reminder'),
    ]

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    link = models.CharField(max_length=300, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notification'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.title}"

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'link': self.link,
            'is_read': self.is_read,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
