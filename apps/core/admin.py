# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils import timezone
from django.utils.html import format_html

from .models import (
    User, Board, BoardMember, TaskList, Card, Subtask,
    BoardInvitation, Notification
)


PRIORITY_COLORS = {
    Card.PRIORITY_LOW: '#10B981',  # green
    Card.PRIORITY_MEDIUM: '#F59E0B',  # yellow
    Card.PRIORITY_HIGH: '#EF4444',  # red
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the custom user model"""

    list_display = [
        'username', 'email', 'display_name', 'boards_count',
        'is_active', 'date_joined'
    ]
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email', 'display_name']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {
            'fields': ('display_name', 'avatar')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Profile', {
            'fields': ('email', 'display_name')
        }),
    )

    def boards_count(self, obj):
        return obj.board_memberships.count()

    boards_count.short_description = 'Boards'


class BoardMemberInline(admin.TabularInline):
    model = BoardMember
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']


class TaskListInline(admin.TabularInline):
    model = TaskList
    extra = 0
    fields = ['title', 'order']
    ordering = ['order']


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin for Kanban boards"""

    list_display = [
        'title', 'owner', 'lists_count', 'cards_count',
        'members_count', 'created_at'
    ]
    list_filter = ['created_at']
    search_fields = ['title', 'description', 'owner__email']
    readonly_fields = ['created_at', 'updated_at']

    inlines = [TaskListInline, BoardMemberInline]

    def lists_count(self, obj):
        return obj.lists.count()

    lists_count.short_description = 'Lists'

    def cards_count(self, obj):
        return Card.objects.filter(task_list__board=obj).count()

    cards_count.short_description = 'Cards'

    def members_count(self, obj):
        return obj.memberships.count()

    members_count.short_description = 'Members'


class CardInline(admin.TabularInline):
    model = Card
    extra = 0
    fields = ['content', 'priority', 'deadline', 'order']
    ordering = ['order']


@admin.register(TaskList)
class TaskListAdmin(admin.ModelAdmin):
    """Admin for board lists"""

    list_display = ['title', 'board', 'order', 'cards_count']
    list_filter = ['board']
    search_fields = ['title', 'board__title']
    ordering = ['board', 'order']

    inlines = [CardInline]

    def cards_count(self, obj):
        return obj.cards.count()

    cards_count.short_description = 'Cards'


class SubtaskInline(admin.TabularInline):
    model = Subtask
    extra = 0
    fields = ['content', 'completed', 'order']
    ordering = ['order']


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    """Admin for cards"""

    list_display = [
        'id', 'content', 'priority_badge', 'task_list',
        'deadline_status', 'progress', 'created_by'
    ]
    list_filter = ['priority', 'task_list__board', 'created_at']
    search_fields = ['content', 'description']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at', 'updated_at', 'created_by']

    fieldsets = (
        ('Card', {
            'fields': ('content', 'description', 'task_list', 'priority', 'deadline')
        }),
        ('Metadata', {
            'fields': ('order', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    inlines = [SubtaskInline]

    def priority_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            PRIORITY_COLORS.get(obj.priority, '#6B7280'),
            obj.get_priority_display()
        )

    priority_badge.short_description = 'Priority'

    def deadline_status(self, obj):
        if not obj.deadline:
            return '-'

        if obj.is_overdue():
            days = (timezone.localdate() - obj.deadline).days
            return format_html('<span style="color: red;">⚠️ {} days late</span>', days)

        days = (obj.deadline - timezone.localdate()).days
        if days == 0:
            return format_html('<span style="color: orange;">{}</span>', '⏰ Due today')
        return f"In {days} days"

    deadline_status.short_description = 'Deadline'

    def progress(self, obj):
        return f"{obj.subtask_progress()}%"

    progress.short_description = 'Subtasks'


@admin.register(BoardInvitation)
class BoardInvitationAdmin(admin.ModelAdmin):
    list_display = ['email', 'board', 'inviter', 'expires_at', 'expired']
    list_filter = ['expires_at', 'board']
    search_fields = ['email', 'board__title', 'inviter__email']
    readonly_fields = ['token', 'created_at']

    def expired(self, obj):
        return obj.is_expired()

    expired.boolean = True


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'type', 'title', 'is_read', 'created_at']
    list_filter = ['type', 'is_read', 'created_at']
    search_fields = ['title', 'message', 'user__email']
    readonly_fields = ['created_at']
