# apps/core/management/commands/send_deadline_reminders.py

from datetime import datetime, time, timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.urls import reverse
from django.utils import timezone

from apps.core.models import BoardMember, Card, Notification
from apps.core.notification_service import notification_service


class Command(BaseCommand):
    help = 'Notifies board members about cards whose deadline is coming up'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=getattr(settings, 'TASKBOARD_DEADLINE_REMINDER_DAYS', 1),
            help='Remind about cards due between today and today + N days'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only reports the reminders that would be sent'
        )

    def handle(self, *args, **options):
        days = max(options['days'], 0)
        today = timezone.localdate()
        start_of_day = timezone.make_aware(datetime.combine(today, time.min))

        cards = Card.objects.filter(
            deadline__gte=today,
            deadline__lte=today + timedelta(days=days),
        ).select_related('task_list__board').order_by('deadline', 'id')

        self.stdout.write(f'⏰ {cards.count()} card(s) due in the next {days} day(s)')

        sent = 0
        for card in cards:
            board = card.task_list.board
            link = f"{reverse('board:kanban', args=[board.id])}?card={card.id}"
            memberships = BoardMember.objects.filter(board=board).select_related('user')

            for membership in memberships:
                if self._already_reminded(membership.user, link, start_of_day):
                    continue

                if options['dry_run']:
                    self.stdout.write(f'  • {membership.user.email}: "{card.content}" ({card.deadline})')
                else:
                    notification_service.create_notification(
                        user=membership.user,
                        type=Notification.TYPE_DEADLINE_REMINDER,
                        title='Deadline approaching',
                        message=self._reminder_message(card, board, today),
                        link=link,
                    )
                sent += 1

        verb = 'would be sent' if options['dry_run'] else 'sent'
        self.stdout.write(self.style.SUCCESS(f'✅ {sent} reminder(s) {verb}'))

    def _reminder_message(self, card, board, today):
        if card.deadline == today:
            return f'"{card.content}" in "{board.title}" is due today'
        return f'"{card.content}" in "{board.title}" is due on {card.deadline.isoformat()}'

    def _already_reminded(self, user, link, start_of_day):
        """One reminder per card per user per day"""
        return Notification.objects.filter(
            user=user,
            type=Notification.TYPE_DEADLINE_REMINDER,
            link=link,
            created_at__gte=start_of_day,
        ).exists()
