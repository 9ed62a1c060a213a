# apps/core/management/commands/purge_expired_invitations.py

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.core.models import BoardInvitation


class Command(BaseCommand):
    help = 'Deletes board invitations that have already expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only reports how many invitations would be deleted'
        )

    def handle(self, *args, **options):
        expired = BoardInvitation.objects.filter(expires_at__lte=timezone.now())
        total = expired.count()

        if options['dry_run']:
            self.stdout.write(
                self.style.WARNING(f'🔍 {total} expired invitation(s) would be deleted')
            )
            return

        expired.delete()

        self.stdout.write(
            self.style.SUCCESS(f'✅ {total} expired invitation(s) deleted')
        )
