# apps/core/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Board, BoardMember

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Board)
def setup_new_board(sender, instance, created, **kwargs):
    """
    New board: OWNER membership for its owner plus the default lists
    """
    if not created:
        return

    BoardMember.objects.get_or_create(
        board=instance,
        user=instance.owner,
        defaults={'role': BoardMember.ROLE_OWNER},
    )

    if not instance.lists.exists():
        instance.create_default_lists()

    logger.info(f"📋 Board {instance.id} created by {instance.owner.email}")
