# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from apps.core.models import Board
from apps.core.notification_service import notification_service
from apps.core.permissions import BoardPermissions
from apps.core.utils import board_group_name, user_group_name

from .board_service import board_service

logger = logging.getLogger(__name__)


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Realtime channel of a Kanban board

    - relays board events (cards moved, lists changed...) to every member
    - announces members joining and leaving
    - answers ping and sync_board requests
    - closes the sockets of members removed from the board
    """

    REMOVED_CLOSE_CODE = 4003

    async def connect(self):
        """
        Joins the board group
        Only authenticated board members are accepted
        """
        self.board_id = self.scope['url_route']['kwargs']['board_id']
        self.user = self.scope.get('user')

        if self.user is None or not self.user.is_authenticated:
            logger.warning("❌ WebSocket rejected - user not authenticated")
            await self.close()
            return

        has_access = await self.check_board_access()
        if not has_access:
            logger.warning(f"❌ WebSocket rejected - {self.user.email} has no access to board {self.board_id}")
            await self.close()
            return

        self.board_group_name = board_group_name(self.board_id)

        await self.channel_layer.group_add(
            self.board_group_name,
            self.channel_name
        )

        await self.accept()

        await self.send(text_data=json.dumps({
            'type': 'connection_established',
            'board_id': int(self.board_id),
            'heartbeat_interval': getattr(settings, 'TASKBOARD_WS_HEARTBEAT_INTERVAL', 30),
            'timestamp': self.get_timestamp()
        }))

        await self.channel_layer.group_send(
            self.board_group_name,
            {
                'type': 'user_joined',
                'message': {
                    'user': self.user.get_display_name(),
                    'user_id': self.user.id,
                    'timestamp': self.get_timestamp()
                }
            }
        )

        logger.info(f"✅ WebSocket connected - {self.user.email} on board {self.board_id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'board_group_name'):
            await self.channel_layer.group_send(
                self.board_group_name,
                {
                    'type': 'user_left',
                    'message': {
                        'user': self.user.get_display_name(),
                        'user_id': self.user.id,
                        'timestamp': self.get_timestamp()
                    }
                }
            )

            await self.channel_layer.group_discard(
                self.board_group_name,
                self.channel_name
            )

            logger.info(f"🔌 WebSocket disconnected - {self.user.email} from board {self.board_id}")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Client messages: ping, sync_board
        Malformed frames are logged and ignored
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ Invalid JSON received via WebSocket from {self.user.email}")
            return

        if not isinstance(data, dict):
            logger.error(f"❌ Unexpected WebSocket frame from {self.user.email}")
            return

        message_type = data.get('type')

        if message_type == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': self.get_timestamp()
            }))

        elif message_type == 'sync_board':
            board_data = await self.get_board_state()
            await self.send(text_data=json.dumps({
                'type': 'board_sync',
                'board_data': board_data,
                'timestamp': self.get_timestamp()
            }))

        else:
            logger.debug(f"Ignoring WebSocket message type {message_type!r}")

    # === Group event handlers ===

    async def board_event(self, event):
        """
        Board mutation broadcast by the views
        The event name travels in message['event']
        """
        message = dict(event['message'])
        event_type = message.pop('event')
        await self.send(text_data=json.dumps({
            'type': event_type,
            'message': message
        }))

    async def user_joined(self, event):
        message = event['message']
        # not echoed to the user who joined
        if message['user_id'] != self.user.id:
            await self.send(text_data=json.dumps({
                'type': 'user_joined',
                'message': message
            }))

    async def user_left(self, event):
        message = event['message']
        if message['user_id'] != self.user.id:
            await self.send(text_data=json.dumps({
                'type': 'user_left',
                'message': message
            }))

    async def member_removed(self, event):
        """
        A membership was deleted
        The removed user's sockets leave the group and are closed
        """
        message = event['message']
        if message['user_id'] != self.user.id:
            await self.send(text_data=json.dumps({
                'type': 'member_removed',
                'message': message
            }))
            return

        await self.channel_layer.group_discard(
            self.board_group_name,
            self.channel_name
        )
        del self.board_group_name

        logger.info(f"🚫 WebSocket closed - {self.user.email} was removed from board {self.board_id}")
        await self.close(code=self.REMOVED_CLOSE_CODE)

    # === Helpers ===

    @database_sync_to_async
    def check_board_access(self):
        board = Board.objects.filter(id=self.board_id).first()
        if board is None:
            return False
        return BoardPermissions.has_board_access(self.user, board)

    @database_sync_to_async
    def get_board_state(self):
        board = Board.objects.filter(id=self.board_id).first()
        if board is None:
            return {}
        return board_service.get_board_data(board)

    def get_timestamp(self):
        return timezone.now().isoformat()


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    Personal notification channel (user_<id> group)
    """

    async def connect(self):
        self.user = self.scope.get('user')

        if self.user is None or not self.user.is_authenticated:
            await self.close()
            return

        self.user_group_name = user_group_name(self.user.id)

        await self.channel_layer.group_add(
            self.user_group_name,
            self.channel_name
        )

        await self.accept()
        logger.info(f"🔔 Notifications connected for {self.user.email}")

    async def disconnect(self, close_code):
        if hasattr(self, 'user_group_name'):
            await self.channel_layer.group_discard(
                self.user_group_name,
                self.channel_name
            )
            logger.info(f"🔕 Notifications disconnected for {self.user.email}")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ Invalid JSON received via NotificationConsumer from {self.user.email}")
            return

        if isinstance(data, dict) and data.get('type') == 'mark_read':
            notification_id = data.get('notification_id')
            success = await self.mark_notification_read(notification_id)
            await self.send(text_data=json.dumps({
                'type': 'notification_read',
                'notification_id': notification_id,
                'success': success
            }))

    async def notification_message(self, event):
        await self.send(text_data=json.dumps({
            'type': 'notification',
            'message': event['message']
        }))

    @database_sync_to_async
    def mark_notification_read(self, notification_id):
        try:
            notification_id = int(notification_id)
        except (TypeError, ValueError):
            return False

        success, _ = notification_service.mark_as_read(self.user, notification_id)
        return success
