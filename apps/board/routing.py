# apps/board/routing.py

from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # Realtime updates of one board
    re_path(r'ws/board/(?P<board_id>\d+)/$', consumers.BoardConsumer.as_asgi()),

    # Personal notifications
    re_path(r'ws/notifications/$', consumers.NotificationConsumer.as_asgi()),
]
