# apps/board/__init__.py

"""
Board - Taskboard Kanban app

Features:
- Kanban page with drag-and-drop of cards and lists
- List, card and subtask endpoints with contiguous ordering
- Deadline calendar
- WebSockets for realtime updates and notifications
"""
