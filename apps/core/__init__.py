# apps/core/__init__.py

"""
Core - main Taskboard app

Contains:
- Models (User, Board, BoardMember, TaskList, Card, Subtask, invitations, notifications)
- Board permissions and access decorators
- Auth, collaboration and notification services
- Dashboard, auth and membership views
- Maintenance commands (expired invitations, deadline reminders)
"""
