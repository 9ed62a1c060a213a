# apps/__init__.py

"""
Taskboard - Django apps

- core: models, authentication, permissions, collaboration and notifications
- board: Kanban lists/cards, calendar and WebSockets
- reports: board exports (PDF, CSV, Excel)
"""

__version__ = '0.1.0'
