# apps/reports/apps.py

from django.apps import AppConfig


class ReportsConfig(AppConfig):
    """Reports app config"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.reports'
    verbose_name = 'Reports - PDF & Exports'
