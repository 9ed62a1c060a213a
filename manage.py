#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Taskboard - collaborative Kanban boards
"""

import os
import sys


def main():
    """Run administrative tasks."""

    # Development settings by default
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Taskboard shortcuts
    if len(sys.argv) > 1:
        command = sys.argv[1]
        python = sys.executable

        # First run
        if command == 'setup':
            print("🚀 Setting up Taskboard...")

            print("📊 Applying migrations...")
            if os.system(f'"{python}" manage.py migrate') != 0:
                print("❌ Migrations failed")
                return

            print("📁 Collecting static files...")
            os.system(f'"{python}" manage.py collectstatic --noinput')

            print("✅ Setup done!")
            print("👤 Create an admin with: python manage.py createsuperuser")
            return

        # Periodic maintenance (cron)
        elif command == 'maintenance':
            print("🧹 Purging expired invitations...")
            os.system(f'"{python}" manage.py purge_expired_invitations')

            print("⏰ Sending deadline reminders...")
            os.system(f'"{python}" manage.py send_deadline_reminders')
            return

        elif command == 'backup':
            print("💾 Creating database backup...")
            from datetime import datetime
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            backup_file = f"backup_taskboard_{timestamp}.json"
            os.system(
                f'"{python}" manage.py dumpdata --indent 2 '
                f'--exclude contenttypes --exclude auth.permission --exclude sessions > {backup_file}'
            )
            print(f"✅ Backup created: {backup_file}")
            return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
