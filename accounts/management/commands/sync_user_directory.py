"""
Management command to export or import the user directory JSON file.

Usage:
    python manage.py sync_user_directory                # export to USER_DIRECTORY_FILE
    python manage.py sync_user_directory --export users.json
    python manage.py sync_user_directory --import users.json
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounts.directory import export_users, import_users


class Command(BaseCommand):
    help = 'Export users to (or import users from) the directory JSON file'

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument('--export', dest='export_path', type=str, help='Write users to this file')
        group.add_argument('--import', dest='import_path', type=str, help='Load users from this file')

    def handle(self, *args, **options):
        if options['import_path']:
            try:
                created, updated = import_users(options['import_path'])
            except (OSError, ValueError) as e:
                raise CommandError(f'Could not import {options["import_path"]}: {e}')
            self.stdout.write(self.style.SUCCESS(f'Imported users: {created} created, {updated} updated'))
            return

        path = options['export_path'] or settings.USER_DIRECTORY_FILE
        if not path:
            raise CommandError('No path given and USER_DIRECTORY_FILE is not set')

        count = export_users(path)
        self.stdout.write(self.style.SUCCESS(f'Wrote {count} users to {path}'))
