"""
Management command to change a user's portal role.

Usage:
    python manage.py set_user_role admin@example.org admin
    python manage.py set_user_role volunteer@example.org volunteer
    python manage.py set_user_role --list
"""
from django.core.management.base import BaseCommand, CommandError
from accounts.models import User


class Command(BaseCommand):
    help = "Set a user's portal role (user, volunteer, admin)"

    def add_arguments(self, parser):
        parser.add_argument(
            'email',
            nargs='?',
            type=str,
            help='Email of the user to update'
        )
        parser.add_argument(
            'role',
            nargs='?',
            type=str,
            choices=[key for key, _ in User.ROLE_CHOICES],
            help='Role to assign'
        )
        parser.add_argument(
            '--list',
            action='store_true',
            help='List all users with their roles'
        )
        parser.add_argument(
            '--deactivate',
            action='store_true',
            help='Also mark the account inactive'
        )

    def handle(self, *args, **options):
        if options['list']:
            users = User.objects.order_by('role', 'email')
            if not users:
                self.stdout.write(self.style.WARNING('No users found.'))
                return
            for user in users:
                status = '' if user.is_active else ' (inactive)'
                self.stdout.write(f'  {user.role:<10} {user.email} - {user.full_name}{status}')
            return

        email = options.get('email')
        role = options.get('role')
        if not email or not role:
            raise CommandError('Please provide an email and a role, or use --list')

        user = User.objects.get_by_email(email)
        if user is None:
            raise CommandError(f'User not found: {email}')

        user.role = role
        if options['deactivate']:
            user.is_active = False
        user.save(update_fields=['role', 'is_active'])

        self.stdout.write(self.style.SUCCESS(f'{user.email} now has role "{role}"'))
