"""
Management command to create a portal admin from environment variables.
Used for container deployments where interactive commands aren't available.
"""
import os
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model


class Command(BaseCommand):
    help = 'Create (or refresh) an Admin account from environment variables'

    def handle(self, *args, **options):
        User = get_user_model()

        email = os.environ.get('DJANGO_SUPERUSER_EMAIL')
        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD')
        first_name = os.environ.get('DJANGO_SUPERUSER_FIRST_NAME', 'Admin')
        last_name = os.environ.get('DJANGO_SUPERUSER_LAST_NAME', 'User')

        if not all([email, password]):
            self.stdout.write(
                self.style.WARNING(
                    'Skipping admin creation: DJANGO_SUPERUSER_EMAIL and '
                    'DJANGO_SUPERUSER_PASSWORD environment variables are required.'
                )
            )
            return

        user = User.objects.get_by_email(email)
        if user:
            # Update password in case it changed
            user.set_password(password)
            self.stdout.write(self.style.SUCCESS(f'Admin "{email}" already exists; password refreshed.'))
        else:
            user = User(
                username=email.lower(),
                email=email,
                first_name=first_name,
                last_name=last_name,
            )
            user.set_password(password)
            self.stdout.write(self.style.SUCCESS(f'Admin "{email}" created successfully.'))

        user.role = User.ROLE_ADMIN
        user.is_staff = True
        user.is_superuser = True
        user.is_active = True
        user.save()
