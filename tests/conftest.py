"""
Pytest fixtures for the relief portal.

Provides one user per role, logged-in clients for each of them, a
registered volunteer profile and a factory for volunteer tasks.
"""
from datetime import timedelta

import pytest
from django.test import Client, RequestFactory
from django.contrib.auth import get_user_model
from django.utils import timezone

User = get_user_model()

DEFAULT_PASSWORD = 'testpass123'


# Disable SSL redirect and other production security settings for tests
@pytest.fixture(autouse=True)
def disable_ssl_redirect(settings):
    """Disable SSL redirect for all tests."""
    settings.SECURE_SSL_REDIRECT = False
    settings.SECURE_PROXY_SSL_HEADER = None
    settings.SESSION_COOKIE_SECURE = False
    settings.CSRF_COOKIE_SECURE = False


@pytest.fixture(autouse=True)
def no_directory_file(settings):
    """Tests opt in to the directory file explicitly."""
    settings.USER_DIRECTORY_FILE = ''


@pytest.fixture
def request_factory():
    """Django RequestFactory for creating test requests."""
    return RequestFactory()


@pytest.fixture
def make_user(db):
    """Factory for portal users with a known password."""
    def _make_user(email, role=User.ROLE_USER, password=DEFAULT_PASSWORD, **extra):
        extra.setdefault('first_name', 'Test')
        extra.setdefault('last_name', 'User')
        return User.objects.create_user(
            username=email.lower(),
            email=email,
            password=password,
            role=role,
            **extra
        )
    return _make_user


@pytest.fixture
def portal_admin(make_user):
    return make_user('admin@relief.test', role=User.ROLE_ADMIN, first_name='Ada', last_name='Admin')


@pytest.fixture
def volunteer_user(make_user):
    return make_user('volunteer@relief.test', role=User.ROLE_VOLUNTEER, first_name='Val', last_name='Helper')


@pytest.fixture
def plain_user(make_user):
    return make_user('donor@relief.test', first_name='Dana', last_name='Donor')


def _client_for(user):
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def client_admin(portal_admin):
    return _client_for(portal_admin)


@pytest.fixture
def client_volunteer(volunteer_user):
    return _client_for(volunteer_user)


@pytest.fixture
def client_user(plain_user):
    return _client_for(plain_user)


@pytest.fixture
def volunteer_profile(volunteer_user):
    from volunteers.models import VolunteerProfile

    return VolunteerProfile.objects.create(
        user=volunteer_user,
        phone_number='555-0100',
        skills='First Aid, Logistics',
        has_transportation=True,
    )


@pytest.fixture
def make_task(portal_admin):
    """Factory for open volunteer tasks starting tomorrow."""
    from volunteers.models import VolunteerTask

    def _make_task(title='Sandbag Filling', **overrides):
        fields = {
            'title': title,
            'description': 'Fill and stack sandbags along the levee.',
            'category': 'cleanup',
            'priority': 'high',
            'required_skills': 'lifting',
            'location': 'North Levee',
            'start_date': timezone.now() + timedelta(days=1),
            'estimated_hours': 4,
            'max_volunteers': 2,
            'created_by': portal_admin,
        }
        fields.update(overrides)
        return VolunteerTask.objects.create(**fields)
    return _make_task


@pytest.fixture
def make_volunteer(make_user):
    """Factory for extra volunteers, each with an active profile."""
    from volunteers.models import VolunteerProfile

    def _make_volunteer(email, **profile_fields):
        user = make_user(email, role=User.ROLE_VOLUNTEER)
        profile_fields.setdefault('phone_number', '555-0199')
        return VolunteerProfile.objects.create(user=user, **profile_fields)
    return _make_volunteer
