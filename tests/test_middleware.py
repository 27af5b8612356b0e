"""
Tests for role decorators, security headers and the role context processor.

The role decorator is what keeps plain users out of admin-only pages, so
these tests exercise it directly as well as through real URLs.
"""
import pytest
from django.contrib.auth.models import AnonymousUser
from django.http import HttpResponse
from django.urls import reverse

from core.context_processors import user_roles
from core.middleware import SecurityHeadersMiddleware, require_role


def ok_view(request):
    return HttpResponse('ok')


@pytest.mark.django_db
class TestRequireRole:
    """Test the require_role decorator."""

    def test_allows_matching_role(self, request_factory, portal_admin):
        request = request_factory.get('/anything/')
        request.user = portal_admin

        response = require_role('admin')(ok_view)(request)

        assert response.status_code == 200

    def test_allows_any_listed_role(self, request_factory, volunteer_user):
        request = request_factory.get('/anything/')
        request.user = volunteer_user

        response = require_role('admin', 'volunteer')(ok_view)(request)

        assert response.status_code == 200

    def test_blocks_other_roles(self, request_factory, plain_user):
        request = request_factory.get('/anything/')
        request.user = plain_user

        response = require_role('admin')(ok_view)(request)

        assert response.status_code == 403
        assert b'admin' in response.content

    def test_blocks_anonymous(self, request_factory):
        request = request_factory.get('/anything/')
        request.user = AnonymousUser()

        response = require_role('admin')(ok_view)(request)

        assert response.status_code == 403

    def test_admin_only_page_forbidden_for_volunteer(self, client_volunteer):
        response = client_volunteer.get(reverse('volunteer_task_create'))
        assert response.status_code == 403

    def test_handler_page_forbidden_for_plain_user(self, client_user):
        response = client_user.get(reverse('resource_list'))
        assert response.status_code == 403


@pytest.mark.django_db
class TestSecurityHeaders:

    def test_headers_added(self, request_factory):
        middleware = SecurityHeadersMiddleware(lambda r: HttpResponse())
        response = middleware.process_response(request_factory.get('/'), HttpResponse())

        assert "frame-ancestors 'none'" in response['Content-Security-Policy']
        assert 'camera=()' in response['Permissions-Policy']

    def test_headers_on_real_response(self, client):
        response = client.get(reverse('home'))

        assert response.status_code == 200
        assert 'Content-Security-Policy' in response


@pytest.mark.django_db
class TestUserRolesContext:

    def test_anonymous_gets_defaults(self, request_factory):
        request = request_factory.get('/')
        request.user = AnonymousUser()

        context = user_roles(request)

        assert context['is_admin'] is False
        assert context['is_volunteer'] is False
        assert context['volunteer_profile'] is None

    def test_admin_flags(self, request_factory, portal_admin):
        request = request_factory.get('/')
        request.user = portal_admin

        context = user_roles(request)

        assert context['is_admin'] is True
        assert context['can_handle_goods'] is True
        assert context['volunteer_profile'] is None

    def test_volunteer_profile_exposed(self, request_factory, volunteer_profile):
        request = request_factory.get('/')
        request.user = volunteer_profile.user

        context = user_roles(request)

        assert context['is_volunteer'] is True
        assert context['volunteer_profile'] == volunteer_profile
