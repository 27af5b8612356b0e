"""
Request-level access control and response hardening.
"""
import logging
from functools import wraps

from django.http import HttpResponseForbidden
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


def require_role(*roles):
    """
    Decorator to require one of the given portal roles.

    Usage:
        @login_required
        @require_role('admin')
        def task_create(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            user = request.user
            if not user.is_authenticated:
                return HttpResponseForbidden("Authentication required")

            if not user.has_role(*roles):
                logger.warning(f"User {user.email} denied {request.path}: role {user.role} not in {roles}")
                return HttpResponseForbidden(f"Role required: {', '.join(roles)}")

            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def require_handler(view_func):
    """Shortcut for views that admins and volunteers may use."""
    return require_role('admin', 'volunteer')(view_func)


class SecurityHeadersMiddleware(MiddlewareMixin):
    """
    Adds security headers not covered by Django's SecurityMiddleware.
    """

    def process_response(self, request, response):
        # Content Security Policy
        csp = "; ".join([
            "default-src 'self'",
            "script-src 'self' 'unsafe-inline' https://unpkg.com",
            "style-src 'self' 'unsafe-inline'",
            "img-src 'self' data: https:",
            "font-src 'self' https://fonts.gstatic.com",
            "connect-src 'self'",
            "frame-ancestors 'none'",
        ])
        response['Content-Security-Policy'] = csp

        # Permissions Policy
        response['Permissions-Policy'] = 'camera=(), microphone=(), geolocation=(), payment=()'

        return response
