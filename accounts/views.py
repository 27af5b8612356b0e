import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods, require_POST

from .services import current_user, login_user, logout_user, register_user

logger = logging.getLogger(__name__)


def _safe_next(request, fallback='dashboard'):
    next_url = request.POST.get('next') or request.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return fallback


@require_http_methods(["GET", "POST"])
def login_view(request):
    """Email/password sign-in."""
    if current_user(request):
        return redirect('dashboard')

    email = ''
    error = None

    if request.method == 'POST':
        email = request.POST.get('email', '').strip()
        password = request.POST.get('password', '')

        if not email or not password:
            error = 'Email and password are required.'
        else:
            result = login_user(request, email, password)
            if result.ok:
                messages.success(request, result.message)
                return redirect(_safe_next(request))
            error = result.message

    return render(request, 'accounts/login.html', {
        'email': email,
        'error': error,
        'next': request.GET.get('next', ''),
    })


@require_http_methods(["GET", "POST"])
def register_view(request):
    """Create an account and sign in."""
    if current_user(request):
        return redirect('dashboard')

    data = {}
    errors = {}

    if request.method == 'POST':
        data = {
            'first_name': request.POST.get('first_name', '').strip(),
            'last_name': request.POST.get('last_name', '').strip(),
            'email': request.POST.get('email', '').strip(),
            'password': request.POST.get('password', ''),
            'confirm_password': request.POST.get('confirm_password', ''),
        }
        result = register_user(request, data)
        if result.ok:
            messages.success(request, result.message)
            return redirect('dashboard')
        errors = result.errors
        if not errors:
            messages.error(request, result.message)

    return render(request, 'accounts/register.html', {
        'data': data,
        'errors': errors,
    })


@require_POST
def logout_view(request):
    logout_user(request)
    messages.info(request, 'You have been logged out successfully.')
    return redirect('home')
