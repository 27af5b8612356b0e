"""
Authentication and session handling.

Login stores the user id in the server-side session through Django's auth
framework; the current user is always derived from that session value.
"""
import logging

from django.contrib.auth import login as auth_login, logout as auth_logout
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from core.results import FieldErrors, ServiceResult, service_boundary

from .directory import sync_directory
from .models import User

logger = logging.getLogger(__name__)

AUTH_BACKEND = 'django.contrib.auth.backends.ModelBackend'

INVALID_CREDENTIALS = 'Invalid email or password'
ACCOUNT_DEACTIVATED = 'Account is deactivated'
EMAIL_EXISTS = 'Email already exists'


def refresh_directory():
    """Rewrite the directory file after an account change that already succeeded."""
    try:
        sync_directory()
    except OSError:
        logger.exception("Could not write the user directory file")


def authenticate_credentials(email, password) -> ServiceResult:
    """Check an email/password pair without touching any session."""
    user = User.objects.get_by_email(email)
    if user is None or not password or not user.check_password(password):
        logger.info(f"Failed login attempt for {email!r}")
        return ServiceResult.rejected(INVALID_CREDENTIALS)

    if not user.is_active:
        logger.info(f"Login refused for deactivated account {user.email}")
        return ServiceResult.rejected(ACCOUNT_DEACTIVATED)

    return ServiceResult.success(user)


@service_boundary('log in')
def login_user(request, email, password) -> ServiceResult:
    result = authenticate_credentials(email, password)
    if not result.ok:
        return result

    user = result.value
    # auth_login stamps last_login through the user_logged_in signal
    auth_login(request, user, backend=AUTH_BACKEND)
    logger.info(f"User {user.email} logged in")
    refresh_directory()
    return ServiceResult.success(user, 'Welcome back! You have successfully logged in.')


def validate_registration(data) -> FieldErrors:
    errors = FieldErrors()

    for field_name, label in (('first_name', 'First name'), ('last_name', 'Last name')):
        value = data.get(field_name, '')
        if not value:
            errors.add(field_name, f'{label} is required.')
        elif not 2 <= len(value) <= 100:
            errors.add(field_name, f'{label} must be between 2 and 100 characters.')

    email = data.get('email', '')
    if not email:
        errors.add('email', 'Email is required.')
    else:
        try:
            validate_email(email)
        except ValidationError:
            errors.add('email', 'Please enter a valid email address.')

    password = data.get('password', '')
    if not password:
        errors.add('password', 'Password is required.')
    elif not 6 <= len(password) <= 100:
        errors.add('password', 'Password must be between 6 and 100 characters.')

    if password != data.get('confirm_password', password):
        errors.add('confirm_password', 'Passwords do not match.')

    return errors


def create_account(first_name, last_name, email, password, role=User.ROLE_USER, **extra) -> ServiceResult:
    """Create a user unless the email is already taken (case-insensitive)."""
    email = email.strip()
    if User.objects.email_exists(email):
        return ServiceResult.rejected(EMAIL_EXISTS)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=email.lower(),
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                role=role,
                **extra
            )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        return ServiceResult.rejected(EMAIL_EXISTS)

    logger.info(f"Registered new user {user.email} with role {user.role}")
    return ServiceResult.success(user)


@service_boundary('register')
def register_user(request, data) -> ServiceResult:
    """
    Register a new account and sign it in.

    Args:
        request: Current request; the new user is logged into its session.
        data: Dict with first_name, last_name, email, password, confirm_password.
    """
    errors = validate_registration(data)
    if errors:
        return ServiceResult.invalid(errors)

    result = create_account(
        first_name=data['first_name'],
        last_name=data['last_name'],
        email=data['email'],
        password=data['password'],
    )
    if not result.ok:
        logger.warning(f"Registration rejected for {data['email']!r}: {result.message}")
        return ServiceResult.invalid({'email': [result.message]}, message=result.message)

    user = result.value
    auth_login(request, user, backend=AUTH_BACKEND)
    refresh_directory()
    return ServiceResult.success(user, 'Registration successful! Welcome to Disaster Relief.')


def current_user(request):
    """Return the logged-in user for this request, or None."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return None
    return user


def logout_user(request):
    user = current_user(request)
    auth_logout(request)
    if user is not None:
        logger.info(f"User {user.email} logged out")

