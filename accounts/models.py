from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.db import models
from django.db.models.functions import Lower


class UserManager(BaseUserManager):
    """User manager with case-insensitive email lookups."""

    def get_by_email(self, email):
        """Return the user with this email (case-insensitive) or None."""
        if not email:
            return None
        return self.filter(email__iexact=email.strip()).first()

    def email_exists(self, email):
        return self.filter(email__iexact=(email or '').strip()).exists()


class User(AbstractUser):
    """Portal account. Email is the login identifier; username mirrors it."""
    ROLE_USER = 'user'
    ROLE_VOLUNTEER = 'volunteer'
    ROLE_ADMIN = 'admin'

    ROLE_CHOICES = [
        (ROLE_USER, 'User'),
        (ROLE_VOLUNTEER, 'Volunteer'),
        (ROLE_ADMIN, 'Admin'),
    ]

    email = models.EmailField('email address', max_length=254)
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_USER,
        help_text="Portal role used for permission checks"
    )

    objects = UserManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                Lower('email'),
                name='accounts_user_email_ci_unique',
            ),
        ]

    def __str__(self):
        return self.full_name or self.email or self.username

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_volunteer(self):
        return self.role == self.ROLE_VOLUNTEER

    def has_role(self, *roles):
        """Check if user holds any of the given roles."""
        return self.is_authenticated and self.role in roles

    @property
    def can_handle_goods(self):
        """Admins and volunteers may quality-check and distribute donated goods."""
        return self.has_role(self.ROLE_ADMIN, self.ROLE_VOLUNTEER)
