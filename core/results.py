"""
Result type returned by every mutating service operation.

Services never raise for expected outcomes. A view inspects ``result.outcome``
to decide between re-rendering a form, answering 403/404, or flashing a
message and redirecting.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Kinds of service outcome."""
    OK = "ok"
    VALIDATION = "validation"  # Field-level input errors
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    REJECTED = "rejected"  # Business rule said no
    ERROR = "error"  # Unexpected failure, already logged


@dataclass
class ServiceResult:
    outcome: Outcome
    value: Any = None
    message: str = ''
    errors: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    def __bool__(self):
        return self.ok

    @classmethod
    def success(cls, value=None, message: str = '') -> 'ServiceResult':
        return cls(Outcome.OK, value=value, message=message)

    @classmethod
    def invalid(cls, errors: dict, message: str = 'Please correct the errors below.') -> 'ServiceResult':
        return cls(Outcome.VALIDATION, errors=errors, message=message)

    @classmethod
    def not_found(cls, message: str = 'Not found.') -> 'ServiceResult':
        return cls(Outcome.NOT_FOUND, message=message)

    @classmethod
    def forbidden(cls, message: str = 'You do not have permission to do that.') -> 'ServiceResult':
        return cls(Outcome.FORBIDDEN, message=message)

    @classmethod
    def rejected(cls, message: str) -> 'ServiceResult':
        return cls(Outcome.REJECTED, message=message)

    @classmethod
    def failure(cls, message: str = 'Something went wrong. Please try again.') -> 'ServiceResult':
        return cls(Outcome.ERROR, message=message)

    def error_list(self) -> list:
        """Flatten field errors for display."""
        flat = []
        for messages in self.errors.values():
            flat.extend(messages)
        return flat


class FieldErrors(dict):
    """Collects validation messages keyed by field name."""

    def add(self, field_name: str, message: str):
        self.setdefault(field_name, []).append(message)


def service_boundary(action: str, default_message: Optional[str] = None):
    """
    Decorator for service operations.

    Any exception that escapes the operation is logged with its traceback and
    turned into an ERROR result with a generic message, so internal details
    never reach the page.

    Usage:
        @service_boundary('create donation')
        def create_donation(donor, data):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception:
                logger.exception(f"Unexpected error during {action}")
                return ServiceResult.failure(
                    default_message or f"Unable to {action} right now. Please try again."
                )
        return wrapper
    return decorator
