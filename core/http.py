"""
Helpers for turning service results into HTTP responses.
"""
from django.contrib import messages
from django.http import Http404, HttpResponseForbidden

from .results import Outcome


def error_response(result):
    """
    Map NOT_FOUND and FORBIDDEN results to their HTTP responses.

    Returns None for every other outcome so the caller can carry on.
    """
    if result.outcome is Outcome.NOT_FOUND:
        raise Http404(result.message)
    if result.outcome is Outcome.FORBIDDEN:
        return HttpResponseForbidden(result.message or 'Access denied')
    return None


def flash_result(request, result):
    """Report a service result through the messages framework."""
    if result.ok:
        if result.message:
            messages.success(request, result.message)
        return
    if result.errors:
        for message in result.error_list():
            messages.error(request, message)
    else:
        messages.error(request, result.message)
