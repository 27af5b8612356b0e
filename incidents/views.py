import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, HttpResponseForbidden
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from accounts.models import User
from core.http import error_response, flash_result
from core.parsing import parse_choice, parse_date

from . import services
from .models import (
    DisasterIncident,
    IncidentMedia,
    IncidentResource,
    IncidentResponse,
    IncidentUpdate,
)
from .reports import IncidentReport

logger = logging.getLogger(__name__)


def _choice_context():
    return {
        'type_choices': DisasterIncident.TYPE_CHOICES,
        'severity_choices': DisasterIncident.SEVERITY_CHOICES,
        'status_choices': DisasterIncident.STATUS_CHOICES,
        'priority_choices': DisasterIncident.PRIORITY_CHOICES,
        'verification_choices': DisasterIncident.VERIFICATION_CHOICES,
    }


def _get_or_404_page(request, pk):
    incident = services.get_incident(pk)
    if incident is None:
        return None, render(request, 'incidents/not_found.html', status=404)
    return incident, None


def _finish(request, result, pk):
    """Common tail for POST actions on an incident."""
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    if request.htmx and result.ok:
        incident = services.get_incident(pk)
        return render(request, 'incidents/partials/updates.html', {'incident': incident})
    return redirect('incident_detail', pk=pk)


@login_required
def incident_dashboard(request):
    context = {
        'recent_incidents': services.recent_incidents(10),
        'critical_incidents': services.critical_incidents()[:5],
        'needs_attention': services.incidents_requiring_attention()[:10],
        'my_reports': services.incidents_reported_by(request.user)[:5],
        'assigned_to_me': services.incidents_assigned_to(request.user)[:5],
        'responses_underway': services.incidents_by_status(DisasterIncident.STATUS_RESPONSE_IN_PROGRESS)[:5],
        'stats': IncidentReport().statistics(),
    }
    return render(request, 'incidents/dashboard.html', context)


@login_required
@require_http_methods(["GET", "POST"])
def incident_report(request):
    """Report a new incident."""
    data = {}
    errors = {}

    if request.method == 'POST':
        data = request.POST.dict()
        result = services.create_incident(request.user, data)
        if result.ok:
            messages.success(request, result.message)
            return redirect('incident_detail', pk=result.value.pk)
        errors = result.errors
        if not errors:
            messages.error(request, result.message)

    return render(request, 'incidents/report.html', {
        'data': data,
        'errors': errors,
        **_choice_context(),
    })


@login_required
def incident_detail(request, pk):
    incident, missing = _get_or_404_page(request, pk)
    if missing:
        return missing

    context = {
        'incident': incident,
        'can_edit': incident.can_edit(request.user),
        'can_delete': incident.can_delete(request.user),
        'assignable_users': User.objects.filter(
            is_active=True, role__in=[User.ROLE_ADMIN, User.ROLE_VOLUNTEER]
        ) if request.user.is_admin else [],
        'update_type_choices': IncidentUpdate.UPDATE_TYPE_CHOICES,
        'resource_type_choices': IncidentResource.TYPE_CHOICES,
        'resource_priority_choices': IncidentResource.PRIORITY_CHOICES,
        'response_type_choices': IncidentResponse.TYPE_CHOICES,
        'response_status_choices': IncidentResponse.STATUS_CHOICES,
        'media_type_choices': IncidentMedia.MEDIA_TYPE_CHOICES,
        **_choice_context(),
    }
    return render(request, 'incidents/detail.html', context)


@login_required
@require_http_methods(["GET", "POST"])
def incident_edit(request, pk):
    incident, missing = _get_or_404_page(request, pk)
    if missing:
        return missing
    if not incident.can_edit(request.user):
        return HttpResponseForbidden('Access denied')

    errors = {}
    if request.method == 'POST':
        data = request.POST.dict()
        result = services.update_incident(pk, request.user, data)
        denied = error_response(result)
        if denied:
            return denied
        if result.ok:
            messages.success(request, result.message)
            return redirect('incident_detail', pk=pk)
        errors = result.errors
    else:
        data = {
            'title': incident.title,
            'incident_type': incident.incident_type,
            'description': incident.description,
            'location': incident.location,
            'latitude': incident.latitude or '',
            'longitude': incident.longitude or '',
            'incident_date': incident.incident_date.strftime('%Y-%m-%dT%H:%M'),
            'severity': incident.severity,
            'affected_population': incident.affected_population,
            'casualties': incident.casualties,
            'injuries': incident.injuries,
            'property_damage_estimate': incident.property_damage_estimate or '',
            **{name: getattr(incident, name) for name in services.TEXT_FIELDS},
        }

    return render(request, 'incidents/edit.html', {
        'incident': incident,
        'data': data,
        'errors': errors,
        **_choice_context(),
    })


@login_required
def incident_search(request):
    term = request.GET.get('q', '').strip()
    filters = {
        'incident_type': parse_choice(request.GET.get('type'), DisasterIncident.TYPE_CHOICES, ''),
        'status': parse_choice(request.GET.get('status'), DisasterIncident.STATUS_CHOICES, ''),
        'priority': parse_choice(request.GET.get('priority'), DisasterIncident.PRIORITY_CHOICES, ''),
        'severity': parse_choice(request.GET.get('severity'), DisasterIncident.SEVERITY_CHOICES, ''),
        'location': request.GET.get('location', ''),
    }
    try:
        date_from = parse_date(request.GET.get('date_from'))
        date_to = parse_date(request.GET.get('date_to'))
    except ValueError:
        date_from = date_to = None
        messages.error(request, 'Dates must be in YYYY-MM-DD format.')

    incidents = services.search_incidents(term=term, date_from=date_from, date_to=date_to, **filters)
    return render(request, 'incidents/search.html', {
        'incidents': incidents[:100],
        'search_query': term,
        'filters': filters,
        'date_from': request.GET.get('date_from', ''),
        'date_to': request.GET.get('date_to', ''),
        **_choice_context(),
    })


@login_required
@require_POST
def incident_update_status(request, pk):
    result = services.update_incident_status(pk, request.POST.get('status', ''), request.user)
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_verify(request, pk):
    result = services.verify_incident(pk, request.POST.get('verification_status', ''), request.user)
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_set_priority(request, pk):
    result = services.set_priority(pk, request.POST.get('priority', ''), request.user)
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_assign(request, pk):
    result = services.assign_incident(pk, request.POST.get('assigned_to'), request.user)
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_add_update(request, pk):
    result = services.post_update(
        pk,
        request.user,
        request.POST.get('update_text', ''),
        update_type=request.POST.get('update_type', IncidentUpdate.TYPE_GENERAL),
        is_critical=request.POST.get('is_critical', ''),
    )
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_add_resource(request, pk):
    result = services.add_resource_request(pk, request.user, request.POST.dict())
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_add_response(request, pk):
    result = services.add_response(pk, request.user, request.POST.dict())
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_add_media(request, pk):
    result = services.add_media(pk, request.user, request.POST.dict())
    return _finish(request, result, pk)


@login_required
@require_POST
def incident_delete_child(request, kind, child_pk):
    result = services.delete_child(kind, child_pk, request.user)
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    if result.ok:
        return redirect('incident_detail', pk=result.value.pk)
    return redirect('incident_dashboard')


@login_required
@require_POST
def incident_delete(request, pk):
    result = services.delete_incident(pk, request.user)
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    return redirect('incident_dashboard')


@login_required
def incident_statistics(request):
    report = IncidentReport()
    return render(request, 'incidents/statistics.html', {
        'stats': report.statistics(),
        'analytics': report.analytics(),
        'urgent_resources': services.urgent_resource_requests()[:10],
        'active_responses': services.active_responses()[:10],
    })


@login_required
def incident_export(request, pk):
    result = services.generate_incident_report(pk, request.user)
    denied = error_response(result)
    if denied:
        return denied
    return HttpResponse(result.value, content_type='text/plain')
