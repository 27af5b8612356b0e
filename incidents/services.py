"""
Incident registry operations.

State changes on an incident (status, verification, priority, assignment,
edits) each append exactly one IncidentUpdate describing the change.
"""
import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from accounts.models import User
from core.parsing import clean, parse_bool, parse_choice, parse_datetime, parse_decimal, parse_int
from core.results import FieldErrors, ServiceResult, service_boundary

from .models import (
    DisasterIncident,
    IncidentMedia,
    IncidentResource,
    IncidentResponse,
    IncidentUpdate,
)

logger = logging.getLogger(__name__)

INITIAL_UPDATE = 'Incident reported and logged into the system'
DETAILS_UPDATED = 'Incident details updated'

TEXT_FIELDS = (
    'infrastructure_damage', 'immediate_needs', 'resources_required',
    'access_routes', 'weather_conditions', 'contact_information',
)
COUNT_FIELDS = ('affected_population', 'casualties', 'injuries')
# (max_digits, decimal_places) of the matching DisasterIncident fields
DECIMAL_SHAPES = {
    'latitude': (9, 6),
    'longitude': (9, 6),
    'property_damage_estimate': (14, 2),
}


def _label(choices, value):
    return DisasterIncident.label_for(choices, value)


def add_update(incident, text, user, update_type=IncidentUpdate.TYPE_GENERAL, is_critical=False):
    return IncidentUpdate.objects.create(
        incident=incident,
        update_text=text,
        update_type=update_type,
        update_date=timezone.now(),
        updated_by=user,
        is_critical=is_critical,
    )


# =============================================================================
# Create / edit
# =============================================================================

def validate_incident(data):
    """
    Validate a submitted incident form.

    Returns:
        (cleaned, errors)
    """
    errors = FieldErrors()
    cleaned = {}

    for field_name, label in (('title', 'Title'), ('description', 'Description'), ('location', 'Location')):
        value = clean(data.get(field_name))
        if not value:
            errors.add(field_name, f'{label} is required.')
        cleaned[field_name] = value
    if len(cleaned['title']) > 200:
        errors.add('title', 'Title must be 200 characters or fewer.')

    incident_type = parse_choice(data.get('incident_type'), DisasterIncident.TYPE_CHOICES)
    if not incident_type:
        errors.add('incident_type', 'Please choose a disaster type.')
    cleaned['incident_type'] = incident_type

    try:
        incident_date = parse_datetime(data.get('incident_date'))
    except ValueError:
        incident_date = None
        errors.add('incident_date', 'Enter a valid date and time.')
    else:
        if incident_date is None:
            errors.add('incident_date', 'Incident date is required.')
        elif incident_date > timezone.now():
            errors.add('incident_date', 'Incident date cannot be in the future.')
    cleaned['incident_date'] = incident_date

    try:
        severity = parse_int(data.get('severity')) or 2
    except ValueError:
        severity = 2
    if severity not in dict(DisasterIncident.SEVERITY_CHOICES):
        errors.add('severity', 'Severity must be between 1 and 5.')
    cleaned['severity'] = severity

    cleaned['priority'] = parse_choice(data.get('priority'), DisasterIncident.PRIORITY_CHOICES, 'medium')

    for field_name in COUNT_FIELDS:
        try:
            value = parse_int(data.get(field_name)) or 0
        except ValueError:
            value = 0
            errors.add(field_name, 'Enter a whole number.')
        if value < 0:
            errors.add(field_name, 'Cannot be negative.')
        cleaned[field_name] = value

    for field_name, (max_digits, decimal_places) in DECIMAL_SHAPES.items():
        try:
            cleaned[field_name] = parse_decimal(data.get(field_name), max_digits, decimal_places)
        except ValueError:
            cleaned[field_name] = None
            errors.add(field_name, 'Enter a valid number.')

    latitude, longitude = cleaned['latitude'], cleaned['longitude']
    if latitude is not None and not -90 <= latitude <= 90:
        errors.add('latitude', 'Latitude must be between -90 and 90.')
    if longitude is not None and not -180 <= longitude <= 180:
        errors.add('longitude', 'Longitude must be between -180 and 180.')

    for field_name in TEXT_FIELDS:
        cleaned[field_name] = clean(data.get(field_name))

    return cleaned, errors


@service_boundary('report incident')
def create_incident(reporter, data) -> ServiceResult:
    cleaned, errors = validate_incident(data)
    if errors:
        return ServiceResult.invalid(errors)

    with transaction.atomic():
        incident = DisasterIncident.objects.create(
            reported_by=reporter,
            reported_date=timezone.now(),
            **cleaned
        )
        add_update(
            incident,
            INITIAL_UPDATE,
            reporter,
            update_type=IncidentUpdate.TYPE_STATUS_CHANGE,
            is_critical=incident.is_critical,
        )

    logger.info(f"Incident {incident.pk} reported by {reporter.email}: {incident.title}")
    return ServiceResult.success(
        incident,
        'Incident reported successfully. Thank you for helping keep the community informed.'
    )


@service_boundary('update incident')
def update_incident(incident_id, user, data) -> ServiceResult:
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')
    if not incident.can_edit(user):
        return ServiceResult.forbidden('Only the reporter or the assigned responder can edit this incident.')

    cleaned, errors = validate_incident(data)
    if errors:
        return ServiceResult.invalid(errors)

    # Priority changes have their own audit entry
    cleaned.pop('priority', None)

    with transaction.atomic():
        for key, value in cleaned.items():
            setattr(incident, key, value)
        incident.save()
        add_update(incident, DETAILS_UPDATED, user)

    return ServiceResult.success(incident, 'Incident updated.')


# =============================================================================
# Transitions
# =============================================================================

def _locked(incident_id):
    return DisasterIncident.objects.select_for_update().filter(pk=incident_id).first()


@service_boundary('update incident status')
def update_incident_status(incident_id, new_status, user) -> ServiceResult:
    if new_status not in dict(DisasterIncident.STATUS_CHOICES):
        return ServiceResult.invalid({'status': ['Unknown incident status.']})

    with transaction.atomic():
        incident = _locked(incident_id)
        if incident is None:
            return ServiceResult.not_found('Incident not found.')
        if not (incident.can_edit(user) or user.can_handle_goods):
            return ServiceResult.forbidden()
        if incident.status == new_status:
            return ServiceResult.rejected(f"Incident is already {incident.get_status_display()}.")

        old_status = incident.status
        incident.status = new_status
        incident.save()
        add_update(
            incident,
            f"Status changed from {_label(DisasterIncident.STATUS_CHOICES, old_status)} "
            f"to {_label(DisasterIncident.STATUS_CHOICES, new_status)}",
            user,
            update_type=IncidentUpdate.TYPE_STATUS_CHANGE,
        )

    logger.info(f"Incident {incident.pk}: {old_status} -> {new_status}")
    return ServiceResult.success(incident, f"Status updated to {incident.get_status_display()}.")


@service_boundary('verify incident')
def verify_incident(incident_id, verification_status, user) -> ServiceResult:
    """Set the verification status; Verified also moves the status to Verified."""
    if verification_status not in dict(DisasterIncident.VERIFICATION_CHOICES):
        return ServiceResult.invalid({'verification_status': ['Unknown verification status.']})
    if not user.can_handle_goods:
        return ServiceResult.forbidden('Only admins and volunteers can verify incidents.')

    with transaction.atomic():
        incident = _locked(incident_id)
        if incident is None:
            return ServiceResult.not_found('Incident not found.')

        incident.verification_status = verification_status
        incident.verified_date = timezone.now()
        incident.verified_by = user
        if verification_status == DisasterIncident.VERIFICATION_VERIFIED:
            incident.status = DisasterIncident.STATUS_VERIFIED
        incident.save()

        add_update(
            incident,
            f"Incident verification status: "
            f"{_label(DisasterIncident.VERIFICATION_CHOICES, verification_status)}",
            user,
            update_type=IncidentUpdate.TYPE_STATUS_CHANGE,
        )

    logger.info(f"Incident {incident.pk} verification set to {verification_status} by {user.email}")
    return ServiceResult.success(incident, 'Verification status updated.')


@service_boundary('change incident priority')
def set_priority(incident_id, priority, user) -> ServiceResult:
    if priority not in dict(DisasterIncident.PRIORITY_CHOICES):
        return ServiceResult.invalid({'priority': ['Unknown priority.']})

    with transaction.atomic():
        incident = _locked(incident_id)
        if incident is None:
            return ServiceResult.not_found('Incident not found.')
        if not (incident.can_edit(user) or user.can_handle_goods):
            return ServiceResult.forbidden()
        if incident.priority == priority:
            return ServiceResult.rejected(f"Priority is already {incident.get_priority_display()}.")

        old_priority = incident.priority
        incident.priority = priority
        incident.save()
        add_update(
            incident,
            f"Priority changed from {_label(DisasterIncident.PRIORITY_CHOICES, old_priority)} "
            f"to {_label(DisasterIncident.PRIORITY_CHOICES, priority)}",
            user,
            is_critical=incident.is_critical,
        )

    return ServiceResult.success(incident, f"Priority updated to {incident.get_priority_display()}.")


@service_boundary('assign incident')
def assign_incident(incident_id, assignee_id, user) -> ServiceResult:
    if not user.is_admin:
        return ServiceResult.forbidden('Only admins can assign incidents.')

    assignee = User.objects.filter(pk=assignee_id, is_active=True).first()
    if assignee is None:
        return ServiceResult.invalid({'assigned_to': ['Choose an active user to assign.']})

    with transaction.atomic():
        incident = _locked(incident_id)
        if incident is None:
            return ServiceResult.not_found('Incident not found.')
        incident.assigned_to = assignee
        incident.save()
        add_update(incident, f"Incident assigned to {assignee.full_name or assignee.email}", user)

    return ServiceResult.success(incident, f"Incident assigned to {assignee}.")


@service_boundary('add incident update')
def post_update(incident_id, user, text, update_type=IncidentUpdate.TYPE_GENERAL, is_critical=False) -> ServiceResult:
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')
    text = clean(text)
    if not text:
        return ServiceResult.invalid({'update_text': ['Update text is required.']})
    update_type = parse_choice(update_type, IncidentUpdate.UPDATE_TYPE_CHOICES, IncidentUpdate.TYPE_GENERAL)

    update = add_update(incident, text, user, update_type=update_type, is_critical=parse_bool(is_critical))
    return ServiceResult.success(update, 'Update posted.')


@service_boundary('delete incident')
def delete_incident(incident_id, user) -> ServiceResult:
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')
    if not incident.can_delete(user):
        return ServiceResult.forbidden('Only the reporter or an admin can delete this incident.')

    incident.delete()
    logger.info(f"Incident {incident_id} deleted by {user.email}")
    return ServiceResult.success(message='Incident deleted.')


# =============================================================================
# Child records
# =============================================================================

@service_boundary('add resource request')
def add_resource_request(incident_id, user, data) -> ServiceResult:
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')

    errors = FieldErrors()
    resource_type = parse_choice(data.get('resource_type'), IncidentResource.TYPE_CHOICES)
    if not resource_type:
        errors.add('resource_type', 'Please choose a resource type.')
    description = clean(data.get('description'))
    if not description:
        errors.add('description', 'Description is required.')
    try:
        quantity_needed = parse_int(data.get('quantity_needed')) or 1
        required_by = parse_datetime(data.get('required_by_date'))
    except ValueError:
        quantity_needed, required_by = 1, None
        errors.add('quantity_needed', 'Check the quantity and required-by date.')
    if errors:
        return ServiceResult.invalid(errors)

    resource = IncidentResource.objects.create(
        incident=incident,
        resource_type=resource_type,
        description=description,
        quantity_needed=quantity_needed,
        priority=parse_choice(data.get('priority'), IncidentResource.PRIORITY_CHOICES, 'medium'),
        required_by_date=required_by,
        requested_by=user,
    )
    return ServiceResult.success(resource, 'Resource request added.')


@service_boundary('add response')
def add_response(incident_id, user, data) -> ServiceResult:
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')
    if not user.can_handle_goods:
        return ServiceResult.forbidden('Only admins and volunteers can log responses.')

    errors = FieldErrors()
    response_type = parse_choice(data.get('response_type'), IncidentResponse.TYPE_CHOICES)
    if not response_type:
        errors.add('response_type', 'Please choose a response type.')
    description = clean(data.get('description'))
    if not description:
        errors.add('description', 'Description is required.')
    try:
        personnel = parse_int(data.get('personnel_involved')) or 0
        cost = parse_decimal(data.get('cost'), 12, 2)
    except ValueError:
        personnel, cost = 0, None
        errors.add('cost', 'Check personnel and cost values.')
    if errors:
        return ServiceResult.invalid(errors)

    response = IncidentResponse.objects.create(
        incident=incident,
        response_type=response_type,
        description=description,
        responded_by=user,
        status=parse_choice(data.get('status'), IncidentResponse.STATUS_CHOICES, 'planned'),
        resources_used=clean(data.get('resources_used')),
        personnel_involved=personnel,
        cost=cost,
        notes=clean(data.get('notes')),
    )
    return ServiceResult.success(response, 'Response logged.')


@service_boundary('attach media')
def add_media(incident_id, user, data) -> ServiceResult:
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')

    errors = FieldErrors()
    file_name = clean(data.get('file_name'))
    file_path = clean(data.get('file_path'))
    if not file_name:
        errors.add('file_name', 'File name is required.')
    if not file_path:
        errors.add('file_path', 'File location is required.')
    if errors:
        return ServiceResult.invalid(errors)

    try:
        file_size = parse_int(data.get('file_size')) or 0
    except ValueError:
        file_size = 0

    media = IncidentMedia.objects.create(
        incident=incident,
        file_name=file_name,
        file_path=file_path,
        media_type=parse_choice(data.get('media_type'), IncidentMedia.MEDIA_TYPE_CHOICES, 'other'),
        file_size=file_size,
        description=clean(data.get('description')),
        uploaded_by=user,
    )
    return ServiceResult.success(media, 'Media attached.')


CHILD_MODELS = {
    'resource': IncidentResource,
    'response': IncidentResponse,
    'media': IncidentMedia,
}


@service_boundary('remove incident record')
def delete_child(kind, child_id, user) -> ServiceResult:
    model = CHILD_MODELS.get(kind)
    if model is None:
        return ServiceResult.not_found()
    child = model.objects.select_related('incident').filter(pk=child_id).first()
    if child is None:
        return ServiceResult.not_found()
    if not (child.incident.can_edit(user) or user.is_admin):
        return ServiceResult.forbidden()

    child.delete()
    return ServiceResult.success(child.incident, 'Removed.')


def urgent_resource_requests():
    return IncidentResource.objects.filter(
        priority='critical',
        status=IncidentResource.STATUS_NEEDED,
    ).select_related('incident')


def active_responses():
    return IncidentResponse.objects.filter(
        status__in=IncidentResponse.ACTIVE_STATUSES,
    ).select_related('incident')


# =============================================================================
# Queries
# =============================================================================

def get_incident(incident_id):
    return (
        DisasterIncident.objects
        .select_related('reported_by', 'assigned_to', 'verified_by')
        .prefetch_related('updates', 'resource_requests', 'responses', 'media')
        .filter(pk=incident_id)
        .first()
    )


def search_incidents(term=None, incident_type=None, status=None, priority=None,
                     severity=None, location=None, date_from=None, date_to=None):
    """Filter incidents; every argument is optional. Newest incident first."""
    queryset = DisasterIncident.objects.select_related('reported_by')

    term = clean(term)
    if term:
        queryset = queryset.filter(
            Q(title__icontains=term) |
            Q(description__icontains=term) |
            Q(location__icontains=term)
        )
    if incident_type:
        queryset = queryset.filter(incident_type=incident_type)
    if status:
        queryset = queryset.filter(status=status)
    if priority:
        queryset = queryset.filter(priority=priority)
    if severity:
        queryset = queryset.filter(severity=severity)
    if clean(location):
        queryset = queryset.filter(location__icontains=clean(location))
    if date_from:
        queryset = queryset.filter(incident_date__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(incident_date__date__lte=date_to)

    return queryset.order_by('-incident_date', '-id')


def incidents_by_status(status):
    return DisasterIncident.objects.filter(status=status)


def incidents_by_type(incident_type):
    return DisasterIncident.objects.filter(incident_type=incident_type)


def incidents_by_severity(severity):
    return DisasterIncident.objects.filter(severity=severity)


def incidents_reported_by(user):
    return DisasterIncident.objects.filter(reported_by=user)


def incidents_assigned_to(user):
    return DisasterIncident.objects.filter(assigned_to=user)


def recent_incidents(count=10):
    return DisasterIncident.objects.select_related('reported_by').order_by('-reported_date', '-id')[:count]


def critical_incidents():
    return DisasterIncident.objects.filter(priority__in=DisasterIncident.CRITICAL_PRIORITIES)


def incidents_requiring_attention():
    return DisasterIncident.objects.filter(
        Q(status=DisasterIncident.STATUS_REPORTED) |
        Q(verification_status=DisasterIncident.VERIFICATION_PENDING) |
        Q(priority__in=DisasterIncident.CRITICAL_PRIORITIES)
    ).order_by('-severity', '-incident_date')


def generate_incident_report(incident_id, user) -> ServiceResult:
    if not user.is_admin:
        return ServiceResult.forbidden('Only admins can export incident reports.')
    incident = DisasterIncident.objects.filter(pk=incident_id).first()
    if incident is None:
        return ServiceResult.not_found('Incident not found.')

    text = f"Incident Report #{incident.pk} - {incident.title} - Generated on {timezone.localdate():%Y-%m-%d}"
    return ServiceResult.success(text)
