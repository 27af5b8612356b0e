"""
Volunteer registry operations: profiles, the task catalog and assignments.

Assignment creation locks the task row so two simultaneous sign-ups cannot
both pass the capacity check; the partial unique constraint on
VolunteerTaskAssignment backs up the one-active-assignment rule.
"""
import logging
from datetime import datetime

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from accounts.models import User
from core.parsing import clean, parse_bool, parse_choice, parse_datetime, parse_decimal, parse_int
from core.results import FieldErrors, ServiceResult, service_boundary

from .models import (
    VolunteerAvailability,
    VolunteerCommunication,
    VolunteerProfile,
    VolunteerTask,
    VolunteerTaskAssignment,
)

logger = logging.getLogger(__name__)

Assignment = VolunteerTaskAssignment

NO_REASON = 'No reason provided'


def get_profile(user):
    return VolunteerProfile.objects.filter(user=user).select_related('user').first()


# =============================================================================
# Profiles
# =============================================================================

PROFILE_TEXT_FIELDS = (
    'phone_number', 'emergency_contact', 'emergency_contact_phone', 'skills',
    'availability', 'languages', 'previous_experience',
)


def validate_profile(data):
    errors = FieldErrors()
    cleaned = {name: clean(data.get(name)) for name in PROFILE_TEXT_FIELDS}
    if not cleaned['phone_number']:
        errors.add('phone_number', 'Phone number is required.')
    cleaned['has_transportation'] = parse_bool(data.get('has_transportation'))
    cleaned['has_medical_training'] = parse_bool(data.get('has_medical_training'))
    return cleaned, errors


@service_boundary('register volunteer')
def create_profile(user, data) -> ServiceResult:
    if get_profile(user) is not None:
        return ServiceResult.rejected('You are already registered as a volunteer.')

    cleaned, errors = validate_profile(data)
    if errors:
        return ServiceResult.invalid(errors)

    try:
        with transaction.atomic():
            profile = VolunteerProfile.objects.create(user=user, **cleaned)
            if not user.is_admin:
                user.role = User.ROLE_VOLUNTEER
                user.save(update_fields=['role'])
    except IntegrityError:
        return ServiceResult.rejected('You are already registered as a volunteer.')

    logger.info(f"Volunteer profile {profile.pk} created for {user.email}")
    return ServiceResult.success(profile, 'Thank you for registering as a volunteer!')


@service_boundary('update volunteer profile')
def update_profile(user, data) -> ServiceResult:
    profile = get_profile(user)
    if profile is None:
        return ServiceResult.not_found('Volunteer profile not found.')

    cleaned, errors = validate_profile(data)
    if errors:
        return ServiceResult.invalid(errors)

    for key, value in cleaned.items():
        setattr(profile, key, value)
    profile.save()
    return ServiceResult.success(profile, 'Profile updated.')


def search_volunteers(term=None, skill=None, status=None):
    queryset = VolunteerProfile.objects.select_related('user')
    term = clean(term)
    if term:
        queryset = queryset.filter(
            Q(user__first_name__icontains=term) |
            Q(user__last_name__icontains=term) |
            Q(user__email__icontains=term)
        )
    if clean(skill):
        queryset = queryset.filter(skills__icontains=clean(skill))
    if status:
        queryset = queryset.filter(status=status)
    return queryset


# =============================================================================
# Task catalog
# =============================================================================

def validate_task(data):
    errors = FieldErrors()
    cleaned = {}

    for field_name, label in (('title', 'Title'), ('description', 'Description'), ('location', 'Location')):
        cleaned[field_name] = clean(data.get(field_name))
        if not cleaned[field_name]:
            errors.add(field_name, f'{label} is required.')

    cleaned['category'] = parse_choice(data.get('category'), VolunteerTask.CATEGORY_CHOICES)
    if not cleaned['category']:
        errors.add('category', 'Please choose a category.')
    cleaned['priority'] = parse_choice(data.get('priority'), VolunteerTask.PRIORITY_CHOICES, 'medium')
    cleaned['required_skills'] = clean(data.get('required_skills'))

    try:
        cleaned['start_date'] = parse_datetime(data.get('start_date'))
        cleaned['end_date'] = parse_datetime(data.get('end_date'))
    except ValueError:
        cleaned['start_date'] = cleaned['end_date'] = None
        errors.add('start_date', 'Enter valid start and end dates.')
    if not cleaned['start_date'] and 'start_date' not in errors:
        errors.add('start_date', 'Start date is required.')
    if cleaned['start_date'] and cleaned['end_date'] and cleaned['end_date'] < cleaned['start_date']:
        errors.add('end_date', 'End date must be after the start date.')

    for field_name, default in (('estimated_hours', 1), ('max_volunteers', 1)):
        try:
            value = parse_int(data.get(field_name))
        except ValueError:
            value = None
        if value is None:
            value = default
        if value < 1:
            errors.add(field_name, 'Must be at least 1.')
        cleaned[field_name] = value

    return cleaned, errors


@service_boundary('create task')
def create_task(user, data) -> ServiceResult:
    if not user.is_admin:
        return ServiceResult.forbidden('Only admins can create volunteer tasks.')

    cleaned, errors = validate_task(data)
    if errors:
        return ServiceResult.invalid(errors)

    task = VolunteerTask.objects.create(created_by=user, **cleaned)
    logger.info(f"Volunteer task {task.pk} created by {user.email}: {task.title}")
    return ServiceResult.success(task, 'Task created.')


@service_boundary('update task')
def update_task(task_id, user, data) -> ServiceResult:
    if not user.is_admin:
        return ServiceResult.forbidden('Only admins can edit volunteer tasks.')
    task = VolunteerTask.objects.filter(pk=task_id).first()
    if task is None:
        return ServiceResult.not_found('Task not found.')

    cleaned, errors = validate_task(data)
    if errors:
        return ServiceResult.invalid(errors)

    cleaned['status'] = parse_choice(data.get('status'), VolunteerTask.STATUS_CHOICES, task.status)
    for key, value in cleaned.items():
        setattr(task, key, value)
    task.save()
    return ServiceResult.success(task, 'Task updated.')


def available_tasks(term=None, category=None, priority=None, location=None, start=None, end=None):
    """Open tasks matching the filters, soonest first."""
    queryset = VolunteerTask.objects.filter(status=VolunteerTask.STATUS_OPEN)

    term = clean(term)
    if term:
        queryset = queryset.filter(
            Q(title__icontains=term) |
            Q(description__icontains=term) |
            Q(required_skills__icontains=term)
        )
    if category:
        queryset = queryset.filter(category=category)
    if priority:
        queryset = queryset.filter(priority=priority)
    if clean(location):
        queryset = queryset.filter(location__icontains=clean(location))
    if start:
        queryset = queryset.filter(start_date__date__gte=start)
    if end:
        queryset = queryset.filter(start_date__date__lte=end)

    return queryset.order_by('start_date', 'id')


# =============================================================================
# Assignments
# =============================================================================

def active_assignment_for(profile, task):
    return (
        Assignment.objects
        .filter(volunteer=profile, task=task)
        .exclude(status__in=Assignment.INACTIVE_STATUSES)
        .first()
    )


def can_take_task(profile, task) -> bool:
    """Whether the volunteer could sign up for the task right now."""
    if profile is None or not profile.is_active or not task.is_open:
        return False
    if active_assignment_for(profile, task) is not None:
        return False
    return not task.is_full


@service_boundary('assign task')
def assign_task(profile, task_id, notes='') -> ServiceResult:
    """
    Claim a spot on a task for a volunteer.

    Rejected when the volunteer is not active, the task is not open, the
    volunteer already holds an active assignment, or the task is full.
    """
    if profile is None:
        return ServiceResult.rejected('Please complete your volunteer registration first.')
    if not profile.is_active:
        return ServiceResult.rejected('Only active volunteers can take on tasks.')

    try:
        with transaction.atomic():
            task = VolunteerTask.objects.select_for_update().filter(pk=task_id).first()
            if task is None:
                return ServiceResult.not_found('Task not found.')
            if not task.is_open:
                return ServiceResult.rejected('This task is no longer open.')
            if active_assignment_for(profile, task) is not None:
                return ServiceResult.rejected('You are already assigned to this task.')
            if task.active_assignments().count() >= task.max_volunteers:
                logger.warning(f"Task {task.pk} is full; rejected volunteer {profile.pk}")
                return ServiceResult.rejected('This task is already full.')

            assignment = Assignment.objects.create(
                volunteer=profile,
                task=task,
                assigned_date=timezone.now(),
                notes=clean(notes),
            )
    except IntegrityError:
        return ServiceResult.rejected('You are already assigned to this task.')

    logger.info(f"Volunteer {profile.pk} assigned to task {task.pk}")
    return ServiceResult.success(assignment, f'You have signed up for "{task.title}".')


def _owned_assignment(assignment_id, user):
    """Fetch an assignment the user may act on. Returns (assignment, error_result)."""
    assignment = (
        Assignment.objects
        .select_related('volunteer__user', 'task')
        .filter(pk=assignment_id)
        .first()
    )
    if assignment is None:
        return None, ServiceResult.not_found('Assignment not found.')
    if assignment.volunteer.user_id != user.pk and not user.is_admin:
        return None, ServiceResult.forbidden()
    return assignment, None


def _transition(assignment_id, user, allowed_from, new_status, verb, **changes):
    assignment, error = _owned_assignment(assignment_id, user)
    if error:
        return error
    if assignment.status not in allowed_from:
        return ServiceResult.rejected(
            f"Cannot {verb} an assignment that is {assignment.get_status_display().lower()}."
        )

    old_status = assignment.status
    assignment.status = new_status
    for key, value in changes.items():
        setattr(assignment, key, value)
    assignment.save()

    logger.info(f"Assignment {assignment.pk}: {old_status} -> {new_status}")
    return ServiceResult.success(assignment)


@service_boundary('accept assignment')
def accept_assignment(assignment_id, user) -> ServiceResult:
    result = _transition(
        assignment_id, user,
        (Assignment.STATUS_ASSIGNED,), Assignment.STATUS_ACCEPTED, 'accept',
    )
    if result.ok:
        result.message = 'Task accepted. Thank you!'
    return result


@service_boundary('decline assignment')
def decline_assignment(assignment_id, user, reason='') -> ServiceResult:
    result = _transition(
        assignment_id, user,
        (Assignment.STATUS_ASSIGNED,), Assignment.STATUS_DECLINED, 'decline',
        notes=clean(reason) or NO_REASON,
    )
    if result.ok:
        result.message = 'Task declined.'
    return result


@service_boundary('start assignment')
def start_assignment(assignment_id, user) -> ServiceResult:
    result = _transition(
        assignment_id, user,
        (Assignment.STATUS_ACCEPTED,), Assignment.STATUS_IN_PROGRESS, 'start',
    )
    if result.ok:
        result.message = 'Task started.'
    return result


@service_boundary('complete assignment')
def complete_assignment(assignment_id, user, hours_worked, notes='') -> ServiceResult:
    try:
        hours = parse_decimal(hours_worked, 6, 2)
    except ValueError:
        hours = None
    if hours is None or hours < 0 or hours > 999:
        return ServiceResult.invalid({'hours_worked': ['Enter the hours worked (0-999).']})

    result = _transition(
        assignment_id, user,
        Assignment.WORKING_STATUSES, Assignment.STATUS_COMPLETED, 'complete',
        hours_worked=hours,
        notes=clean(notes),
        completion_date=timezone.now(),
    )
    if result.ok:
        result.message = 'Task completed. Thank you for your service!'
    return result


@service_boundary('cancel assignment')
def cancel_assignment(assignment_id, user) -> ServiceResult:
    result = _transition(
        assignment_id, user,
        (Assignment.STATUS_ASSIGNED,) + Assignment.WORKING_STATUSES,
        Assignment.STATUS_CANCELLED, 'cancel',
    )
    if result.ok:
        result.message = 'Assignment cancelled.'
    return result


@service_boundary('rate assignment')
def rate_assignment(assignment_id, user, rating, feedback='') -> ServiceResult:
    if not user.is_admin:
        return ServiceResult.forbidden('Only admins can rate volunteer work.')
    assignment = Assignment.objects.filter(pk=assignment_id).first()
    if assignment is None:
        return ServiceResult.not_found('Assignment not found.')
    if assignment.status != Assignment.STATUS_COMPLETED:
        return ServiceResult.rejected('Only completed assignments can be rated.')
    try:
        rating = parse_int(rating)
    except ValueError:
        rating = None
    if rating is None or not 1 <= rating <= 5:
        return ServiceResult.invalid({'rating': ['Rating must be between 1 and 5.']})

    assignment.rating = rating
    assignment.feedback = clean(feedback)
    assignment.save(update_fields=['rating', 'feedback'])
    return ServiceResult.success(assignment, 'Rating saved.')


def assignments_for(profile):
    return profile.assignments.select_related('task')


def active_assignments_for(profile):
    return assignments_for(profile).exclude(status__in=Assignment.INACTIVE_STATUSES + (Assignment.STATUS_COMPLETED,))


# =============================================================================
# Statistics
# =============================================================================

def volunteer_stats(profile) -> dict:
    assignments = profile.assignments.all()
    completed = assignments.filter(status=Assignment.STATUS_COMPLETED)

    ratings = [a.rating for a in completed if a.rating]
    total_hours = completed.aggregate(total=Sum('hours_worked'))['total'] or 0

    return {
        'total_hours_worked': total_hours,
        'tasks_completed': completed.count(),
        'active_tasks': assignments.filter(status__in=Assignment.WORKING_STATUSES).count(),
        'pending_tasks': assignments.filter(status=Assignment.STATUS_ASSIGNED).count(),
        'average_rating': round(sum(ratings) / len(ratings), 2) if ratings else 0,
        'days_active': (timezone.now() - profile.registration_date).days,
    }


def system_stats() -> dict:
    profiles = VolunteerProfile.objects.all()
    tasks = VolunteerTask.objects.all()
    labels = dict(VolunteerTask.CATEGORY_CHOICES)

    by_category = {
        labels.get(row['category'], row['category']): row['count']
        for row in tasks.values('category').annotate(count=Count('id')).order_by('-count')
    }
    total_hours = (
        Assignment.objects
        .filter(status=Assignment.STATUS_COMPLETED)
        .aggregate(total=Sum('hours_worked'))['total'] or 0
    )

    return {
        'total_volunteers': profiles.count(),
        'active_volunteers': profiles.filter(status=VolunteerProfile.STATUS_ACTIVE).count(),
        'total_tasks': tasks.count(),
        'open_tasks': tasks.filter(status=VolunteerTask.STATUS_OPEN).count(),
        'completed_tasks': tasks.filter(status=VolunteerTask.STATUS_COMPLETED).count(),
        'total_hours_worked': total_hours,
        'tasks_by_category': by_category,
    }


# =============================================================================
# Availability and communications
# =============================================================================

@service_boundary('save availability')
def set_availability(profile, day_of_week, start_time, end_time, is_available=True) -> ServiceResult:
    """Create or replace the availability window for one weekday."""
    errors = FieldErrors()
    try:
        day = parse_int(day_of_week)
    except ValueError:
        day = None
    if day not in dict(VolunteerAvailability.DAY_CHOICES):
        errors.add('day_of_week', 'Choose a day of the week.')
    try:
        start = datetime.strptime(clean(start_time), '%H:%M').time()
        end = datetime.strptime(clean(end_time), '%H:%M').time()
    except ValueError:
        start = end = None
        errors.add('start_time', 'Enter start and end times as HH:MM.')
    if start and end and end <= start:
        errors.add('end_time', 'End time must be after start time.')
    if errors:
        return ServiceResult.invalid(errors)

    slot, _ = VolunteerAvailability.objects.update_or_create(
        volunteer=profile,
        day_of_week=day,
        defaults={'start_time': start, 'end_time': end, 'is_available': parse_bool(is_available)},
    )
    return ServiceResult.success(slot, f'Availability saved for {slot.get_day_of_week_display()}.')


def availability_for(profile):
    return profile.availability_slots.all()


@service_boundary('send message')
def send_communication(sender, volunteer_id, subject, message, communication_type='general', task_id=None) -> ServiceResult:
    if not sender.is_admin:
        return ServiceResult.forbidden('Only admins can message volunteers.')

    profile = VolunteerProfile.objects.filter(pk=volunteer_id).first()
    if profile is None:
        return ServiceResult.not_found('Volunteer not found.')

    errors = FieldErrors()
    if not clean(subject):
        errors.add('subject', 'Subject is required.')
    if not clean(message):
        errors.add('message', 'Message is required.')
    if errors:
        return ServiceResult.invalid(errors)

    communication = VolunteerCommunication.objects.create(
        volunteer=profile,
        task=VolunteerTask.objects.filter(pk=task_id).first() if task_id else None,
        subject=clean(subject),
        message=clean(message),
        communication_type=parse_choice(communication_type, VolunteerCommunication.TYPE_CHOICES, 'general'),
        sent_by=sender,
    )
    return ServiceResult.success(communication, 'Message sent.')


def communications_for(profile):
    return profile.communications.select_related('task', 'sent_by')


@service_boundary('mark message read')
def mark_communication_read(communication_id, user) -> ServiceResult:
    communication = (
        VolunteerCommunication.objects
        .select_related('volunteer')
        .filter(pk=communication_id)
        .first()
    )
    if communication is None:
        return ServiceResult.not_found('Message not found.')
    if communication.volunteer.user_id != user.pk:
        return ServiceResult.forbidden()

    communication.is_read = True
    communication.save(update_fields=['is_read'])
    return ServiceResult.success(communication)
