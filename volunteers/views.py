import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods, require_POST

from core.http import error_response, flash_result
from core.middleware import require_role
from core.parsing import parse_date

from . import services
from .matching import TaskRecommender
from .models import (
    VolunteerAvailability,
    VolunteerCommunication,
    VolunteerProfile,
    VolunteerTask,
    VolunteerTaskAssignment,
)

logger = logging.getLogger(__name__)


def _profile_or_redirect(request):
    """Return (profile, None) or (None, redirect-to-registration)."""
    profile = services.get_profile(request.user)
    if profile is None:
        messages.info(request, 'Please complete your volunteer registration first.')
        return None, redirect('volunteer_register')
    return profile, None


@login_required
@require_http_methods(["GET", "POST"])
def volunteer_register(request):
    """Create the volunteer profile for the logged-in user."""
    if services.get_profile(request.user):
        return redirect('volunteer_dashboard')

    data = {}
    errors = {}
    if request.method == 'POST':
        data = request.POST.dict()
        result = services.create_profile(request.user, data)
        if result.ok:
            messages.success(request, result.message)
            return redirect('volunteer_dashboard')
        errors = result.errors
        if not errors:
            messages.error(request, result.message)

    return render(request, 'volunteers/register.html', {'data': data, 'errors': errors})


@login_required
def volunteer_dashboard(request):
    profile, missing = _profile_or_redirect(request)
    if missing:
        return missing

    context = {
        'profile': profile,
        'assignments': services.assignments_for(profile)[:10],
        'current_assignments': services.active_assignments_for(profile),
        'recommendations': TaskRecommender().recommend(profile),
        'stats': services.volunteer_stats(profile),
        'unread_messages': services.communications_for(profile).filter(is_read=False),
    }
    return render(request, 'volunteers/dashboard.html', context)


@login_required
@require_http_methods(["GET", "POST"])
def volunteer_profile(request):
    profile, missing = _profile_or_redirect(request)
    if missing:
        return missing

    errors = {}
    if request.method == 'POST':
        result = services.update_profile(request.user, request.POST.dict())
        if result.ok:
            messages.success(request, result.message)
            return redirect('volunteer_profile')
        errors = result.errors

    return render(request, 'volunteers/profile.html', {
        'profile': profile,
        'errors': errors,
        'availability': services.availability_for(profile),
        'day_choices': VolunteerAvailability.DAY_CHOICES,
    })


@login_required
@require_POST
def volunteer_availability(request):
    profile, missing = _profile_or_redirect(request)
    if missing:
        return missing

    result = services.set_availability(
        profile,
        request.POST.get('day_of_week'),
        request.POST.get('start_time', ''),
        request.POST.get('end_time', ''),
        request.POST.get('is_available', 'on'),
    )
    flash_result(request, result)
    return redirect('volunteer_profile')


@login_required
def task_list(request):
    """Open tasks with filters."""
    term = request.GET.get('q', '').strip()
    category = request.GET.get('category', '')
    priority = request.GET.get('priority', '')
    location = request.GET.get('location', '')
    try:
        start = parse_date(request.GET.get('start'))
        end = parse_date(request.GET.get('end'))
    except ValueError:
        start = end = None
        messages.error(request, 'Dates must be in YYYY-MM-DD format.')

    tasks = services.available_tasks(
        term=term,
        category=category,
        priority=priority,
        location=location,
        start=start,
        end=end,
    )

    return render(request, 'volunteers/tasks.html', {
        'tasks': tasks,
        'search_query': term,
        'category': category,
        'priority': priority,
        'location': location,
        'category_choices': VolunteerTask.CATEGORY_CHOICES,
        'priority_choices': VolunteerTask.PRIORITY_CHOICES,
        'profile': services.get_profile(request.user),
    })


@login_required
def task_detail(request, pk):
    task = get_object_or_404(VolunteerTask, pk=pk)
    profile = services.get_profile(request.user)

    context = {
        'task': task,
        'profile': profile,
        'can_apply': services.can_take_task(profile, task),
        'my_assignment': services.active_assignment_for(profile, task) if profile else None,
    }
    if request.user.is_admin:
        context['assignments'] = task.assignments.select_related('volunteer__user')
    return render(request, 'volunteers/task_detail.html', context)


@login_required
@require_role('admin')
@require_http_methods(["GET", "POST"])
def task_create(request):
    data = {}
    errors = {}
    if request.method == 'POST':
        data = request.POST.dict()
        result = services.create_task(request.user, data)
        denied = error_response(result)
        if denied:
            return denied
        if result.ok:
            messages.success(request, result.message)
            return redirect('volunteer_task_detail', pk=result.value.pk)
        errors = result.errors

    return _render_task_form(request, data, errors)


@login_required
@require_role('admin')
@require_http_methods(["GET", "POST"])
def task_edit(request, pk):
    task = get_object_or_404(VolunteerTask, pk=pk)
    errors = {}
    if request.method == 'POST':
        data = request.POST.dict()
        result = services.update_task(task.pk, request.user, data)
        denied = error_response(result)
        if denied:
            return denied
        if result.ok:
            messages.success(request, result.message)
            return redirect('volunteer_task_detail', pk=task.pk)
        errors = result.errors
    else:
        data = _task_form_data(task)

    return _render_task_form(request, data, errors, task=task)


def _task_form_data(task):
    """Current task values in the shape the form posts them."""
    def local(value):
        return timezone.localtime(value).strftime('%Y-%m-%dT%H:%M') if value else ''

    return {
        'title': task.title,
        'description': task.description,
        'category': task.category,
        'priority': task.priority,
        'status': task.status,
        'required_skills': task.required_skills,
        'location': task.location,
        'start_date': local(task.start_date),
        'end_date': local(task.end_date),
        'estimated_hours': task.estimated_hours,
        'max_volunteers': task.max_volunteers,
    }


def _render_task_form(request, data, errors, task=None):
    return render(request, 'volunteers/task_form.html', {
        'task': task,
        'data': data,
        'errors': errors,
        'category_choices': VolunteerTask.CATEGORY_CHOICES,
        'priority_choices': VolunteerTask.PRIORITY_CHOICES,
        'status_choices': VolunteerTask.STATUS_CHOICES,
    })


@login_required
@require_POST
def task_apply(request, pk):
    """Sign the current volunteer up for a task."""
    profile, missing = _profile_or_redirect(request)
    if missing:
        return missing

    result = services.assign_task(profile, pk, request.POST.get('notes', ''))
    denied = error_response(result)
    if denied:
        return denied

    if result.ok:
        messages.success(request, result.message)
        return redirect('volunteer_my_tasks')

    logger.info(f"Task application rejected for volunteer {profile.pk}: {result.message}")
    messages.error(
        request,
        f'Unable to apply for this task. {result.message}'
    )
    return redirect('volunteer_task_detail', pk=pk)


@login_required
def my_tasks(request):
    profile, missing = _profile_or_redirect(request)
    if missing:
        return missing

    status = request.GET.get('status', '')
    assignments = services.assignments_for(profile)
    if status:
        assignments = assignments.filter(status=status)

    return render(request, 'volunteers/my_tasks.html', {
        'profile': profile,
        'assignments': assignments,
        'status': status,
        'status_choices': VolunteerTaskAssignment.STATUS_CHOICES,
    })


def _assignment_action(request, result):
    denied = error_response(result)
    if denied:
        return denied
    if request.htmx and result.ok:
        return render(request, 'volunteers/partials/assignment_row.html', {'assignment': result.value})
    flash_result(request, result)
    return redirect('volunteer_my_tasks')


@login_required
@require_POST
def assignment_accept(request, pk):
    return _assignment_action(request, services.accept_assignment(pk, request.user))


@login_required
@require_POST
def assignment_decline(request, pk):
    return _assignment_action(request, services.decline_assignment(pk, request.user, request.POST.get('reason', '')))


@login_required
@require_POST
def assignment_start(request, pk):
    return _assignment_action(request, services.start_assignment(pk, request.user))


@login_required
@require_POST
def assignment_cancel(request, pk):
    return _assignment_action(request, services.cancel_assignment(pk, request.user))


@login_required
@require_http_methods(["GET", "POST"])
def assignment_complete(request, pk):
    assignment = get_object_or_404(
        VolunteerTaskAssignment.objects.select_related('task', 'volunteer'), pk=pk
    )
    errors = {}

    if request.method == 'POST':
        result = services.complete_assignment(
            pk,
            request.user,
            request.POST.get('hours_worked', ''),
            request.POST.get('notes', ''),
        )
        denied = error_response(result)
        if denied:
            return denied
        if result.ok:
            messages.success(request, result.message)
            return redirect('volunteer_my_tasks')
        if result.errors:
            errors = result.errors
        else:
            messages.error(request, result.message)
            return redirect('volunteer_my_tasks')
    elif assignment.volunteer.user_id != request.user.pk and not request.user.is_admin:
        return redirect('volunteer_my_tasks')

    return render(request, 'volunteers/complete_task.html', {'assignment': assignment, 'errors': errors})


@login_required
@require_role('admin')
@require_POST
def assignment_rate(request, pk):
    result = services.rate_assignment(pk, request.user, request.POST.get('rating'), request.POST.get('feedback', ''))
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    assignment = get_object_or_404(VolunteerTaskAssignment, pk=pk)
    return redirect('volunteer_task_detail', pk=assignment.task_id)


@login_required
def volunteer_messages(request):
    profile, missing = _profile_or_redirect(request)
    if missing:
        return missing
    return render(request, 'volunteers/messages.html', {
        'communications': services.communications_for(profile),
    })


@login_required
@require_POST
def message_mark_read(request, pk):
    result = services.mark_communication_read(pk, request.user)
    denied = error_response(result)
    if denied:
        return denied
    return redirect('volunteer_messages')


@login_required
@require_role('admin')
@require_http_methods(["GET", "POST"])
def volunteer_directory(request):
    """Admin search over volunteers, with a message form per volunteer."""
    if request.method == 'POST':
        result = services.send_communication(
            request.user,
            request.POST.get('volunteer_id'),
            request.POST.get('subject', ''),
            request.POST.get('message', ''),
            request.POST.get('communication_type', 'general'),
            request.POST.get('task_id') or None,
        )
        denied = error_response(result)
        if denied:
            return denied
        flash_result(request, result)
        return redirect('volunteer_directory')

    volunteers = services.search_volunteers(
        term=request.GET.get('q', ''),
        skill=request.GET.get('skill', ''),
        status=request.GET.get('status', ''),
    )
    return render(request, 'volunteers/directory.html', {
        'volunteers': volunteers,
        'search_query': request.GET.get('q', ''),
        'skill': request.GET.get('skill', ''),
        'status': request.GET.get('status', ''),
        'status_choices': VolunteerProfile.STATUS_CHOICES,
        'type_choices': VolunteerCommunication.TYPE_CHOICES,
    })


@login_required
def volunteer_statistics(request):
    return render(request, 'volunteers/statistics.html', {'stats': services.system_stats()})
