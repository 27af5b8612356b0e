import logging
from itertools import zip_longest

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from core.http import error_response, flash_result
from core.middleware import require_handler, require_role
from core.parsing import parse_date

from . import services
from .models import Donation, DonationCenter, ResourceDonation
from .reports import DonationReport

logger = logging.getLogger(__name__)

RESOURCE_FIELDS = (
    'category', 'item_name', 'quantity', 'unit_of_measure', 'condition',
    'description', 'estimated_value', 'expiration_date',
)


def _resource_lines_from_post(post):
    """Rebuild resource line dicts from the repeated resource_* inputs."""
    columns = [post.getlist(f'resource_{name}') for name in RESOURCE_FIELDS]
    return [dict(zip(RESOURCE_FIELDS, values)) for values in zip_longest(*columns, fillvalue='')]


def _can_view(user, donation):
    return donation.donor_id == user.pk or user.can_handle_goods


def _choice_context():
    return {
        'type_choices': Donation.TYPE_CHOICES,
        'status_choices': Donation.STATUS_CHOICES,
        'urgency_choices': Donation.URGENCY_CHOICES,
        'delivery_choices': Donation.DELIVERY_CHOICES,
        'payment_choices': Donation.PAYMENT_METHOD_CHOICES,
        'category_choices': ResourceDonation.CATEGORY_CHOICES,
        'condition_choices': ResourceDonation.CONDITION_CHOICES,
    }


@login_required
def donation_dashboard(request):
    """Donations landing page: the user's own pledges plus headline numbers."""
    context = {
        'my_donations': services.donations_for_user(request.user)[:10],
        'recent_donations': services.recent_donations(5),
        'urgent_donations': services.urgent_donations()[:5],
        'stats': DonationReport().statistics(),
        'centers': services.active_donation_centers()[:5],
    }
    return render(request, 'donations/dashboard.html', context)


@login_required
@require_http_methods(["GET", "POST"])
def donate(request):
    """Create a financial, resource or mixed donation."""
    data = {}
    errors = {}

    if request.method == 'POST':
        data = request.POST.dict()
        data['resources'] = _resource_lines_from_post(request.POST)

        result = services.create_donation(request.user, data)
        if result.ok:
            messages.success(request, result.message)
            return redirect('donation_detail', pk=result.value.pk)

        errors = result.errors
        if not errors:
            messages.error(request, result.message)

    context = {
        'data': data,
        'errors': errors,
        'resource_lines': data.get('resources') or [{}],
        **_choice_context(),
    }
    return render(request, 'donations/donate.html', context)


@login_required
def donation_detail(request, pk):
    donation = services.get_donation(pk)
    if donation is None:
        return render(request, 'donations/not_found.html', status=404)
    if not _can_view(request.user, donation):
        return HttpResponseForbidden('Access denied')

    context = {
        'donation': donation,
        'resources': donation.resources.all(),
        'tracking': donation.tracking_history.all(),
        'distributions': donation.distributions.all(),
        'status_choices': Donation.STATUS_CHOICES,
        'category_choices': ResourceDonation.CATEGORY_CHOICES,
        'condition_choices': ResourceDonation.CONDITION_CHOICES,
    }
    return render(request, 'donations/detail.html', context)


@login_required
def donation_search(request):
    """Search donations by text and filters."""
    term = request.GET.get('q', '').strip()
    filters = {
        'donation_type': request.GET.get('type', ''),
        'status': request.GET.get('status', ''),
        'urgency': request.GET.get('urgency', ''),
        'location': request.GET.get('location', ''),
    }
    try:
        date_from = parse_date(request.GET.get('date_from'))
        date_to = parse_date(request.GET.get('date_to'))
    except ValueError:
        date_from = date_to = None
        messages.error(request, 'Dates must be in YYYY-MM-DD format.')

    donations = services.search_donations(term=term, date_from=date_from, date_to=date_to, **filters)
    if not request.user.can_handle_goods:
        donations = donations.filter(donor=request.user)

    context = {
        'donations': donations[:100],
        'search_query': term,
        'filters': filters,
        'date_from': request.GET.get('date_from', ''),
        'date_to': request.GET.get('date_to', ''),
        **_choice_context(),
    }
    return render(request, 'donations/search.html', context)


@login_required
@require_POST
def donation_update_status(request, pk):
    new_status = request.POST.get('status', '')
    if new_status == Donation.STATUS_REJECTED:
        result = services.reject_donation(pk, request.POST.get('reason', ''), request.user)
    else:
        result = services.update_donation_status(pk, new_status, request.user, request.POST.get('notes', '').strip())

    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    return redirect('donation_detail', pk=pk)


@login_required
@require_POST
def donation_add_tracking(request, pk):
    result = services.add_tracking_update(
        pk,
        request.user,
        location=request.POST.get('location', ''),
        notes=request.POST.get('notes', ''),
        estimated_delivery=request.POST.get('estimated_delivery', ''),
    )
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    return redirect('donation_detail', pk=pk)


@login_required
@require_POST
def donation_add_resource(request, pk):
    """Add one more item line to a resource or mixed donation."""
    line = {name: request.POST.get(name, '') for name in RESOURCE_FIELDS}
    result = services.add_resource_donation(pk, request.user, line)
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    return redirect('donation_detail', pk=pk)


@login_required
@require_POST
def resource_quality_check(request, pk):
    """Approve or reject a donated resource line."""
    resource = get_object_or_404(ResourceDonation, pk=pk)
    approved = request.POST.get('decision') == 'approve'
    result = services.perform_quality_check(pk, request.user, approved, request.POST.get('notes', ''))

    denied = error_response(result)
    if denied:
        return denied

    if request.htmx:
        return render(request, 'donations/partials/resource_row.html', {'resource': result.value or resource})

    flash_result(request, result)
    return redirect('donation_detail', pk=resource.donation_id)


@login_required
@require_handler
@require_http_methods(["GET", "POST"])
def donation_distribute(request, pk):
    """Record goods from a donation being handed out."""
    donation = services.get_donation(pk)
    if donation is None:
        return render(request, 'donations/not_found.html', status=404)

    data = {}
    errors = {}

    if request.method == 'POST':
        data = request.POST.dict()
        data['allocations'] = {
            key[len('quantity_'):]: value
            for key, value in request.POST.items()
            if key.startswith('quantity_')
        }
        result = services.create_distribution(pk, request.user, data)
        denied = error_response(result)
        if denied:
            return denied
        if result.ok:
            messages.success(request, result.message)
            return redirect('donation_detail', pk=pk)
        errors = result.errors
        if not errors:
            messages.error(request, result.message)

    context = {
        'donation': donation,
        'resources': donation.resources.filter(status=ResourceDonation.STATUS_AVAILABLE),
        'data': data,
        'errors': errors,
    }
    return render(request, 'donations/distribute.html', context)


@login_required
@require_handler
def resource_list(request):
    """Inventory of donated goods."""
    category = request.GET.get('category', '')
    resources = services.resources_by_category(category) if category else services.available_resources()

    context = {
        'resources': resources,
        'category': category,
        'expiring': services.expiring_resources(),
        'pending_check': services.resources_pending_quality_check(),
        'category_choices': ResourceDonation.CATEGORY_CHOICES,
    }
    return render(request, 'donations/resources.html', context)


@login_required
def donation_statistics(request):
    report = DonationReport()
    context = {
        'stats': report.statistics(),
        'analytics': report.analytics(),
        'top_donations': report.top_donations(5),
    }
    return render(request, 'donations/statistics.html', context)


@login_required
def tax_receipt(request, pk):
    result = services.generate_tax_receipt(pk, request.user)
    denied = error_response(result)
    if denied:
        return denied
    if not result.ok:
        flash_result(request, result)
        return redirect('donation_detail', pk=pk)
    return HttpResponse(result.value, content_type='text/plain')


@login_required
@require_POST
def donation_delete(request, pk):
    result = services.delete_donation(pk, request.user)
    denied = error_response(result)
    if denied:
        return denied
    flash_result(request, result)
    if result.ok:
        return redirect('donation_dashboard')
    return redirect('donation_detail', pk=pk)


@login_required
def center_list(request):
    city = request.GET.get('city', '').strip()
    centers = services.nearby_donation_centers(city) if city else services.active_donation_centers()
    return render(request, 'donations/centers.html', {'centers': centers, 'city': city})


@login_required
@require_role('admin')
@require_http_methods(["GET", "POST"])
def center_edit(request, pk=None):
    center = get_object_or_404(DonationCenter, pk=pk) if pk else None
    data = {}
    errors = {}

    if request.method == 'POST':
        data = request.POST.dict()
        result = services.save_donation_center(request.user, data, center_id=pk)
        denied = error_response(result)
        if denied:
            return denied
        if result.ok:
            messages.success(request, result.message)
            return redirect('donation_center_list')
        errors = result.errors

    return render(request, 'donations/center_form.html', {
        'center': center,
        'data': data,
        'errors': errors,
    })
