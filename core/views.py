import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render

from donations.services import urgent_donations
from incidents.services import incidents_requiring_attention

from .activity import portal_stats, recent_activity
from .middleware import require_role
from .reports import build_report

logger = logging.getLogger(__name__)


def home(request):
    """Public landing page with the headline counts."""
    return render(request, 'core/home.html', {'stats': portal_stats()})


@login_required
def dashboard(request):
    """Dashboard view with overview statistics and the user's recent activity."""
    context = {
        'stats': portal_stats(),
        'recent_activity': recent_activity(request.user),
    }

    if request.user.can_handle_goods:
        context['urgent_donations'] = urgent_donations().exclude(status__in=('completed', 'cancelled'))[:5]
        context['incidents_needing_attention'] = incidents_requiring_attention()[:5]

    return render(request, 'core/dashboard.html', context)


@login_required
@require_role('admin')
def statistics_export(request, report_type):
    """
    Export a statistics report as JSON.
    """
    report_data = build_report(report_type)
    if report_data is None:
        return JsonResponse({'error': 'Unknown report type'}, status=400)

    response = JsonResponse(report_data, json_dumps_params={'indent': 2})
    response['Content-Disposition'] = f'attachment; filename="{report_type}_report.json"'
    return response
