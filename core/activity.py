"""
Portal-wide headline numbers and the per-user activity feed.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.db.models import Sum
from django.urls import reverse

from donations.models import Donation, DonationDistribution
from incidents.models import DisasterIncident
from volunteers.models import VolunteerProfile, VolunteerTaskAssignment

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


@dataclass
class ActivityItem:
    """One line in the dashboard's recent activity list."""
    kind: str
    title: str
    status: str
    date: datetime
    url: str


def portal_stats() -> dict:
    """Headline counts shown on the home page and dashboard."""
    total_financial = (
        Donation.objects.exclude(status=Donation.STATUS_CANCELLED)
        .aggregate(total=Sum('amount'))['total'] or Decimal('0')
    )
    communities = (
        DonationDistribution.objects
        .values('distribution_location')
        .distinct()
        .count()
    )
    return {
        'active_volunteers': VolunteerProfile.objects.filter(status=VolunteerProfile.STATUS_ACTIVE).count(),
        'total_financial': total_financial,
        'active_incidents': DisasterIncident.objects.filter(status__in=DisasterIncident.ACTIVE_STATUSES).count(),
        'communities_helped': communities,
    }


def recent_activity(user, limit: int = RECENT_ACTIVITY_LIMIT) -> list:
    """
    The user's donations, incident reports and task assignments, newest first.
    """
    items = []

    for donation in Donation.objects.filter(donor=user).order_by('-donation_date', '-id')[:limit]:
        items.append(ActivityItem(
            kind='donation',
            title=f"{donation.get_donation_type_display()} donation #{donation.pk}",
            status=donation.get_status_display(),
            date=donation.donation_date,
            url=reverse('donation_detail', args=[donation.pk]),
        ))

    for incident in DisasterIncident.objects.filter(reported_by=user).order_by('-reported_date', '-id')[:limit]:
        items.append(ActivityItem(
            kind='incident',
            title=incident.title,
            status=incident.get_status_display(),
            date=incident.reported_date,
            url=reverse('incident_detail', args=[incident.pk]),
        ))

    assignments = (
        VolunteerTaskAssignment.objects
        .filter(volunteer__user=user)
        .select_related('task')
        .order_by('-assigned_date', '-id')[:limit]
    )
    for assignment in assignments:
        items.append(ActivityItem(
            kind='assignment',
            title=assignment.task.title,
            status=assignment.get_status_display(),
            date=assignment.assigned_date,
            url=reverse('volunteer_task_detail', args=[assignment.task_id]),
        ))

    items.sort(key=lambda item: item.date, reverse=True)
    return items[:limit]
