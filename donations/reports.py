"""
Donation statistics and analytics.

All methods return plain dictionaries that can be rendered in templates or
exported as JSON through ``core.reports.build_report``.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
import logging

from django.db.models import Avg, Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Donation, ResourceDonation

logger = logging.getLogger(__name__)


def month_keys(months: int, today=None) -> list:
    """Return "YYYY-MM" keys for the last ``months`` calendar months, oldest first."""
    today = today or timezone.localdate()
    year, month = today.year, today.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    keys.reverse()
    return keys


class DonationReport:
    """
    Aggregates over the donation ledger.

    Statistics are computed on each call; nothing is cached.
    """

    def __init__(self, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
        """
        Args:
            date_from: Start of the analytics window (default: 365 days ago)
            date_to: End of the analytics window (default: now)
        """
        self.date_to = date_to or timezone.now()
        self.date_from = date_from or (self.date_to - timedelta(days=365))

    def statistics(self) -> dict:
        """
        Headline numbers for the donations dashboard.

        Returns:
            Dict with total_donations, total_financial_amount, total_resource_items,
            donations_this_month, active_donations, distributed_donations,
            donations_by_category, donations_by_status, unique_donors and
            average_donation_amount.
        """
        donations = Donation.objects.all()
        financial = donations.filter(amount__isnull=False)
        month_ago = timezone.now() - timedelta(days=30)

        totals = financial.aggregate(total=Sum('amount'), average=Avg('amount'))

        by_category = {
            row['category']: row['count']
            for row in ResourceDonation.objects.values('category').annotate(count=Count('id'))
        }
        by_status = {
            row['status']: row['count']
            for row in donations.values('status').annotate(count=Count('id'))
        }

        return {
            'total_donations': donations.count(),
            'total_financial_amount': totals['total'] or Decimal('0'),
            'total_resource_items': ResourceDonation.objects.count(),
            'donations_this_month': donations.filter(donation_date__gte=month_ago).count(),
            'active_donations': donations.filter(status__in=Donation.ACTIVE_STATUSES).count(),
            'distributed_donations': donations.filter(status__in=Donation.DISTRIBUTED_STATUSES).count(),
            'donations_by_category': by_category,
            'donations_by_status': by_status,
            'unique_donors': donations.values('donor').distinct().count(),
            'average_donation_amount': (totals['average'] or Decimal('0')).quantize(Decimal('0.01')),
        }

    def analytics(self, months: int = 12) -> dict:
        """Completion rate and trends within the report window."""
        window = Donation.objects.filter(
            donation_date__gte=self.date_from,
            donation_date__lte=self.date_to,
        )
        total = window.count()
        completed = window.filter(status__in=Donation.DISTRIBUTED_STATUSES).count()

        return {
            'date_from': self.date_from,
            'date_to': self.date_to,
            'total_donations': total,
            'completed_donations': completed,
            'completion_rate': round(completed * 100 / total, 1) if total else 0.0,
            'total_amount': window.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
            'monthly_trends': self.monthly_trends(months),
            'category_breakdown': self.category_breakdown(),
        }

    def monthly_trends(self, months: int = 12) -> dict:
        """
        Financial amount per calendar month for the last ``months`` months.

        Returns:
            Ordered dict of "YYYY-MM" -> Decimal, zero for months with no donations.
        """
        keys = month_keys(months)
        first_year, first_month = (int(part) for part in keys[0].split('-'))
        start = timezone.make_aware(datetime(first_year, first_month, 1))

        trends = {key: Decimal('0') for key in keys}
        rows = (
            Donation.objects
            .filter(donation_date__gte=start, amount__isnull=False)
            .annotate(month=TruncMonth('donation_date'))
            .values('month')
            .annotate(total=Sum('amount'))
        )
        for row in rows:
            key = row['month'].strftime('%Y-%m')
            if key in trends:
                trends[key] += row['total']
        return trends

    def category_breakdown(self) -> dict:
        """Units donated and still on hand per resource category."""
        breakdown = {}
        rows = (
            ResourceDonation.objects
            .values('category')
            .annotate(quantity=Sum('quantity'), remaining=Sum('remaining_quantity'), lines=Count('id'))
        )
        labels = dict(ResourceDonation.CATEGORY_CHOICES)
        for row in rows:
            breakdown[row['category']] = {
                'label': labels.get(row['category'], row['category']),
                'lines': row['lines'],
                'quantity': row['quantity'] or 0,
                'remaining': row['remaining'] or 0,
            }
        return breakdown

    def top_donations(self, count: int = 10):
        return (
            Donation.objects
            .filter(amount__isnull=False)
            .select_related('donor')
            .order_by('-amount', '-donation_date')[:count]
        )
