"""
Incident statistics and analytics, recomputed on every call.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Avg, Count, Sum
from django.utils import timezone

from .models import DisasterIncident


class IncidentReport:
    """Aggregates over reported incidents within an optional date window."""

    def __init__(self, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
        self.date_to = date_to or timezone.now()
        self.date_from = date_from or (self.date_to - timedelta(days=365))

    def statistics(self) -> dict:
        incidents = DisasterIncident.objects.all()
        month_ago = timezone.now() - timedelta(days=30)
        type_labels = dict(DisasterIncident.TYPE_CHOICES)
        severity_labels = dict(DisasterIncident.SEVERITY_CHOICES)

        by_type = {
            type_labels.get(row['incident_type'], row['incident_type']): row['count']
            for row in incidents.values('incident_type').annotate(count=Count('id')).order_by('-count')
        }
        by_severity = {
            severity_labels.get(row['severity'], row['severity']): row['count']
            for row in incidents.values('severity').annotate(count=Count('id')).order_by('severity')
        }

        return {
            'total_incidents': incidents.count(),
            'active_incidents': incidents.filter(status__in=DisasterIncident.ACTIVE_STATUSES).count(),
            'resolved_incidents': incidents.filter(status__in=DisasterIncident.RESOLVED_STATUSES).count(),
            'critical_incidents': incidents.filter(priority__in=DisasterIncident.CRITICAL_PRIORITIES).count(),
            'incidents_this_month': incidents.filter(reported_date__gte=month_ago).count(),
            'total_people_affected': incidents.aggregate(total=Sum('affected_population'))['total'] or 0,
            'incidents_by_type': by_type,
            'incidents_by_severity': by_severity,
        }

    def analytics(self) -> dict:
        window = DisasterIncident.objects.filter(
            incident_date__gte=self.date_from,
            incident_date__lte=self.date_to,
        )
        total = window.count()
        totals = window.aggregate(
            casualties=Sum('casualties'),
            injuries=Sum('injuries'),
            damage=Sum('property_damage_estimate'),
            severity=Avg('severity'),
        )
        most_common = (
            window.values('incident_type')
            .annotate(count=Count('id'))
            .order_by('-count', 'incident_type')
            .first()
        )
        verified = window.filter(verification_status=DisasterIncident.VERIFICATION_VERIFIED).count()

        return {
            'date_from': self.date_from,
            'date_to': self.date_to,
            'total_incidents': total,
            'total_casualties': totals['casualties'] or 0,
            'total_injuries': totals['injuries'] or 0,
            'total_property_damage': totals['damage'] or Decimal('0'),
            'most_common_type': (
                dict(DisasterIncident.TYPE_CHOICES).get(most_common['incident_type'])
                if most_common else None
            ),
            'average_severity': round(totals['severity'] or 0, 2),
            'verification_rate': round(verified * 100 / total, 1) if total else 0.0,
        }
