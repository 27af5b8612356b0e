"""
Report export helpers shared by the statistics pages.
"""
from datetime import datetime, date
from typing import Any
import logging

from django.utils import timezone

from donations.reports import DonationReport
from incidents.reports import IncidentReport
from volunteers.services import system_stats

from .activity import portal_stats

logger = logging.getLogger(__name__)


def serialize_for_json(obj: Any) -> Any:
    """
    Recursively convert datetime objects to ISO format strings for JSON serialization.

    Args:
        obj: Any object (dict, list, datetime, etc.)

    Returns:
        JSON-serializable version of the object
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {str(key): serialize_for_json(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [serialize_for_json(item) for item in obj]
    elif hasattr(obj, '__dict__'):
        # Model instances and other objects with __dict__
        return str(obj)
    return obj


def _donations_report():
    report = DonationReport()
    return {'statistics': report.statistics(), 'analytics': report.analytics()}


def _incidents_report():
    report = IncidentReport()
    return {'statistics': report.statistics(), 'analytics': report.analytics()}


REPORTS = {
    'dashboard': portal_stats,
    'donations': _donations_report,
    'incidents': _incidents_report,
    'volunteers': system_stats,
}


def build_report(report_type: str):
    """Return the serialized report, or None for an unknown type."""
    builder = REPORTS.get(report_type)
    if builder is None:
        return None
    data = serialize_for_json(builder())
    data['generated_at'] = timezone.now().isoformat()
    logger.info(f"Built {report_type} report")
    return data
