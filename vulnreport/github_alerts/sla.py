"""
Service level arithmetic for vulnerability alerts.

We aim to close vulnerability alerts within SLA_DAYS calendar days of the
alert being raised. All calendar days count, weekends and bank holidays
included.
"""

import logging
from datetime import date
from typing import Optional

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date

logger = logging.getLogger(__name__)

SLA_DAYS = 14


def sla_days() -> int:
    return getattr(settings, 'VULNREPORT_SLA_DAYS', SLA_DAYS)


def alert_date(created_at: Optional[str]) -> Optional[date]:
    """Date portion of an ISO-8601 timestamp, or None if it cannot be read."""
    if not created_at or not isinstance(created_at, str):
        return None

    try:
        return parse_date(created_at[:10])
    except ValueError:
        logger.debug(f"Unparseable alert timestamp: {created_at!r}")
        return None


def days_to_breach(created_at: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """
    Calendar days left before an alert raised at created_at breaches the SLA.

    Negative values mean the SLA has already been breached.

    Args:
        created_at: ISO-8601 timestamp of the alert
        today: Reference date (default: today in the configured time zone)

    Returns:
        Days remaining, or None when created_at is absent or unreadable
    """
    created = alert_date(created_at)
    if created is None:
        return None

    if today is None:
        today = timezone.localdate()

    return sla_days() - (today - created).days
