"""
Alert classification and projection.

An alert is active until GitHub records that it was dismissed, auto-dismissed
or fixed. Active alerts are projected from the nested API node into a flat
Alert; every field is read independently so that a partial node only loses
the fields it is missing.
"""

import logging
from typing import Any, Iterable, Optional

from vulnreport.github_alerts.models import Alert, RawAlert

logger = logging.getLogger(__name__)


def is_active(alert: RawAlert) -> bool:
    """True if none of the resolution timestamps are set."""
    return (
        alert.dismissed_at is None
        and alert.fixed_at is None
        and alert.auto_dismissed_at is None
    )


def has_active_alert(alerts: Iterable[RawAlert]) -> bool:
    """True as soon as one active alert is found."""
    return any(is_active(alert) for alert in alerts)


def _dig(data: Any, *path: str) -> Optional[Any]:
    """Follow path through nested mappings, None if any step is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def project(raw: RawAlert) -> Alert:
    """
    Map a raw alert node to an Alert.

    Never raises on missing or malformed nested data; absent values become None.

    Args:
        raw: Raw alert as read from the API

    Returns:
        Alert with whatever fields could be read
    """
    node = raw.node
    alert = Alert(
        package_name=_dig(node, "securityVulnerability", "package", "name"),
        affected_range=_dig(node, "securityVulnerability", "vulnerableVersionRange"),
        severity=_dig(node, "securityVulnerability", "severity"),
        created_at=_dig(node, "createdAt"),
        fixed_in=_dig(node, "securityVulnerability", "firstPatchedVersion", "identifier"),
        details=_dig(node, "securityAdvisory", "summary"),
    )

    if alert.package_name is None:
        logger.debug(f"Alert without package name: {node!r}")

    return alert
