"""
Data structures for the vulnerability alert pipeline.

Raw* types hold the API shape as read from a GraphQL page and never leave the
scanner. Repo and Alert are the projected values handed to report rendering.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from vulnreport.github_alerts.exceptions import InvalidScanConfig, MissingCredential, MissingOrganization
from vulnreport.github_alerts.sla import days_to_breach

GITHUB_WEB_URL = "https://github.com"


@dataclass(frozen=True)
class Alert:
    """A single active vulnerability alert on one dependency package."""
    package_name: Optional[str] = None
    affected_range: Optional[str] = None
    severity: Optional[str] = None
    created_at: Optional[str] = None
    fixed_in: Optional[str] = None
    details: Optional[str] = None

    @property
    def severity_label(self) -> Optional[str]:
        """Severity for display, e.g. CRITICAL -> Critical."""
        if not self.severity:
            return None
        return str(self.severity).capitalize()

    def days_to_breach(self, today: Optional[date] = None) -> Optional[int]:
        return days_to_breach(self.created_at, today=today)


@dataclass
class Repo:
    """A repository with at least one active alert."""
    url: str
    alerts: List[Alert] = field(default_factory=list)

    @property
    def alert_count(self) -> int:
        return len(self.alerts)

    @classmethod
    def url_for(cls, name_with_owner: str) -> str:
        return f"{GITHUB_WEB_URL}/{name_with_owner}"


@dataclass(frozen=True)
class RawAlert:
    """
    Resolution state of one alert node as returned by the API.

    Any of the three timestamps being set means the alert has been resolved.
    """
    dismissed_at: Optional[str] = None
    fixed_at: Optional[str] = None
    auto_dismissed_at: Optional[str] = None
    node: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_node(cls, node: Any) -> 'RawAlert':
        if not isinstance(node, dict):
            return cls()
        return cls(
            dismissed_at=node.get('dismissedAt'),
            fixed_at=node.get('fixedAt'),
            auto_dismissed_at=node.get('autoDismissedAt'),
            node=node,
        )


@dataclass
class RawRepository:
    """One repository node from a page of the organization query."""
    name_with_owner: str
    topics: FrozenSet[str] = frozenset()
    alerts: List[RawAlert] = field(default_factory=list)
    alerts_total_count: Optional[int] = None

    @property
    def url(self) -> str:
        return Repo.url_for(self.name_with_owner)


@dataclass
class PageResult:
    """A page of repositories plus the cursor needed to request the next one."""
    repositories: List[RawRepository]
    end_cursor: Optional[str]
    has_next_page: bool


@dataclass(frozen=True)
class TopicFilterConfig:
    """
    Repository topic constraints.

    An empty set places no constraint. When both are set, inclusion is
    evaluated before exclusion.
    """
    included_topics: FrozenSet[str] = frozenset()
    excluded_topics: FrozenSet[str] = frozenset()

    @classmethod
    def from_lists(
        cls,
        included: Optional[Iterable[str]] = None,
        excluded: Optional[Iterable[str]] = None
    ) -> 'TopicFilterConfig':
        return cls(
            included_topics=frozenset(t for t in (included or []) if t),
            excluded_topics=frozenset(t for t in (excluded or []) if t),
        )


@dataclass(frozen=True)
class ScanConfig:
    """
    Everything one scan needs. Validated on construction so that missing
    credentials are reported before any network call is made.
    """
    organization: str
    token: str = field(repr=False)
    page_size: int = 100
    alerts_page_size: int = 100
    topics_page_size: int = 10
    timeout: Optional[float] = 30
    topic_filter: TopicFilterConfig = TopicFilterConfig()
    endpoint: Optional[str] = None

    def __post_init__(self):
        if not self.token:
            raise MissingCredential("Missing GitHub personal access token")
        if not self.organization:
            raise MissingOrganization("Missing GitHub organization name")
        for name in ('page_size', 'alerts_page_size', 'topics_page_size'):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise InvalidScanConfig(f"{name} must be a positive integer, got {value!r}")
