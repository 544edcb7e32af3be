"""
GitHub Vulnerability Alerts Module

Finds the repositories of a GitHub organization that have active Dependabot
vulnerability alerts:
- Fetches all repositories page by page from the GraphQL API v4
- Filters repositories by included/excluded topics
- Classifies alerts as active or resolved (dismissed, auto-dismissed, fixed)
- Projects active alerts into flat Repo/Alert values for reporting
- Computes calendar days left before the remediation SLA is breached
"""

from .exceptions import (
    FetchFailed,
    InvalidScanConfig,
    MissingCredential,
    MissingOrganization,
    VulnerabilityReportError,
)
from .graphql_client import GitHubGraphQLClient, RepositoryPaginator
from .models import Alert, Repo, ScanConfig, TopicFilterConfig
from .scanner import VulnerabilityScanner

__all__ = [
    'Alert',
    'FetchFailed',
    'GitHubGraphQLClient',
    'InvalidScanConfig',
    'MissingCredential',
    'MissingOrganization',
    'Repo',
    'RepositoryPaginator',
    'ScanConfig',
    'TopicFilterConfig',
    'VulnerabilityReportError',
    'VulnerabilityScanner',
]
