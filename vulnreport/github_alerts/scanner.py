"""
Vulnerability Scanner

Orchestrates one scan of an organization:

1. Fetch every repository page (RepositoryPaginator)
2. Drop repositories by topic, and those without any active alert
3. Project the active alerts of the remaining repositories into Repo/Alert

A scan either completes or raises; partial results are never returned.
"""

import logging
from typing import List, Optional

from vulnreport.github_alerts import alerts as alert_policy
from vulnreport.github_alerts.graphql_client import GitHubGraphQLClient, RepositoryPaginator
from vulnreport.github_alerts.models import RawRepository, Repo, ScanConfig, TopicFilterConfig
from vulnreport.github_alerts.topic_filter import should_skip

logger = logging.getLogger(__name__)


class VulnerabilityScanner:
    """
    Finds the repositories of an organization with active vulnerability alerts.

    Usage:
        scanner = VulnerabilityScanner(ScanConfig(organization="my-org", token=token))
        repos = scanner.scan()
    """

    def __init__(self, config: ScanConfig, paginator: Optional[RepositoryPaginator] = None):
        """
        Initialize scanner.

        Args:
            config: Validated scan configuration
            paginator: Paginator to fetch with (built from config by default)
        """
        self.config = config
        if paginator is None:
            client = GitHubGraphQLClient(
                config.token,
                endpoint=config.endpoint,
                timeout=config.timeout,
                alerts_page_size=config.alerts_page_size,
                topics_page_size=config.topics_page_size
            )
            paginator = RepositoryPaginator(client)
        self.paginator = paginator

    def close(self):
        self.paginator.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def scan(
        self,
        org: Optional[str] = None,
        filter_config: Optional[TopicFilterConfig] = None
    ) -> List[Repo]:
        """
        Run a full scan.

        Args:
            org: Organization login (default: config.organization)
            filter_config: Topic filter (default: config.topic_filter)

        Returns:
            Vulnerable repositories in API order, empty if none qualify

        Raises:
            FetchFailed: If any page could not be fetched
        """
        org = org or self.config.organization
        if filter_config is None:
            filter_config = self.config.topic_filter

        raw_repositories = self.paginator.fetch_all(org, self.config.page_size)
        return self.vulnerable_repos(raw_repositories, filter_config)

    def vulnerable_repos(
        self,
        raw_repositories: List[RawRepository],
        filter_config: TopicFilterConfig
    ) -> List[Repo]:
        """Filter and project already fetched repositories."""
        skipped_by_topic = 0
        repos = []

        for raw_repo in raw_repositories:
            if should_skip(raw_repo.topics, filter_config):
                skipped_by_topic += 1
                logger.debug(f"Skipping {raw_repo.name_with_owner} - topic filter")
                continue

            if not raw_repo.alerts:
                continue

            if not alert_policy.has_active_alert(raw_repo.alerts):
                continue

            repos.append(self.build_repo(raw_repo))

        logger.info(f"Scan complete: {len(raw_repositories)} repositories fetched, "
                    f"{skipped_by_topic} skipped by topic, {len(repos)} vulnerable")
        return repos

    def build_repo(self, raw_repo: RawRepository) -> Repo:
        """Project the active alerts of a repository, keeping API order."""
        active = [
            alert_policy.project(raw_alert)
            for raw_alert in raw_repo.alerts
            if alert_policy.is_active(raw_alert)
        ]
        return Repo(url=raw_repo.url, alerts=active)
