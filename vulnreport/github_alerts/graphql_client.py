"""
GitHub GraphQL Client

Fetches an organization's repositories, with their topics and Dependabot
vulnerability alerts, from GitHub API v4 one page at a time.

Pagination:
- Repositories are requested `page_size` at a time and followed by cursor
  until pageInfo.hasNextPage is false
- Each repository carries at most `alerts_page_size` alerts; alerts beyond
  that limit are not fetched (a warning is logged when this happens)
- Every failure aborts the whole fetch with FetchFailed, nothing is retried

Reference: https://docs.github.com/en/graphql
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from vulnreport.github_alerts.exceptions import FetchFailed
from vulnreport.github_alerts.models import PageResult, RawAlert, RawRepository
from vulnreport.github_alerts.topic_filter import topic_names

logger = logging.getLogger(__name__)


class GitHubGraphQLClient:
    """
    GitHub GraphQL API client issuing the vulnerable repositories query.

    A single requests.Session is kept for the lifetime of the client so that
    consecutive pages reuse the same connection.
    """

    GRAPHQL_ENDPOINT = "https://api.github.com/graphql"

    # vulnerabilityAlerts is only exposed under the vixen preview
    PREVIEW_MEDIA_TYPE = "application/vnd.github.vixen-preview+json"

    RATE_LIMIT_WARNING_THRESHOLD = 500

    def __init__(
        self,
        github_token: str,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = 30,
        alerts_page_size: int = 100,
        topics_page_size: int = 10,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize GraphQL client.

        Args:
            github_token: GitHub personal access token allowed to read security alerts
            endpoint: GraphQL endpoint (default: public GitHub API)
            timeout: Per-request timeout in seconds, None waits indefinitely
            alerts_page_size: Maximum alerts returned per repository
            topics_page_size: Maximum topics returned per repository
            session: Session to send requests with (a new one by default)
        """
        self.endpoint = endpoint or self.GRAPHQL_ENDPOINT
        self.timeout = timeout
        self.alerts_page_size = alerts_page_size
        self.topics_page_size = topics_page_size
        self.headers = {
            "Authorization": f"Bearer {github_token}",
            "Accept": self.PREVIEW_MEDIA_TYPE,
            "Content-Type": "application/json"
        }

        self.session = session if session is not None else requests.Session()
        self.session.headers.update(self.headers)

        self.queries_dir = Path(__file__).parent / "queries"
        self.repositories_query = self._load_query("vulnerable_repositories.graphql")

        logger.debug("Initialized GitHub GraphQL client")

    def _load_query(self, filename: str) -> str:
        """Load GraphQL query from file."""
        query_path = self.queries_dir / filename
        with open(query_path, 'r') as f:
            # Strip comments and empty lines
            lines = []
            for line in f:
                stripped = line.strip()
                if stripped and not stripped.startswith('#'):
                    lines.append(line)
            return ''.join(lines)

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def execute_query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute GraphQL query.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            Response data dictionary

        Raises:
            requests.RequestException: If the request fails or returns non-2xx
            ValueError: If the body is not JSON or contains GraphQL errors
        """
        payload = {
            "query": query,
            "variables": variables
        }

        response = self.session.post(
            self.endpoint,
            json=payload,
            timeout=self.timeout
        )

        response.raise_for_status()
        data = response.json()

        if not isinstance(data, dict):
            raise ValueError(f"Unexpected GraphQL response: {type(data).__name__}")

        # Check for GraphQL errors
        if data.get("errors"):
            error_messages = [
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in data["errors"]
            ]
            logger.error(f"GraphQL errors: {error_messages}")
            raise ValueError(f"GraphQL query failed: {'; '.join(error_messages)}")

        return data

    def fetch_repositories_page(
        self,
        org: str,
        page_size: int,
        cursor: Optional[str] = None
    ) -> PageResult:
        """
        Fetch one page of organization repositories.

        Args:
            org: Organization login name
            page_size: Number of repositories to request
            cursor: endCursor of the previous page, None for the first page

        Returns:
            PageResult with the parsed repositories and pagination state

        Raises:
            requests.RequestException: On transport or HTTP failure
            ValueError: On GraphQL errors or an unusable response body
        """
        variables = {
            "org": org,
            "pageSize": page_size,
            "cursor": cursor,
            "alertsPageSize": self.alerts_page_size,
            "topicsPageSize": self.topics_page_size,
        }

        result = self.execute_query(self.repositories_query, variables)

        data = result.get("data")
        org_data = data.get("organization") if isinstance(data, dict) else None
        if not isinstance(org_data, dict):
            raise ValueError(f"Organization {org} not found or not accessible")

        repos_connection = org_data.get("repositories") or {}
        page_info = repos_connection.get("pageInfo") or {}
        nodes = repos_connection.get("nodes") or []

        self._log_rate_limit(data.get("rateLimit"))

        repositories = []
        for node in nodes:
            parsed = self._parse_repository(node)
            if parsed:
                repositories.append(parsed)

        return PageResult(
            repositories=repositories,
            end_cursor=page_info.get("endCursor"),
            has_next_page=bool(page_info.get("hasNextPage", False))
        )

    def _parse_repository(self, node: Any) -> Optional[RawRepository]:
        """Parse a repository node, skipping nodes that cannot be identified."""
        if not isinstance(node, dict) or not node.get("nameWithOwner"):
            logger.warning(f"Skipping repository node without nameWithOwner: {node!r}")
            return None

        name_with_owner = node["nameWithOwner"]

        alerts_connection = node.get("vulnerabilityAlerts")
        if not isinstance(alerts_connection, dict):
            alerts_connection = {}
        alert_nodes = [alert for alert in alerts_connection.get("nodes") or [] if isinstance(alert, dict)]
        total_count = alerts_connection.get("totalCount")

        if isinstance(total_count, int) and total_count > len(alert_nodes):
            logger.warning(
                f"{name_with_owner} has {total_count} vulnerability alerts, "
                f"only the first {len(alert_nodes)} are considered"
            )

        return RawRepository(
            name_with_owner=name_with_owner,
            topics=topic_names(node.get("repositoryTopics")),
            alerts=[RawAlert.from_node(alert) for alert in alert_nodes],
            alerts_total_count=total_count
        )

    def _log_rate_limit(self, rate_limit: Optional[Dict[str, Any]]):
        """Log rate limit information."""
        if not rate_limit:
            return

        cost = rate_limit.get('cost', 0)
        remaining = rate_limit.get('remaining', 0)
        reset_at = rate_limit.get('resetAt', 'unknown')

        logger.debug(f"Rate limit: cost={cost}, remaining={remaining}, reset={reset_at}")

        if isinstance(remaining, int) and remaining < self.RATE_LIMIT_WARNING_THRESHOLD:
            logger.warning(f"Rate limit running low: {remaining} points remaining (resets at {reset_at})")


class RepositoryPaginator:
    """
    Drives the cursor loop over an organization's repositories.

    Usage:
        paginator = RepositoryPaginator(GitHubGraphQLClient(token))
        raw_repos = paginator.fetch_all("my-org", page_size=100)
    """

    def __init__(self, client: GitHubGraphQLClient):
        self.client = client

    def fetch_all(self, org: str, page_size: int = 100) -> List[RawRepository]:
        """
        Fetch every repository of an organization.

        Pages are requested strictly in sequence, each with the endCursor of
        the one before, and their repositories are concatenated in page order.

        Args:
            org: Organization login name
            page_size: Repositories requested per page

        Returns:
            List of all raw repositories

        Raises:
            FetchFailed: If any page cannot be fetched; no partial list is returned
        """
        logger.info(f"Fetching repositories for {org} ({page_size} per page)")

        repositories: List[RawRepository] = []
        cursor = None
        page_count = 0

        while True:
            page_count += 1

            try:
                result = self.client.fetch_repositories_page(org, page_size, cursor=cursor)
            except (requests.RequestException, ValueError) as e:
                logger.error(f"Failed fetching page {page_count} for {org}: {e}")
                raise FetchFailed(page_count, cursor, str(e)) from e

            repositories.extend(result.repositories)

            logger.info(f"Page {page_count}: Fetched {len(result.repositories)} repos, "
                        f"{len(repositories)} total")

            if not result.has_next_page:
                break

            if not result.end_cursor:
                raise FetchFailed(page_count, cursor, "hasNextPage is set but endCursor is missing")

            cursor = result.end_cursor

        logger.info(f"Completed organization fetch: {len(repositories)} repositories "
                    f"in {page_count} pages")
        return repositories
