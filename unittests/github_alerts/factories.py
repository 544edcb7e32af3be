"""Builders for GraphQL response fragments used across the alert tests."""

from unittest.mock import MagicMock


def alert_node(
    package="Package Name",
    severity="HIGH",
    created_at="2020-12-19T10:00:00Z",
    dismissed_at=None,
    fixed_at=None,
    auto_dismissed_at=None,
    summary="This is the summary",
    affected_range="A range of things",
    fixed_in="IDENTIFIER"
):
    node = {
        "createdAt": created_at,
        "dismissedAt": dismissed_at,
        "fixedAt": fixed_at,
        "autoDismissedAt": auto_dismissed_at,
        "securityVulnerability": {
            "package": {"name": package},
            "severity": severity,
            "vulnerableVersionRange": affected_range,
            "firstPatchedVersion": {"identifier": fixed_in},
        },
    }
    if summary is not None:
        node["securityAdvisory"] = {"summary": summary}
    return node


def repository_node(name_with_owner="dxw/repo", topics=(), alerts=(), total_count=None):
    alerts = list(alerts)
    return {
        "nameWithOwner": name_with_owner,
        "repositoryTopics": {
            "nodes": [{"topic": {"name": topic}} for topic in topics]
        },
        "vulnerabilityAlerts": {
            "totalCount": len(alerts) if total_count is None else total_count,
            "nodes": alerts,
        },
    }


def page_payload(repositories=(), end_cursor=None, has_next_page=False, remaining=4990):
    return {
        "data": {
            "organization": {
                "repositories": {
                    "pageInfo": {
                        "endCursor": end_cursor,
                        "hasNextPage": has_next_page,
                    },
                    "nodes": list(repositories),
                }
            },
            "rateLimit": {"cost": 1, "remaining": remaining, "resetAt": "2020-12-26T12:00:00Z"},
        }
    }


def json_response(payload):
    """A successful requests.Response stand-in returning payload."""
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def mock_session(*responses):
    """A requests.Session stand-in whose post() yields responses in order."""
    session = MagicMock()
    session.headers = {}
    session.post.side_effect = list(responses)
    return session
