"""
Repository topic filtering.

Repositories can be narrowed down by the topics attached to them on GitHub:

- included topics: only repositories carrying at least one of them are kept
- excluded topics: repositories carrying any of them are dropped

Inclusion is checked first. A repository without topics can never match an
exclusion, but it is dropped whenever an inclusion list is configured.
"""

from typing import AbstractSet, Any, FrozenSet

from vulnreport.github_alerts.models import TopicFilterConfig


def should_skip(repo_topics: AbstractSet[str], config: TopicFilterConfig) -> bool:
    """
    Decide whether a repository is left out of the scan because of its topics.

    Args:
        repo_topics: Topic names attached to the repository
        config: Included/excluded topic sets

    Returns:
        True if the repository should be skipped
    """
    if config.included_topics and config.included_topics.isdisjoint(repo_topics):
        return True
    if config.excluded_topics and not config.excluded_topics.isdisjoint(repo_topics):
        return True
    return False


def topic_names(topics_connection: Any) -> FrozenSet[str]:
    """
    Topic names from a repositoryTopics connection.

    Nodes without a topic or a name are ignored.
    """
    if not isinstance(topics_connection, dict):
        return frozenset()

    names = set()
    for node in topics_connection.get("nodes") or []:
        topic = node.get("topic") if isinstance(node, dict) else None
        name = topic.get("name") if isinstance(topic, dict) else None
        if name:
            names.add(name)
    return frozenset(names)
