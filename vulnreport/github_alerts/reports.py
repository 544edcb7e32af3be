"""
Report rendering for vulnerable repositories.

Three formats are supported: plain text and HTML written to a stream, and CSV
written to a file. HTML goes through the Django template engine so every
value coming from GitHub is escaped.
"""

import csv
import logging
import re
from datetime import date
from typing import IO, Iterable, List, Optional, Tuple

from django.template.loader import render_to_string

from vulnreport.github_alerts.models import Alert, Repo

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Repository",
    "Package",
    "Severity",
    "Calendar days to SLA breach",
    "Affected range",
    "Fixed in",
    "Details",
]

HTML_TEMPLATE = "vulnreport/report.html"


def filter_by_name(repos: Iterable[Repo], pattern: Optional[str]) -> List[Repo]:
    """Keep repositories whose URL matches the regex pattern (all if None)."""
    if not pattern:
        return list(repos)
    regex = re.compile(pattern)
    return [repo for repo in repos if regex.search(repo.url)]


def summarize(repos: Iterable[Repo]) -> Tuple[int, int]:
    """Return (total alerts, repository count)."""
    repos = list(repos)
    return sum(repo.alert_count for repo in repos), len(repos)


def summary_line(repos: Iterable[Repo]) -> str:
    total_alerts, repo_count = summarize(repos)
    return f"WARNING: {total_alerts} vulnerabilities in {repo_count} repos"


def _text(value) -> str:
    return "" if value is None else str(value)


def _sla(alert: Alert, today: Optional[date]) -> str:
    days = alert.days_to_breach(today=today)
    return "N/A" if days is None else str(days)


def write_text_report(repos: Iterable[Repo], stream: IO[str], today: Optional[date] = None):
    """Write the human readable report, one block per alert."""
    for repo in repos:
        stream.write(f"{repo.url}\n")
        for alert in repo.alerts:
            stream.write(f"  {_text(alert.package_name)} ({_text(alert.affected_range)})\n")
            stream.write(f"  Severity: {_text(alert.severity_label)}\n")
            stream.write(f"  SLA breach in: {_sla(alert, today)} calendar days\n")
            stream.write(f"  Fixed in: {_text(alert.fixed_in)}\n")
            stream.write(f"  Details: {_text(alert.details)}\n")
            stream.write("\n")


def csv_rows(repos: Iterable[Repo], today: Optional[date] = None) -> List[List[str]]:
    """Header plus one row per (repository, alert) pair."""
    rows = [list(CSV_HEADER)]
    for repo in repos:
        for alert in repo.alerts:
            rows.append([
                repo.url,
                _text(alert.package_name),
                _text(alert.severity_label),
                _sla(alert, today),
                _text(alert.affected_range),
                _text(alert.fixed_in),
                _text(alert.details),
            ])
    return rows


def write_csv_report(repos: Iterable[Repo], path: str, today: Optional[date] = None) -> int:
    """
    Write the CSV report to path, quoting every field.

    Returns:
        Number of data rows written
    """
    rows = csv_rows(repos, today=today)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerows(rows)

    logger.info(f"Wrote {len(rows) - 1} rows to {path}")
    return len(rows) - 1


def render_html_report(repos: Iterable[Repo], today: Optional[date] = None) -> str:
    """Render the HTML report: a summary heading and one table per repository."""
    repos = list(repos)
    context = {
        "summary": summary_line(repos),
        "repos": [
            {
                "url": repo.url,
                "alerts": [
                    {
                        "package_name": _text(alert.package_name),
                        "affected_range": _text(alert.affected_range),
                        "severity": _text(alert.severity_label),
                        "sla": _sla(alert, today),
                        "fixed_in": _text(alert.fixed_in),
                        "details": _text(alert.details),
                    }
                    for alert in repo.alerts
                ],
            }
            for repo in repos
        ],
    }
    return render_to_string(HTML_TEMPLATE, context)
