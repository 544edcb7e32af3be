"""
Django management command reporting GitHub repositories with active
vulnerability alerts.

Follows the Nagios plugin conventions, so it can run as a monitoring check:

    0 OK       no repository has an active alert
    1 WARNING  at least one repository has an active alert (report follows)
    3 UNKNOWN  missing configuration or the scan failed

Usage:
    python manage.py check_vulnerabilities -o ORG -t TOKEN [options]

Examples:
    # Plain text report for the whole organization
    python manage.py check_vulnerabilities -o myorg -t $GITHUB_OAUTH_TOKEN

    # Only repositories tagged "production", skipping "archived-soon"
    python manage.py check_vulnerabilities -o myorg -i production -e archived-soon

    # Repositories whose name matches a regex, written as CSV
    python manage.py check_vulnerabilities -o myorg -f 'api-.*' -c alerts.csv

    # HTML report on stdout, e.g. for an email body
    python manage.py check_vulnerabilities -o myorg --html
"""

import logging
import sys
import traceback
from enum import IntEnum

from django.conf import settings
from django.core.management.base import BaseCommand

from vulnreport.github_alerts import reports
from vulnreport.github_alerts.exceptions import InvalidScanConfig, MissingCredential, MissingOrganization
from vulnreport.github_alerts.models import ScanConfig, TopicFilterConfig
from vulnreport.github_alerts.scanner import VulnerabilityScanner

logger = logging.getLogger(__name__)


class Status(IntEnum):
    OK = 0
    WARNING = 1
    UNKNOWN = 3


def comma_separated(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Command(BaseCommand):
    help = 'Report GitHub repositories with active Dependabot vulnerability alerts'

    requires_system_checks = []

    def add_arguments(self, parser):
        parser.add_argument(
            '-o', '--organization',
            type=str,
            help='The name of the GitHub organization (overrides GITHUB_ORGANIZATION setting)'
        )
        parser.add_argument(
            '-t', '--token',
            type=str,
            help='A GitHub personal access token (overrides GITHUB_OAUTH_TOKEN setting)'
        )
        parser.add_argument(
            '-i', '--include',
            type=comma_separated,
            metavar='TOPIC[,TOPIC...]',
            help='A comma-separated list of repository topics to include'
        )
        parser.add_argument(
            '-e', '--exclude',
            type=comma_separated,
            metavar='TOPIC[,TOPIC...]',
            help='A comma-separated list of repository topics to exclude'
        )
        parser.add_argument(
            '-f', '--filter',
            type=str,
            help='A regex to filter repositories by name'
        )
        parser.add_argument(
            '-c', '--csv',
            type=str,
            metavar='FILE',
            help='Write output to FILE in CSV format'
        )
        parser.add_argument(
            '--html',
            action='store_true',
            help='Write HTML output to stdout'
        )
        parser.add_argument(
            '--page-size',
            type=int,
            help='Repositories requested per GraphQL page (overrides VULNREPORT_PAGE_SIZE setting)'
        )

    def handle(self, *args, **options):
        """Run the scan and exit with the matching status."""
        verbosity = options.get('verbosity', 1)

        if verbosity >= 3:
            logging.getLogger('vulnreport').setLevel(logging.DEBUG)
        elif verbosity == 2:
            logging.getLogger('vulnreport').setLevel(logging.INFO)
        elif verbosity == 0:
            logging.getLogger('vulnreport').setLevel(logging.ERROR)

        try:
            config = self._build_config(options)
        except MissingCredential:
            self._exit(Status.UNKNOWN, f"UNKNOWN: Missing GitHub personal access token - usage: {self._usage()}")
        except MissingOrganization:
            self._exit(Status.UNKNOWN, f"UNKNOWN: Missing GitHub organization name - usage: {self._usage()}")
        except InvalidScanConfig as e:
            self._exit(Status.UNKNOWN, f"UNKNOWN: {e}")

        try:
            status = self._report(config, options)
        except Exception as e:
            logger.error(f"Vulnerability check failed: {e}", exc_info=True)
            self._exit(Status.UNKNOWN, f"UNKNOWN: {e}\n{traceback.format_exc()}")

        sys.exit(status)

    def _build_config(self, options) -> ScanConfig:
        token = options.get('token') or getattr(settings, 'GITHUB_OAUTH_TOKEN', '')
        organization = options.get('organization') or getattr(settings, 'GITHUB_ORGANIZATION', '')
        page_size = options.get('page_size')
        if page_size is None:
            page_size = getattr(settings, 'VULNREPORT_PAGE_SIZE', 100)

        return ScanConfig(
            organization=organization,
            token=token,
            page_size=page_size,
            alerts_page_size=getattr(settings, 'VULNREPORT_ALERTS_PAGE_SIZE', 100),
            topics_page_size=getattr(settings, 'VULNREPORT_TOPICS_PAGE_SIZE', 10),
            timeout=getattr(settings, 'VULNREPORT_REQUEST_TIMEOUT', 30),
            topic_filter=TopicFilterConfig.from_lists(options.get('include'), options.get('exclude')),
            endpoint=getattr(settings, 'GITHUB_GRAPHQL_ENDPOINT', None)
        )

    def _report(self, config: ScanConfig, options) -> Status:
        """Scan, write the requested report and return the check status."""
        with VulnerabilityScanner(config) as scanner:
            repos = scanner.scan()

        repos = reports.filter_by_name(repos, options.get('filter'))

        if not repos:
            self.stdout.write("OK: No vulnerabilities")
            return Status.OK

        csv_path = options.get('csv')

        if options.get('html'):
            self.stdout.write(reports.render_html_report(repos))
        elif csv_path:
            self.stdout.write(reports.summary_line(repos))
            reports.write_csv_report(repos, csv_path)
            self.stdout.write(f"Vulnerability data written to: {csv_path}")
        else:
            self.stdout.write(reports.summary_line(repos))
            reports.write_text_report(repos, self.stdout)

        return Status.WARNING

    def _usage(self) -> str:
        return self.create_parser('manage.py', 'check_vulnerabilities').format_help()

    def _exit(self, status: Status, message: str):
        self.stdout.write(message)
        sys.exit(status)
