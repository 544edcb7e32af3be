"""
Console entry point.

    github-vulnerability-report -o my-org -t $GITHUB_OAUTH_TOKEN [options]

is equivalent to

    python manage.py check_vulnerabilities -o my-org -t $GITHUB_OAUTH_TOKEN [options]
"""

import os
import sys


def main(argv=None):
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vulnreport.settings')
    from django.core.management import execute_from_command_line

    argv = sys.argv[1:] if argv is None else argv
    execute_from_command_line(['github-vulnerability-report', 'check_vulnerabilities', *argv])


if __name__ == '__main__':
    main()
