"""
Django settings for the vulnerability report tool.

The tool has no database and no web surface; Django provides configuration,
management commands, logging configuration and the HTML template engine.
Every value can be overridden from the environment.
"""

import os

SECRET_KEY = os.environ.get('VULNREPORT_SECRET_KEY', 'vulnreport-not-used-for-signing')

DEBUG = False

INSTALLED_APPS = [
    'vulnreport',
]

DATABASES = {}

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {},
    },
]

USE_TZ = True
TIME_ZONE = os.environ.get('VULNREPORT_TIME_ZONE', 'UTC')

# GitHub access
GITHUB_OAUTH_TOKEN = os.environ.get('GITHUB_OAUTH_TOKEN', '')
GITHUB_ORGANIZATION = os.environ.get('GITHUB_ORGANIZATION', '')
GITHUB_GRAPHQL_ENDPOINT = os.environ.get('GITHUB_GRAPHQL_ENDPOINT', 'https://api.github.com/graphql')

# Scan tuning
VULNREPORT_PAGE_SIZE = int(os.environ.get('VULNREPORT_PAGE_SIZE', '100'))
VULNREPORT_ALERTS_PAGE_SIZE = int(os.environ.get('VULNREPORT_ALERTS_PAGE_SIZE', '100'))
VULNREPORT_TOPICS_PAGE_SIZE = int(os.environ.get('VULNREPORT_TOPICS_PAGE_SIZE', '10'))
VULNREPORT_REQUEST_TIMEOUT = float(os.environ.get('VULNREPORT_REQUEST_TIMEOUT', '30'))

# Vulnerability alerts should be closed within this many calendar days,
# weekends and bank holidays included.
VULNREPORT_SLA_DAYS = int(os.environ.get('VULNREPORT_SLA_DAYS', '14'))

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    },
    'handlers': {
        # Report output goes to stdout, keep log lines on stderr
        'console': {
            'class': 'logging.StreamHandler',
            'stream': 'ext://sys.stderr',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'vulnreport': {
            'handlers': ['console'],
            'level': os.environ.get('VULNREPORT_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
    },
}
