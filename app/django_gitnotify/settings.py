"""
Django settings for django_gitnotify project.

Every deployment-specific value is read from the environment.
"""

import os
from pathlib import Path

import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    return os.environ.get(name, str(default)).lower() in ("1", "true", "yes")


SECRET_KEY = os.environ.get("SECRET_KEY", "django-insecure-change-me")
DEBUG = env_bool("DEBUG")
ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "webhooks.apps.WebhooksConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "django_gitnotify.urls"
WSGI_APPLICATION = "django_gitnotify.wsgi.application"

# No models are stored; an in-memory database keeps checks happy
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
USE_TZ = True

# Email
EMAIL_BACKEND = os.environ.get(
    "EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend"
)
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "25"))
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = env_bool("EMAIL_USE_TLS")
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "gitnotify@localhost")

# Webhook authentication
GITLAB_WEBHOOK_TOKEN = os.environ.get("GITLAB_WEBHOOK_TOKEN", "")

# Run service jobs inline instead of in background threads
JOB_QUEUE_EAGER = env_bool("JOB_QUEUE_EAGER")

# Project services
NOTIFY_ONLY_BROKEN_PIPELINES = env_bool("NOTIFY_ONLY_BROKEN_PIPELINES")
PROJECT_SERVICES = []

if os.environ.get("SLACK_WEBHOOK_URL"):
    PROJECT_SERVICES.append(
        {
            "type": "slack",
            "active": True,
            "properties": {
                "webhook": os.environ["SLACK_WEBHOOK_URL"],
                "channel": os.environ.get("SLACK_CHANNEL", ""),
                "username": os.environ.get("SLACK_USERNAME", ""),
                "notify_only_broken_pipelines": NOTIFY_ONLY_BROKEN_PIPELINES,
            },
        }
    )

if os.environ.get("MATTERMOST_WEBHOOK_URL"):
    PROJECT_SERVICES.append(
        {
            "type": "mattermost",
            "active": True,
            "properties": {
                "webhook": os.environ["MATTERMOST_WEBHOOK_URL"],
                "channel": os.environ.get("MATTERMOST_CHANNEL", ""),
                "username": os.environ.get("MATTERMOST_USERNAME", ""),
                "notify_only_broken_pipelines": NOTIFY_ONLY_BROKEN_PIPELINES,
            },
        }
    )

if os.environ.get("EMAILS_ON_PUSH_RECIPIENTS"):
    PROJECT_SERVICES.append(
        {
            "type": "emails_on_push",
            "active": True,
            "properties": {"recipients": os.environ["EMAILS_ON_PUSH_RECIPIENTS"]},
        }
    )

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "urllib3": {"level": "WARNING"},
    },
}

# Error tracking
SENTRY_DSN = os.environ.get("SENTRY_DSN")
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        environment=os.environ.get("SENTRY_ENVIRONMENT", "production"),
        send_default_pii=False,
    )
