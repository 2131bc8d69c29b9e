"""
Django Settings - Development Configuration
"""

from .base import *

DEBUG = True

# ALLOWED_HOSTS is set in base.py based on DEBUG flag (accepts all hosts in dev)

# SQL logging on demand
if config("LOG_SQL", default=False, cast=bool):
    LOGGING["loggers"]["django.db.backends"] = {
        "handlers": ["console"],
        "level": "DEBUG",
        "propagate": False,
    }

# Development throttle profile: permissive but still active.
DEV_DISABLE_THROTTLING = config("DEV_DISABLE_THROTTLING", default=False, cast=bool)

if DEV_DISABLE_THROTTLING:
    REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
else:
    REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"].update({
        "anon": "5000/hour",
        "burst": "600/minute",
        "login": "30/minute",
    })

# Email - Console backend
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Celery runs inline unless a broker is configured explicitly
CELERY_TASK_ALWAYS_EAGER = config("CELERY_TASK_ALWAYS_EAGER", default=True, cast=bool)
