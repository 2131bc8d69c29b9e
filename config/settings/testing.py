"""
Django Settings - Testing Configuration
"""

from .base import *

DEBUG = False
TESTING = True

# Use faster password hasher
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# In-memory SQLite keeps the suite self-contained
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Throttling off for deterministic API suites
REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    "anon": "20000/hour",
    "organization": "500000/hour",
    "org_user": "200000/hour",
    "burst": "5000/minute",
    "login": "300/minute",
    "approval_action": "5000/minute",
}

# Use sync Celery
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# Fast deterministic in-process cache for tests.
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "ledgerflow-tests-cache",
    }
}

CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}
}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

APPROVAL_ELEVATED_ROLES = ['admin', 'ceo', 'cfo']
APPROVAL_NOTIFICATION_CHANNEL = 'in_app'

# Disable logging during tests
LOGGING = {}

# Email - In-memory backend
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
