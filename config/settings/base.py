"""
Django Settings - Base Configuration
LedgerFlow multi-tenant accounting platform
"""

from pathlib import Path
from datetime import timedelta
from decouple import config, Csv
from django.core.exceptions import ImproperlyConfigured
from celery.schedules import crontab

# =============================================================================
# PATHS
# =============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# =============================================================================
# SECURITY
# =============================================================================

DEBUG = config("DEBUG", default=True, cast=bool)

SECRET_KEY = config(
    "SECRET_KEY",
    default="django-insecure-development-key-change-in-production",
)

ENVIRONMENT = config("ENVIRONMENT", default="development")

# Block unsafe production deploys
if ENVIRONMENT == "production" and SECRET_KEY.startswith("django-insecure"):
    raise ImproperlyConfigured("SECRET_KEY must be set in production")

# =============================================================================
# HOSTS
# =============================================================================

if DEBUG:
    ALLOWED_HOSTS = ["*"]
else:
    ALLOWED_HOSTS = config(
        "ALLOWED_HOSTS",
        default="localhost,127.0.0.1,testserver",
        cast=Csv(),
    )

BASE_DOMAIN = config("BASE_DOMAIN", default="localhost")

# =============================================================================
# APPLICATIONS
# =============================================================================

INSTALLED_APPS = [
    # Django
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Auth
    "apps.authentication",

    # Domain apps
    "apps.core",
    "apps.accounting",
    "apps.notifications",
    "apps.approvals",

    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "corsheaders",
    "django_filters",
    "drf_spectacular",
    "channels",
]

# =============================================================================
# MIDDLEWARE
# =============================================================================

MIDDLEWARE = [
    # Security (MUST be first)
    "django.middleware.security.SecurityMiddleware",

    # Static files
    "whitenoise.middleware.WhiteNoiseMiddleware",

    # CORS (must be early)
    "corsheaders.middleware.CorsMiddleware",

    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",

    # Request correlation + tenant context cleanup
    "apps.core.middleware.CorrelationIdMiddleware",

    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# =============================================================================
# URL / ASGI / WSGI
# =============================================================================

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# =============================================================================
# TEMPLATES
# =============================================================================

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# =============================================================================
# DATABASE
# =============================================================================

DATABASE_URL = config("DATABASE_URL", default="sqlite:///db.sqlite3")

if DATABASE_URL.startswith("sqlite"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

else:
    POSTGRES_PASSWORD = config("POSTGRES_PASSWORD", default=None)

    if not POSTGRES_PASSWORD:
        raise ImproperlyConfigured(
            "PostgreSQL selected but POSTGRES_PASSWORD is missing"
        )

    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": config("POSTGRES_DB"),
            "USER": config("POSTGRES_USER"),
            "PASSWORD": POSTGRES_PASSWORD,
            "HOST": config("DB_HOST", default="localhost"),
            "PORT": config("DB_PORT", default="5432"),
            "CONN_MAX_AGE": 60,
        }
    }

# =============================================================================
# REDIS / CHANNELS (OPTIONAL)
# =============================================================================

REDIS_URL = config("REDIS_URL", default=None)
REDIS_CACHE_URL = config("REDIS_CACHE_URL", default=REDIS_URL)

if REDIS_CACHE_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_CACHE_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
            "KEY_PREFIX": f"ledgerflow:{ENVIRONMENT}",
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": f"ledgerflow-{ENVIRONMENT}-cache",
        }
    }

CHANNEL_LAYER_IN_MEMORY = config("CHANNEL_LAYER_IN_MEMORY", default=False, cast=bool)
CHANNEL_LAYER_URL = config("CHANNEL_LAYER_URL", default=None)
CHANNEL_LAYER_HOST = config("CHANNEL_LAYER_HOST", default="127.0.0.1")
CHANNEL_LAYER_PORT = config("CHANNEL_LAYER_PORT", default=6379, cast=int)
CHANNEL_LAYER_DB = config("CHANNEL_LAYER_DB", default=3, cast=int)

if CHANNEL_LAYER_IN_MEMORY:
    CHANNEL_LAYERS = {
        "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}
    }
else:
    if CHANNEL_LAYER_URL:
        channel_hosts = [CHANNEL_LAYER_URL]
    elif REDIS_URL:
        channel_hosts = [f"{REDIS_URL}/{CHANNEL_LAYER_DB}"]
    else:
        channel_hosts = [(CHANNEL_LAYER_HOST, CHANNEL_LAYER_PORT)]

    CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels_redis.core.RedisChannelLayer",
            "CONFIG": {"hosts": channel_hosts},
        }
    }

# =============================================================================
# AUTH
# =============================================================================

AUTH_USER_MODEL = "authentication.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# =============================================================================
# I18N
# =============================================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = config("TIME_ZONE", default="UTC")
USE_I18N = True
USE_TZ = True

# =============================================================================
# STATIC / MEDIA
# =============================================================================

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# DRF
# =============================================================================

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "apps.authentication.authentication.OrganizationAwareJWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated"
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "apps.core.renderers.StandardJSONRenderer",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "apps.core.throttling.OrganizationRateThrottle",
        "apps.core.throttling.BurstRateThrottle",
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": config("THROTTLE_ANON_RATE", default="60/minute"),
        "organization": config("THROTTLE_ORGANIZATION_RATE", default="100000/hour"),
        "org_user": config("THROTTLE_ORG_USER_RATE", default="20000/hour"),
        "burst": config("THROTTLE_BURST_RATE", default="300/minute"),
        "login": config("THROTTLE_LOGIN_RATE", default="10/minute"),
        "approval_action": config("THROTTLE_APPROVAL_ACTION_RATE", default="120/minute"),
    },
    "DEFAULT_THROTTLE_CACHE": "default",
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ],
    "DEFAULT_PAGINATION_CLASS": "apps.core.pagination.StandardResultsPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "apps.core.exceptions.custom_exception_handler",
}

# =============================================================================
# JWT
# =============================================================================

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=config("JWT_ACCESS_MINUTES", default=30, cast=int)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=config("JWT_REFRESH_DAYS", default=7, cast=int)),
    "ROTATE_REFRESH_TOKENS": False,
}

# =============================================================================
# CORS
# =============================================================================

CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", default="http://localhost:3000", cast=Csv())
CORS_ALLOW_CREDENTIALS = True

# =============================================================================
# CELERY
# =============================================================================

CELERY_BROKER_URL = config("CELERY_BROKER_URL", default="redis://127.0.0.1:6379/0")
CELERY_RESULT_BACKEND = config("CELERY_RESULT_BACKEND", default="redis://127.0.0.1:6379/0")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = 600          # hard kill after 10 min
CELERY_TASK_SOFT_TIME_LIMIT = 540     # soft warning at 9 min

CELERY_BEAT_SCHEDULE = {
    # -- Approvals --
    "approvals.escalation.reminders": {
        "task": "approvals.send_escalation_reminders",
        "schedule": crontab(minute=0),     # hourly
        "options": {"queue": "approvals"},
    },
}

# =============================================================================
# APPROVALS
# =============================================================================

# Roles that approve amount based steps above their threshold
APPROVAL_ELEVATED_ROLES = config("APPROVAL_ELEVATED_ROLES", default="admin,ceo,cfo", cast=Csv())
# Channel used for approval notifications (in_app, email, sms, slack, teams)
APPROVAL_NOTIFICATION_CHANNEL = config("APPROVAL_NOTIFICATION_CHANNEL", default="in_app")

# =============================================================================
# EMAIL
# =============================================================================

EMAIL_BACKEND = config(
    "EMAIL_BACKEND",
    default="django.core.mail.backends.console.EmailBackend",
)
DEFAULT_FROM_EMAIL = config("DEFAULT_FROM_EMAIL", default="LedgerFlow <noreply@localhost>")

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = config("LOG_LEVEL", default="INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "correlation_id": {
            "()": "apps.core.logging.CorrelationIdFilter",
        }
    },
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s org=%(organization_id)s user=%(user_id)s] %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
            "filters": ["correlation_id"],
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "security.audit": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}

# =============================================================================
# API DOCS
# =============================================================================

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}
ENABLE_API_DOCS = config("ENABLE_API_DOCS", default=DEBUG, cast=bool)

SPECTACULAR_SETTINGS = {
    "TITLE": "LedgerFlow API",
    "DESCRIPTION": "Multi-tenant accounting platform with a unified approval engine",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SCHEMA_PATH_PREFIX": r"/api/v1",
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_COERCE_PATH_PK_SUFFIX": True,
    "SCHEMA_COERCE_METHOD_NAMES": True,
    "ENUM_NAME_OVERRIDES": {
        "ApprovalRequestStatusEnum": "apps.approvals.models.ApprovalRequest.STATUS_CHOICES",
        "ApprovalAssigneeStatusEnum": "apps.approvals.models.ApprovalAssignee.STATUS_CHOICES",
    },
}
