# apps/api/config/settings/base.py

from pathlib import Path
from datetime import timedelta
import os

# ==================================================
# BASE
# ==================================================

BASE_DIR = Path(__file__).resolve().parents[4]

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-secret-key")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = ["*"]

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

# 응시자 화면 base URL (초대 응답 / test_assigned 이벤트의 test_url)
WEBAPP_URL = os.getenv("WEBAPP_URL", "http://localhost:3000")


# ==================================================
# INSTALLED APPS
# ==================================================

INSTALLED_APPS = [
    # Django
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Domain Apps
    "apps.domains.exams.apps.ExamsConfig",
    "apps.domains.attempts.apps.AttemptsConfig",
    "apps.domains.ai.apps.AIJobsConfig",

    # support
    "apps.support.notifications.apps.NotificationsConfig",

    # REST
    "rest_framework",
    "rest_framework_simplejwt",
    "django_filters",

    # Swagger
    "drf_yasg",

    # CORS
    "corsheaders",
]

# ==================================================
# MIDDLEWARE
# ==================================================

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

# ==================================================
# URL / WSGI / ASGI
# ==================================================

ROOT_URLCONF = "apps.api.config.urls"

WSGI_APPLICATION = "apps.api.config.wsgi.application"
ASGI_APPLICATION = "apps.api.config.asgi.application"

# ==================================================
# TEMPLATES
# ==================================================

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# ==================================================
# DATABASE
# ==================================================
# Postgres 전제: attempt row lock / queue claim 의 SKIP LOCKED

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME"),
        "USER": os.getenv("DB_USER"),
        "PASSWORD": os.getenv("DB_PASSWORD"),
        "HOST": os.getenv("DB_HOST"),
        "PORT": os.getenv("DB_PORT", "5432"),
    }
}


# ==================================================
# AUTH
# ==================================================

AUTHENTICATION_BACKENDS = [
    "django.contrib.auth.backends.ModelBackend",
]

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"
    },
]

# ==================================================
# GLOBAL
# ==================================================

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"

USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "storage" / "media"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ==================================================
# DRF
# ==================================================

REST_FRAMEWORK = {
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "EXCEPTION_HANDLER": "apps.api.common.exceptions.domain_exception_handler",
}

# ==================================================
# JWT
# ==================================================

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(days=1),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=30),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# ==================================================
# CORS
# ==================================================

CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# ==================================================
# ATTEMPT LIFECYCLE
# ==================================================

ATTEMPT_MAX_VIOLATIONS = int(os.getenv("ATTEMPT_MAX_VIOLATIONS", "2"))
ATTEMPT_IDLE_THRESHOLD_SECONDS = int(os.getenv("ATTEMPT_IDLE_THRESHOLD_SECONDS", "120"))
ATTEMPT_DEADLINE_WARNING_SECONDS = int(os.getenv("ATTEMPT_DEADLINE_WARNING_SECONDS", "3600"))
ATTEMPT_DEFAULT_EXPIRES_IN_HOURS = int(os.getenv("ATTEMPT_DEFAULT_EXPIRES_IN_HOURS", "72"))
ATTEMPT_ACCESS_TOKEN_LENGTH = 32

DEADLINE_SWEEP_INTERVAL_SECONDS = float(os.getenv("DEADLINE_SWEEP_INTERVAL_SECONDS", "60"))

# ==================================================
# NOTIFICATION OUTBOX (webhook)
# ==================================================
# URL 미설정이면 이벤트를 적재하지 않는다 (로그만)

NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL", "")
NOTIFICATION_WEBHOOK_SECRET = os.getenv("NOTIFICATION_WEBHOOK_SECRET", "")

NOTIFICATION_MAX_ATTEMPTS = int(os.getenv("NOTIFICATION_MAX_ATTEMPTS", "3"))
NOTIFICATION_BACKOFF_BASE_SECONDS = int(os.getenv("NOTIFICATION_BACKOFF_BASE_SECONDS", "30"))
NOTIFICATION_BACKOFF_CAP_SECONDS = int(os.getenv("NOTIFICATION_BACKOFF_CAP_SECONDS", "3600"))
NOTIFICATION_HTTP_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_HTTP_TIMEOUT_SECONDS", "10"))
NOTIFICATION_POLL_INTERVAL_SECONDS = float(os.getenv("NOTIFICATION_POLL_INTERVAL_SECONDS", "1.0"))
NOTIFICATION_ERROR_SLEEP_SECONDS = float(os.getenv("NOTIFICATION_ERROR_SLEEP_SECONDS", "2.0"))

# running 으로 남은 queue item 회수 기준 (crash 복구)
QUEUE_STALE_CLAIM_SECONDS = int(os.getenv("QUEUE_STALE_CLAIM_SECONDS", "600"))

# ==================================================
# AI GENERATION
# ==================================================

AI_GENERATION_PIPELINE = os.getenv(
    "AI_GENERATION_PIPELINE",
    "apps.domains.ai.services.pipeline.HTTPGenerationPipeline",
)
AI_GENERATION_URL = os.getenv("AI_GENERATION_URL", "")
AI_GENERATION_TIMEOUT_SECONDS = float(os.getenv("AI_GENERATION_TIMEOUT_SECONDS", "180"))
AI_DEFAULT_QUESTIONS = int(os.getenv("AI_DEFAULT_QUESTIONS", "6"))
AI_MAX_QUESTIONS = int(os.getenv("AI_MAX_QUESTIONS", "20"))
AI_POLL_INTERVAL_SECONDS = float(os.getenv("AI_POLL_INTERVAL_SECONDS", "0.75"))
AI_ERROR_SLEEP_SECONDS = float(os.getenv("AI_ERROR_SLEEP_SECONDS", "1.0"))
AI_STALE_CLAIM_SECONDS = int(os.getenv("AI_STALE_CLAIM_SECONDS", "1800"))

# ==================================================
# LOGGING
# ==================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {asctime} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django.db.backends": {
            "level": "WARNING",
        },
    },
}
