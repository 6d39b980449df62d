# apps/api/config/settings/test.py

from .base import *
import os

DEBUG = False
SECRET_KEY = "test-secret-key"

# 기본 sqlite in-memory. 동시성(SKIP LOCKED) 테스트는 TEST_DB_ENGINE=postgresql 로
if os.getenv("TEST_DB_ENGINE", "sqlite") == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME", "assessments"),
            "USER": os.getenv("DB_USER", "postgres"),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "localhost"),
            "PORT": os.getenv("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

WEBAPP_URL = "https://tests.example.com"
NOTIFICATION_WEBHOOK_URL = "https://hooks.example.com/assessments"
NOTIFICATION_WEBHOOK_SECRET = "test-webhook-secret"

AI_GENERATION_URL = "https://ai.example.com/generate"
AI_GENERATION_TIMEOUT_SECONDS = 5

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

LOGGING["root"]["level"] = "WARNING"
