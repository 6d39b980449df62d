# PATH: apps/support/notifications/config.py
from __future__ import annotations

import os
import socket
from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class OutboxConfig:
    WEBHOOK_URL: str
    WEBHOOK_SECRET: str
    WORKER_ID: str

    MAX_ATTEMPTS: int
    BACKOFF_BASE_SECONDS: int
    BACKOFF_CAP_SECONDS: int
    STALE_CLAIM_SECONDS: int

    HTTP_TIMEOUT_SECONDS: float
    POLL_INTERVAL_SECONDS: float
    ERROR_SLEEP_SECONDS: float


def load_config() -> OutboxConfig:
    return OutboxConfig(
        WEBHOOK_URL=str(getattr(settings, "NOTIFICATION_WEBHOOK_URL", "") or "").strip(),
        WEBHOOK_SECRET=str(getattr(settings, "NOTIFICATION_WEBHOOK_SECRET", "") or ""),
        WORKER_ID=os.environ.get("WORKER_ID") or f"outbox-{socket.gethostname()}-{os.getpid()}",

        MAX_ATTEMPTS=int(getattr(settings, "NOTIFICATION_MAX_ATTEMPTS", 3)),
        BACKOFF_BASE_SECONDS=int(getattr(settings, "NOTIFICATION_BACKOFF_BASE_SECONDS", 30)),
        BACKOFF_CAP_SECONDS=int(getattr(settings, "NOTIFICATION_BACKOFF_CAP_SECONDS", 3600)),
        STALE_CLAIM_SECONDS=int(getattr(settings, "QUEUE_STALE_CLAIM_SECONDS", 600)),

        HTTP_TIMEOUT_SECONDS=float(getattr(settings, "NOTIFICATION_HTTP_TIMEOUT_SECONDS", 10)),
        POLL_INTERVAL_SECONDS=float(getattr(settings, "NOTIFICATION_POLL_INTERVAL_SECONDS", 1.0)),
        ERROR_SLEEP_SECONDS=float(getattr(settings, "NOTIFICATION_ERROR_SLEEP_SECONDS", 2.0)),
    )
