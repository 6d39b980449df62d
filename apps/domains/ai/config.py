# PATH: apps/domains/ai/config.py
from __future__ import annotations

import os
import socket
from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class AIWorkerConfig:
    WORKER_ID: str

    PIPELINE: str
    GENERATION_URL: str
    GENERATION_TIMEOUT_SECONDS: float

    DEFAULT_QUESTIONS: int
    MAX_QUESTIONS: int
    STALE_CLAIM_SECONDS: int

    POLL_INTERVAL_SECONDS: float
    ERROR_SLEEP_SECONDS: float


def load_config() -> AIWorkerConfig:
    return AIWorkerConfig(
        WORKER_ID=os.environ.get("WORKER_ID") or f"ai-{socket.gethostname()}-{os.getpid()}",

        PIPELINE=str(getattr(settings, "AI_GENERATION_PIPELINE", "apps.domains.ai.services.pipeline.HTTPGenerationPipeline")),
        GENERATION_URL=str(getattr(settings, "AI_GENERATION_URL", "") or "").strip(),
        GENERATION_TIMEOUT_SECONDS=float(getattr(settings, "AI_GENERATION_TIMEOUT_SECONDS", 180)),

        DEFAULT_QUESTIONS=int(getattr(settings, "AI_DEFAULT_QUESTIONS", 6)),
        MAX_QUESTIONS=int(getattr(settings, "AI_MAX_QUESTIONS", 20)),
        STALE_CLAIM_SECONDS=int(getattr(settings, "AI_STALE_CLAIM_SECONDS", 1800)),

        POLL_INTERVAL_SECONDS=float(getattr(settings, "AI_POLL_INTERVAL_SECONDS", 0.75)),
        ERROR_SLEEP_SECONDS=float(getattr(settings, "AI_ERROR_SLEEP_SECONDS", 1.0)),
    )
