# PATH: apps/domains/ai/gateway.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.api.common.exceptions import NotFoundError
from apps.domains.ai.config import AIWorkerConfig, load_config
from apps.domains.ai.models import AIJobModel
from apps.shared.queue.db_queue import DBQueueConfig, DBWorkQueue

logger = logging.getLogger(__name__)


class JobNotFound(NotFoundError):
    code = "job_not_found"
    default_message = "AI job not found."


def get_ai_queue(cfg: Optional[AIWorkerConfig] = None) -> DBWorkQueue:
    cfg = cfg or load_config()
    # 단일 시도: 실패하면 바로 최종 failed
    return DBWorkQueue(
        AIJobModel,
        DBQueueConfig(
            stale_claim_sec=cfg.STALE_CLAIM_SECONDS,
            default_max_attempts=1,
            retry_enabled=False,
        ),
    )


def enqueue_ai_job(
    *,
    profession: str,
    skills: Optional[List[str]] = None,
    num_questions: Optional[int] = None,
    persist: bool = False,
    title: str = "",
    description: str = "",
    duration_minutes: int = 45,
    passing_score: Any = 70,
    created_by=None,
) -> int:
    """
    AI 시험 생성 Job 적재 → job_id
    (생성 자체는 run_ai_worker 가 수행)
    """
    cfg = load_config()
    count = int(num_questions or cfg.DEFAULT_QUESTIONS)
    count = max(1, min(count, cfg.MAX_QUESTIONS))

    payload: Dict[str, Any] = {
        "profession": str(profession).strip(),
        "skills": [str(s).strip() for s in (skills or []) if str(s).strip()],
        "num_questions": count,
        "created_by": getattr(created_by, "pk", None),
    }

    job_id = get_ai_queue(cfg).enqueue(
        payload=payload,
        max_attempts=1,
        persist=bool(persist),
        title=title or "",
        description=description or "",
        duration_minutes=int(duration_minutes),
        passing_score=Decimal(str(passing_score)),
        created_by=created_by if getattr(created_by, "pk", None) else None,
    )
    logger.info("ai_job enqueued job_id=%s profession=%s count=%s persist=%s", job_id, payload["profession"], count, persist)
    return job_id


def get_job(job_id: int) -> AIJobModel:
    job = AIJobModel.objects.filter(pk=job_id).first()
    if job is None:
        raise JobNotFound()
    return job
