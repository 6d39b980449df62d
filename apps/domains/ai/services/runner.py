# PATH: apps/domains/ai/services/runner.py
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction

from apps.domains.ai.config import AIWorkerConfig, load_config
from apps.domains.ai.gateway import get_ai_queue
from apps.domains.ai.models import AIJobModel
from apps.domains.ai.services.pipeline import GenerationPipeline, generate_with_timeout, get_pipeline
from apps.domains.exams.services.exam_store import create_exam
from apps.shared.contracts.generation import GenerationRequest
from apps.shared.contracts.questions import sanitize_questions

logger = logging.getLogger(__name__)

EMPTY_GENERATION = "empty_generation"


class AIJobRunner:
    """
    AI Job 1건 처리

    1) claim (SKIP LOCKED)
    2) pipeline 호출 (hard timeout)
    3) 문항 검증 / 정리 → 0개면 empty_generation 실패
    4) persist 요청 시 Exam 생성 + job 연결 (같은 트랜잭션)
    실패는 재시도 없이 failed 확정
    """

    def __init__(self, *, cfg: Optional[AIWorkerConfig] = None, pipeline: Optional[GenerationPipeline] = None):
        self.cfg = cfg or load_config()
        self.queue = get_ai_queue(self.cfg)
        self.pipeline = pipeline or get_pipeline(self.cfg)

    def run_once(self) -> bool:
        job = self.queue.claim_one(worker_id=self.cfg.WORKER_ID)
        if job is None:
            return False

        logger.info("ai_job picked job_id=%s", job.pk)
        try:
            self._process(job)
        except Exception as e:
            logger.exception("ai_job failed job_id=%s", job.pk)
            self.queue.fail(job.pk, worker_id=self.cfg.WORKER_ID, error=str(e) or type(e).__name__, retryable=False)
        return True

    def _process(self, job: AIJobModel) -> None:
        request = GenerationRequest.from_payload(
            job.payload or {},
            default_count=self.cfg.DEFAULT_QUESTIONS,
            max_count=self.cfg.MAX_QUESTIONS,
        )
        if not request.profession:
            raise ValueError("profession_required")

        output = generate_with_timeout(
            self.pipeline,
            request,
            timeout_seconds=self.cfg.GENERATION_TIMEOUT_SECONDS,
        )
        questions = sanitize_questions(output.questions, limit=request.count)

        if not questions:
            self.queue.fail(
                job.pk,
                worker_id=self.cfg.WORKER_ID,
                error=EMPTY_GENERATION,
                retryable=False,
                result={"questions": [], "logs": output.logs},
            )
            logger.warning("ai_job empty generation job_id=%s logs=%s", job.pk, len(output.logs))
            return

        with transaction.atomic():
            exam = None
            if job.persist:
                exam = create_exam(
                    title=job.title or f"AI {request.profession} Test",
                    description=job.description or "",
                    questions=questions,
                    duration_minutes=job.duration_minutes or 45,
                    passing_score=job.passing_score if job.passing_score is not None else 70,
                    ai_metadata={"logs": output.logs, "job_id": job.pk, "request": request.to_dict()},
                    created_by=job.created_by,
                )

            self.queue.complete(
                job.pk,
                worker_id=self.cfg.WORKER_ID,
                result={
                    "questions": questions,
                    "logs": output.logs,
                    "test_id": exam.pk if exam else None,
                },
                exam=exam,
            )

        logger.info("ai_job done job_id=%s questions=%s test_id=%s", job.pk, len(questions), exam.pk if exam else None)
