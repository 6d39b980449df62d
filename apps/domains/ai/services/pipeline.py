# PATH: apps/domains/ai/services/pipeline.py
"""
AI Generation Pipeline 어댑터

pipeline 자체(프롬프트 / provider 호출 / 품질 검증)는 외부 서비스.
여기서는 계약(GenerationRequest → GenerationOutput)과 hard timeout 만 책임진다.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Optional, Protocol

import requests
from django.utils.module_loading import import_string

from apps.domains.ai.config import AIWorkerConfig, load_config
from apps.shared.contracts.generation import GenerationOutput, GenerationRequest

logger = logging.getLogger(__name__)


class GenerationPipeline(Protocol):
    def generate(self, request: GenerationRequest) -> GenerationOutput:
        ...


class HTTPGenerationPipeline:
    """
    POST {AI_GENERATION_URL}
    body: {"profession", "skills", "count"}
    resp: {"questions": [...], "logs": [...]}
    """

    def __init__(self, cfg: Optional[AIWorkerConfig] = None):
        self.cfg = cfg or load_config()

    def generate(self, request: GenerationRequest) -> GenerationOutput:
        if not self.cfg.GENERATION_URL:
            raise RuntimeError("AI_GENERATION_URL not configured")

        r = requests.post(
            self.cfg.GENERATION_URL,
            json=request.to_dict(),
            timeout=self.cfg.GENERATION_TIMEOUT_SECONDS,
        )
        r.raise_for_status()
        return GenerationOutput.from_dict(r.json())


def get_pipeline(cfg: Optional[AIWorkerConfig] = None) -> GenerationPipeline:
    cfg = cfg or load_config()
    pipeline_cls = import_string(cfg.PIPELINE)
    return pipeline_cls(cfg)


def generate_with_timeout(
    pipeline: GenerationPipeline,
    request: GenerationRequest,
    *,
    timeout_seconds: float,
) -> GenerationOutput:
    """
    hard timeout: 초과 시 빈 결과로 degrade (worker 를 무기한 붙잡지 않는다)
    pipeline 예외는 그대로 전파 → job failed
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ai-generate")
    future = executor.submit(pipeline.generate, request)
    try:
        return future.result(timeout=timeout_seconds)
    except FuturesTimeout:
        logger.warning("ai generation timed out after %ss profession=%s", timeout_seconds, request.profession)
        return GenerationOutput.empty("generation_timeout")
    finally:
        executor.shutdown(wait=False)
