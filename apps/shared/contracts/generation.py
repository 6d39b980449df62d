# apps/shared/contracts/generation.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class GenerationRequest:
    """
    AI Job → Generation Pipeline 으로 전달되는 '계약'

    pipeline은 DB/ORM을 모른다. 직무/스킬/개수만 받는다.
    """

    profession: str
    skills: Tuple[str, ...] = ()
    count: int = 6

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["skills"] = list(self.skills)
        return d

    @staticmethod
    def from_payload(payload: Dict[str, Any], *, default_count: int, max_count: int) -> "GenerationRequest":
        skills = payload.get("skills") or []
        if not isinstance(skills, (list, tuple)):
            skills = [skills]

        try:
            count = int(payload.get("num_questions") or default_count)
        except (TypeError, ValueError):
            count = default_count

        return GenerationRequest(
            profession=str(payload.get("profession") or "").strip(),
            skills=tuple(str(s).strip() for s in skills if str(s).strip()),
            count=max(1, min(count, max_count)),
        )


@dataclass(frozen=True)
class GenerationOutput:
    """
    Generation Pipeline → AI Job runner 결과 '계약'
    - questions: raw question dict 목록 (검증 전)
    - logs: pipeline 단계별 로그 (persist 시 Exam.ai_metadata 로 보존)
    """

    questions: List[Dict[str, Any]] = field(default_factory=list)
    logs: List[Any] = field(default_factory=list)

    @staticmethod
    def empty(reason: str = "") -> "GenerationOutput":
        return GenerationOutput(questions=[], logs=[reason] if reason else [])

    @staticmethod
    def from_dict(data: Any) -> "GenerationOutput":
        if not isinstance(data, dict):
            return GenerationOutput.empty("invalid_pipeline_response")
        questions = data.get("questions") or []
        logs = data.get("logs") or []
        return GenerationOutput(
            questions=[q for q in questions if isinstance(q, dict)] if isinstance(questions, list) else [],
            logs=list(logs) if isinstance(logs, list) else [logs],
        )
