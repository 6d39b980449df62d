# PATH: apps/domains/attempts/services/attempt_service.py
from __future__ import annotations

import logging
import os
import string
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import IntegrityError, models, transaction
from django.db.models import Count, F, Value
from django.db.models.functions import Coalesce, Least
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.text import get_valid_filename

from apps.domains.attempts.errors import (
    AlreadyCompleted,
    AttemptNotFound,
    EmptySubmission,
    InvalidFileType,
    InvalidGrade,
    InvalidState,
    InvalidUrl,
    InvalidUrlScheme,
    NotPresentation,
    PendingInviteExists,
    QuestionNotFound,
    TestExpired,
    TestTerminated,
)
from apps.domains.attempts.models import AnswerLog, Attempt
from apps.domains.attempts.services import events
from apps.domains.attempts.services.grading import (
    answers_by_question,
    compute_percentage,
    grade,
    is_passed,
    max_possible_score,
    raw_percentage,
    recompute,
    to_decimal,
)
from apps.domains.exams.services.exam_store import get_exam
from apps.shared.contracts.questions import parse_questions

logger = logging.getLogger(__name__)

Status = Attempt.Status

TOKEN_CHARS = string.ascii_letters + string.digits
PRESENTATION_EXTENSIONS = ("pdf", "pptx", "ppt", "key")
ALLOWED_URL_SCHEMES = ("http", "https")


def _max_violations() -> int:
    return int(getattr(settings, "ATTEMPT_MAX_VIOLATIONS", 2))


def _seconds_between(start: Optional[datetime], end: datetime) -> Optional[int]:
    if not start:
        return None
    return max(0, int((end - start).total_seconds()))


def _upsert_answer(entries: List[Dict[str, Any]], entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    out = [e for e in (entries or []) if not (isinstance(e, dict) and e.get("question_id") == entry["question_id"])]
    out.append(entry)
    return out


class AttemptService:
    """
    Attempt 상태 머신 전담

    원칙:
    - 모든 전이는 "현재 상태 ∈ {X} 일 때만" 조건부 UPDATE 로 수행
    - 대상 row 는 select_for_update 로 잠그고 (Postgres), 잠금이 없는 백엔드에서도
      조건부 UPDATE 결과(0 rows)로 경합 패배를 감지한다
    - 만료 판단은 매 변경 요청마다 다시 한다 (강제 종료는 sweeper 만)
    - 알림은 커밋 이후 fire-and-forget
    """

    # =========================================================
    # helpers
    # =========================================================

    @staticmethod
    def generate_token() -> str:
        length = int(getattr(settings, "ATTEMPT_ACCESS_TOKEN_LENGTH", 32))
        return get_random_string(length, allowed_chars=TOKEN_CHARS)

    @staticmethod
    def _lock(**lookup) -> Attempt:
        attempt = Attempt.objects.select_for_update().filter(**lookup).first()
        if attempt is None:
            raise AttemptNotFound()
        return attempt

    @staticmethod
    def _guard_active(attempt: Attempt, now: datetime) -> None:
        """
        pending / in_progress + 미만료 일 때만 통과
        """
        if attempt.status in Attempt.GRADED_STATUSES:
            raise AlreadyCompleted()
        if attempt.status == Status.TIMEOUT:
            raise TestExpired()
        if attempt.status == Status.ESCAPED:
            raise TestTerminated()
        if attempt.expires_at <= now:
            raise TestExpired()

    @classmethod
    def _raise_for_lost_race(cls, attempt_id: int, now: datetime) -> None:
        current = Attempt.objects.filter(pk=attempt_id).first()
        if current is None:
            raise AttemptNotFound()
        cls._guard_active(current, now)
        raise InvalidState()

    # =========================================================
    # invite
    # =========================================================

    @classmethod
    def create_invite(
        cls,
        *,
        exam_id: int,
        candidate: Dict[str, Any],
        expires_in_hours: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Attempt:
        exam = get_exam(exam_id, active_only=True)

        email = str(candidate.get("email") or "").strip().lower()
        hours = int(expires_in_hours or getattr(settings, "ATTEMPT_DEFAULT_EXPIRES_IN_HOURS", 72))
        now = timezone.now()

        with transaction.atomic():
            # 1) 응시자당 pending 초대 1건
            if Attempt.objects.filter(candidate_email=email, status=Status.PENDING).exists():
                raise PendingInviteExists()

            # 2) 생성 (동시 초대 경합은 partial unique constraint 가 막는다)
            try:
                with transaction.atomic():
                    attempt = Attempt.objects.create(
                        exam=exam,
                        candidate_name=str(candidate.get("name") or "").strip(),
                        candidate_email=email,
                        candidate_external_id=str(candidate.get("external_id") or ""),
                        candidate_phone=str(candidate.get("phone") or ""),
                        candidate_chat_id=candidate.get("chat_id"),
                        access_token=cls.generate_token(),
                        expires_at=now + timedelta(hours=hours),
                        is_presentation=exam.is_presentation,
                        questions_snapshot=exam.snapshot(),
                        metadata=dict(metadata or {}),
                        status=Status.PENDING,
                    )
            except IntegrityError:
                if Attempt.objects.filter(candidate_email=email, status=Status.PENDING).exists():
                    raise PendingInviteExists()
                raise

            events.emit_after_commit(events.TEST_ASSIGNED, attempt)

        logger.info("attempt_invited attempt_id=%s exam_id=%s email=%s expires_at=%s", attempt.pk, exam.pk, email, attempt.expires_at)
        return attempt

    @staticmethod
    def invite_response(attempt: Attempt) -> Dict[str, Any]:
        return {
            "attempt_id": attempt.pk,
            "access_token": attempt.access_token,
            "test_url": events.build_test_url(attempt.access_token),
            "expires_at": attempt.expires_at,
            "status": attempt.status,
        }

    # =========================================================
    # token-scoped (candidate)
    # =========================================================

    @staticmethod
    def get_by_token(token: str) -> Attempt:
        attempt = Attempt.objects.select_related("exam").filter(access_token=str(token or "")).first()
        if attempt is None:
            raise AttemptNotFound()
        return attempt

    @classmethod
    @transaction.atomic
    def start(cls, token: str) -> Attempt:
        attempt = cls._lock(access_token=token)
        now = timezone.now()
        cls._guard_active(attempt, now)

        # 늦게 시작해도 초대 마감보다 늘어나지 않는다: min(expires_at, started_at + duration)
        started_at = attempt.started_at or now
        deadline = started_at + timedelta(minutes=int(attempt.exam.duration_minutes))

        updated = Attempt.objects.filter(
            pk=attempt.pk,
            status__in=Attempt.ACTIVE_STATUSES,
            expires_at__gt=now,
        ).update(
            status=Status.IN_PROGRESS,
            started_at=Coalesce(F("started_at"), Value(now, output_field=models.DateTimeField())),
            expires_at=Least(F("expires_at"), Value(deadline, output_field=models.DateTimeField())),
            updated_at=now,
        )
        if not updated:
            cls._raise_for_lost_race(attempt.pk, now)

        attempt.refresh_from_db()
        logger.info("attempt_started attempt_id=%s started_at=%s expires_at=%s", attempt.pk, attempt.started_at, attempt.expires_at)
        return attempt

    @classmethod
    @transaction.atomic
    def save_answer(
        cls,
        token: str,
        *,
        question_id: int,
        answer: Any,
        time_spent: Optional[int] = None,
        marked_for_review: bool = False,
    ) -> Dict[str, Any]:
        attempt = cls._lock(access_token=token)
        now = timezone.now()
        cls._guard_active(attempt, now)

        question_ids = {q.id for q in parse_questions(attempt.questions_snapshot)}
        if int(question_id) not in question_ids:
            raise QuestionNotFound()

        # 1) 감사 로그 (append only)
        AnswerLog.objects.create(
            attempt=attempt,
            question_id=int(question_id),
            answer=answer,
            time_spent=time_spent,
            marked_for_review=bool(marked_for_review),
        )

        # 2) snapshot upsert (문항별 last write wins)
        entry = {
            "question_id": int(question_id),
            "answer": answer,
            "time_spent": time_spent,
            "marked_for_review": bool(marked_for_review),
            "answered_at": now.isoformat(),
        }
        answers = _upsert_answer(list(attempt.answers or []), entry)

        updated = Attempt.objects.filter(
            pk=attempt.pk,
            status__in=Attempt.ACTIVE_STATUSES,
            expires_at__gt=now,
        ).update(answers=answers, updated_at=now)
        if not updated:
            cls._raise_for_lost_race(attempt.pk, now)

        return {
            "saved": entry,
            "answered": len(answers),
            "total": attempt.total_questions,
        }

    @classmethod
    @transaction.atomic
    def submit(cls, token: str, *, answers: Any = None) -> Attempt:
        attempt = cls._lock(access_token=token)
        now = timezone.now()
        cls._guard_active(attempt, now)

        if attempt.is_presentation:
            raise InvalidState("Presentation tests are submitted with a link or file.")

        exam = attempt.exam

        # 1) 최종 답안 merge (요청에 같이 온 답안이 우선)
        merged = list(attempt.answers or [])
        for qid, value in answers_by_question(answers or []).items():
            merged = _upsert_answer(merged, {
                "question_id": qid,
                "answer": value,
                "time_spent": None,
                "marked_for_review": False,
                "answered_at": now.isoformat(),
            })

        # 2) 채점
        outcome = grade(attempt.questions_snapshot, merged)
        percentage = outcome.percentage
        new_status = Status.NEEDS_REVIEW if outcome.needs_review else Status.COMPLETED
        started_at = attempt.started_at or now

        # 3) 전이
        updated = Attempt.objects.filter(
            pk=attempt.pk,
            status__in=Attempt.ACTIVE_STATUSES,
            expires_at__gt=now,
        ).update(
            answers=merged,
            graded_answers=[ga.to_dict() for ga in outcome.graded_answers],
            score=outcome.earned,
            max_score=outcome.max_possible,
            percentage=percentage,
            passed=outcome.passed(exam.passing_score),
            status=new_status,
            started_at=started_at,
            completed_at=now,
            time_spent_seconds=_seconds_between(started_at, now),
            updated_at=now,
        )
        if not updated:
            cls._raise_for_lost_race(attempt.pk, now)

        attempt.refresh_from_db()
        events.emit_after_commit(events.TEST_COMPLETED, attempt)

        logger.info(
            "attempt_submitted attempt_id=%s status=%s score=%s/%s percentage=%s passed=%s",
            attempt.pk,
            attempt.status,
            attempt.score,
            attempt.max_score,
            attempt.percentage,
            attempt.passed,
        )
        return attempt

    @staticmethod
    def validate_presentation_link(link: str) -> str:
        link = (link or "").strip()
        parsed = urlparse(link)
        scheme = (parsed.scheme or "").lower()
        if scheme and scheme not in ALLOWED_URL_SCHEMES:
            raise InvalidUrlScheme()
        if not scheme or not parsed.netloc:
            raise InvalidUrl()
        return link

    @staticmethod
    def validate_presentation_file(upload) -> str:
        name = os.path.basename(str(getattr(upload, "name", "") or ""))
        ext = os.path.splitext(name)[1].lower().lstrip(".")
        if ext not in PRESENTATION_EXTENSIONS:
            raise InvalidFileType()
        return name

    @classmethod
    @transaction.atomic
    def submit_presentation(cls, token: str, *, link: Optional[str] = None, upload=None) -> Attempt:
        # 0) 입력 검증 (link / file 중 최소 1개)
        link = (link or "").strip()
        if not link and upload is None:
            raise EmptySubmission()
        if link:
            link = cls.validate_presentation_link(link)
        filename = cls.validate_presentation_file(upload) if upload is not None else ""

        attempt = cls._lock(access_token=token)
        now = timezone.now()

        if not attempt.is_presentation:
            raise NotPresentation()
        if attempt.status == Status.COMPLETED:
            raise AlreadyCompleted()
        if attempt.status == Status.TIMEOUT or attempt.expires_at <= now:
            raise TestExpired()
        if attempt.status == Status.ESCAPED:
            raise TestTerminated()

        # 1) 파일 저장 (같은 attempt 하위 경로)
        file_path = attempt.presentation_file
        if upload is not None:
            file_path = default_storage.save(
                f"presentations/{attempt.pk}/{get_valid_filename(filename)}",
                upload,
            )

        # 2) 전이: 발표는 항상 needs_review (자동 채점 없음)
        started_at = attempt.started_at or now
        updated = Attempt.objects.filter(
            pk=attempt.pk,
            status__in=(Status.PENDING, Status.IN_PROGRESS, Status.NEEDS_REVIEW),
            expires_at__gt=now,
        ).update(
            presentation_link=link or attempt.presentation_link,
            presentation_file=file_path or "",
            status=Status.NEEDS_REVIEW,
            started_at=started_at,
            completed_at=now,
            time_spent_seconds=_seconds_between(started_at, now),
            updated_at=now,
        )
        if not updated:
            cls._raise_for_lost_race(attempt.pk, now)

        attempt.refresh_from_db()
        events.emit_after_commit(events.PRESENTATION_SUBMITTED, attempt)
        logger.info("presentation_submitted attempt_id=%s link=%s file=%s", attempt.pk, bool(attempt.presentation_link), bool(attempt.presentation_file))
        return attempt

    @classmethod
    def heartbeat(cls, token: str) -> Dict[str, Any]:
        now = timezone.now()
        # 단일 UPDATE, 상태는 바꾸지 않는다
        Attempt.objects.filter(
            access_token=token,
            status=Status.IN_PROGRESS,
        ).update(last_heartbeat_at=now)
        return cls.get_status(token, now=now)

    @classmethod
    @transaction.atomic
    def report_violation(
        cls,
        token: str,
        *,
        violation_type: str = "tab_switch",
        tab_switches: Optional[int] = None,
    ) -> Dict[str, Any]:
        attempt = cls._lock(access_token=token)
        max_violations = _max_violations()

        def _result(a: Attempt) -> Dict[str, Any]:
            return {
                "status": a.status,
                "violation_count": a.violation_count,
                "max_violations": max_violations,
                "terminated": a.status == Status.ESCAPED,
            }

        # in_progress 가 아니면 no-op
        if attempt.status != Status.IN_PROGRESS:
            return _result(attempt)

        now = timezone.now()
        entry = {
            "type": str(violation_type or "tab_switch"),
            "tab_switches": tab_switches,
            "timestamp": now.isoformat(),
        }
        activity = list(attempt.suspicious_activity or []) + [entry]
        new_count = int(attempt.violation_count) + 1

        fields: Dict[str, Any] = {
            "violation_count": F("violation_count") + 1,
            "suspicious_activity": activity,
            "updated_at": now,
        }

        terminated = new_count >= max_violations
        if terminated:
            max_possible = max_possible_score(attempt.questions_snapshot) if not attempt.is_presentation else Decimal("100")
            fields.update(
                status=Status.ESCAPED,
                score=Decimal("0"),
                max_score=max_possible,
                percentage=Decimal("0"),
                passed=False,
                completed_at=now,
                time_spent_seconds=_seconds_between(attempt.started_at, now),
            )

        updated = Attempt.objects.filter(
            pk=attempt.pk,
            status=Status.IN_PROGRESS,
            violation_count=attempt.violation_count,
        ).update(**fields)

        attempt.refresh_from_db()
        if not updated:
            return _result(attempt)

        if terminated:
            events.emit_after_commit(events.ATTEMPT_TERMINATED, attempt)
            logger.warning("attempt_escaped attempt_id=%s violations=%s", attempt.pk, attempt.violation_count)
        else:
            logger.info("attempt_violation attempt_id=%s type=%s count=%s", attempt.pk, entry["type"], attempt.violation_count)

        return _result(attempt)

    @classmethod
    def get_status(cls, token: str, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        attempt = cls.get_by_token(token)
        now = now or timezone.now()

        remaining = None
        if attempt.started_at and attempt.status == Status.IN_PROGRESS:
            remaining = max(0, int((attempt.expires_at - now).total_seconds()))

        return {
            "attempt_id": attempt.pk,
            "status": attempt.status,
            "started_at": attempt.started_at,
            "expires_at": attempt.expires_at,
            "expired": attempt.status in Attempt.ACTIVE_STATUSES and attempt.expires_at <= now,
            "seconds_remaining": remaining,
            "answered": attempt.answered_count,
            "total_questions": attempt.total_questions,
            "violation_count": attempt.violation_count,
            "max_violations": _max_violations(),
            "last_heartbeat_at": attempt.last_heartbeat_at,
        }

    # =========================================================
    # staff-scoped
    # =========================================================

    @staticmethod
    def get(attempt_id: int) -> Attempt:
        attempt = Attempt.objects.select_related("exam").filter(pk=attempt_id).first()
        if attempt is None:
            raise AttemptNotFound()
        return attempt

    @staticmethod
    def queryset():
        return Attempt.objects.select_related("exam").order_by("-created_at", "-id")

    @staticmethod
    @transaction.atomic
    def delete(attempt_id: int) -> None:
        deleted, _ = Attempt.objects.filter(pk=attempt_id, status=Status.PENDING).delete()
        if deleted:
            logger.info("attempt_deleted attempt_id=%s", attempt_id)
            return
        if not Attempt.objects.filter(pk=attempt_id).exists():
            raise AttemptNotFound()
        raise InvalidState("Only pending attempts can be deleted.")

    @classmethod
    @transaction.atomic
    def grade_answer(
        cls,
        attempt_id: int,
        *,
        question_id: int,
        is_correct: bool,
        points: Any = None,
        grader=None,
    ) -> Attempt:
        attempt = cls._lock(pk=attempt_id)
        if attempt.is_presentation or attempt.status not in Attempt.GRADED_STATUSES:
            raise InvalidState("Attempt is not awaiting answer grading.")

        graded: List[Dict[str, Any]] = [dict(ga) for ga in (attempt.graded_answers or [])]
        target = next((ga for ga in graded if ga.get("question_id") == int(question_id)), None)
        if target is None:
            raise QuestionNotFound()

        # 1) 문항 점수 (points 없으면 all-or-nothing)
        max_points = to_decimal(target.get("max_points"))
        if points is None:
            earned = max_points if is_correct else Decimal("0")
        else:
            earned = to_decimal(points)
            if earned < 0 or earned > max_points:
                raise InvalidGrade(f"points must be between 0 and {max_points}.")

        now = timezone.now()
        target.update(
            points_earned=float(earned),
            is_correct=bool(is_correct),
            needs_review=False,
            manually_graded=True,
            graded_at=now.isoformat(),
        )

        # 2) 합계 재계산 → 남은 리뷰 없으면 completed
        total, max_possible, still_review = recompute(graded)
        percentage = compute_percentage(total, max_possible)
        new_status = Status.NEEDS_REVIEW if still_review else Status.COMPLETED

        updated = Attempt.objects.filter(pk=attempt.pk, status=attempt.status).update(
            graded_answers=graded,
            score=total,
            max_score=max_possible,
            percentage=percentage,
            passed=is_passed(raw_percentage(total, max_possible), attempt.exam.passing_score),
            status=new_status,
            graded_by=grader if getattr(grader, "pk", None) else None,
            graded_at=now,
            updated_at=now,
        )
        if not updated:
            raise InvalidState()

        previous = attempt.status
        attempt.refresh_from_db()
        if previous == Status.NEEDS_REVIEW and attempt.status == Status.COMPLETED:
            events.emit_after_commit(events.ATTEMPT_GRADED, attempt)

        logger.info(
            "answer_graded attempt_id=%s question_id=%s points=%s status=%s percentage=%s",
            attempt.pk,
            question_id,
            earned,
            attempt.status,
            attempt.percentage,
        )
        return attempt

    @classmethod
    @transaction.atomic
    def grade_presentation(cls, attempt_id: int, *, grade_value: Any, comment: str = "", grader=None) -> Attempt:
        attempt = cls._lock(pk=attempt_id)
        if not attempt.is_presentation:
            raise NotPresentation()
        if attempt.status not in Attempt.GRADED_STATUSES:
            raise InvalidState("Presentation has not been submitted.")

        value = to_decimal(grade_value)
        if value < 0 or value > 100:
            raise InvalidGrade("grade must be between 0 and 100.")

        now = timezone.now()
        updated = Attempt.objects.filter(pk=attempt.pk, status__in=Attempt.GRADED_STATUSES).update(
            presentation_grade=value,
            presentation_comment=comment or "",
            score=value,
            max_score=Decimal("100"),
            percentage=value,
            passed=is_passed(value, attempt.exam.passing_score),
            status=Status.COMPLETED,
            graded_by=grader if getattr(grader, "pk", None) else None,
            graded_at=now,
            updated_at=now,
        )
        if not updated:
            raise InvalidState()

        attempt.refresh_from_db()
        events.emit_after_commit(events.ATTEMPT_GRADED, attempt)
        logger.info("presentation_graded attempt_id=%s grade=%s passed=%s", attempt.pk, value, attempt.passed)
        return attempt

    @staticmethod
    def status_distribution(*, exam_id: Optional[int] = None) -> Dict[str, int]:
        qs = Attempt.objects.all()
        if exam_id is not None:
            qs = qs.filter(exam_id=exam_id)

        counts = {value: 0 for value in Status.values}
        for row in qs.values("status").annotate(n=Count("id")).order_by():
            counts[row["status"]] = int(row["n"])
        return counts
