import itertools
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.domains.attempts.models import Attempt
from apps.domains.attempts.services.attempt_service import AttemptService
from apps.domains.exams.models import Exam
from apps.domains.exams.services.exam_store import create_exam
from libs.observability.shutdown import reset_shutdown_state
from tests.factories import MCQ_QUESTION, OPEN_QUESTION


@pytest.fixture(autouse=True)
def _reset_shutdown():
    reset_shutdown_state()
    yield
    reset_shutdown_state()


@pytest.fixture
def make_exam(db):
    def _make(**kwargs) -> Exam:
        data = {
            "title": "Backend Engineer",
            "questions": [MCQ_QUESTION],
            "duration_minutes": 10,
            "passing_score": 50,
        }
        data.update(kwargs)
        return create_exam(**data)

    return _make


@pytest.fixture
def exam(make_exam) -> Exam:
    return make_exam()


@pytest.fixture
def mixed_exam(make_exam) -> Exam:
    return make_exam(title="Mixed", questions=[MCQ_QUESTION, OPEN_QUESTION])


@pytest.fixture
def presentation_exam(make_exam) -> Exam:
    return make_exam(
        title="System design talk",
        questions=[],
        exam_type=Exam.ExamType.PRESENTATION,
        presentation_themes=["Scaling reads", "Queue design"],
        presentation_extra_info="15 minutes max",
        duration_minutes=60 * 24,
        passing_score=60,
    )


@pytest.fixture
def invite(db):
    counter = itertools.count(1)

    def _invite(exam: Exam, **kwargs) -> Attempt:
        n = next(counter)
        candidate = kwargs.pop("candidate", None) or {
            "name": f"Candidate {n}",
            "email": f"candidate{n}@example.com",
            "chat_id": 1000 + n,
        }
        return AttemptService.create_invite(exam_id=exam.pk, candidate=candidate, **kwargs)

    return _invite


@pytest.fixture
def started(invite):
    def _started(exam: Exam, **kwargs) -> Attempt:
        attempt = invite(exam, **kwargs)
        return AttemptService.start(attempt.access_token)

    return _started


@pytest.fixture
def expire():
    def _expire(attempt: Attempt, *, seconds_ago: int = 60) -> Attempt:
        Attempt.objects.filter(pk=attempt.pk).update(expires_at=timezone.now() - timedelta(seconds=seconds_ago))
        attempt.refresh_from_db()
        return attempt

    return _expire


@pytest.fixture
def staff_user(django_user_model):
    return django_user_model.objects.create_user(username="grader", password="pw-grader", is_staff=True)


@pytest.fixture
def regular_user(django_user_model):
    return django_user_model.objects.create_user(username="viewer", password="pw-viewer")


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def staff_client(staff_user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client
