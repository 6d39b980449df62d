import dataclasses
import threading
from decimal import Decimal
from unittest import mock

import pytest

from apps.domains.ai.config import load_config
from apps.domains.ai.gateway import JobNotFound, enqueue_ai_job, get_job
from apps.domains.ai.models import AIJobModel
from apps.domains.ai.services.pipeline import HTTPGenerationPipeline, generate_with_timeout, get_pipeline
from apps.domains.ai.services.runner import AIJobRunner
from apps.domains.exams.models import Exam
from apps.shared.contracts.generation import GenerationOutput, GenerationRequest
from apps.shared.queue.models import QueueStatus
from tests.factories import MCQ_QUESTION, OPEN_QUESTION


class FakePipeline:
    def __init__(self, output=None, exc=None):
        self.output = output
        self.exc = exc
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        if self.exc:
            raise self.exc
        return self.output


class BlockingPipeline:
    def __init__(self):
        self.release = threading.Event()

    def generate(self, request):
        self.release.wait(5)
        return GenerationOutput(questions=[MCQ_QUESTION])


def _cfg(**overrides):
    return dataclasses.replace(load_config(), WORKER_ID="ai-test", **overrides)


@pytest.mark.django_db
class TestEnqueue:
    def test_job_payload_and_single_attempt(self):
        job_id = enqueue_ai_job(profession="Python Developer", skills=["django", " ", "sql"], num_questions=4)

        job = get_job(job_id)
        assert job.status == QueueStatus.PENDING
        assert job.max_attempts == 1
        assert job.payload == {
            "profession": "Python Developer",
            "skills": ["django", "sql"],
            "num_questions": 4,
            "created_by": None,
        }

    def test_question_count_is_capped(self):
        job = get_job(enqueue_ai_job(profession="QA", num_questions=500))
        assert job.payload["num_questions"] == 20

    def test_default_question_count(self):
        job = get_job(enqueue_ai_job(profession="QA"))
        assert job.payload["num_questions"] == 6

    def test_unknown_job(self):
        with pytest.raises(JobNotFound):
            get_job(12345)


@pytest.mark.django_db
class TestRunner:
    def test_generated_questions_are_validated(self):
        job_id = enqueue_ai_job(profession="Python Developer", skills=["django"], num_questions=2)
        pipeline = FakePipeline(GenerationOutput(
            questions=[
                MCQ_QUESTION,
                {"type": "multiple_choice", "question": "broken", "options": []},
                OPEN_QUESTION,
            ],
            logs=["draft", "review"],
        ))

        assert AIJobRunner(cfg=_cfg(), pipeline=pipeline).run_once() is True

        job = AIJobModel.objects.get(pk=job_id)
        assert job.status == QueueStatus.SUCCEEDED
        assert [q["id"] for q in job.result["questions"]] == [1, 2]
        assert job.result["logs"] == ["draft", "review"]
        assert job.result["test_id"] is None
        assert job.exam_id is None
        assert pipeline.requests[0] == GenerationRequest(profession="Python Developer", skills=("django",), count=2)

    def test_persist_creates_exam(self):
        job_id = enqueue_ai_job(profession="Python Developer", persist=True, passing_score=65)
        pipeline = FakePipeline(GenerationOutput(questions=[MCQ_QUESTION], logs=["ok"]))

        AIJobRunner(cfg=_cfg(), pipeline=pipeline).run_once()

        job = AIJobModel.objects.get(pk=job_id)
        exam = Exam.objects.get(pk=job.exam_id)
        assert job.result["test_id"] == exam.pk
        assert exam.title == "AI Python Developer Test"
        assert exam.passing_score == Decimal("65")
        assert exam.ai_metadata["logs"] == ["ok"]
        assert len(exam.questions) == 1

    def test_empty_generation_fails_without_exam(self):
        job_id = enqueue_ai_job(profession="Python Developer", persist=True)
        pipeline = FakePipeline(GenerationOutput(questions=[{"type": "essay"}], logs=["nothing usable"]))

        AIJobRunner(cfg=_cfg(), pipeline=pipeline).run_once()

        job = AIJobModel.objects.get(pk=job_id)
        assert job.status == QueueStatus.FAILED
        assert job.error == "empty_generation"
        assert job.result["logs"] == ["nothing usable"]
        assert job.is_terminal is True
        assert Exam.objects.count() == 0

    def test_pipeline_error_fails_without_retry(self):
        job_id = enqueue_ai_job(profession="Python Developer")
        runner = AIJobRunner(cfg=_cfg(), pipeline=FakePipeline(exc=RuntimeError("provider down")))

        runner.run_once()

        job = AIJobModel.objects.get(pk=job_id)
        assert job.status == QueueStatus.FAILED
        assert job.error == "provider down"
        assert job.next_retry_at is None
        assert runner.run_once() is False

    def test_timeout_degrades_to_empty_generation(self):
        job_id = enqueue_ai_job(profession="Python Developer")
        pipeline = BlockingPipeline()

        try:
            AIJobRunner(cfg=_cfg(GENERATION_TIMEOUT_SECONDS=0.05), pipeline=pipeline).run_once()
        finally:
            pipeline.release.set()

        job = AIJobModel.objects.get(pk=job_id)
        assert job.error == "empty_generation"
        assert job.result["logs"] == ["generation_timeout"]

    def test_idle_queue(self):
        assert AIJobRunner(cfg=_cfg(), pipeline=FakePipeline()).run_once() is False


class TestPipeline:
    def test_generate_with_timeout_returns_result(self):
        out = generate_with_timeout(
            FakePipeline(GenerationOutput(questions=[MCQ_QUESTION])),
            GenerationRequest(profession="QA"),
            timeout_seconds=1,
        )
        assert out.questions == [MCQ_QUESTION]

    def test_generate_with_timeout_propagates_errors(self):
        with pytest.raises(ValueError):
            generate_with_timeout(FakePipeline(exc=ValueError("bad")), GenerationRequest(profession="QA"), timeout_seconds=1)

    def test_http_pipeline_posts_request(self):
        response = mock.Mock()
        response.json.return_value = {"questions": [MCQ_QUESTION, "junk"], "logs": "single"}

        with mock.patch("apps.domains.ai.services.pipeline.requests.post", return_value=response) as post:
            out = HTTPGenerationPipeline(_cfg()).generate(GenerationRequest(profession="QA", skills=("api",), count=3))

        post.assert_called_once_with(
            "https://ai.example.com/generate",
            json={"profession": "QA", "skills": ["api"], "count": 3},
            timeout=5.0,
        )
        assert out.questions == [MCQ_QUESTION]
        assert out.logs == ["single"]

    def test_http_pipeline_requires_url(self):
        with pytest.raises(RuntimeError):
            HTTPGenerationPipeline(_cfg(GENERATION_URL="")).generate(GenerationRequest(profession="QA"))

    def test_default_pipeline_is_http(self):
        assert isinstance(get_pipeline(_cfg()), HTTPGenerationPipeline)

    def test_request_from_payload_clamps_count(self):
        req = GenerationRequest.from_payload({"profession": " QA ", "skills": "api", "num_questions": 0}, default_count=6, max_count=20)
        assert req == GenerationRequest(profession="QA", skills=("api",), count=6)


@pytest.mark.django_db
class TestAIJobAPI:
    def test_create_returns_202(self, staff_client, staff_user):
        res = staff_client.post("/api/v1/ai/jobs/", {"profession": "Data Engineer", "skills": ["spark"], "num_questions": 3}, format="json")

        assert res.status_code == 202
        assert res.data["status"] == "pending"
        job = AIJobModel.objects.get(pk=res.data["job_id"])
        assert job.created_by == staff_user
        assert job.payload["created_by"] == staff_user.pk

    def test_status_polling(self, staff_client):
        job_id = enqueue_ai_job(profession="QA")

        res = staff_client.get(f"/api/v1/ai/jobs/{job_id}/")

        assert res.status_code == 200
        assert res.data["job_id"] == job_id
        assert res.data["error"] is None

    def test_unknown_job_404(self, staff_client):
        res = staff_client.get("/api/v1/ai/jobs/999999/")

        assert res.status_code == 404
        assert res.data["error"] == "job_not_found"

    def test_requires_staff(self, api_client, regular_user):
        api_client.force_authenticate(user=regular_user)
        res = api_client.post("/api/v1/ai/jobs/", {"profession": "QA"}, format="json")
        assert res.status_code == 403
