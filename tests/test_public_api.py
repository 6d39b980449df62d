import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.domains.attempts.models import Attempt


def _url(token, action=""):
    return f"/api/v1/public/tests/{token}/{action}"


@pytest.mark.django_db
class TestCandidateFlow:
    def test_view_hides_answer_keys(self, api_client, mixed_exam, invite):
        attempt = invite(mixed_exam)

        res = api_client.get(_url(attempt.access_token))

        assert res.status_code == 200
        assert res.data["status"] == "pending"
        assert res.data["test"]["test_type"] == "question_based"
        assert res.data["result"] is None
        for q in res.data["questions"]:
            assert "correct_answer" not in q
            assert "explanation" not in q
            assert "expected_keywords" not in q

    def test_unknown_token(self, api_client, db):
        res = api_client.get(_url("missing"))

        assert res.status_code == 404
        assert res.data == {"error": "attempt_not_found", "message": "Attempt not found."}

    def test_start_answer_submit(self, api_client, exam, invite):
        token = invite(exam).access_token

        res = api_client.post(_url(token, "start/"))
        assert res.status_code == 200
        assert res.data["status"] == "in_progress"

        res = api_client.post(_url(token, "answers/"), {"question_id": 1, "answer": 1, "time_spent": 5}, format="json")
        assert res.status_code == 200
        assert res.data["answered"] == 1

        res = api_client.post(_url(token, "submit/"), {}, format="json")
        assert res.status_code == 200
        assert res.data["status"] == "completed"
        assert res.data["passed"] is True

        res = api_client.post(_url(token, "submit/"), {}, format="json")
        assert res.status_code == 409
        assert res.data["error"] == "already_completed"

        res = api_client.get(_url(token))
        assert res.data["result"]["passed"] is True

    def test_invalid_answer_payload(self, api_client, exam, started):
        token = started(exam).access_token

        res = api_client.post(_url(token, "answers/"), {"answer": 1}, format="json")

        assert res.status_code == 400
        assert res.data["error"] == "invalid_request"

    def test_unknown_question(self, api_client, exam, started):
        token = started(exam).access_token

        res = api_client.post(_url(token, "answers/"), {"question_id": 42, "answer": 1}, format="json")

        assert res.status_code == 404
        assert res.data["error"] == "question_not_found"

    def test_expired_attempt_is_forbidden(self, api_client, exam, started, expire):
        token = expire(started(exam)).access_token

        assert api_client.get(_url(token)).data["error"] == "test_expired"
        res = api_client.post(_url(token, "submit/"), {}, format="json")
        assert res.status_code == 403
        assert res.data["error"] == "test_expired"

    def test_heartbeat_and_status(self, api_client, exam, started):
        token = started(exam).access_token

        res = api_client.post(_url(token, "heartbeat/"))
        assert res.status_code == 200
        assert res.data["last_heartbeat_at"] is not None

        res = api_client.get(_url(token, "status/"))
        assert res.status_code == 200
        assert res.data["total_questions"] == 1
        assert res.data["max_violations"] == 2

    def test_violations_terminate(self, api_client, exam, started):
        token = started(exam).access_token

        first = api_client.post(_url(token, "violation/"), {"type": "tab_switch", "tab_switches": 1}, format="json")
        second = api_client.post(_url(token, "violation/"), {"type": "tab_switch", "tab_switches": 2}, format="json")

        assert first.data["terminated"] is False
        assert second.data["terminated"] is True

        res = api_client.post(_url(token, "answers/"), {"question_id": 1, "answer": 1}, format="json")
        assert res.status_code == 403
        assert res.data["error"] == "test_terminated"


@pytest.mark.django_db
class TestPresentationUpload:
    def test_view_shows_themes(self, api_client, presentation_exam, invite):
        res = api_client.get(_url(invite(presentation_exam).access_token))

        assert res.data["questions"] == []
        assert res.data["presentation"]["themes"] == ["Scaling reads", "Queue design"]

    def test_multipart_file_upload(self, api_client, presentation_exam, invite):
        attempt = invite(presentation_exam)
        upload = SimpleUploadedFile("talk.pptx", b"PK\x03\x04slides", content_type="application/vnd.ms-powerpoint")

        res = api_client.post(_url(attempt.access_token, "presentation/"), {"file": upload}, format="multipart")

        assert res.status_code == 200
        assert res.data["status"] == "needs_review"
        attempt.refresh_from_db()
        assert attempt.presentation_file.endswith("talk.pptx")

    def test_bad_scheme(self, api_client, presentation_exam, invite):
        token = invite(presentation_exam).access_token

        res = api_client.post(_url(token, "presentation/"), {"presentation_link": "javascript:alert(1)"}, format="json")

        assert res.status_code == 400
        assert res.data["error"] == "invalid_url_scheme"

    def test_nothing_submitted(self, api_client, presentation_exam, invite):
        token = invite(presentation_exam).access_token

        res = api_client.post(_url(token, "presentation/"), {}, format="json")

        assert res.status_code == 400
        assert res.data["error"] == "empty_submission"
        assert Attempt.objects.get(access_token=token).status == "pending"
