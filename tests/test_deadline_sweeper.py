from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.domains.attempts.models import Attempt
from apps.domains.attempts.services import deadline_sweeper
from apps.domains.attempts.services.attempt_service import AttemptService
from apps.domains.attempts.services.deadline_sweeper import sweep_deadlines
from apps.support.notifications.models import OutboxEvent

Status = Attempt.Status


def _set(attempt, **fields):
    Attempt.objects.filter(pk=attempt.pk).update(**fields)
    attempt.refresh_from_db()
    return attempt


@pytest.mark.django_db
class TestTimeout:
    def test_never_started_invite_times_out(self, exam, invite, expire):
        attempt = expire(invite(exam))

        report = sweep_deadlines()

        attempt.refresh_from_db()
        assert report.timed_out == 1
        assert attempt.status == Status.TIMEOUT
        assert attempt.completed_at == attempt.expires_at
        assert attempt.score == Decimal("0")
        assert attempt.percentage == Decimal("0")
        assert attempt.passed is False

    def test_in_progress_attempt_times_out(self, exam, started, expire):
        attempt = expire(started(exam))

        sweep_deadlines()

        attempt.refresh_from_db()
        assert attempt.status == Status.TIMEOUT

    def test_finished_attempts_are_untouched(self, exam, started, expire):
        attempt = AttemptService.submit(started(exam).access_token, answers={1: 1})
        attempt = expire(attempt)

        report = sweep_deadlines()

        attempt.refresh_from_db()
        assert report.timed_out == 0
        assert attempt.status == Status.COMPLETED
        assert attempt.percentage == Decimal("100")

    def test_unexpired_attempts_are_untouched(self, exam, started):
        attempt = started(exam)

        assert sweep_deadlines().timed_out == 0
        attempt.refresh_from_db()
        assert attempt.status == Status.IN_PROGRESS


@pytest.mark.django_db
class TestIdleEscape:
    def test_stale_heartbeat_escapes(self, exam, started):
        attempt = _set(started(exam), last_heartbeat_at=timezone.now() - timedelta(minutes=5))

        report = sweep_deadlines()

        attempt.refresh_from_db()
        assert report.escaped == 1
        assert attempt.status == Status.ESCAPED
        assert attempt.passed is False

    def test_escape_records_full_max_score(self, mixed_exam, started):
        attempt = _set(started(mixed_exam), last_heartbeat_at=timezone.now() - timedelta(minutes=5))

        sweep_deadlines()

        attempt.refresh_from_db()
        assert attempt.status == Status.ESCAPED
        assert attempt.score == Decimal("0")
        assert attempt.max_score == Decimal("3")
        assert attempt.percentage == Decimal("0")

    def test_recent_heartbeat_is_kept(self, exam, started):
        attempt = _set(started(exam), last_heartbeat_at=timezone.now() - timedelta(seconds=30))

        assert sweep_deadlines().escaped == 0
        attempt.refresh_from_db()
        assert attempt.status == Status.IN_PROGRESS

    def test_attempt_without_heartbeat_is_kept(self, exam, started):
        attempt = started(exam)

        assert sweep_deadlines().escaped == 0
        attempt.refresh_from_db()
        assert attempt.status == Status.IN_PROGRESS

    def test_presentation_is_never_escaped(self, presentation_exam, started):
        attempt = _set(started(presentation_exam), last_heartbeat_at=timezone.now() - timedelta(hours=2))

        assert sweep_deadlines().escaped == 0
        attempt.refresh_from_db()
        assert attempt.status == Status.IN_PROGRESS


@pytest.mark.django_db
class TestDeadlineWarning:
    def test_warns_once_within_window(self, presentation_exam, invite):
        attempt = _set(invite(presentation_exam), expires_at=timezone.now() + timedelta(minutes=30))

        first = sweep_deadlines()
        second = sweep_deadlines()

        attempt.refresh_from_db()
        assert first.warned == 1
        assert second.warned == 0
        assert attempt.deadline_notified is True

        event = OutboxEvent.objects.get(event_type="deadline_warning")
        assert event.payload["attempt_id"] == attempt.pk

    def test_outside_window_is_not_warned(self, presentation_exam, invite):
        _set(invite(presentation_exam), expires_at=timezone.now() + timedelta(hours=3))

        assert sweep_deadlines().warned == 0
        assert not OutboxEvent.objects.filter(event_type="deadline_warning").exists()

    def test_question_attempts_are_not_warned(self, exam, invite):
        _set(invite(exam), expires_at=timezone.now() + timedelta(minutes=30))

        assert sweep_deadlines().warned == 0

    def test_enqueue_failure_leaves_flag_for_retry(self, presentation_exam, invite):
        attempt = _set(invite(presentation_exam), expires_at=timezone.now() + timedelta(minutes=30))

        with mock.patch.object(deadline_sweeper, "enqueue_notification", side_effect=RuntimeError("db down")):
            report = sweep_deadlines()

        attempt.refresh_from_db()
        assert report.warned == 0
        assert attempt.deadline_notified is False

        assert sweep_deadlines().warned == 1


@pytest.mark.django_db
class TestSweeperCommand:
    def test_once_runs_single_sweep(self, exam, invite, expire):
        attempt = expire(invite(exam))
        out = StringIO()

        call_command("run_deadline_sweeper", "--once", stdout=out)

        attempt.refresh_from_db()
        assert attempt.status == Status.TIMEOUT
        assert "timed_out=1" in out.getvalue()
