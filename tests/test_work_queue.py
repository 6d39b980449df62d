import threading
from datetime import timedelta

import pytest
from django.db import connection, connections
from django.utils import timezone

from apps.shared.queue.db_queue import DBQueueConfig, DBWorkQueue
from apps.shared.queue.loop import run_polling_loop
from apps.shared.queue.models import QueueStatus
from apps.support.notifications.models import OutboxEvent
from libs.observability.shutdown import request_shutdown

TARGET = "https://hooks.example.com/assessments"


@pytest.fixture
def queue():
    return DBWorkQueue(OutboxEvent, DBQueueConfig(stale_claim_sec=600, default_max_attempts=3))


def _enqueue(queue, n=1, **kwargs):
    return [
        queue.enqueue(payload={"n": i}, event_type="test_assigned", target_url=TARGET, **kwargs)
        for i in range(n)
    ]


def _shift(item_id, **fields):
    OutboxEvent.objects.filter(pk=item_id).update(**fields)


@pytest.mark.django_db
class TestClaim:
    def test_claim_marks_running_and_owner(self, queue):
        [item_id] = _enqueue(queue)

        item = queue.claim_one(worker_id="w1")

        assert item.pk == item_id
        assert item.status == QueueStatus.RUNNING
        assert item.attempts == 1
        assert item.locked_by == "w1"
        assert item.claimed_at is not None

    def test_claimed_item_is_not_handed_out_twice(self, queue):
        _enqueue(queue)

        assert queue.claim_one(worker_id="w1") is not None
        assert queue.claim_one(worker_id="w2") is None

    def test_claims_oldest_first(self, queue):
        first, second = _enqueue(queue, 2)

        assert queue.claim_one(worker_id="w1").pk == first
        assert queue.claim_one(worker_id="w1").pk == second

    def test_empty_queue(self, queue, db):
        assert queue.claim_one(worker_id="w1") is None


@pytest.mark.django_db
class TestCompleteAndFail:
    def test_complete_by_owner(self, queue):
        [item_id] = _enqueue(queue)
        queue.claim_one(worker_id="w1")

        assert queue.complete(item_id, worker_id="w1", result={"ok": True}) is True

        item = OutboxEvent.objects.get(pk=item_id)
        assert item.status == QueueStatus.SUCCEEDED
        assert item.result == {"ok": True}
        assert item.finished_at is not None
        assert item.is_terminal is True

    def test_complete_by_other_worker_is_ignored(self, queue):
        [item_id] = _enqueue(queue)
        queue.claim_one(worker_id="w1")

        assert queue.complete(item_id, worker_id="w2") is False
        assert OutboxEvent.objects.get(pk=item_id).status == QueueStatus.RUNNING

    def test_fail_by_other_worker_is_rejected(self, queue):
        [item_id] = _enqueue(queue)
        queue.claim_one(worker_id="w1")

        outcome = queue.fail(item_id, worker_id="w2", error="boom")

        assert outcome.ok is False
        assert outcome.reason == "lease_owner_mismatch"

    def test_fail_unknown_item(self, queue, db):
        assert queue.fail(999, error="boom").reason == "not_found"

    def test_retry_schedule_then_permanent_failure(self, queue):
        [item_id] = _enqueue(queue)

        # 1st attempt → retry in 30s
        queue.claim_one(worker_id="w1")
        before = timezone.now()
        outcome = queue.fail(item_id, worker_id="w1", error="http_500")
        assert outcome.reason == "retry_scheduled"
        assert before + timedelta(seconds=29) <= outcome.next_retry_at <= timezone.now() + timedelta(seconds=31)

        item = OutboxEvent.objects.get(pk=item_id)
        assert item.status == QueueStatus.FAILED
        assert item.is_terminal is False

        # not eligible until due
        assert queue.claim_one(worker_id="w1") is None

        # 2nd attempt → retry in 60s
        _shift(item_id, next_retry_at=timezone.now() - timedelta(seconds=1))
        assert queue.claim_one(worker_id="w1").attempts == 2
        before = timezone.now()
        outcome = queue.fail(item_id, worker_id="w1", error="http_500")
        assert outcome.next_retry_at >= before + timedelta(seconds=59)

        # 3rd attempt → final
        _shift(item_id, next_retry_at=timezone.now() - timedelta(seconds=1))
        assert queue.claim_one(worker_id="w1").attempts == 3
        outcome = queue.fail(item_id, worker_id="w1", error="http_500")
        assert outcome.reason == "failed"
        assert outcome.next_retry_at is None

        item = OutboxEvent.objects.get(pk=item_id)
        assert item.is_terminal is True
        assert item.error == "http_500"
        assert queue.claim_one(worker_id="w1") is None

    def test_non_retryable_failure_is_final(self, queue):
        [item_id] = _enqueue(queue)
        queue.claim_one(worker_id="w1")

        outcome = queue.fail(item_id, worker_id="w1", error="bad", retryable=False)

        assert outcome.reason == "failed"
        assert OutboxEvent.objects.get(pk=item_id).next_retry_at is None


class TestBackoff:
    def test_exponential_with_cap(self):
        q = DBWorkQueue(OutboxEvent, DBQueueConfig(base_backoff_sec=30, max_backoff_sec=3600))

        assert [q.backoff_seconds(n) for n in (1, 2, 3, 4)] == [30, 60, 120, 240]
        assert q.backoff_seconds(10) == 3600


@pytest.mark.django_db
class TestStaleReclaim:
    def test_crashed_claim_is_requeued(self, queue):
        [item_id] = _enqueue(queue)
        queue.claim_one(worker_id="crashed")
        _shift(item_id, claimed_at=timezone.now() - timedelta(seconds=601))

        item = queue.claim_one(worker_id="w2")

        assert item.pk == item_id
        assert item.locked_by == "w2"
        assert item.attempts == 2

    def test_exhausted_stale_claim_is_failed(self, queue):
        [item_id] = _enqueue(queue, max_attempts=1)
        queue.claim_one(worker_id="crashed")
        _shift(item_id, claimed_at=timezone.now() - timedelta(seconds=601))

        assert queue.reclaim_stale() == 1

        item = OutboxEvent.objects.get(pk=item_id)
        assert item.status == QueueStatus.FAILED
        assert item.error == "claim_expired"
        assert item.is_terminal is True

    def test_fresh_claim_is_left_alone(self, queue):
        _enqueue(queue)
        queue.claim_one(worker_id="w1")

        assert queue.reclaim_stale() == 0


@pytest.mark.skipif(connection.vendor != "postgresql", reason="SKIP LOCKED needs PostgreSQL")
@pytest.mark.django_db(transaction=True)
class TestConcurrentClaim:
    def test_parallel_workers_claim_each_item_once(self, queue):
        ids = _enqueue(queue, 5)
        barrier = threading.Barrier(8)
        claimed = []
        lock = threading.Lock()

        def worker(n):
            try:
                barrier.wait()
                while True:
                    item = queue.claim_one(worker_id=f"w{n}")
                    if item is None:
                        return
                    with lock:
                        claimed.append(item.pk)
            finally:
                connections.close_all()

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(claimed) == sorted(ids)


@pytest.mark.django_db
class TestPollingLoop:
    def test_stop_when_idle_drains(self):
        work = [True, True, False]
        sleeps = []

        processed = run_polling_loop(
            name="t",
            run_once=lambda: work.pop(0),
            idle_sleep=1,
            error_sleep=2,
            stop_when_idle=True,
            sleep=sleeps.append,
        )

        assert processed == 2
        assert sleeps == []

    def test_errors_sleep_and_continue(self):
        calls = {"n": 0}

        def run_once():
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("boom")
            return False

        sleeps = []
        run_polling_loop(name="t", run_once=run_once, idle_sleep=1, error_sleep=5, max_iterations=2, sleep=sleeps.append)

        assert sleeps == [5, 1]

    def test_shutdown_request_stops_loop(self):
        def run_once():
            request_shutdown()
            return True

        processed = run_polling_loop(name="t", run_once=run_once, idle_sleep=1, error_sleep=1, sleep=lambda s: None)
        assert processed == 1
