# PATH: apps/support/notifications/services/outbox.py
"""
Notification Outbox

- enqueue_notification(): 즉시 row 적재만 하고 반환 (전달은 worker 책임)
- OutboxDelivery.run_once(): 1건 claim → 서명 POST → succeeded / 재시도 예약 / 최종 failed
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from apps.shared.queue.db_queue import DBQueueConfig, DBWorkQueue
from apps.support.notifications.config import OutboxConfig, load_config
from apps.support.notifications.models import OutboxEvent
from apps.support.notifications.services.signing import WebhookSigner
from apps.support.notifications.services.transport import HTTPTransport

logger = logging.getLogger(__name__)


def get_outbox_queue(cfg: Optional[OutboxConfig] = None) -> DBWorkQueue:
    cfg = cfg or load_config()
    return DBWorkQueue(
        OutboxEvent,
        DBQueueConfig(
            stale_claim_sec=cfg.STALE_CLAIM_SECONDS,
            default_max_attempts=cfg.MAX_ATTEMPTS,
            base_backoff_sec=cfg.BACKOFF_BASE_SECONDS,
            max_backoff_sec=cfg.BACKOFF_CAP_SECONDS,
        ),
    )


def enqueue_notification(
    *,
    event_type: str,
    payload: Dict[str, Any],
    target_url: Optional[str] = None,
    max_attempts: Optional[int] = None,
) -> Optional[int]:
    """
    이벤트 적재. webhook URL 미설정이면 적재하지 않고 None.
    """
    cfg = load_config()
    url = (target_url or cfg.WEBHOOK_URL or "").strip()
    if not url:
        logger.info("notification skipped (no webhook url) event_type=%s", event_type)
        return None

    event_id = get_outbox_queue(cfg).enqueue(
        payload=payload or {},
        max_attempts=max_attempts or cfg.MAX_ATTEMPTS,
        event_type=str(event_type),
        target_url=url,
    )
    logger.info("notification enqueued id=%s event_type=%s", event_id, event_type)
    return event_id


class OutboxDelivery:
    def __init__(
        self,
        *,
        cfg: Optional[OutboxConfig] = None,
        transport: Optional[HTTPTransport] = None,
        signer: Optional[WebhookSigner] = None,
    ):
        self.cfg = cfg or load_config()
        self.queue = get_outbox_queue(self.cfg)
        self.transport = transport or HTTPTransport(timeout_seconds=self.cfg.HTTP_TIMEOUT_SECONDS)
        self.signer = signer or WebhookSigner(secret=self.cfg.WEBHOOK_SECRET)

    def run_once(self) -> bool:
        event = self.queue.claim_one(worker_id=self.cfg.WORKER_ID)
        if event is None:
            return False

        # 1) 서명된 요청 구성
        body, headers = self.signer.build(
            payload=event.payload or {},
            event_type=event.event_type,
            event_id=event.pk,
        )

        # 2) 전달 (transport 는 raise 하지 않음)
        res = self.transport.deliver(url=event.target_url, body=body, headers=headers)

        # 3) 결과 기록
        if res.ok:
            self.queue.complete(
                event.pk,
                worker_id=self.cfg.WORKER_ID,
                result={"http_status": res.http_status},
                http_status=res.http_status,
                response_body=res.body,
            )
            logger.info("notification delivered id=%s event_type=%s status=%s", event.pk, event.event_type, res.http_status)
            return True

        outcome = self.queue.fail(
            event.pk,
            worker_id=self.cfg.WORKER_ID,
            error=res.error or "delivery_failed",
            http_status=res.http_status,
            response_body=res.body,
        )
        logger.warning(
            "notification delivery failed id=%s event_type=%s attempt=%s/%s status=%s outcome=%s next_retry_at=%s",
            event.pk,
            event.event_type,
            event.attempts,
            event.max_attempts,
            res.http_status,
            outcome.reason,
            outcome.next_retry_at,
        )
        return True
