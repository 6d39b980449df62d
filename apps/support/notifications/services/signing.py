# PATH: apps/support/notifications/services/signing.py
from __future__ import annotations

import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

SIGNATURE_PREFIX = "sha256="


@dataclass(frozen=True)
class WebhookSigner:
    """
    수신 측에서 검증 가능한 webhook 서명 생성.
    - sig = HMAC-SHA256(secret, f"{timestamp}.{body}")
    - 헤더: X-Webhook-Timestamp, X-Webhook-Signature, X-Webhook-Event, X-Webhook-Id

    secret 원문은 절대 헤더로 보내지 않는다.
    """
    secret: str

    def signature(self, *, body: bytes, timestamp: int) -> str:
        msg = f"{int(timestamp)}.".encode("utf-8") + body
        mac = hmac.new(self.secret.encode("utf-8"), msg, hashlib.sha256).hexdigest()
        return f"{SIGNATURE_PREFIX}{mac}"

    def verify(self, *, body: bytes, timestamp: int, signature: str) -> bool:
        return hmac.compare_digest(self.signature(body=body, timestamp=timestamp), signature or "")

    def build(
        self,
        *,
        payload: Dict[str, Any],
        event_type: str,
        event_id: int,
        timestamp: Optional[int] = None,
    ) -> Tuple[bytes, Dict[str, str]]:
        ts = int(timestamp if timestamp is not None else time.time())
        body = json.dumps(
            {"event_type": event_type, "event_id": event_id, "payload": payload},
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
            default=str,
        ).encode("utf-8")

        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Event": str(event_type),
            "X-Webhook-Id": str(event_id),
            "X-Webhook-Timestamp": str(ts),
        }
        if self.secret:
            headers["X-Webhook-Signature"] = self.signature(body=body, timestamp=ts)
        return body, headers
