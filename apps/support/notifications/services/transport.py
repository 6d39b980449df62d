# PATH: apps/support/notifications/services/transport.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)

RESPONSE_BODY_LIMIT = 2000


@dataclass(frozen=True)
class DeliveryResult:
    http_status: Optional[int]
    body: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.http_status is not None and 200 <= self.http_status < 300


class HTTPTransport:
    """
    Outbound Notification Transport
    - non-2xx / 네트워크 오류 모두 DeliveryResult(ok=False) 로 돌려준다 (raise 안 함)
    """

    def __init__(self, *, timeout_seconds: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout_seconds = float(timeout_seconds)
        self.session = session or requests.Session()

    def deliver(self, *, url: str, body: bytes, headers: Dict[str, str]) -> DeliveryResult:
        try:
            r = self.session.post(url, data=body, headers=headers, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            logger.warning("webhook transport error url=%s err=%s", url, e)
            return DeliveryResult(http_status=None, error=f"transport_error: {e}")

        text = (r.text or "")[:RESPONSE_BODY_LIMIT]
        if not (200 <= r.status_code < 300):
            return DeliveryResult(http_status=r.status_code, body=text, error=f"http_{r.status_code}")
        return DeliveryResult(http_status=r.status_code, body=text)
