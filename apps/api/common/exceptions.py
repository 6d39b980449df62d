# PATH: apps/api/common/exceptions.py
"""
도메인 예외 + DRF exception handler

- 서비스 레이어는 DomainError 하위 클래스를 raise 한다.
- 뷰는 에러 바디를 직접 만들지 않는다.
- 응답 형태: {"error": "<machine_code>", "message": "<사람이 읽는 설명>"}
- DRF ValidationError 등은 DRF 기본 포맷(필드별 detail)을 그대로 둔다.
"""
from __future__ import annotations

import logging
from typing import Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    code = "domain_error"
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class NotFoundError(DomainError):
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class ForbiddenStateError(DomainError):
    code = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "Operation is not allowed."


class ConflictError(DomainError):
    code = "conflict"
    http_status = status.HTTP_409_CONFLICT
    default_message = "Operation conflicts with current state."


class ValidationFailed(DomainError):
    code = "validation_failed"
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        view = context.get("view") if context else None
        logger.info(
            "domain_error code=%s status=%s view=%s",
            exc.code,
            exc.http_status,
            type(view).__name__ if view is not None else "-",
        )
        return Response(exc.to_dict(), status=exc.http_status)

    # 나머지(DRF APIException)는 기본 처리, 그 외 예외는 None → Django 500
    return drf_exception_handler(exc, context)
