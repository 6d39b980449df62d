# PATH: apps/shared/queue/loop.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from django.db import close_old_connections, connection

from libs.observability.shutdown import is_shutdown_requested

logger = logging.getLogger(__name__)


def _refresh_connections() -> None:
    # 바깥 트랜잭션(atomic) 안에서 호출되면 연결을 닫지 않는다
    if not connection.in_atomic_block:
        close_old_connections()


def run_polling_loop(
    *,
    name: str,
    run_once: Callable[[], bool],
    idle_sleep: float,
    error_sleep: float,
    stop_when_idle: bool = False,
    max_iterations: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    고정 간격 polling 루프.

    run_once() → True(1건 처리) / False(처리할 것 없음)
    - 비어 있으면 idle_sleep, 예외면 로그 후 error_sleep
    - stop_when_idle: 큐가 빌 때까지만 돌고 종료 (cron / --once)
    - SIGTERM 수신 시 현재 item 처리 후 종료
    """
    processed = 0
    iterations = 0

    logger.info("%s READY | idle_sleep=%s error_sleep=%s", name, idle_sleep, error_sleep)

    while not is_shutdown_requested():
        iterations += 1
        _refresh_connections()

        try:
            did_work = bool(run_once())
        except Exception:
            logger.exception("%s loop error", name)
            if stop_when_idle:
                break
            sleep(error_sleep)
        else:
            if did_work:
                processed += 1
            elif stop_when_idle:
                break
            else:
                sleep(idle_sleep)

        if max_iterations is not None and iterations >= max_iterations:
            break

    logger.info("%s STOPPED | processed=%s", name, processed)
    return processed
