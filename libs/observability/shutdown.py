"""
Graceful Shutdown 유틸리티

SIGTERM, SIGINT 수신 시 종료 플래그만 세운다.
polling 워커는 매 iteration마다 is_shutdown_requested()를 확인하고
처리 중인 item을 끝낸 뒤 루프를 빠져나온다. (claim된 item을 중간에 버리지 않음)
"""

import signal
import logging

logger = logging.getLogger(__name__)

_shutdown_requested = False


def is_shutdown_requested() -> bool:
    """종료 요청 여부 확인"""
    return _shutdown_requested


def request_shutdown() -> None:
    global _shutdown_requested
    _shutdown_requested = True


def reset_shutdown_state() -> None:
    """테스트/재기동용: 플래그 초기화"""
    global _shutdown_requested
    _shutdown_requested = False


def _signal_handler(signum, frame):
    signal_name = signal.Signals(signum).name
    logger.info("Received %s, finishing current item then stopping", signal_name)
    request_shutdown()


def setup_graceful_shutdown() -> None:
    """Graceful shutdown 설정 (메인 스레드에서만 호출)"""
    signal.signal(signal.SIGTERM, _signal_handler)
    signal.signal(signal.SIGINT, _signal_handler)
    logger.info("Graceful shutdown handlers registered")
