"""
core/aws/retry.py - 스로틀링 고정 간격 재시도

리소스 연결(create_service_network_resource_association)처럼 짧은 시간에
연속 호출하면 ThrottlingException이 나는 API에만 사용합니다.
지수 백오프 없이 고정 간격으로 최대 MAX_RETRIES회 시도하며,
스로틀링이 아닌 오류는 즉시 전파합니다.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from core.config import MAX_RETRIES, THROTTLE_RETRY_DELAY
from core.exceptions import RetryExhaustedError, is_throttling

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_throttle(
    func: Callable[[], T],
    operation: str,
    max_retries: int = MAX_RETRIES,
    delay: float = THROTTLE_RETRY_DELAY,
) -> T:
    """스로틀링 시 고정 간격으로 재시도

    Args:
        func: 인자 없는 호출 (lambda로 감싼 API 호출)
        operation: 로그/예외에 표시할 작업 이름
        max_retries: 최대 시도 횟수 (첫 시도 포함)
        delay: 시도 사이 대기 시간 (초)

    Returns:
        func의 반환값

    Raises:
        RetryExhaustedError: 모든 시도가 스로틀링으로 실패한 경우
        Exception: 스로틀링이 아닌 오류는 그대로 전파
    """
    last_error: Exception | None = None

    for attempt in range(1, max_retries + 1):
        try:
            return func()
        except Exception as e:
            if not is_throttling(e):
                raise
            last_error = e
            logger.warning("%s 스로틀링 (%d/%d)", operation, attempt, max_retries)
            # 마지막 시도 후에는 대기하지 않음
            if attempt < max_retries:
                time.sleep(delay)

    raise RetryExhaustedError(operation, max_retries, last_error)
