"""
core/aws/waiter.py - 상태 폴링 (지수 백오프 + 전체 대기 한도)

Lattice 리소스처럼 boto3 waiter가 없는 리소스의 상태 전이를 기다립니다.
대기 간격은 initial_delay에서 시작해 backoff 배수로 늘어나며 max_delay에서
멈추고, 누적 대기 시간이 timeout을 넘으면 WaitTimeoutError를 발생시킵니다.

누적 시간은 실제 경과 시간이 아니라 수행한 sleep의 합으로 계산합니다.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from core.config import POLL_BACKOFF, POLL_INITIAL_DELAY, POLL_MAX_DELAY, POLL_TIMEOUT
from core.exceptions import StateTransitionError, WaitTimeoutError

logger = logging.getLogger(__name__)

# 리소스 생성 폴링에서 공통으로 치명적인 상태
CREATE_FAILURE_STATUSES = frozenset({"CREATE_FAILED"})

# spoke VPC 연결 폴링에서 치명적인 상태
ASSOCIATION_FAILURE_STATUSES = frozenset({"CREATE_FAILED", "DELETE_IN_PROGRESS", "DELETE_FAILED"})


@dataclass(frozen=True)
class PollConfig:
    """폴링 설정

    Attributes:
        initial_delay: 첫 대기 시간 (초)
        max_delay: 대기 시간 상한 (초)
        backoff: 대기 시간 증가 배수
        timeout: 전체 대기 한도 (초)
    """

    initial_delay: float = POLL_INITIAL_DELAY
    max_delay: float = POLL_MAX_DELAY
    backoff: float = POLL_BACKOFF
    timeout: float = POLL_TIMEOUT

    def delays(self) -> Iterable[float]:
        """대기 시간 시퀀스 (한도까지)"""
        delay = self.initial_delay
        waited = 0.0
        while waited < self.timeout:
            step = min(delay, self.max_delay, self.timeout - waited)
            yield step
            waited += step
            delay *= self.backoff


DEFAULT_POLL_CONFIG = PollConfig()


def wait_for_status(
    fetch_status: Callable[[], str | None],
    resource: str,
    resource_id: str,
    success: Iterable[str] = ("ACTIVE",),
    failure: Iterable[str] = CREATE_FAILURE_STATUSES,
    config: PollConfig = DEFAULT_POLL_CONFIG,
) -> str:
    """리소스가 성공 상태가 될 때까지 폴링

    Args:
        fetch_status: 현재 상태를 반환하는 호출
        resource: 리소스 종류 (로그/예외용)
        resource_id: 리소스 ID
        success: 성공 상태 집합
        failure: 즉시 실패로 처리할 상태 집합
        config: 폴링 설정

    Returns:
        도달한 성공 상태

    Raises:
        StateTransitionError: 실패 상태에 도달한 경우
        WaitTimeoutError: 한도 내에 성공 상태에 도달하지 못한 경우
    """
    success_set = frozenset(success)
    failure_set = frozenset(failure)
    waited = 0.0

    status = fetch_status()
    for delay in config.delays():
        if status in success_set:
            return status
        if status in failure_set:
            raise StateTransitionError(resource, resource_id, status)

        logger.debug("%s %s 상태 %s, %.0f초 후 재확인", resource, resource_id, status, delay)
        time.sleep(delay)
        waited += delay
        status = fetch_status()

    if status in success_set:
        return status
    if status in failure_set:
        raise StateTransitionError(resource, resource_id, status)
    raise WaitTimeoutError(resource, resource_id, "/".join(sorted(success_set)), status, waited)

