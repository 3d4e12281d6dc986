"""
core/report.py - 정리(teardown) 결과 보고서

정리 단계는 개별 삭제가 실패해도 중단하지 않으므로, 각 삭제 시도의 결과를
TeardownReport에 모아 마지막에 요약합니다.

주요 구성 요소:
- OutcomeStatus: SUCCEEDED / NOT_FOUND / FAILED
- ResourceOutcome: 개별 삭제 결과
- TeardownReport: 결과 수집기 (attempt()로 호출과 분류를 한 번에)

Example:
    report = TeardownReport()
    report.attempt("hub-lattice", "service-network", sn_id,
                   lambda: lattice.delete_service_network(serviceNetworkIdentifier=sn_id))
    if report.has_failures:
        ...
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import VPCEError, get_error_code, is_not_found

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    """삭제 시도 결과"""

    SUCCEEDED = "succeeded"
    NOT_FOUND = "not_found"  # 이미 없음 (재실행 시 정상)
    FAILED = "failed"


@dataclass
class ResourceOutcome:
    """개별 리소스 삭제 결과

    Attributes:
        phase: 정리 단계 (spoke-test, hub-dns 등)
        resource_type: 리소스 종류
        resource_id: 리소스 ID 또는 이름
        status: 결과
        error_code: 실패/없음일 때 에러 코드
        message: 상세 메시지
    """

    phase: str
    resource_type: str
    resource_id: str
    status: OutcomeStatus
    error_code: str | None = None
    message: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        base = f"[{self.status.value.upper()}] {self.phase} - {self.resource_type} {self.resource_id}"
        if self.error_code:
            return f"{base}: {self.error_code}"
        return base

    def to_dict(self) -> dict[str, str | None]:
        """딕셔너리로 변환 (로깅/직렬화용)"""
        return {
            "timestamp": self.timestamp.isoformat(),
            "phase": self.phase,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "status": self.status.value,
            "error_code": self.error_code,
            "message": self.message,
        }


class TeardownReport:
    """정리 결과 수집기"""

    def __init__(self) -> None:
        self._outcomes: list[ResourceOutcome] = []

    def record(
        self,
        phase: str,
        resource_type: str,
        resource_id: str,
        status: OutcomeStatus,
        error_code: str | None = None,
        message: str | None = None,
    ) -> ResourceOutcome:
        """결과 기록"""
        outcome = ResourceOutcome(phase, resource_type, resource_id, status, error_code, message)
        self._outcomes.append(outcome)

        if status == OutcomeStatus.FAILED:
            logger.warning("%s", outcome)
        else:
            logger.debug("%s", outcome)
        return outcome

    def record_error(self, phase: str, resource_type: str, resource_id: str, error: Exception) -> ResourceOutcome:
        """예외를 NOT_FOUND 또는 FAILED로 분류해 기록"""
        status = OutcomeStatus.NOT_FOUND if is_not_found(error) else OutcomeStatus.FAILED
        return self.record(phase, resource_type, resource_id, status, get_error_code(error), str(error))

    def attempt(
        self,
        phase: str,
        resource_type: str,
        resource_id: str,
        func: Callable[[], Any],
    ) -> ResourceOutcome:
        """삭제 호출을 실행하고 결과를 기록

        호출이 예외를 던져도 전파하지 않습니다 (best effort).
        """
        try:
            func()
        except (ClientError, BotoCoreError, VPCEError) as e:
            return self.record_error(phase, resource_type, resource_id, e)
        return self.record(phase, resource_type, resource_id, OutcomeStatus.SUCCEEDED)

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    @property
    def outcomes(self) -> list[ResourceOutcome]:
        return list(self._outcomes)

    @property
    def failures(self) -> list[ResourceOutcome]:
        return [o for o in self._outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def has_failures(self) -> bool:
        return any(o.status == OutcomeStatus.FAILED for o in self._outcomes)

    def counts(self) -> dict[OutcomeStatus, int]:
        """상태별 건수 (없는 상태는 0)"""
        counter = Counter(o.status for o in self._outcomes)
        return {status: counter.get(status, 0) for status in OutcomeStatus}

    def summary_rows(self) -> list[list[str]]:
        """단계별 요약 테이블 행: [phase, succeeded, not_found, failed]"""
        phases: dict[str, Counter[OutcomeStatus]] = {}
        for outcome in self._outcomes:
            phases.setdefault(outcome.phase, Counter())[outcome.status] += 1
        return [
            [
                phase,
                str(counter[OutcomeStatus.SUCCEEDED]),
                str(counter[OutcomeStatus.NOT_FOUND]),
                str(counter[OutcomeStatus.FAILED]),
            ]
            for phase, counter in phases.items()
        ]

    def get_summary(self) -> str:
        """한 줄 요약"""
        counts = self.counts()
        return (
            f"성공 {counts[OutcomeStatus.SUCCEEDED]}건, "
            f"없음 {counts[OutcomeStatus.NOT_FOUND]}건, "
            f"실패 {counts[OutcomeStatus.FAILED]}건"
        )
