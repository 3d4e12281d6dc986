"""
core/auth/session.py - 계정 역할별 boto3 세션

프로파일 이름으로 boto3.Session을 만들고, 역할(허브/spoke)과 리전을 함께 묶은
AccountSession을 제공합니다. 단계 코드는 boto3를 직접 다루지 않고
AccountSession.client()로 retry 설정이 적용된 클라이언트를 얻습니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from core.aws.client import get_client
from core.exceptions import APICallError, PreconditionError

if TYPE_CHECKING:
    import boto3

logger = logging.getLogger(__name__)


class AccountRole(Enum):
    """배포 토폴로지에서 계정의 역할"""

    HUB = "hub"
    SPOKE_DEV = "spoke-dev"
    SPOKE_TEST = "spoke-test"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def for_environment(cls, environment: str) -> AccountRole:
        """환경 이름(dev/test)에서 spoke 역할 반환"""
        return cls(f"spoke-{environment}")


def create_session(profile: str, region: str) -> boto3.Session:
    """프로파일 기반 boto3 세션 생성

    Raises:
        PreconditionError: 프로파일이 ~/.aws/config에 없는 경우
    """
    import boto3

    try:
        return boto3.Session(profile_name=profile, region_name=region)
    except ProfileNotFound as e:
        raise PreconditionError(profile, f"AWS 프로파일을 찾을 수 없습니다 ({e})") from e


def resolve_account_id(session: Any, region: str) -> str:
    """STS GetCallerIdentity로 세션의 계정 ID 조회

    Raises:
        APICallError: 자격 증명이 유효하지 않은 경우
    """
    sts = get_client(session, "sts", region_name=region)
    try:
        account_id: str = sts.get_caller_identity()["Account"]
    except ClientError as e:
        raise APICallError.from_client_error("sts", "get_caller_identity", e) from e
    except BotoCoreError as e:
        raise APICallError("sts", "get_caller_identity", error_message=str(e), cause=e) from e
    return account_id


@dataclass
class AccountSession:
    """역할/프로파일/리전이 결합된 계정 세션

    Attributes:
        role: 계정 역할
        profile: AWS CLI 프로파일 이름
        region: 리전
        session: boto3 Session (테스트에서는 client()를 제공하는 대체 객체)
    """

    role: AccountRole
    profile: str
    region: str
    session: Any
    _account_id: str | None = field(default=None, repr=False)
    _clients: dict[tuple[str, int | None], Any] = field(default_factory=dict, repr=False)

    @property
    def account_id(self) -> str:
        """계정 ID (최초 조회 후 캐시)"""
        if self._account_id is None:
            self._account_id = resolve_account_id(self.session, self.region)
            logger.debug("%s 계정 ID: %s", self.role, self._account_id)
        return self._account_id

    def client(self, service_name: str, total_max_attempts: int | None = None) -> Any:
        """서비스 클라이언트 (세션 내에서 재사용)

        Args:
            service_name: AWS 서비스 이름
            total_max_attempts: botocore 전체 시도 횟수 (1이면 botocore 재시도 없음).
                호출자가 직접 재시도 횟수를 제어해야 하는 API에 사용
        """
        key = (service_name, total_max_attempts)
        if key not in self._clients:
            self._clients[key] = get_client(
                self.session, service_name, region_name=self.region, total_max_attempts=total_max_attempts
            )
        return self._clients[key]


def open_account(role: AccountRole, profile: str, region: str) -> AccountSession:
    """프로파일로 AccountSession 생성"""
    return AccountSession(role=role, profile=profile, region=region, session=create_session(profile, region))
