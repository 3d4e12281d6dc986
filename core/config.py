"""
core/config.py - 중앙 설정 관리

배포 명령 전체에서 공유하는 기본값과 프로세스 환경 변수 핸드오프를 관리합니다.

디스패처는 명령줄 옵션을 Settings로 모은 뒤 to_env()로 내보내고,
각 단계는 Settings.from_env()로 같은 값을 다시 읽습니다.

환경 변수:
    VPCE_REGION              AWS 리전 (기본: us-east-2)
    VPCE_STACK_PREFIX        리소스 이름 접두사 (기본: central-vpce)
    VPCE_HUB_PROFILE         허브(엔드포인트) 계정 프로파일
    VPCE_SPOKE_DEV_PROFILE   spoke-dev 계정 프로파일
    VPCE_SPOKE_TEST_PROFILE  spoke-test 계정 프로파일
    VPCE_SPOKE_DEV_ACCOUNT   spoke-dev 계정 ID (RAM 공유용)
    VPCE_SPOKE_TEST_ACCOUNT  spoke-test 계정 ID (RAM 공유용)
    VPCE_STATE_DIR           단계 출력 저장 디렉토리

Usage:
    from core.config import Settings

    settings = Settings.from_env()
    settings.require("hub_profile")
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

from core.exceptions import ConfigError, PreconditionError

# =============================================================================
# 기본값
# =============================================================================

DEFAULT_REGION = "us-east-2"
DEFAULT_STACK_PREFIX = "central-vpce"

# Settings 필드 -> 환경 변수 이름
ENV_VARS: dict[str, str] = {
    "region": "VPCE_REGION",
    "prefix": "VPCE_STACK_PREFIX",
    "hub_profile": "VPCE_HUB_PROFILE",
    "spoke_dev_profile": "VPCE_SPOKE_DEV_PROFILE",
    "spoke_test_profile": "VPCE_SPOKE_TEST_PROFILE",
    "spoke_dev_account": "VPCE_SPOKE_DEV_ACCOUNT",
    "spoke_test_account": "VPCE_SPOKE_TEST_ACCOUNT",
    "state_dir": "VPCE_STATE_DIR",
}

# 폴링/대기 설정 (초)
POLL_INITIAL_DELAY = 5.0
POLL_MAX_DELAY = 30.0
POLL_BACKOFF = 1.5
POLL_TIMEOUT = 900.0

# 리소스 연결 스로틀링 재시도
MAX_RETRIES = 3
THROTTLE_RETRY_DELAY = 10.0
ASSOCIATION_SPACING = 3.0

# 정리 단계에서 비동기 삭제를 기다리는 시간
TEARDOWN_SETTLE_DELAY = 5.0
TEARDOWN_GATEWAY_SETTLE_DELAY = 10.0

_PREFIX_PATTERN = re.compile(r"^[a-z][a-z0-9-]{0,39}$")


def _get_project_root() -> Path:
    """프로젝트 루트 경로 (core/config.py 기준 2단계 상위)"""
    return Path(__file__).resolve().parent.parent


DEFAULT_STATE_DIR = str(_get_project_root() / "temp" / "state")


def get_version() -> str:
    """버전 문자열 반환

    프로젝트 루트의 version.txt에서 읽으며, 없으면 "0.0.0"을 반환합니다.
    """
    version_file = _get_project_root() / "version.txt"
    try:
        return version_file.read_text(encoding="utf-8").strip() or "0.0.0"
    except OSError:
        return "0.0.0"


# =============================================================================
# Settings
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """배포 명령의 프로세스 전역 설정

    Attributes:
        region: AWS 리전
        prefix: 스택/리소스 이름 접두사
        hub_profile: 허브 계정 AWS CLI 프로파일
        spoke_dev_profile: spoke-dev 계정 프로파일
        spoke_test_profile: spoke-test 계정 프로파일
        spoke_dev_account: spoke-dev 계정 ID (프로파일로부터 해석됨)
        spoke_test_account: spoke-test 계정 ID
        state_dir: 단계 출력 저장 디렉토리
    """

    region: str = DEFAULT_REGION
    prefix: str = DEFAULT_STACK_PREFIX
    hub_profile: str | None = None
    spoke_dev_profile: str | None = None
    spoke_test_profile: str | None = None
    spoke_dev_account: str | None = None
    spoke_test_account: str | None = None
    state_dir: str = DEFAULT_STATE_DIR

    def __post_init__(self) -> None:
        if not self.region:
            raise ConfigError("region", "리전이 비어 있습니다")
        if not _PREFIX_PATTERN.match(self.prefix):
            raise ConfigError(
                "prefix",
                f"'{self.prefix}'은(는) 사용할 수 없는 접두사입니다 (소문자로 시작, 소문자/숫자/하이픈, 최대 40자)",
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """환경 변수에서 Settings 생성

        비어 있는 값은 설정되지 않은 것으로 간주합니다.
        """
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for name, var in ENV_VARS.items():
            value = env.get(var, "").strip()
            if value:
                values[name] = value
        return cls(**values)

    def to_env(self, environ: MutableMapping[str, str] | None = None) -> dict[str, str]:
        """설정을 환경 변수로 내보내기 (하위 단계 핸드오프용)

        Returns:
            내보낸 변수 딕셔너리
        """
        exported = {var: str(getattr(self, name)) for name, var in ENV_VARS.items() if getattr(self, name)}
        target = os.environ if environ is None else environ
        target.update(exported)
        return exported

    def with_overrides(self, **overrides: str | None) -> Settings:
        """None이 아닌 값만 덮어쓴 새 Settings 반환"""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if k in known and v is not None}
        return replace(self, **changes)

    def require(self, *names: str) -> None:
        """필수 설정 확인

        Raises:
            PreconditionError: 값이 비어 있는 항목이 있는 경우
        """
        missing = [ENV_VARS[name] for name in names if not getattr(self, name)]
        if missing:
            raise PreconditionError(", ".join(missing), "필수 설정이 없습니다")

    @property
    def spoke_accounts(self) -> list[str]:
        """RAM 공유 대상 spoke 계정 ID 목록"""
        return [a for a in (self.spoke_dev_account, self.spoke_test_account) if a]
