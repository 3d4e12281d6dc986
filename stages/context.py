"""
stages/context.py - 단계 실행 컨텍스트

각 단계 함수(run_hub, run_spoke, run_status, run_teardown)는 StageContext
하나를 받아 설정, 계정 세션, 상태 저장소, 폴링 설정을 꺼내 씁니다.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from core.auth import AccountRole, AccountSession, open_account
from core.aws.waiter import DEFAULT_POLL_CONFIG, PollConfig
from core.config import ENV_VARS, Settings
from core.exceptions import PreconditionError
from core.state import StateStore

logger = logging.getLogger(__name__)

SPOKE_ENVIRONMENTS = ("dev", "test")

_PROFILE_FIELDS = {
    AccountRole.HUB: "hub_profile",
    AccountRole.SPOKE_DEV: "spoke_dev_profile",
    AccountRole.SPOKE_TEST: "spoke_test_profile",
}


@dataclass
class StageContext:
    """단계 실행 컨텍스트

    Attributes:
        settings: 프로세스 전역 설정
        store: 단계 출력 저장소
        accounts: 역할 -> 계정 세션 (프로파일이 주어진 계정만)
        poll: Lattice 상태 폴링 설정
    """

    settings: Settings
    store: StateStore
    accounts: dict[AccountRole, AccountSession] = field(default_factory=dict)
    poll: PollConfig = DEFAULT_POLL_CONFIG

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        roles: Iterable[AccountRole] | None = None,
        skip_invalid: bool = False,
    ) -> StageContext:
        """설정에서 컨텍스트 생성

        Args:
            settings: 설정
            roles: 세션을 열 역할 (None이면 프로파일이 있는 모든 역할)
            skip_invalid: 존재하지 않는 프로파일을 경고 후 건너뛸지 여부 (상태 조회용)
        """
        wanted = list(roles) if roles is not None else list(AccountRole)
        accounts: dict[AccountRole, AccountSession] = {}
        for role in wanted:
            profile = getattr(settings, _PROFILE_FIELDS[role])
            if not profile:
                continue
            try:
                accounts[role] = open_account(role, profile, settings.region)
            except PreconditionError as e:
                if not skip_invalid:
                    raise
                logger.warning("%s 계정 세션을 열 수 없습니다: %s", role, e)

        store = StateStore(settings.state_dir, settings.prefix, settings.region)
        return cls(settings=settings, store=store, accounts=accounts)

    def account(self, role: AccountRole) -> AccountSession:
        """역할의 계정 세션

        Raises:
            PreconditionError: 해당 역할의 프로파일이 주어지지 않은 경우
        """
        session = self.accounts.get(role)
        if session is None:
            raise PreconditionError(ENV_VARS[_PROFILE_FIELDS[role]], f"{role} 계정 프로파일이 없습니다")
        return session

    def has_account(self, role: AccountRole) -> bool:
        return role in self.accounts

    @property
    def hub(self) -> AccountSession:
        return self.account(AccountRole.HUB)

    def spoke(self, environment: str) -> AccountSession:
        return self.account(AccountRole.for_environment(environment))

    @property
    def prefix(self) -> str:
        return self.settings.prefix

    @property
    def region(self) -> str:
        return self.settings.region
