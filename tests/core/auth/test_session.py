"""
tests/core/auth/test_session.py - 계정 세션 테스트

테스트 대상:
- AccountRole 환경 매핑
- create_session: 없는 프로파일 -> PreconditionError
- resolve_account_id: STS 조회 / 오류 래핑
- AccountSession: 계정 ID 캐시, 클라이언트 재사용
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ProfileNotFound
from conftest import create_mock_client_error

from core.auth import AccountRole, AccountSession, create_session, open_account, resolve_account_id
from core.exceptions import APICallError, PreconditionError


class TestAccountRole:
    """AccountRole 테스트"""

    def test_for_environment(self):
        assert AccountRole.for_environment("dev") is AccountRole.SPOKE_DEV
        assert AccountRole.for_environment("test") is AccountRole.SPOKE_TEST

    def test_unknown_environment(self):
        with pytest.raises(ValueError):
            AccountRole.for_environment("prod")

    def test_str(self):
        assert str(AccountRole.SPOKE_DEV) == "spoke-dev"


class TestCreateSession:
    """create_session 테스트"""

    def test_profile_not_found(self):
        with patch("boto3.Session", side_effect=ProfileNotFound(profile="missing")):
            with pytest.raises(PreconditionError) as exc_info:
                create_session("missing", "us-east-2")

        assert exc_info.value.details["requirement"] == "missing"

    def test_session_arguments(self):
        with patch("boto3.Session") as mock_session:
            create_session("hub", "us-east-2")

        mock_session.assert_called_once_with(profile_name="hub", region_name="us-east-2")

    def test_open_account(self):
        with patch("boto3.Session") as mock_session:
            account = open_account(AccountRole.HUB, "hub", "us-east-2")

        assert account.role is AccountRole.HUB
        assert account.profile == "hub"
        assert account.session is mock_session.return_value


class TestResolveAccountId:
    """resolve_account_id 테스트"""

    def test_success(self):
        session = MagicMock()
        session.client.return_value.get_caller_identity.return_value = {"Account": "111111111111"}

        assert resolve_account_id(session, "us-east-2") == "111111111111"
        assert session.client.call_args.args[0] == "sts"

    def test_invalid_credentials(self):
        session = MagicMock()
        session.client.return_value.get_caller_identity.side_effect = create_mock_client_error(
            "InvalidClientTokenId", "bad token", "GetCallerIdentity"
        )

        with pytest.raises(APICallError) as exc_info:
            resolve_account_id(session, "us-east-2")

        assert exc_info.value.error_code == "InvalidClientTokenId"


class TestAccountSession:
    """AccountSession 테스트"""

    def _account(self) -> tuple[AccountSession, MagicMock]:
        session = MagicMock()
        session.client.return_value.get_caller_identity.return_value = {"Account": "222222222222"}
        return AccountSession(AccountRole.SPOKE_DEV, "dev", "us-east-2", session), session

    def test_account_id_cached(self):
        account, session = self._account()

        assert account.account_id == "222222222222"
        assert account.account_id == "222222222222"
        assert session.client.return_value.get_caller_identity.call_count == 1

    def test_client_reused(self):
        account, session = self._account()

        first = account.client("vpc-lattice")
        second = account.client("vpc-lattice")

        assert first is second
        assert session.client.call_count == 1
        assert session.client.call_args.kwargs["region_name"] == "us-east-2"

    def test_client_per_retry_setting(self):
        """재시도 설정이 다르면 별도 클라이언트"""
        account, session = self._account()
        session.client.side_effect = lambda *args, **kwargs: MagicMock()

        default = account.client("vpc-lattice")
        no_retry = account.client("vpc-lattice", total_max_attempts=1)

        assert default is not no_retry
        assert account.client("vpc-lattice", total_max_attempts=1) is no_retry
        assert session.client.call_args.kwargs["config"].retries["total_max_attempts"] == 1
