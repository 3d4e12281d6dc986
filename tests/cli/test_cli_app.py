"""
tests/cli/test_cli_app.py - CLI 디스패처 테스트

테스트 대상:
- 필수 파라미터 검증 (AWS 호출 전 종료 코드 1)
- 명령 -> 단계 함수 라우팅
- cleanup 확인 프롬프트
- 단계 실패/중단 종료 코드
- spoke 계정 ID 확인
"""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from fake_aws import DEV_ACCOUNT, TEST_ACCOUNT

from cli.app import VERSION, cli, missing_parameters, resolve_spoke_accounts
from core.config import Settings
from core.exceptions import PreconditionError, StateError

ALL_PROFILES = [
    "--hub-profile",
    "hub",
    "--spoke-dev-profile",
    "dev",
    "--spoke-test-profile",
    "test",
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_context(stage_ctx):
    """StageContext.from_settings가 가짜 AWS 컨텍스트를 반환하도록 패치"""
    with patch("cli.app.StageContext") as mock_cls:
        mock_cls.from_settings.return_value = stage_ctx
        yield mock_cls


class TestMissingParameters:
    """missing_parameters 테스트"""

    def test_hub_needs_all_profiles(self):
        missing = missing_parameters(Settings(hub_profile="hub"), "hub")
        assert missing == [
            "--spoke-dev-profile (VPCE_SPOKE_DEV_PROFILE)",
            "--spoke-test-profile (VPCE_SPOKE_TEST_PROFILE)",
        ]

    def test_spoke_needs_own_and_hub(self):
        settings = Settings(spoke_dev_profile="dev")
        assert missing_parameters(settings, "spoke-dev") == ["--hub-profile (VPCE_HUB_PROFILE)"]
        assert missing_parameters(settings, "spoke-test") == [
            "--spoke-test-profile (VPCE_SPOKE_TEST_PROFILE)",
            "--hub-profile (VPCE_HUB_PROFILE)",
        ]

    def test_status_needs_nothing(self):
        assert missing_parameters(Settings(), "status") == []


class TestValidation:
    """AWS 호출 전 검증"""

    @pytest.mark.parametrize("command", ["all", "hub", "spoke-dev", "spoke-test", "cleanup"])
    def test_missing_profiles_exit_1(self, runner, command):
        with patch("cli.app.StageContext") as mock_cls:
            result = runner.invoke(cli, [command])

        assert result.exit_code == 1
        assert "VPCE_HUB_PROFILE" in result.output
        mock_cls.from_settings.assert_not_called()

    def test_english_message(self, runner):
        result = runner.invoke(cli, ["--lang", "en", "hub"])
        assert result.exit_code == 1
        assert "Missing required parameters" in result.output

    def test_invalid_prefix(self, runner):
        result = runner.invoke(cli, ["--prefix", "Bad_Prefix", *ALL_PROFILES[:2], "status"])
        assert result.exit_code == 1
        assert "설정 오류" in result.output

    def test_profiles_from_environment(self, runner, mock_context):
        """옵션 대신 환경 변수로 전달"""
        env = {
            "VPCE_HUB_PROFILE": "hub",
            "VPCE_SPOKE_DEV_PROFILE": "dev",
        }
        with patch("cli.app.run_spoke") as mock_spoke:
            result = runner.invoke(cli, ["spoke-dev"], env=env)

        assert result.exit_code == 0, result.output
        mock_spoke.assert_called_once()


class TestRouting:
    """명령 라우팅 테스트"""

    def test_hub(self, runner, mock_context, stage_ctx):
        with patch("cli.app.run_hub") as mock_hub:
            result = runner.invoke(cli, [*ALL_PROFILES, "hub"])

        assert result.exit_code == 0, result.output
        mock_hub.assert_called_once_with(stage_ctx)

    @pytest.mark.parametrize("env", ["dev", "test"])
    def test_spoke(self, runner, mock_context, stage_ctx, env):
        with patch("cli.app.run_spoke") as mock_spoke:
            result = runner.invoke(cli, [*ALL_PROFILES, f"spoke-{env}"])

        assert result.exit_code == 0, result.output
        mock_spoke.assert_called_once_with(stage_ctx, env)

    def test_all_passes_hub_outputs(self, runner, mock_context, stage_ctx):
        """all: 허브 출력을 파일 없이 spoke 단계에 직접 전달"""
        hub_outputs = MagicMock()
        with patch("cli.app.run_hub", return_value=hub_outputs) as mock_hub, patch("cli.app.run_spoke") as mock_spoke:
            result = runner.invoke(cli, [*ALL_PROFILES, "all"])

        assert result.exit_code == 0, result.output
        mock_hub.assert_called_once_with(stage_ctx)
        assert [c.args[1] for c in mock_spoke.call_args_list] == ["dev", "test"]
        assert all(c.kwargs["hub_outputs"] is hub_outputs for c in mock_spoke.call_args_list)

    def test_all_stops_after_hub_failure(self, runner, mock_context):
        with patch("cli.app.run_hub", side_effect=PreconditionError("x", "boom")), patch(
            "cli.app.run_spoke"
        ) as mock_spoke:
            result = runner.invoke(cli, [*ALL_PROFILES, "all"])

        assert result.exit_code == 1
        mock_spoke.assert_not_called()

    def test_exports_environment(self, runner, mock_context):
        """단계 실행 전 설정을 환경 변수로 내보냄"""
        seen = {}

        def capture(ctx):
            import os

            seen["prefix"] = os.environ.get("VPCE_STACK_PREFIX")

        with patch("cli.app.run_hub", side_effect=capture):
            runner.invoke(cli, [*ALL_PROFILES, "hub"])

        assert seen["prefix"] == "central-vpce"

    def test_status_without_profiles(self, runner):
        """status는 프로파일 없이도 실행, 잘못된 프로파일은 건너뜀"""
        with patch("cli.app.StageContext") as mock_cls, patch("cli.app.run_status") as mock_status:
            result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0, result.output
        assert mock_cls.from_settings.call_args.kwargs["skip_invalid"] is True
        mock_status.assert_called_once_with(mock_cls.from_settings.return_value)


class TestFailures:
    """단계 실패 종료 코드"""

    def test_stage_error_exit_1(self, runner, mock_context):
        error = StateError("/tmp/hub.json", "파일이 없습니다")
        with patch("cli.app.run_spoke", side_effect=error):
            result = runner.invoke(cli, [*ALL_PROFILES, "spoke-dev"])

        assert result.exit_code == 1
        assert "hub.json" in result.output

    def test_keyboard_interrupt_exit_130(self, runner, mock_context):
        with patch("cli.app.run_hub", side_effect=KeyboardInterrupt):
            result = runner.invoke(cli, [*ALL_PROFILES, "hub"])

        assert result.exit_code == 130

    def test_session_error_exit_1(self, runner):
        """프로파일이 없으면 컨텍스트 생성 단계에서 종료"""
        with patch("cli.app.StageContext") as mock_cls:
            mock_cls.from_settings.side_effect = PreconditionError("hub", "AWS 프로파일을 찾을 수 없습니다")
            result = runner.invoke(cli, [*ALL_PROFILES, "hub"])

        assert result.exit_code == 1


class TestCleanup:
    """cleanup 명령 테스트"""

    def test_cancelled(self, runner, mock_context):
        with patch("cli.app.run_teardown") as mock_teardown:
            result = runner.invoke(cli, [*ALL_PROFILES, "cleanup"], input="no\n")

        assert result.exit_code == 0
        assert "취소" in result.output
        mock_teardown.assert_not_called()
        mock_context.from_settings.assert_not_called()

    def test_confirmed(self, runner, mock_context, stage_ctx):
        with patch("cli.app.run_teardown") as mock_teardown:
            mock_teardown.return_value.has_failures = False
            result = runner.invoke(cli, [*ALL_PROFILES, "cleanup"], input="yes\n")

        assert result.exit_code == 0, result.output
        mock_teardown.assert_called_once_with(stage_ctx)

    def test_yes_flag_skips_prompt(self, runner, mock_context):
        with patch("cli.app.run_teardown") as mock_teardown, patch("cli.app.click.prompt") as mock_prompt:
            mock_teardown.return_value.has_failures = False
            result = runner.invoke(cli, [*ALL_PROFILES, "cleanup", "--yes"])

        assert result.exit_code == 0, result.output
        mock_prompt.assert_not_called()

    def test_partial_failure_exit_1(self, runner, mock_context):
        with patch("cli.app.run_teardown") as mock_teardown:
            mock_teardown.return_value.has_failures = True
            result = runner.invoke(cli, [*ALL_PROFILES, "cleanup", "-y"])

        assert result.exit_code == 1


class TestMisc:
    """버전/도움말"""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("all", "hub", "spoke-dev", "spoke-test", "cleanup", "status"):
            assert command in result.output

    def test_help_follows_lang_option(self, runner):
        """--lang en이면 옵션/명령 도움말도 영어"""
        result = runner.invoke(cli, ["--lang", "en", "--help"])

        assert result.exit_code == 0
        assert "AWS region" in result.output
        assert "Show deployment status" in result.output
        assert "Centralizes VPC endpoints" in result.output
        assert "AWS 리전" not in result.output

    def test_help_defaults_to_korean(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert "AWS 리전" in result.output
        assert "배포 상태 조회" in result.output

    def test_subcommand_option_help_follows_lang(self, runner):
        result = runner.invoke(cli, ["--lang", "en", "cleanup", "--help"])

        assert result.exit_code == 0
        assert "Skip the deletion confirmation prompt" in result.output


class TestResolveSpokeAccounts:
    """spoke 계정 ID 확인"""

    def test_fills_missing_accounts(self, cloud, tmp_path):
        ctx = cloud.stage_context(tmp_path, spoke_dev_account=None, spoke_test_account=None)

        resolve_spoke_accounts(ctx)

        assert ctx.settings.spoke_dev_account == DEV_ACCOUNT
        assert ctx.settings.spoke_test_account == TEST_ACCOUNT

    def test_keeps_configured_accounts(self, cloud, tmp_path):
        ctx = cloud.stage_context(tmp_path, spoke_dev_account="999999999999", spoke_test_account=None)

        resolve_spoke_accounts(ctx)

        assert ctx.settings.spoke_dev_account == "999999999999"
        assert ctx.settings.spoke_test_account == TEST_ACCOUNT
