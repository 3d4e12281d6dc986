"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반 명령 디스패처입니다. 계정 프로파일, 리전, 접두사를 받아
Settings로 묶고 환경 변수로 내보낸 뒤 명령에 해당하는 단계를 실행합니다.

명령어 구조:
    vpce [옵션] all         # 허브 -> spoke-dev -> spoke-test
    vpce [옵션] hub         # 허브 계정
    vpce [옵션] spoke-dev   # spoke-dev 계정
    vpce [옵션] spoke-test  # spoke-test 계정
    vpce [옵션] cleanup     # 역순 정리 (확인 프롬프트)
    vpce [옵션] status      # 상태 조회

종료 코드:
    0    성공
    1    파라미터 누락, 단계 실패, 정리 중 일부 실패
    130  사용자 중단 (Ctrl+C)

Usage:
    $ vpce --hub-profile hub --spoke-dev-profile dev --spoke-test-profile test all
    $ VPCE_HUB_PROFILE=hub vpce status
    $ python -m cli.app --version
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import click
from botocore.exceptions import BotoCoreError, ClientError
from click import Context

from cli.i18n import set_lang, t
from cli.ui import (
    configure_logging,
    print_error,
    print_info,
    print_panel_header,
    print_rule,
    print_success,
    print_warning,
)
from core.auth import AccountRole
from core.config import ENV_VARS, Settings, get_version
from core.exceptions import ConfigError, VPCEError, format_error_for_user
from stages.context import SPOKE_ENVIRONMENTS, StageContext
from stages.hub import run_hub
from stages.spoke import run_spoke
from stages.status import run_status
from stages.teardown import run_teardown

logger = logging.getLogger(__name__)

T = TypeVar("T")

VERSION = get_version()

# 명령별 필수 프로파일 (Settings 필드)
_ALL_PROFILES = ("hub_profile", "spoke_dev_profile", "spoke_test_profile")
REQUIRED_PROFILES: dict[str, tuple[str, ...]] = {
    "all": _ALL_PROFILES,
    # 허브는 RAM 공유 대상 계정 ID 확인을 위해 spoke 프로파일도 필요
    "hub": _ALL_PROFILES,
    "spoke-dev": ("spoke_dev_profile", "hub_profile"),
    "spoke-test": ("spoke_test_profile", "hub_profile"),
    "cleanup": _ALL_PROFILES,
    "status": (),
}

_OPTION_NAMES = {
    "hub_profile": "--hub-profile",
    "spoke_dev_profile": "--spoke-dev-profile",
    "spoke_test_profile": "--spoke-test-profile",
}


def missing_parameters(settings: Settings, command: str) -> list[str]:
    """명령 실행에 필요한데 비어 있는 파라미터 목록 ("--옵션 (환경변수)" 형식)"""
    return [
        f"{_OPTION_NAMES[name]} ({ENV_VARS[name]})"
        for name in REQUIRED_PROFILES.get(command, ())
        if not getattr(settings, name)
    ]


def _validate(settings: Settings, command: str) -> None:
    """필수 파라미터 검증 (AWS 호출 전)"""
    missing = missing_parameters(settings, command)
    if missing:
        print_error(t("cli.missing_params", params=", ".join(missing)))
        raise SystemExit(1)


def _run_guarded(stage: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """단계 실행 래퍼

    VPCEError/boto 예외는 에러 출력 후 종료 코드 1, Ctrl+C는 130으로 변환합니다.
    """
    try:
        return func(*args, **kwargs)
    except (VPCEError, ClientError, BotoCoreError) as e:
        logger.debug("%s 단계 실패", stage, exc_info=True)
        print_error(t("cli.stage_failed", stage=stage, error=format_error_for_user(e)))
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        print_warning(t("cli.interrupted"))
        raise SystemExit(130) from None


def resolve_spoke_accounts(ctx: StageContext) -> None:
    """spoke 계정 ID가 설정에 없으면 STS로 확인해 컨텍스트 설정에 채움"""
    settings = ctx.settings
    overrides: dict[str, str] = {}
    for env in SPOKE_ENVIRONMENTS:
        field_name = f"spoke_{env}_account"
        if getattr(settings, field_name):
            continue
        role = AccountRole.for_environment(env)
        if ctx.has_account(role):
            overrides[field_name] = ctx.account(role).account_id

    if overrides:
        ctx.settings = settings.with_overrides(**overrides)


def _prepare(click_ctx: Context, command: str, resolve_accounts: bool = False) -> StageContext:
    """검증 -> 세션 열기 -> (계정 ID 확인) -> 환경 변수 내보내기"""
    settings: Settings = click_ctx.obj["settings"]
    _validate(settings, command)

    def build() -> StageContext:
        stage_ctx = StageContext.from_settings(settings)
        if resolve_accounts:
            print_info(t("cli.resolving_accounts"))
            resolve_spoke_accounts(stage_ctx)
        return stage_ctx

    stage_ctx = _run_guarded(command, build)
    stage_ctx.settings.to_env()
    return stage_ctx


def _build_help_text() -> str:
    """help 텍스트 생성"""
    lines = [
        "VPCE - Centralized VPC Endpoints (VPC Lattice)",
        "",
        t("cli.help_intro"),
        "",
        "\b",  # Click 줄바꿈 유지 마커
        t("cli.help_commands"),
        f"  all          {t('cli.help_all')}",
        f"  hub          {t('cli.help_hub')}",
        f"  spoke-dev    {t('cli.help_spoke_dev')}",
        f"  spoke-test   {t('cli.help_spoke_test')}",
        f"  cleanup      {t('cli.help_cleanup')}",
        f"  status       {t('cli.help_status')}",
        "",
        "\b",
        t("cli.help_examples"),
        "  vpce --hub-profile hub --spoke-dev-profile dev --spoke-test-profile test all",
        "  vpce --hub-profile hub --spoke-dev-profile dev spoke-dev",
        "  vpce --prefix my-vpce --region ap-northeast-2 status",
    ]
    return "\n".join(lines)


class LocalizedOption(click.Option):
    """도움말을 출력 시점의 언어로 번역하는 옵션 (help 대신 help_key 지정)"""

    def __init__(self, *args: Any, help_key: str | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.help_key = help_key

    def get_help_record(self, ctx: Context) -> tuple[str, str] | None:
        if self.help_key:
            self.help = t(self.help_key)
        return super().get_help_record(ctx)


class LocalizedCommand(click.Command):
    """help_key로 도움말을 지연 번역하는 명령"""

    def __init__(self, *args: Any, help_key: str | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.help_key = help_key

    def _localize(self) -> None:
        if self.help_key:
            self.help = t(self.help_key)

    def get_short_help_str(self, limit: int = 45) -> str:
        self._localize()
        return super().get_short_help_str(limit)

    def format_help_text(self, ctx: Context, formatter: click.HelpFormatter) -> None:
        self._localize()
        super().format_help_text(ctx, formatter)


class LocalizedGroup(click.Group):
    """--lang이 반영된 그룹 도움말 (하위 명령은 LocalizedCommand)"""

    command_class = LocalizedCommand

    def format_help_text(self, ctx: Context, formatter: click.HelpFormatter) -> None:
        self.help = _build_help_text()
        super().format_help_text(ctx, formatter)


def _apply_lang(ctx: Context, param: click.Parameter, value: str) -> str:
    # --help보다 먼저 처리되도록 eager 옵션의 콜백에서 언어 설정
    set_lang(value)
    return value


@click.group(cls=LocalizedGroup)
@click.version_option(VERSION, prog_name="vpce")
@click.option(
    "--lang",
    type=click.Choice(["ko", "en"]),
    default="ko",
    is_eager=True,
    callback=_apply_lang,
    help="UI 언어 설정 / UI language (ko: 한국어, en: English)",
)
@click.option(
    "--hub-profile",
    envvar=ENV_VARS["hub_profile"],
    default=None,
    cls=LocalizedOption,
    help_key="cli.opt_hub_profile",
)
@click.option(
    "--spoke-dev-profile",
    envvar=ENV_VARS["spoke_dev_profile"],
    default=None,
    cls=LocalizedOption,
    help_key="cli.opt_spoke_dev_profile",
)
@click.option(
    "--spoke-test-profile",
    envvar=ENV_VARS["spoke_test_profile"],
    default=None,
    cls=LocalizedOption,
    help_key="cli.opt_spoke_test_profile",
)
@click.option(
    "-r", "--region", envvar=ENV_VARS["region"], default=None, cls=LocalizedOption, help_key="cli.opt_region"
)
@click.option("--prefix", envvar=ENV_VARS["prefix"], default=None, cls=LocalizedOption, help_key="cli.opt_prefix")
@click.option(
    "--state-dir", envvar=ENV_VARS["state_dir"], default=None, cls=LocalizedOption, help_key="cli.opt_state_dir"
)
@click.option("-v", "--verbose", is_flag=True, cls=LocalizedOption, help_key="cli.opt_verbose")
@click.pass_context
def cli(
    ctx: Context,
    lang: str,
    hub_profile: str | None,
    spoke_dev_profile: str | None,
    spoke_test_profile: str | None,
    region: str | None,
    prefix: str | None,
    state_dir: str | None,
    verbose: bool,
) -> None:
    """VPCE - Centralized VPC Endpoints CLI"""
    set_lang(lang)
    configure_logging(verbose)

    try:
        settings = Settings.from_env().with_overrides(
            hub_profile=hub_profile,
            spoke_dev_profile=spoke_dev_profile,
            spoke_test_profile=spoke_test_profile,
            region=region,
            prefix=prefix,
            state_dir=state_dir,
        )
    except ConfigError as e:
        print_error(t("cli.invalid_config", error=e))
        raise SystemExit(1) from e

    ctx.ensure_object(dict)
    ctx.obj["lang"] = lang
    ctx.obj["settings"] = settings


@cli.command("all", help_key="cli.help_all")
@click.pass_context
def all_command(ctx: Context) -> None:
    stage_ctx = _prepare(ctx, "all", resolve_accounts=True)

    hub_outputs = _run_guarded(t("common.hub"), run_hub, stage_ctx)
    for env in SPOKE_ENVIRONMENTS:
        print_rule(t("common.spoke", env=env))
        _run_guarded(t("common.spoke", env=env), run_spoke, stage_ctx, env, hub_outputs=hub_outputs)

    print_success(t("cli.all_done"))


@cli.command("hub", help_key="cli.help_hub")
@click.pass_context
def hub_command(ctx: Context) -> None:
    stage_ctx = _prepare(ctx, "hub", resolve_accounts=True)
    _run_guarded(t("common.hub"), run_hub, stage_ctx)


def _spoke_command(ctx: Context, env: str) -> None:
    stage_ctx = _prepare(ctx, f"spoke-{env}")
    _run_guarded(t("common.spoke", env=env), run_spoke, stage_ctx, env)


@cli.command("spoke-dev", help_key="cli.help_spoke_dev")
@click.pass_context
def spoke_dev_command(ctx: Context) -> None:
    _spoke_command(ctx, "dev")


@cli.command("spoke-test", help_key="cli.help_spoke_test")
@click.pass_context
def spoke_test_command(ctx: Context) -> None:
    _spoke_command(ctx, "test")


@cli.command("cleanup", help_key="cli.help_cleanup")
@click.option("-y", "--yes", is_flag=True, cls=LocalizedOption, help_key="cli.opt_yes")
@click.pass_context
def cleanup_command(ctx: Context, yes: bool) -> None:
    settings: Settings = ctx.obj["settings"]
    _validate(settings, "cleanup")

    if not yes:
        print_panel_header(
            t("cli.cleanup_title"),
            t("cli.cleanup_warning", prefix=settings.prefix, region=settings.region),
        )
        answer = click.prompt(t("cli.cleanup_confirm"), default="", show_default=False)
        if answer.strip().lower() != "yes":
            print_info(t("cli.cleanup_cancelled"))
            return

    stage_ctx = _prepare(ctx, "cleanup")
    report = _run_guarded(t("common.cleanup"), run_teardown, stage_ctx)
    if report.has_failures:
        print_warning(t("cli.cleanup_partial"))
        raise SystemExit(1)


@cli.command("status", help_key="cli.help_status")
@click.pass_context
def status_command(ctx: Context) -> None:
    settings: Settings = ctx.obj["settings"]
    stage_ctx = _run_guarded(t("common.status"), StageContext.from_settings, settings, skip_invalid=True)
    # 조회 실패는 경고로만 표시하고 종료 코드는 0
    _run_guarded(t("common.status"), run_status, stage_ctx)


if __name__ == "__main__":
    cli()
