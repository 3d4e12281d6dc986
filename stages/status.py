"""
stages/status.py - 배포 상태 조회 (읽기 전용)

프로파일이 주어진 계정마다 이름에 접두사가 포함된 CloudFormation 스택,
Lattice 서비스 네트워크, VPC 엔드포인트를 조회해 출력합니다.
조회 실패는 섹션별 경고로만 표시하며 명령 종료 코드에 영향을 주지 않습니다.
마지막으로 로컬에 저장된 허브/spoke 단계 출력을 요약합니다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cli.ui import console, print_header, print_info, print_sub_info, print_sub_warning, print_table
from core.auth import AccountRole, AccountSession
from core.aws.client import paginate
from core.exceptions import StateError, VPCEError
from stages.context import SPOKE_ENVIRONMENTS, StageContext
from stages.lattice import list_service_networks_containing

logger = logging.getLogger(__name__)

ACTIVE_STACK_STATUSES = ["CREATE_COMPLETE", "UPDATE_COMPLETE"]

_ROLE_LABELS = {
    AccountRole.HUB: "허브 계정",
    AccountRole.SPOKE_DEV: "spoke-dev 계정",
    AccountRole.SPOKE_TEST: "spoke-test 계정",
}

_PROFILE_OPTIONS = {
    AccountRole.HUB: "--hub-profile",
    AccountRole.SPOKE_DEV: "--spoke-dev-profile",
    AccountRole.SPOKE_TEST: "--spoke-test-profile",
}


def list_prefixed_stacks(cfn: Any, prefix: str) -> list[list[str]]:
    """완료 상태 스택 중 이름에 접두사가 포함된 스택 [이름, 상태]"""
    summaries = paginate(cfn, "list_stacks", "StackSummaries", StackStatusFilter=ACTIVE_STACK_STATUSES)
    return [[s["StackName"], s["StackStatus"]] for s in summaries if prefix in s.get("StackName", "")]


def list_prefixed_service_networks(vpc_lattice: Any, prefix: str) -> list[list[str]]:
    """이름에 접두사가 포함된 서비스 네트워크 [이름, ID]"""
    return [[sn.get("name", ""), sn.get("id", "")] for sn in list_service_networks_containing(vpc_lattice, prefix)]


def list_prefixed_endpoints(ec2: Any, prefix: str) -> list[list[str]]:
    """Name 태그에 접두사가 포함된 VPC 엔드포인트 [서비스, 상태]"""
    endpoints = paginate(
        ec2,
        "describe_vpc_endpoints",
        "VpcEndpoints",
        Filters=[{"Name": "tag:Name", "Values": [f"*{prefix}*"]}],
    )
    return [[e.get("ServiceName", ""), e.get("State", "")] for e in endpoints]


def _section(title: str, columns: list[str], fetch: Callable[[], list[list[str]]]) -> bool:
    """조회 섹션 출력

    Returns:
        조회에 성공했으면 True (결과가 비어도 True)
    """
    try:
        rows = fetch()
    except (ClientError, BotoCoreError, VPCEError) as e:
        logger.debug("%s 조회 실패", title, exc_info=True)
        print_sub_warning(f"{title}: 조회 실패 ({e})")
        return False

    if not rows:
        print_sub_info(f"{title}: 없음")
    else:
        print_table(title, columns, rows)
    return True


def report_account(account: AccountSession, prefix: str) -> int:
    """계정 하나의 상태 출력

    Returns:
        조회에 실패한 섹션 수
    """
    failures = 0
    failures += not _section(
        "CloudFormation 스택",
        ["이름", "상태"],
        lambda: list_prefixed_stacks(account.client("cloudformation"), prefix),
    )
    failures += not _section(
        "VPC Lattice 서비스 네트워크",
        ["이름", "ID"],
        lambda: list_prefixed_service_networks(account.client("vpc-lattice"), prefix),
    )
    failures += not _section(
        "VPC 엔드포인트", ["서비스", "상태"], lambda: list_prefixed_endpoints(account.client("ec2"), prefix)
    )
    return failures


def _report_spoke_state(ctx: StageContext, environment: str) -> None:
    """저장된 spoke 출력 요약 (PHZ 연결 실패 포함)"""
    if not ctx.store.spoke_path(environment).exists():
        return
    try:
        outputs = ctx.store.load_spoke(environment)
    except StateError as e:
        print_sub_warning(f"spoke-{environment} 출력을 읽을 수 없습니다: {e}")
        return
    print_info(
        f"spoke-{environment} 출력 저장됨: VPC {outputs.vpc_id}, PHZ 연결 {len(outputs.associated_zones)}개"
    )
    if outputs.failed_zones:
        print_sub_warning(f"PHZ 연결 실패: {', '.join(outputs.failed_zones)}")


def run_status(ctx: StageContext) -> int:
    """배포 상태 출력

    Returns:
        조회에 실패한 섹션 수 (종료 코드에는 사용하지 않음)
    """
    prefix = ctx.prefix
    print_header(f"배포 상태 ({ctx.region}, {prefix})")

    failures = 0
    for role in AccountRole:
        console.print(f"[bold]{_ROLE_LABELS[role]}[/bold]")
        if not ctx.has_account(role):
            print_sub_info(f"({_PROFILE_OPTIONS[role]} 미지정)")
            continue
        failures += report_account(ctx.account(role), prefix)
        console.print()

    if ctx.store.has_hub():
        print_info(f"허브 출력 저장됨: {ctx.store.hub_path()}")
    else:
        print_info("저장된 허브 출력 없음")
    for environment in SPOKE_ENVIRONMENTS:
        _report_spoke_state(ctx, environment)
    return failures
