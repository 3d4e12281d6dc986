"""
stages/teardown.py - 전체 리소스 정리

프로비저닝의 역순으로 리소스를 삭제합니다.

    1. spoke-test  2. spoke-dev
       서비스 네트워크 엔드포인트 -> VPC 연결 -> 보안 그룹 -> 워크로드 VPC 스택
    3. 허브 DNS
       PHZ별 레코드(NS/SOA 제외) -> 생성 VPC 외 연결 해제 -> PHZ
    4. 허브 Lattice
       RAM 공유 -> VPC 연결 -> 리소스 연결 -> 리소스 구성 -> 리소스 게이트웨이 -> 서비스 네트워크
    5. 허브 엔드포인트 VPC 스택
    6. 로컬 상태 파일

개별 삭제 실패는 TeardownReport에 기록하고 다음 단계로 계속 진행합니다.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cli.ui import (
    print_header,
    print_step_header,
    print_sub_error,
    print_sub_task,
    print_sub_task_done,
    print_sub_warning,
    print_success,
    print_table,
)
from core.aws.client import find_by_name, paginate
from core.config import TEARDOWN_GATEWAY_SETTLE_DELAY, TEARDOWN_SETTLE_DELAY
from core.exceptions import VPCEError
from core.report import OutcomeStatus, TeardownReport
from stages import dns
from stages.context import StageContext
from stages.hub import share_name
from stages.lattice import service_network_name
from stages.services import ENDPOINT_SERVICES
from stages.stacks import delete_stack, get_stack, hub_stack_name, spoke_stack_name, stack_outputs

logger = logging.getLogger(__name__)

# 정리 순서 (spoke는 test가 먼저)
TEARDOWN_SPOKES = ("test", "dev")

_HANDLED_ERRORS = (ClientError, BotoCoreError, VPCEError)


def _collect(report: TeardownReport, phase: str, resource_type: str, fetch: Callable[[], list[Any]]) -> list[Any]:
    """삭제 대상 조회 (실패는 보고서에 기록하고 빈 목록 반환)"""
    try:
        return fetch()
    except _HANDLED_ERRORS as e:
        report.record_error(phase, resource_type, "*", e)
        return []


def _delete_stack(report: TeardownReport, phase: str, cfn: Any, stack_name: str) -> None:
    print_sub_task(f"스택 삭제 대기: {stack_name}")
    try:
        existed = delete_stack(cfn, stack_name)
    except _HANDLED_ERRORS as e:
        report.record_error(phase, "cloudformation-stack", stack_name, e)
        return
    status = OutcomeStatus.SUCCEEDED if existed else OutcomeStatus.NOT_FOUND
    report.record(phase, "cloudformation-stack", stack_name, status)


# =============================================================================
# spoke
# =============================================================================


def teardown_spoke(ctx: StageContext, environment: str, report: TeardownReport) -> None:
    """spoke 계정 정리"""
    phase = f"spoke-{environment}"
    account = ctx.spoke(environment)
    cfn = account.client("cloudformation")
    ec2 = account.client("ec2")
    vpc_lattice = account.client("vpc-lattice")
    stack_name = spoke_stack_name(ctx.prefix, environment)

    vpc_id: str | None = None
    try:
        stack = get_stack(cfn, stack_name)
    except _HANDLED_ERRORS as e:
        report.record_error(phase, "cloudformation-stack", stack_name, e)
        stack = None
    if stack:
        vpc_id = stack_outputs(stack).get("VpcId")

    if vpc_id:
        # 서비스 네트워크 타입 VPC 엔드포인트
        endpoints = _collect(
            report,
            phase,
            "service-network-endpoint",
            lambda: paginate(
                ec2,
                "describe_vpc_endpoints",
                "VpcEndpoints",
                Filters=[
                    {"Name": "vpc-endpoint-type", "Values": ["ServiceNetwork"]},
                    {"Name": "vpc-id", "Values": [vpc_id]},
                ],
            ),
        )
        for endpoint in endpoints:
            endpoint_id = endpoint["VpcEndpointId"]
            report.attempt(
                phase,
                "service-network-endpoint",
                endpoint_id,
                lambda endpoint_id=endpoint_id: ec2.delete_vpc_endpoints(VpcEndpointIds=[endpoint_id]),
            )
        time.sleep(TEARDOWN_SETTLE_DELAY)

        # 서비스 네트워크 VPC 연결
        associations = _collect(
            report,
            phase,
            "service-network-vpc-association",
            lambda: paginate(vpc_lattice, "list_service_network_vpc_associations", "items", vpcIdentifier=vpc_id),
        )
        for association in associations:
            association_id = association["id"]
            report.attempt(
                phase,
                "service-network-vpc-association",
                association_id,
                lambda association_id=association_id: vpc_lattice.delete_service_network_vpc_association(
                    serviceNetworkVpcAssociationIdentifier=association_id
                ),
            )
        time.sleep(TEARDOWN_SETTLE_DELAY)
    else:
        print_sub_task(f"{stack_name} 스택이 없어 VPC 단위 정리를 건너뜁니다")

    # 보안 그룹
    groups = _collect(
        report,
        phase,
        "security-group",
        lambda: paginate(
            ec2,
            "describe_security_groups",
            "SecurityGroups",
            Filters=[{"Name": "group-name", "Values": [f"{ctx.prefix}-*-sg-{environment}"]}],
        ),
    )
    for group in groups:
        group_id = group["GroupId"]
        report.attempt(
            phase,
            "security-group",
            group_id,
            lambda group_id=group_id: ec2.delete_security_group(GroupId=group_id),
        )

    _delete_stack(report, phase, cfn, stack_name)
    print_sub_task_done(f"{phase} 정리 완료")


# =============================================================================
# 허브 DNS
# =============================================================================


def teardown_hub_dns(ctx: StageContext, report: TeardownReport) -> None:
    """허브 PHZ 정리 (서비스 4개 모두)"""
    phase = "hub-dns"
    route53 = ctx.hub.client("route53")

    for service in ENDPOINT_SERVICES:
        zone_name = service.phz_name(ctx.region)
        try:
            zone_id = dns.find_hosted_zone(route53, zone_name)
        except _HANDLED_ERRORS as e:
            report.record_error(phase, "hosted-zone", zone_name, e)
            continue
        if not zone_id:
            report.record(phase, "hosted-zone", zone_name, OutcomeStatus.NOT_FOUND)
            continue

        report.attempt(
            phase, "record-sets", zone_id, lambda zone_id=zone_id: dns.delete_override_records(route53, zone_id)
        )

        vpcs = _collect(report, phase, "hosted-zone-vpc", lambda zone_id=zone_id: dns.zone_vpcs(route53, zone_id))
        # 첫 번째(생성 시 연결된) VPC는 남겨야 영역을 삭제할 수 있음
        for vpc in vpcs[1:]:
            report.attempt(
                phase,
                "hosted-zone-vpc",
                f"{zone_id}/{vpc['VPCId']}",
                lambda zone_id=zone_id, vpc=vpc: dns.disassociate_vpc(route53, zone_id, vpc),
            )

        outcome = report.attempt(
            phase, "hosted-zone", zone_id, lambda zone_id=zone_id: dns.delete_hosted_zone(route53, zone_id)
        )
        if outcome.status == OutcomeStatus.FAILED:
            print_sub_warning(f"{zone_name} PHZ를 삭제하지 못했습니다")
        else:
            print_sub_task_done(f"{zone_name} PHZ 삭제")


# =============================================================================
# 허브 Lattice
# =============================================================================


def teardown_hub_lattice(ctx: StageContext, report: TeardownReport) -> None:
    """허브 Lattice 리소스 정리 (의존 순서대로)"""
    phase = "hub-lattice"
    hub = ctx.hub
    vpc_lattice = hub.client("vpc-lattice")
    ram = hub.client("ram")
    prefix = ctx.prefix

    # RAM 공유
    name = share_name(prefix)
    shares = _collect(
        report,
        phase,
        "resource-share",
        lambda: paginate(ram, "get_resource_shares", "resourceShares", resourceOwner="SELF", name=name),
    )
    live_shares = [s for s in shares if s.get("status") not in ("DELETING", "DELETED")]
    if not live_shares:
        report.record(phase, "resource-share", name, OutcomeStatus.NOT_FOUND)
    for share in live_shares:
        share_arn = share["resourceShareArn"]
        report.attempt(
            phase,
            "resource-share",
            share_arn,
            lambda share_arn=share_arn: ram.delete_resource_share(resourceShareArn=share_arn),
        )

    networks = _collect(
        report, phase, "service-network", lambda: paginate(vpc_lattice, "list_service_networks", "items")
    )
    service_network = find_by_name(networks, service_network_name(prefix))
    sn_id = service_network["id"] if service_network else None

    if sn_id:
        # VPC 연결
        vpc_associations = _collect(
            report,
            phase,
            "service-network-vpc-association",
            lambda: paginate(
                vpc_lattice, "list_service_network_vpc_associations", "items", serviceNetworkIdentifier=sn_id
            ),
        )
        for association in vpc_associations:
            association_id = association["id"]
            report.attempt(
                phase,
                "service-network-vpc-association",
                association_id,
                lambda association_id=association_id: vpc_lattice.delete_service_network_vpc_association(
                    serviceNetworkVpcAssociationIdentifier=association_id
                ),
            )
        time.sleep(TEARDOWN_SETTLE_DELAY)

        # 리소스 연결
        resource_associations = _collect(
            report,
            phase,
            "service-network-resource-association",
            lambda: paginate(
                vpc_lattice, "list_service_network_resource_associations", "items", serviceNetworkIdentifier=sn_id
            ),
        )
        for association in resource_associations:
            association_id = association["id"]
            report.attempt(
                phase,
                "service-network-resource-association",
                association_id,
                lambda association_id=association_id: vpc_lattice.delete_service_network_resource_association(
                    serviceNetworkResourceAssociationIdentifier=association_id
                ),
            )
        time.sleep(TEARDOWN_SETTLE_DELAY)

    # 리소스 구성
    configurations = _collect(
        report, phase, "resource-configuration", lambda: paginate(vpc_lattice, "list_resource_configurations", "items")
    )
    for configuration in configurations:
        if prefix not in configuration.get("name", ""):
            continue
        config_id = configuration["id"]
        report.attempt(
            phase,
            "resource-configuration",
            config_id,
            lambda config_id=config_id: vpc_lattice.delete_resource_configuration(
                resourceConfigurationIdentifier=config_id
            ),
        )
    time.sleep(TEARDOWN_SETTLE_DELAY)

    # 리소스 게이트웨이
    gateways = _collect(
        report, phase, "resource-gateway", lambda: paginate(vpc_lattice, "list_resource_gateways", "items")
    )
    for gateway in gateways:
        if prefix not in gateway.get("name", ""):
            continue
        gateway_id = gateway["id"]
        report.attempt(
            phase,
            "resource-gateway",
            gateway_id,
            lambda gateway_id=gateway_id: vpc_lattice.delete_resource_gateway(resourceGatewayIdentifier=gateway_id),
        )
    time.sleep(TEARDOWN_GATEWAY_SETTLE_DELAY)

    # 서비스 네트워크
    if sn_id:
        report.attempt(
            phase,
            "service-network",
            sn_id,
            lambda: vpc_lattice.delete_service_network(serviceNetworkIdentifier=sn_id),
        )
    else:
        report.record(phase, "service-network", service_network_name(prefix), OutcomeStatus.NOT_FOUND)
    print_sub_task_done("VPC Lattice 리소스 정리 완료")


# =============================================================================
# 진입점
# =============================================================================


def run_teardown(ctx: StageContext) -> TeardownReport:
    """전체 정리 (확인 프롬프트는 호출하는 쪽에서 처리)

    Returns:
        TeardownReport. has_failures이면 재실행이 필요합니다.

    Raises:
        PreconditionError: 세 계정 프로파일 중 하나라도 없는 경우
    """
    ctx.settings.require("hub_profile", "spoke_dev_profile", "spoke_test_profile")
    report = TeardownReport()
    print_header(f"리소스 정리 ({ctx.region}, {ctx.prefix})")

    step = 1
    for environment in TEARDOWN_SPOKES:
        print_step_header(step, f"spoke-{environment} 계정 정리 중...")
        teardown_spoke(ctx, environment, report)
        step += 1

    print_step_header(step, "Route 53 프라이빗 호스팅 영역 정리 중...")
    teardown_hub_dns(ctx, report)
    step += 1

    print_step_header(step, "VPC Lattice 리소스 정리 중...")
    teardown_hub_lattice(ctx, report)
    step += 1

    print_step_header(step, "허브 엔드포인트 VPC 스택 정리 중...")
    _delete_stack(report, "hub-network", ctx.hub.client("cloudformation"), hub_stack_name(ctx.prefix))
    step += 1

    print_step_header(step, "로컬 상태 파일 정리 중...")
    try:
        for path in ctx.store.clear():
            report.record("local-state", "state-file", path.name, OutcomeStatus.SUCCEEDED)
    except OSError as e:
        report.record("local-state", "state-file", str(ctx.store.directory), OutcomeStatus.FAILED, message=str(e))

    print_table("정리 결과", ["단계", "성공", "없음", "실패"], report.summary_rows())
    if report.has_failures:
        for outcome in report.failures:
            print_sub_error(str(outcome))
        print_sub_warning(f"{report.get_summary()} - 다시 실행해 남은 리소스를 정리하세요")
    else:
        print_success(f"정리가 완료되었습니다 ({report.get_summary()})")
    return report
