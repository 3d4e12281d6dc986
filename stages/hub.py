"""
stages/hub.py - 허브(엔드포인트) 계정 프로비저닝

허브 계정에 엔드포인트 VPC를 배포하고, 인터페이스 엔드포인트를 VPC Lattice
리소스 구성으로 노출한 뒤 서비스 네트워크를 spoke 계정에 RAM으로 공유합니다.
마지막으로 서비스 DNS 이름을 Lattice DNS 이름으로 재정의하는 PHZ를 만듭니다.

모든 생성 호출 전에 기존 리소스를 조회하므로 재실행해도 안전합니다.

단계:
    1. 엔드포인트 VPC 스택 배포/재사용
    2. 인터페이스 엔드포인트 DNS 이름 조회
    3. 서비스 네트워크
    4. 리소스 게이트웨이 (ACTIVE 대기)
    5. 리소스 구성 (전부 ACTIVE가 된 뒤에야 6단계 진행)
    6. 서비스 네트워크 리소스 연결 (스로틀링 재시도)
    7. RAM 리소스 공유
    8. 허브 VPC 연결 (실패는 경고)
    9. Lattice DNS 이름 조회
    10. PHZ + CNAME (실패는 경고)
    11. 출력 저장
"""

from __future__ import annotations

import logging
import time
from typing import Any

from botocore.exceptions import ClientError

from cli.ui import (
    print_header,
    print_key_values,
    print_step_header,
    print_sub_info,
    print_sub_task_done,
    print_sub_warning,
    print_success,
)
from core.aws.client import paginate
from core.config import ASSOCIATION_SPACING
from core.exceptions import APICallError, PreconditionError, ResourceCreationError, VPCEError
from core.state import HubOutputs
from stages import dns, lattice
from stages.context import StageContext
from stages.services import ENDPOINT_SERVICES
from stages.stacks import HUB_TEMPLATE, deploy_stack, hub_stack_name

logger = logging.getLogger(__name__)

# RAM 공유 중 재사용할 수 없는 상태
_INACTIVE_SHARE_STATUSES = frozenset({"DELETING", "DELETED", "FAILED"})


def share_name(prefix: str) -> str:
    return f"{prefix}-lattice-share"


def _require_output(outputs: dict[str, str], key: str, stack_name: str) -> str:
    value = outputs.get(key)
    if not value:
        raise PreconditionError(f"{stack_name}:{key}", "스택 출력이 없습니다")
    return value


def resolve_endpoint_dns(ec2: Any, endpoint_id: str) -> str:
    """인터페이스 엔드포인트의 첫 번째 DNS 이름

    Raises:
        PreconditionError: 엔드포인트 또는 DNS 항목이 없는 경우
    """
    try:
        endpoints = ec2.describe_vpc_endpoints(VpcEndpointIds=[endpoint_id]).get("VpcEndpoints", [])
    except ClientError as e:
        raise APICallError.from_client_error("ec2", "describe_vpc_endpoints", e) from e

    entries = endpoints[0].get("DnsEntries", []) if endpoints else []
    if not entries or not entries[0].get("DnsName"):
        raise PreconditionError(endpoint_id, "VPC 엔드포인트 DNS 항목이 없습니다")
    dns_name: str = entries[0]["DnsName"]
    return dns_name


def ensure_resource_share(ram: Any, name: str, service_network_arn: str, principals: list[str]) -> tuple[str, bool]:
    """RAM 리소스 공유 조회 또는 생성

    삭제(중)/실패 상태의 공유는 재사용하지 않습니다.
    """
    shares = paginate(ram, "get_resource_shares", "resourceShares", resourceOwner="SELF", name=name)
    for share in shares:
        if share.get("name") == name and share.get("status") not in _INACTIVE_SHARE_STATUSES:
            logger.info("기존 RAM 공유 재사용: %s", share["resourceShareArn"])
            return share["resourceShareArn"], False

    try:
        response = ram.create_resource_share(
            name=name,
            resourceArns=[service_network_arn],
            principals=principals,
            allowExternalPrincipals=False,
        )
    except ClientError as e:
        raise ResourceCreationError(name, e) from e
    return response["resourceShare"]["resourceShareArn"], True


def run_hub(ctx: StageContext) -> HubOutputs:
    """허브 계정 프로비저닝

    Args:
        ctx: 단계 컨텍스트 (허브 세션, spoke 계정 ID 필요)

    Returns:
        HubOutputs (저장도 함께 수행)

    Raises:
        PreconditionError: 허브 프로파일 또는 spoke 계정 ID가 없는 경우
        ResourceCreationError, RetryExhaustedError, StateTransitionError, WaitTimeoutError
    """
    settings = ctx.settings
    settings.require("hub_profile", "spoke_dev_account", "spoke_test_account")
    hub = ctx.hub
    prefix, region = settings.prefix, settings.region

    cfn = hub.client("cloudformation")
    ec2 = hub.client("ec2")
    vpc_lattice = hub.client("vpc-lattice")
    # 리소스 연결 생성은 retry_on_throttle만 재시도 (botocore 재시도 끔)
    association_lattice = hub.client("vpc-lattice", total_max_attempts=1)
    ram = hub.client("ram")
    route53 = hub.client("route53")

    print_header(f"허브 계정 설정: {hub.account_id} ({region}, {prefix})")
    print_sub_info(f"공유 대상 spoke 계정: {', '.join(settings.spoke_accounts)}")

    # 1. 엔드포인트 VPC
    stack_name = hub_stack_name(prefix)
    print_step_header(1, "엔드포인트 VPC 배포 중...")
    outputs, created = deploy_stack(cfn, stack_name, HUB_TEMPLATE, {"StackPrefix": prefix})
    vpc_id = _require_output(outputs, "VpcId", stack_name)
    subnet_a = _require_output(outputs, "PrivateSubnetAId", stack_name)
    endpoint_sg = _require_output(outputs, "EndpointSecurityGroupId", stack_name)
    print_sub_task_done(f"{'생성' if created else '재사용'}: {stack_name} (VPC {vpc_id})")

    # 2. 엔드포인트 DNS
    print_step_header(2, "VPC 엔드포인트 DNS 이름 조회 중...")
    endpoint_dns: dict[str, str] = {}
    for service in ENDPOINT_SERVICES:
        endpoint_id = _require_output(outputs, service.output_key, stack_name)
        endpoint_dns[service.name] = resolve_endpoint_dns(ec2, endpoint_id)
        print_sub_info(f"{service.label}: {endpoint_dns[service.name]}")

    # 3. 서비스 네트워크
    print_step_header(3, "VPC Lattice 서비스 네트워크 생성 중...")
    service_network, _ = lattice.ensure_service_network(vpc_lattice, lattice.service_network_name(prefix))
    sn_id, sn_arn = service_network["id"], service_network["arn"]
    print_sub_task_done(f"서비스 네트워크: {sn_id}")

    # 4. 리소스 게이트웨이
    print_step_header(4, "리소스 게이트웨이 생성 중...")
    gateway_id, _ = lattice.ensure_resource_gateway(
        vpc_lattice,
        lattice.resource_gateway_name(prefix),
        vpc_id,
        [subnet_a],
        [endpoint_sg],
        poll=ctx.poll,
    )
    print_sub_task_done(f"리소스 게이트웨이 ACTIVE: {gateway_id}")

    # 5. 리소스 구성
    print_step_header(5, "리소스 구성 생성 중...")
    config_ids: dict[str, str] = {}
    for service in ENDPOINT_SERVICES:
        config_ids[service.name], _ = lattice.ensure_resource_configuration(
            vpc_lattice,
            service.resource_name(prefix),
            gateway_id,
            endpoint_dns[service.name],
            service.port,
        )
    for service in ENDPOINT_SERVICES:
        lattice.wait_resource_configuration(vpc_lattice, config_ids[service.name], poll=ctx.poll)
        print_sub_task_done(f"{service.label} 리소스 구성 ACTIVE: {config_ids[service.name]}")

    # 6. 리소스 연결
    print_step_header(6, "리소스 구성을 서비스 네트워크에 연결 중...")
    association_ids: dict[str, str] = {}
    previous_created = False
    for service in ENDPOINT_SERVICES:
        if previous_created:
            time.sleep(ASSOCIATION_SPACING)
        association_ids[service.name], previous_created = lattice.ensure_resource_association(
            vpc_lattice, sn_id, config_ids[service.name], service.name, create_client=association_lattice
        )
        print_sub_task_done(f"{service.label} 연결: {association_ids[service.name]}")

    # 7. RAM 공유
    print_step_header(7, "RAM으로 서비스 네트워크 공유 중...")
    share_arn, _ = ensure_resource_share(ram, share_name(prefix), sn_arn, settings.spoke_accounts)
    print_sub_task_done(f"RAM 공유: {share_arn}")

    # 8. 허브 VPC 연결 (DNS 해석용, 실패해도 계속)
    print_step_header(8, "허브 VPC를 서비스 네트워크에 연결 중...")
    hub_association_id: str | None = None
    try:
        hub_association_id, _ = lattice.ensure_vpc_association(vpc_lattice, sn_id, vpc_id, poll=ctx.poll)
        print_sub_task_done(f"허브 VPC 연결 ACTIVE: {hub_association_id}")
    except (VPCEError, ClientError) as e:
        logger.debug("허브 VPC 연결 실패", exc_info=True)
        print_sub_warning(f"허브 VPC 연결 실패 (계속 진행): {e}")

    # 9. Lattice DNS
    print_step_header(9, "Lattice 리소스 DNS 이름 조회 중...")
    dns_names = lattice.resolve_dns_names(vpc_lattice, sn_id, config_ids, poll=ctx.poll)
    for service in ENDPOINT_SERVICES:
        print_sub_info(f"{service.label}: {dns_names[service.name]}")

    # 10. PHZ
    print_step_header(10, "DNS 재정의용 Route 53 프라이빗 호스팅 영역 생성 중...")
    hosted_zones: dict[str, str] = {}
    for service in ENDPOINT_SERVICES:
        zone_name = service.phz_name(region)
        try:
            zone_id, _ = dns.ensure_hosted_zone(route53, zone_name, vpc_id, region, f"{prefix}-{service.name}")
        except (APICallError, ClientError) as e:
            print_sub_warning(f"{zone_name} PHZ 생성 실패: {e}")
            continue
        hosted_zones[service.name] = zone_id

        try:
            dns.upsert_cname(route53, zone_id, zone_name, dns_names[service.name])
        except APICallError as e:
            print_sub_warning(f"{zone_name} CNAME 레코드 생성 실패, 수동 설정이 필요할 수 있습니다: {e}")
            continue
        print_sub_task_done(f"{zone_name} ({zone_id}) -> {dns_names[service.name]}")

    # 11. 저장
    result = HubOutputs(
        account_id=hub.account_id,
        region=region,
        prefix=prefix,
        vpc_id=vpc_id,
        service_network_id=sn_id,
        service_network_arn=sn_arn,
        resource_gateway_id=gateway_id,
        resource_share_arn=share_arn,
        resource_configurations=config_ids,
        resource_associations=association_ids,
        dns_names=dns_names,
        hosted_zones=hosted_zones,
        hub_vpc_association_id=hub_association_id,
    )
    path = ctx.store.save_hub(result)
    logger.debug("허브 출력 저장: %s", path)

    print_key_values(
        "허브 계정 설정 완료",
        [
            ("엔드포인트 VPC", vpc_id),
            ("서비스 네트워크", sn_id),
            ("리소스 게이트웨이", gateway_id),
            ("RAM 공유", share_arn),
            *[(service.phz_name(region), hosted_zones.get(service.name, "-")) for service in ENDPOINT_SERVICES],
        ],
    )
    print_success("허브 계정 설정이 완료되었습니다")
    return result
