"""
stages/spoke.py - spoke(워크로드) 계정 프로비저닝

허브 출력(HubOutputs)을 입력으로 받아 spoke 계정에 워크로드 VPC를 배포하고,
공유받은 서비스 네트워크에 VPC를 연결한 뒤 허브의 PHZ에 VPC를 교차 계정으로
연결합니다. spoke VPC는 모두 같은 CIDR(10.0.0.0/16)을 사용하며 로컬
인터페이스 엔드포인트가 없습니다.
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import ClientError

from cli.ui import (
    console,
    print_header,
    print_key_values,
    print_step_header,
    print_sub_info,
    print_sub_task_done,
    print_sub_warning,
    print_success,
)
from core.aws.client import paginate
from core.exceptions import ConfigError, PreconditionError, get_error_code
from core.state import HubOutputs, SpokeOutputs
from stages import dns, lattice
from stages.context import SPOKE_ENVIRONMENTS, StageContext
from stages.hub import share_name
from stages.services import ENDPOINT_SERVICES
from stages.stacks import SPOKE_TEMPLATE, deploy_stack, spoke_stack_name

logger = logging.getLogger(__name__)


def accept_share_invitation(ram: Any, name: str) -> bool:
    """대기 중인 RAM 공유 초대 수락 (best effort)

    같은 Organization 안의 공유는 초대 없이 바로 적용되므로 초대가 없어도 정상입니다.

    Returns:
        초대를 수락했으면 True
    """
    try:
        invitations = paginate(ram, "get_resource_share_invitations", "resourceShareInvitations")
    except ClientError as e:
        logger.warning("RAM 공유 초대 조회 실패: %s", get_error_code(e))
        return False

    for invitation in invitations:
        if invitation.get("resourceShareName") == name and invitation.get("status") == "PENDING":
            try:
                ram.accept_resource_share_invitation(
                    resourceShareInvitationArn=invitation["resourceShareInvitationArn"]
                )
            except ClientError as e:
                logger.warning("RAM 공유 초대 수락 실패: %s", get_error_code(e))
                return False
            return True
    return False


def run_spoke(ctx: StageContext, environment: str, hub_outputs: HubOutputs | None = None) -> SpokeOutputs:
    """spoke 계정 프로비저닝

    Args:
        ctx: 단계 컨텍스트 (spoke, 허브 세션 필요)
        environment: spoke 환경 (dev/test)
        hub_outputs: 허브 출력. None이면 저장된 hub.json을 읽습니다.

    Returns:
        SpokeOutputs (저장도 함께 수행)

    Raises:
        ConfigError: 알 수 없는 환경
        PreconditionError: 프로파일 없음, 허브 출력에 PHZ ID 누락
        StateError: 허브 출력이 없거나 읽을 수 없음
        ResourceCreationError, StateTransitionError, WaitTimeoutError
    """
    if environment not in SPOKE_ENVIRONMENTS:
        raise ConfigError("environment", f"알 수 없는 spoke 환경입니다: {environment}")

    settings = ctx.settings
    settings.require(f"spoke_{environment}_profile", "hub_profile")
    if hub_outputs is None:
        hub_outputs = ctx.store.load_hub()
    missing_zones = [s.name for s in ENDPOINT_SERVICES if not hub_outputs.hosted_zones.get(s.name)]
    if missing_zones:
        raise PreconditionError(
            "hub_outputs.hosted_zones",
            f"허브 출력에 PHZ ID가 없습니다 (허브 단계를 다시 실행하세요): {', '.join(missing_zones)}",
        )

    spoke = ctx.spoke(environment)
    hub = ctx.hub
    prefix, region = settings.prefix, settings.region

    cfn = spoke.client("cloudformation")
    vpc_lattice = spoke.client("vpc-lattice")
    spoke_route53 = spoke.client("route53")
    hub_route53 = hub.client("route53")

    print_header(f"spoke-{environment} 계정 설정: {spoke.account_id} ({region}, {prefix})")
    print_sub_info(f"서비스 네트워크: {hub_outputs.service_network_id}")

    # 1. RAM 공유 초대
    print_step_header(1, "RAM 공유 초대 확인 중...")
    if accept_share_invitation(spoke.client("ram"), share_name(prefix)):
        print_sub_task_done("RAM 공유 초대 수락")
    else:
        print_sub_info("대기 중인 초대 없음")

    # 2. 워크로드 VPC
    stack_name = spoke_stack_name(prefix, environment)
    print_step_header(2, "워크로드 VPC 배포 중...")
    outputs, created = deploy_stack(
        cfn,
        stack_name,
        SPOKE_TEMPLATE,
        {"StackPrefix": prefix, "Environment": environment},
        capabilities=["CAPABILITY_NAMED_IAM"],
    )
    vpc_id = outputs.get("VpcId")
    if not vpc_id:
        raise PreconditionError(f"{stack_name}:VpcId", "스택 출력이 없습니다")
    print_sub_task_done(f"{'생성' if created else '재사용'}: {stack_name} (VPC {vpc_id})")

    # 3. 서비스 네트워크 VPC 연결 (공유받은 네트워크는 ARN으로 지정)
    print_step_header(3, "서비스 네트워크 VPC 연결 생성 중...")
    association_id, _ = lattice.ensure_vpc_association(
        vpc_lattice, hub_outputs.service_network_arn, vpc_id, poll=ctx.poll
    )
    print_sub_task_done(f"VPC 연결 ACTIVE: {association_id}")

    # 4. 허브 PHZ 교차 계정 연결
    print_step_header(4, "허브 프라이빗 호스팅 영역에 VPC 연결 중...")
    associated: list[str] = []
    failed: list[str] = []
    for service in ENDPOINT_SERVICES:
        zone_id = hub_outputs.hosted_zones[service.name]
        result = dns.associate_spoke_vpc(hub_route53, spoke_route53, zone_id, vpc_id, region)
        if result == dns.AssociationResult.FAILED:
            failed.append(zone_id)
            print_sub_warning(f"{service.label} PHZ 연결 실패: {zone_id}")
        else:
            associated.append(zone_id)
            suffix = " (이미 연결됨)" if result == dns.AssociationResult.ALREADY_ASSOCIATED else ""
            print_sub_task_done(f"{service.label} PHZ 연결: {zone_id}{suffix}")

    # 5. 저장
    result_outputs = SpokeOutputs(
        environment=environment,
        account_id=spoke.account_id,
        region=region,
        vpc_id=vpc_id,
        subnet_id=outputs.get("PrivateSubnetId"),
        instance_id=outputs.get("TestInstanceId"),
        vpc_association_id=association_id,
        associated_zones=associated,
        failed_zones=failed,
    )
    ctx.store.save_spoke(result_outputs)

    print_key_values(
        f"spoke-{environment} 계정 설정 완료",
        [
            ("워크로드 VPC", f"{vpc_id} (10.0.0.0/16)"),
            ("프라이빗 서브넷", result_outputs.subnet_id or "-"),
            ("테스트 인스턴스", result_outputs.instance_id or "-"),
            ("VPC 연결", association_id),
            ("PHZ 연결", f"{len(associated)}개 성공, {len(failed)}개 실패"),
        ],
    )
    _print_testing_instructions(result_outputs, spoke.profile)
    print_success(f"spoke-{environment} 계정 설정이 완료되었습니다")
    return result_outputs


def _print_testing_instructions(outputs: SpokeOutputs, profile: str) -> None:
    console.print("[bold]테스트 방법[/bold]")
    if outputs.instance_id:
        console.print(
            f"  aws ssm start-session --target {outputs.instance_id} --profile {profile} --region {outputs.region}"
        )
    console.print("  인스턴스에서 DNS 확인:")
    for service in ENDPOINT_SERVICES:
        console.print(f"    nslookup {service.phz_name(outputs.region)}")
