"""
stages/lattice.py - VPC Lattice 리소스 헬퍼

서비스 네트워크, 리소스 게이트웨이, 리소스 구성, 서비스 네트워크 연결(리소스/VPC)을
"이름 또는 부모+멤버 ID로 먼저 조회하고 없을 때만 생성"하는 함수들입니다.

필수 리소스의 생성 실패는 ResourceCreationError로 변환하고, 상태 대기는
core.aws.waiter로 처리합니다.
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import ClientError

from core.aws.client import find_by_name, paginate
from core.aws.retry import retry_on_throttle
from core.aws.waiter import ASSOCIATION_FAILURE_STATUSES, CREATE_FAILURE_STATUSES, PollConfig, wait_for_status
from core.exceptions import APICallError, ResourceCreationError

logger = logging.getLogger(__name__)

DEFAULT_POLL = PollConfig()


def service_network_name(prefix: str) -> str:
    return f"{prefix}-service-network"


def resource_gateway_name(prefix: str) -> str:
    return f"{prefix}-resource-gateway"


# =============================================================================
# 서비스 네트워크
# =============================================================================


def ensure_service_network(lattice: Any, name: str) -> tuple[dict[str, str], bool]:
    """서비스 네트워크 조회 또는 생성

    Returns:
        ({"id", "arn"}, 새로 생성했는지 여부)
    """
    existing = find_by_name(paginate(lattice, "list_service_networks", "items"), name)
    if existing:
        logger.info("기존 서비스 네트워크 재사용: %s", existing["id"])
        sn_id = existing["id"]
        arn = existing.get("arn") or lattice.get_service_network(serviceNetworkIdentifier=sn_id)["arn"]
        return {"id": sn_id, "arn": arn}, False

    try:
        created = lattice.create_service_network(name=name, authType="NONE")
    except ClientError as e:
        raise ResourceCreationError(name, e) from e

    arn = created.get("arn") or lattice.get_service_network(serviceNetworkIdentifier=created["id"])["arn"]
    return {"id": created["id"], "arn": arn}, True


# =============================================================================
# 리소스 게이트웨이
# =============================================================================


def ensure_resource_gateway(
    lattice: Any,
    name: str,
    vpc_id: str,
    subnet_ids: list[str],
    security_group_ids: list[str],
    poll: PollConfig = DEFAULT_POLL,
) -> tuple[str, bool]:
    """리소스 게이트웨이 조회 또는 생성 후 ACTIVE 대기"""
    existing = find_by_name(paginate(lattice, "list_resource_gateways", "items"), name)
    if existing:
        gateway_id = existing["id"]
        created = False
        logger.info("기존 리소스 게이트웨이 재사용: %s", gateway_id)
    else:
        try:
            response = lattice.create_resource_gateway(
                name=name,
                vpcIdentifier=vpc_id,
                subnetIds=subnet_ids,
                securityGroupIds=security_group_ids,
            )
        except ClientError as e:
            raise ResourceCreationError(name, e) from e
        gateway_id = response["id"]
        created = True

    wait_for_status(
        lambda: lattice.get_resource_gateway(resourceGatewayIdentifier=gateway_id).get("status"),
        "resource-gateway",
        gateway_id,
        config=poll,
    )
    return gateway_id, created


# =============================================================================
# 리소스 구성
# =============================================================================


def ensure_resource_configuration(
    lattice: Any,
    name: str,
    gateway_id: str,
    domain_name: str,
    port: int,
) -> tuple[str, bool]:
    """리소스 구성 조회 또는 생성 (상태 대기는 wait_resource_configuration)"""
    existing = find_by_name(paginate(lattice, "list_resource_configurations", "items"), name)
    if existing:
        logger.info("기존 리소스 구성 재사용: %s (%s)", name, existing["id"])
        return existing["id"], False

    try:
        response = lattice.create_resource_configuration(
            name=name,
            type="SINGLE",
            resourceGatewayIdentifier=gateway_id,
            portRanges=[str(port)],
            protocol="TCP",
            resourceConfigurationDefinition={
                "dnsResource": {"domainName": domain_name, "ipAddressType": "IPV4"},
            },
        )
    except ClientError as e:
        raise ResourceCreationError(name, e) from e
    return response["id"], True


def wait_resource_configuration(lattice: Any, config_id: str, poll: PollConfig = DEFAULT_POLL) -> str:
    """리소스 구성이 ACTIVE가 될 때까지 대기 (CREATE_FAILED는 치명적)"""
    return wait_for_status(
        lambda: lattice.get_resource_configuration(resourceConfigurationIdentifier=config_id).get("status"),
        "resource-configuration",
        config_id,
        failure=CREATE_FAILURE_STATUSES,
        config=poll,
    )


# =============================================================================
# 서비스 네트워크 리소스 연결
# =============================================================================


def list_resource_associations(lattice: Any, service_network_id: str) -> list[dict[str, Any]]:
    return paginate(
        lattice,
        "list_service_network_resource_associations",
        "items",
        serviceNetworkIdentifier=service_network_id,
    )


def find_resource_association(lattice: Any, service_network_id: str, config_id: str) -> dict[str, Any] | None:
    """리소스 구성 ID로 기존 연결 조회"""
    for item in list_resource_associations(lattice, service_network_id):
        if item.get("resourceConfigurationId") == config_id:
            return item
    return None


def ensure_resource_association(
    lattice: Any,
    service_network_id: str,
    config_id: str,
    label: str,
    create_client: Any | None = None,
) -> tuple[str, bool]:
    """리소스 구성을 서비스 네트워크에 연결 (스로틀링 시 고정 간격 재시도)

    Args:
        lattice: 조회용 vpc-lattice 클라이언트
        service_network_id: 서비스 네트워크 ID
        config_id: 리소스 구성 ID
        label: 로그/예외에 표시할 이름
        create_client: 생성 호출용 클라이언트 (None이면 lattice).
            botocore 재시도가 꺼진 클라이언트를 넘겨야 시도 횟수가 MAX_RETRIES로 제한됨

    Raises:
        RetryExhaustedError: 스로틀링으로 재시도 소진
        ResourceCreationError: 스로틀링이 아닌 생성 실패
    """
    existing = find_resource_association(lattice, service_network_id, config_id)
    if existing:
        logger.info("기존 리소스 연결 재사용: %s (%s)", label, existing["id"])
        return existing["id"], False

    writer = create_client or lattice
    try:
        response = retry_on_throttle(
            lambda: writer.create_service_network_resource_association(
                serviceNetworkIdentifier=service_network_id,
                resourceConfigurationIdentifier=config_id,
            ),
            f"create_service_network_resource_association({label})",
        )
    except ClientError as e:
        raise ResourceCreationError(f"{label} resource association", e) from e
    return response["id"], True


def resolve_dns_names(
    lattice: Any,
    service_network_id: str,
    config_ids: dict[str, str],
    poll: PollConfig = DEFAULT_POLL,
) -> dict[str, str]:
    """리소스 연결에 Lattice DNS 이름이 채워질 때까지 폴링

    Args:
        config_ids: 서비스 이름 -> 리소스 구성 ID

    Returns:
        서비스 이름 -> Lattice DNS 이름
    """
    dns_names: dict[str, str] = {}

    def _collect() -> str:
        associations = list_resource_associations(lattice, service_network_id)
        by_config = {item.get("resourceConfigurationId"): item for item in associations}
        for service, config_id in config_ids.items():
            domain = (by_config.get(config_id, {}).get("dnsEntry") or {}).get("domainName")
            if domain:
                dns_names[service] = domain
        return "READY" if len(dns_names) == len(config_ids) else "PENDING"

    wait_for_status(
        _collect,
        "resource-association-dns",
        service_network_id,
        success=("READY",),
        failure=(),
        config=poll,
    )
    return dns_names


# =============================================================================
# 서비스 네트워크 VPC 연결
# =============================================================================


def find_vpc_association(lattice: Any, service_network: str, vpc_id: str) -> dict[str, Any] | None:
    """서비스 네트워크(ID 또는 ARN)와 VPC로 기존 연결 조회"""
    items = paginate(
        lattice,
        "list_service_network_vpc_associations",
        "items",
        serviceNetworkIdentifier=service_network,
    )
    for item in items:
        if item.get("vpcId") == vpc_id:
            return item
    return None


def ensure_vpc_association(
    lattice: Any,
    service_network: str,
    vpc_id: str,
    poll: PollConfig = DEFAULT_POLL,
) -> tuple[str, bool]:
    """VPC를 서비스 네트워크에 연결하고 ACTIVE 대기

    CREATE_FAILED, DELETE_IN_PROGRESS, DELETE_FAILED는 치명적입니다.

    Raises:
        ResourceCreationError: 연결 생성 실패
        StateTransitionError: 실패 상태 도달
        WaitTimeoutError: 대기 한도 초과
    """
    existing = find_vpc_association(lattice, service_network, vpc_id)
    if existing:
        association_id = existing["id"]
        created = False
        logger.info("기존 VPC 연결 재사용: %s", association_id)
    else:
        try:
            response = lattice.create_service_network_vpc_association(
                serviceNetworkIdentifier=service_network,
                vpcIdentifier=vpc_id,
            )
        except ClientError as e:
            raise ResourceCreationError(f"vpc association {vpc_id}", e) from e
        association_id = response["id"]
        created = True

    wait_for_status(
        lambda: lattice.get_service_network_vpc_association(
            serviceNetworkVpcAssociationIdentifier=association_id
        ).get("status"),
        "service-network-vpc-association",
        association_id,
        failure=ASSOCIATION_FAILURE_STATUSES,
        config=poll,
    )
    return association_id, created


def list_service_networks_containing(lattice: Any, prefix: str) -> list[dict[str, Any]]:
    """이름에 접두사가 포함된 서비스 네트워크 목록 (상태 조회용)"""
    try:
        return [sn for sn in paginate(lattice, "list_service_networks", "items") if prefix in sn.get("name", "")]
    except ClientError as e:
        raise APICallError.from_client_error("vpc-lattice", "list_service_networks", e) from e
