"""
stages/dns.py - Route 53 프라이빗 호스팅 영역(PHZ) 헬퍼

서비스 DNS 이름(예: ssm.us-east-2.amazonaws.com)을 Lattice DNS 이름으로
재정의하는 PHZ를 허브 계정에 만들고, spoke VPC를 교차 계정으로 연결합니다.

교차 계정 연결 순서:
    1. 허브: create_vpc_association_authorization
    2. spoke: associate_vpc_with_hosted_zone ("already associated"는 성공)
    3. 허브: delete_vpc_association_authorization (2단계 결과와 무관하게 항상 시도)
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any

from botocore.exceptions import ClientError

from core.aws.client import paginate
from core.exceptions import APICallError, get_error_code, is_already_associated

logger = logging.getLogger(__name__)

CNAME_TTL = 60
ZONE_COMMENT = "DNS override for centralized VPC endpoint"

# 삭제하면 안 되는 기본 레코드
PROTECTED_RECORD_TYPES = frozenset({"NS", "SOA"})


class AssociationResult(Enum):
    """spoke VPC의 PHZ 연결 결과"""

    ASSOCIATED = "associated"
    ALREADY_ASSOCIATED = "already_associated"
    FAILED = "failed"


def normalize_zone_id(zone_id: str) -> str:
    """'/hostedzone/Z123' -> 'Z123'"""
    return zone_id.rsplit("/", 1)[-1]


def find_hosted_zone(route53: Any, zone_name: str) -> str | None:
    """이름이 일치하는 프라이빗 호스팅 영역 ID"""
    fqdn = zone_name.rstrip(".") + "."
    for zone in paginate(route53, "list_hosted_zones", "HostedZones"):
        if zone.get("Name") == fqdn and zone.get("Config", {}).get("PrivateZone", False):
            return normalize_zone_id(zone["Id"])
    return None


def ensure_hosted_zone(
    route53: Any,
    zone_name: str,
    vpc_id: str,
    region: str,
    caller_prefix: str,
) -> tuple[str, bool]:
    """PHZ 조회 또는 생성 (생성 시 허브 VPC에 연결)

    Args:
        caller_prefix: CallerReference 접두사 (<prefix>-<svc>)

    Returns:
        (호스팅 영역 ID, 새로 생성했는지 여부)
    """
    existing = find_hosted_zone(route53, zone_name)
    if existing:
        logger.info("기존 PHZ 재사용: %s (%s)", zone_name, existing)
        return existing, False

    try:
        response = route53.create_hosted_zone(
            Name=zone_name,
            VPC={"VPCRegion": region, "VPCId": vpc_id},
            CallerReference=f"{caller_prefix}-{int(time.time())}",
            HostedZoneConfig={"Comment": ZONE_COMMENT, "PrivateZone": True},
        )
    except ClientError as e:
        raise APICallError.from_client_error("route53", "create_hosted_zone", e) from e
    return normalize_zone_id(response["HostedZone"]["Id"]), True


def upsert_cname(route53: Any, zone_id: str, record_name: str, target: str, ttl: int = CNAME_TTL) -> None:
    """CNAME 레코드 UPSERT"""
    try:
        route53.change_resource_record_sets(
            HostedZoneId=zone_id,
            ChangeBatch={
                "Changes": [
                    {
                        "Action": "UPSERT",
                        "ResourceRecordSet": {
                            "Name": record_name,
                            "Type": "CNAME",
                            "TTL": ttl,
                            "ResourceRecords": [{"Value": target}],
                        },
                    }
                ]
            },
        )
    except ClientError as e:
        raise APICallError.from_client_error("route53", "change_resource_record_sets", e) from e


def associate_spoke_vpc(
    hub_route53: Any,
    spoke_route53: Any,
    zone_id: str,
    vpc_id: str,
    region: str,
) -> AssociationResult:
    """허브 PHZ에 spoke VPC를 교차 계정으로 연결

    인증 생성/삭제 실패와 "already associated" 이외의 연결 실패는 경고로만 남깁니다.
    """
    vpc = {"VPCRegion": region, "VPCId": vpc_id}

    try:
        hub_route53.create_vpc_association_authorization(HostedZoneId=zone_id, VPC=vpc)
    except ClientError as e:
        logger.warning("PHZ %s 연결 인증 생성 실패: %s", zone_id, get_error_code(e))

    try:
        try:
            spoke_route53.associate_vpc_with_hosted_zone(HostedZoneId=zone_id, VPC=vpc)
        except ClientError as e:
            if is_already_associated(e):
                logger.info("VPC %s는 이미 PHZ %s에 연결됨", vpc_id, zone_id)
                return AssociationResult.ALREADY_ASSOCIATED
            logger.warning("PHZ %s 연결 실패: %s", zone_id, e)
            return AssociationResult.FAILED
        return AssociationResult.ASSOCIATED
    finally:
        try:
            hub_route53.delete_vpc_association_authorization(HostedZoneId=zone_id, VPC=vpc)
        except ClientError as e:
            logger.debug("PHZ %s 연결 인증 삭제 실패: %s", zone_id, get_error_code(e))


# =============================================================================
# 정리용
# =============================================================================


def delete_override_records(route53: Any, zone_id: str) -> int:
    """NS/SOA를 제외한 레코드 삭제

    Returns:
        삭제한 레코드 수
    """
    records = paginate(route53, "list_resource_record_sets", "ResourceRecordSets", HostedZoneId=zone_id)
    changes = [
        {"Action": "DELETE", "ResourceRecordSet": record}
        for record in records
        if record.get("Type") not in PROTECTED_RECORD_TYPES
    ]
    if changes:
        route53.change_resource_record_sets(HostedZoneId=zone_id, ChangeBatch={"Changes": changes})
    return len(changes)


def zone_vpcs(route53: Any, zone_id: str) -> list[dict[str, str]]:
    """PHZ에 연결된 VPC 목록 (첫 항목이 생성 시 연결된 VPC)"""
    return route53.get_hosted_zone(Id=zone_id).get("VPCs", [])


def disassociate_vpc(route53: Any, zone_id: str, vpc: dict[str, str]) -> None:
    route53.disassociate_vpc_from_hosted_zone(
        HostedZoneId=zone_id,
        VPC={"VPCRegion": vpc["VPCRegion"], "VPCId": vpc["VPCId"]},
    )


def delete_hosted_zone(route53: Any, zone_id: str) -> None:
    route53.delete_hosted_zone(Id=zone_id)
