"""
stages/services.py - 중앙화 대상 엔드포인트 서비스 목록

허브 VPC의 인터페이스 엔드포인트 중 Lattice 리소스 구성으로 노출하고
PHZ로 DNS를 재정의하는 서비스들입니다. 순서는 생성/연결 순서입니다.
"""

from __future__ import annotations

from dataclasses import dataclass

ENDPOINT_PORT = 443


@dataclass(frozen=True)
class EndpointService:
    """중앙화 엔드포인트 서비스

    Attributes:
        name: 서비스 이름 (DNS 레이블)
        output_key: 허브 스택의 엔드포인트 ID 출력 키
        label: 표시용 이름
    """

    name: str
    output_key: str
    label: str
    port: int = ENDPOINT_PORT

    def phz_name(self, region: str) -> str:
        """재정의 대상 서비스 DNS 이름 (예: ssm.us-east-2.amazonaws.com)"""
        return f"{self.name}.{region}.amazonaws.com"

    def resource_name(self, prefix: str) -> str:
        """Lattice 리소스 구성 이름"""
        return f"{prefix}-{self.name}-resource"


ENDPOINT_SERVICES: tuple[EndpointService, ...] = (
    EndpointService("ssm", "SSMEndpointId", "SSM"),
    EndpointService("ssmmessages", "SSMMessagesEndpointId", "SSM Messages"),
    EndpointService("ec2messages", "EC2MessagesEndpointId", "EC2 Messages"),
    EndpointService("sts", "STSEndpointId", "STS"),
)

