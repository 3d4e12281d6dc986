"""
core/aws/client.py - boto3 client 생성 및 페이지네이션 헬퍼

Retry(standard 모드) + 타임아웃이 설정된 boto3 client를 생성하고,
list 계열 API를 페이지네이터로 끝까지 읽는 헬퍼를 제공합니다.

주요 구성 요소:
- get_client: retry 설정이 적용된 boto3 client 생성
- paginate: 페이지네이터 결과 키를 평탄화한 리스트 반환

Example:
    from core.aws.client import get_client, paginate

    lattice = get_client(session, "vpc-lattice", region_name="us-east-2")
    networks = paginate(lattice, "list_service_networks", "items")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, cast

if TYPE_CHECKING:
    import boto3

# Retry mode 타입 (botocore TypedDict와 호환)
RetryMode = Literal["legacy", "standard", "adaptive"]

# 기본 retry 설정
DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_MODE: RetryMode = "standard"
DEFAULT_CONNECT_TIMEOUT = 10  # 초
DEFAULT_READ_TIMEOUT = 60  # 초 (CloudFormation/Route 53 변경 호출 고려)


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: int = DEFAULT_READ_TIMEOUT,
    total_max_attempts: int | None = None,
    **kwargs: Any,
) -> Any:
    """Retry가 적용된 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (vpc-lattice, route53, ram 등)
        region_name: 리전 (None이면 세션 기본값)
        max_attempts: botocore 재시도 횟수 (기본: 5, 첫 호출 제외)
        retry_mode: 재시도 모드 ('standard' 또는 'adaptive')
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        total_max_attempts: 첫 호출을 포함한 전체 시도 횟수.
            지정하면 max_attempts 대신 사용 (1이면 botocore 재시도 없음)
        **kwargs: session.client()에 전달할 추가 인자

    Returns:
        boto3 client
    """
    from botocore.config import Config

    if total_max_attempts is not None:
        retries = {"total_max_attempts": total_max_attempts, "mode": retry_mode}
    else:
        retries = {"max_attempts": max_attempts, "mode": retry_mode}

    config = Config(
        retries=retries,  # pyright: ignore[reportArgumentType]
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )

    # 기존 config가 있으면 병합
    if "config" in kwargs:
        existing = kwargs.pop("config")
        config = config.merge(existing)

    # cast to Any to bypass boto3-stubs Literal type requirements
    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=config,
        **kwargs,
    )


def paginate(client: Any, operation: str, result_key: str, **kwargs: Any) -> list[dict[str, Any]]:
    """페이지네이터로 전체 결과 조회

    Args:
        client: boto3 client
        operation: 페이지네이션 가능한 API 이름 (예: "list_resource_gateways")
        result_key: 각 페이지에서 항목 리스트를 담은 키 (예: "items")
        **kwargs: API 파라미터

    Returns:
        모든 페이지의 항목 리스트
    """
    items: list[dict[str, Any]] = []
    for page in client.get_paginator(operation).paginate(**kwargs):
        items.extend(page.get(result_key, []))
    return items


def find_by_name(items: list[dict[str, Any]], name: str, key: str = "name") -> dict[str, Any] | None:
    """이름이 정확히 일치하는 첫 항목"""
    return next((item for item in items if item.get(key) == name), None)
