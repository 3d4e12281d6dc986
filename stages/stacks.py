"""
stages/stacks.py - CloudFormation 스택 헬퍼

허브 엔드포인트 VPC와 spoke 워크로드 VPC는 패키지에 포함된 정적 템플릿으로
배포합니다. 이미 완료 상태의 스택이 있으면 재사용하고, 없으면 생성 후
boto3 waiter로 완료를 기다립니다.
"""

from __future__ import annotations

import logging
from importlib.resources import files
from typing import Any

from botocore.exceptions import ClientError, WaiterError

from core.config import POLL_TIMEOUT
from core.exceptions import APICallError, StateTransitionError, WaitTimeoutError, is_not_found

logger = logging.getLogger(__name__)

HUB_TEMPLATE = "endpoint_vpc.yaml"
SPOKE_TEMPLATE = "workload_vpc.yaml"

READY_STATUSES = frozenset({"CREATE_COMPLETE", "UPDATE_COMPLETE"})

# boto3 waiter 폴링 간격 (초), 전체 한도는 POLL_TIMEOUT
WAITER_DELAY = 15


def hub_stack_name(prefix: str) -> str:
    return f"{prefix}-endpoint-vpc"


def spoke_stack_name(prefix: str, environment: str) -> str:
    return f"{prefix}-workload-vpc-{environment}"


def load_template(name: str) -> str:
    """패키지 데이터에서 템플릿 본문 읽기"""
    return (files("stages") / "templates" / name).read_text(encoding="utf-8")


def get_stack(cfn: Any, stack_name: str) -> dict[str, Any] | None:
    """스택 조회 (없으면 None)"""
    try:
        stacks = cfn.describe_stacks(StackName=stack_name).get("Stacks", [])
    except ClientError as e:
        if is_not_found(e):
            return None
        raise APICallError.from_client_error("cloudformation", "describe_stacks", e) from e
    return stacks[0] if stacks else None


def stack_outputs(stack: dict[str, Any]) -> dict[str, str]:
    """스택 Outputs를 OutputKey -> OutputValue 딕셔너리로 변환"""
    return {o["OutputKey"]: o["OutputValue"] for o in stack.get("Outputs", [])}


def _wait(cfn: Any, waiter_name: str, stack_name: str) -> None:
    waiter = cfn.get_waiter(waiter_name)
    max_attempts = max(1, int(POLL_TIMEOUT // WAITER_DELAY))
    try:
        waiter.wait(StackName=stack_name, WaiterConfig={"Delay": WAITER_DELAY, "MaxAttempts": max_attempts})
    except WaiterError as e:
        stack = get_stack(cfn, stack_name)
        status = stack["StackStatus"] if stack else "DELETE_COMPLETE"
        if waiter_name == "stack_delete_complete" and stack is None:
            return
        if status.endswith("_IN_PROGRESS"):
            raise WaitTimeoutError("cloudformation-stack", stack_name, waiter_name, status, POLL_TIMEOUT) from e
        raise StateTransitionError("cloudformation-stack", stack_name, status) from e


def deploy_stack(
    cfn: Any,
    stack_name: str,
    template_name: str,
    parameters: dict[str, str],
    capabilities: list[str] | None = None,
) -> tuple[dict[str, str], bool]:
    """스택 배포 또는 재사용

    Args:
        cfn: CloudFormation client
        stack_name: 스택 이름
        template_name: 패키지 템플릿 파일 이름
        parameters: 템플릿 파라미터
        capabilities: 필요한 경우 CAPABILITY_NAMED_IAM 등

    Returns:
        (스택 출력, 새로 생성했는지 여부)

    Raises:
        StateTransitionError: 스택이 실패 상태인 경우
        WaitTimeoutError: 생성 대기 한도 초과
        APICallError: API 호출 실패
    """
    stack = get_stack(cfn, stack_name)

    if stack is not None:
        status = stack["StackStatus"]
        if status in READY_STATUSES:
            logger.info("기존 스택 재사용: %s (%s)", stack_name, status)
            return stack_outputs(stack), False
        if status in ("CREATE_IN_PROGRESS", "UPDATE_IN_PROGRESS"):
            waiter_name = "stack_create_complete" if status == "CREATE_IN_PROGRESS" else "stack_update_complete"
            _wait(cfn, waiter_name, stack_name)
            refreshed = get_stack(cfn, stack_name) or {}
            return stack_outputs(refreshed), False
        if status == "ROLLBACK_COMPLETE":
            # 업데이트할 수 없는 상태라 삭제 후 다시 생성
            logger.warning("롤백된 스택 삭제 후 재생성: %s", stack_name)
            delete_stack(cfn, stack_name)
        else:
            raise StateTransitionError("cloudformation-stack", stack_name, status)

    kwargs: dict[str, Any] = {
        "StackName": stack_name,
        "TemplateBody": load_template(template_name),
        "Parameters": [{"ParameterKey": k, "ParameterValue": v} for k, v in parameters.items()],
    }
    if capabilities:
        kwargs["Capabilities"] = capabilities

    try:
        cfn.create_stack(**kwargs)
    except ClientError as e:
        raise APICallError.from_client_error("cloudformation", "create_stack", e) from e

    logger.info("스택 생성 대기: %s", stack_name)
    _wait(cfn, "stack_create_complete", stack_name)

    created = get_stack(cfn, stack_name) or {}
    return stack_outputs(created), True


def delete_stack(cfn: Any, stack_name: str) -> bool:
    """스택 삭제 후 완료 대기

    Returns:
        스택이 존재해서 삭제했으면 True, 원래 없었으면 False
    """
    if get_stack(cfn, stack_name) is None:
        return False

    try:
        cfn.delete_stack(StackName=stack_name)
    except ClientError as e:
        raise APICallError.from_client_error("cloudformation", "delete_stack", e) from e

    _wait(cfn, "stack_delete_complete", stack_name)
    return True
