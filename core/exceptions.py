"""
core/exceptions.py - 통합 예외 계층 구조

프로비저닝/정리 단계 전체에서 사용되는 예외 클래스들을 정의합니다.
단계별 실패 정책(즉시 중단 vs 경고 후 계속)은 예외 타입으로 구분합니다.

예외 계층 구조:
    VPCEError (베이스)
    ├── PreconditionError (필수 파라미터/이전 단계 출력 누락)
    ├── ConfigError (설정 값 오류)
    ├── StateError (저장된 단계 출력 파일 오류)
    ├── APICallError (AWS API 호출 실패)
    ├── ResourceCreationError (필수 리소스 생성 실패)
    ├── RetryExhaustedError (스로틀링 재시도 소진)
    ├── StateTransitionError (리소스가 실패 상태에 도달)
    └── WaitTimeoutError (상태 대기 시간 초과)

Usage:
    from core.exceptions import APICallError, is_throttling

    try:
        lattice.create_service_network(name=name, authType="NONE")
    except ClientError as e:
        if is_throttling(e):
            ...
        raise APICallError.from_client_error("vpc-lattice", "create_service_network", e)
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class VPCEError(Exception):
    """VPCE 배포 도구 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 사전 조건 / 설정 관련 예외
# =============================================================================


class PreconditionError(VPCEError):
    """필수 자격 증명, 파라미터, 이전 단계 출력이 없는 경우

    AWS API를 호출하기 전에 발생하며 항상 치명적입니다.
    """

    def __init__(self, requirement: str, message: str):
        super().__init__(f"사전 조건 실패 [{requirement}]: {message}")
        self.requirement = requirement
        self.details["requirement"] = requirement


class ConfigError(VPCEError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class StateError(VPCEError):
    """단계 간 상태 파일 읽기/쓰기 오류"""

    def __init__(
        self,
        path: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(f"상태 파일 오류 [{path}]: {message}", cause)
        self.path = path
        self.details["path"] = path


# =============================================================================
# AWS API 호출 관련 예외
# =============================================================================


class APICallError(VPCEError):
    """AWS API 호출 관련 예외

    boto3/botocore의 ClientError를 래핑하여 일관된 예외 처리를 제공합니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message)
        self.cause = cause
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "error_code": error_code,
            }
        )

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
    ) -> "APICallError":
        """botocore.exceptions.ClientError로부터 생성

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: ClientError 예외

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        if hasattr(client_error, "response"):
            error_info = client_error.response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message or str(client_error),
            cause=client_error,
        )

    def __str__(self) -> str:
        # 원인 메시지는 이미 error_message에 포함됨
        return self.message


class ResourceCreationError(VPCEError):
    """필수 리소스 생성 실패

    기존 리소스 조회 후에도 생성이 거부된 경우로, 해당 단계를 중단합니다.
    """

    def __init__(self, resource: str, cause: Exception):
        super().__init__(f"리소스 생성 실패 [{resource}]: {get_error_code(cause)} - {cause}")
        self.cause = cause
        self.resource = resource
        self.error_code = get_error_code(cause)
        self.details.update({"resource": resource, "error_code": self.error_code})

    def __str__(self) -> str:
        return self.message


class RetryExhaustedError(VPCEError):
    """스로틀링 재시도 횟수 초과"""

    def __init__(
        self,
        operation: str,
        attempts: int,
        cause: Optional[Exception] = None,
    ):
        super().__init__(f"최대 재시도 횟수 초과 [{operation}]: {attempts}회 시도", cause)
        self.operation = operation
        self.attempts = attempts
        self.details.update({"operation": operation, "attempts": attempts})


# =============================================================================
# 상태 대기 관련 예외
# =============================================================================


class StateTransitionError(VPCEError):
    """폴링 중인 리소스가 실패 상태(CREATE_FAILED 등)에 도달"""

    def __init__(self, resource: str, resource_id: str, status: str):
        super().__init__(f"리소스 상태 전이 실패 [{resource} {resource_id}]: {status}")
        self.resource = resource
        self.resource_id = resource_id
        self.status = status
        self.details.update({"resource": resource, "resource_id": resource_id, "status": status})


class WaitTimeoutError(VPCEError):
    """원하는 상태에 도달하기 전에 대기 시간을 초과"""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        expected: str,
        last_status: Optional[str],
        waited: float,
    ):
        super().__init__(
            f"상태 대기 시간 초과 [{resource} {resource_id}]: "
            f"{expected} 대기 중 {waited:.0f}초 경과 (마지막 상태: {last_status})"
        )
        self.resource = resource
        self.resource_id = resource_id
        self.expected = expected
        self.last_status = last_status
        self.waited = waited
        self.details.update(
            {
                "resource": resource,
                "resource_id": resource_id,
                "expected": expected,
                "last_status": last_status,
            }
        )


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError의 경우 response에서 Code를 추출하고,
    그 외에는 예외 클래스명을 반환합니다.
    """
    if isinstance(error, APICallError) and error.error_code:
        return error.error_code

    response = getattr(error, "response", None)
    if response is not None:
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인

    에러 코드뿐 아니라 메시지에 ThrottlingException이 포함된 경우도
    스로틀링으로 간주합니다.

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    throttling_codes = {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
    }

    if get_error_code(error) in throttling_codes:
        return True

    return "ThrottlingException" in str(error)


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    not_found_codes = {
        "ResourceNotFoundException",
        "NotFoundException",
        "UnknownResourceException",
        "NoSuchHostedZone",
        "InvalidVpcEndpointId.NotFound",
        "InvalidGroup.NotFound",
        "VPCAssociationNotFound",
        "VPCAssociationAuthorizationNotFound",
    }

    code = get_error_code(error)
    if code in not_found_codes:
        return True

    # CloudFormation은 존재하지 않는 스택에 ValidationError를 반환
    return code == "ValidationError" and "does not exist" in str(error)


def is_already_associated(error: Exception) -> bool:
    """Route 53 VPC가 이미 호스팅 영역에 연결된 경우인지 확인"""
    if get_error_code(error) == "ConflictingDomainExists":
        return True
    return "already associated" in str(error).lower()


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, VPCEError):
        return str(error)

    if hasattr(error, "response"):
        error_info = error.response.get("Error", {})
        code = error_info.get("Code", "UnknownError")
        message = error_info.get("Message", str(error))

        friendly_messages = {
            "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
            "AccessDeniedException": "권한이 없습니다. IAM 정책을 확인하세요.",
            "ExpiredToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "InvalidClientTokenId": "잘못된 자격 증명입니다.",
            "ThrottlingException": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }

        return friendly_messages.get(code, f"{code}: {message}")

    return str(error)
