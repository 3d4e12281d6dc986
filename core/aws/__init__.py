# core/aws/__init__.py
"""
AWS API 호출 유틸리티 (core/aws)

- client: retry/타임아웃이 설정된 boto3 client 생성, 페이지네이션
- retry: 스로틀링 고정 간격 재시도
- waiter: 지수 백오프 상태 폴링

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "get_client",
    "paginate",
    "find_by_name",
    "retry_on_throttle",
    "PollConfig",
    "wait_for_status",
]

_IMPORT_MAPPING = {
    "get_client": (".client", "get_client"),
    "paginate": (".client", "paginate"),
    "find_by_name": (".client", "find_by_name"),
    "retry_on_throttle": (".retry", "retry_on_throttle"),
    "PollConfig": (".waiter", "PollConfig"),
    "wait_for_status": (".waiter", "wait_for_status"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
