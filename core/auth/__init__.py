# core/auth/__init__.py
"""
AWS 계정별 세션 모듈 (core/auth)

허브, spoke-dev, spoke-test 세 계정에 대한 boto3 세션을 프로파일 기반으로
생성하고, 계정 ID 조회(STS)와 클라이언트 생성을 한 곳에서 처리합니다.

사용 예시:
    from core.auth import AccountRole, open_account

    hub = open_account(AccountRole.HUB, "hub-profile", "us-east-2")
    print(hub.account_id)
    lattice = hub.client("vpc-lattice")

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
    실제 사용 시점에만 하위 모듈이 로드되어 CLI 시작 시간을 최적화합니다.
"""

__all__ = [
    "AccountRole",
    "AccountSession",
    "create_session",
    "open_account",
    "resolve_account_id",
]

# Lazy import 매핑 테이블
_IMPORT_MAPPING = {
    "AccountRole": (".session", "AccountRole"),
    "AccountSession": (".session", "AccountSession"),
    "create_session": (".session", "create_session"),
    "open_account": (".session", "open_account"),
    "resolve_account_id": (".session", "resolve_account_id"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드

    CLI 시작 시간 최적화를 위해 무거운 의존성(boto3 등)을
    실제 필요한 시점에만 로드합니다.
    """
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
