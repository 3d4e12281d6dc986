# stages/__init__.py
"""
배포 단계 (stages)

    hub       허브(엔드포인트) 계정 프로비저닝 - run_hub
    spoke     spoke 계정 프로비저닝 - run_spoke
    status    배포 상태 조회 - run_status
    teardown  역순 정리 - run_teardown

보조 모듈:
    context   StageContext (설정 + 계정 세션 + 상태 저장소)
    services  중앙화 엔드포인트 서비스 목록
    stacks    CloudFormation 템플릿 배포/삭제
    lattice   VPC Lattice 리소스 조회/생성
    dns       Route 53 PHZ 및 교차 계정 연결

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "StageContext",
    "run_hub",
    "run_spoke",
    "run_status",
    "run_teardown",
]

_IMPORT_MAPPING = {
    "StageContext": (".context", "StageContext"),
    "run_hub": (".hub", "run_hub"),
    "run_spoke": (".spoke", "run_spoke"),
    "run_status": (".status", "run_status"),
    "run_teardown": (".teardown", "run_teardown"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
