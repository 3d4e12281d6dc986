# core/__init__.py
"""
core - VPC Lattice 중앙 엔드포인트 배포 인프라

단계(stages) 코드가 공통으로 사용하는 설정, 예외, 인증, AWS 호출 유틸리티,
단계 간 상태 저장을 포함하는 최상위 패키지입니다.

아키텍처:
    core/
    ├── auth/           # 계정 역할별 boto3 세션
    ├── aws/            # client 생성, 스로틀링 재시도, 상태 폴링
    ├── state/          # 단계 출력 저장 (버전 JSON)
    ├── config.py       # 중앙 설정 관리 (환경 변수 핸드오프)
    ├── exceptions.py   # 통합 예외 계층
    └── report.py       # 정리 결과 보고서

Usage:
    from core.config import Settings
    from core.exceptions import VPCEError, is_not_found

    settings = Settings.from_env()
"""

from core import auth, aws, config, exceptions, report, state

__all__: list[str] = [
    # 서브패키지
    "auth",
    "aws",
    "state",
    # 모듈
    "config",
    "exceptions",
    "report",
]
