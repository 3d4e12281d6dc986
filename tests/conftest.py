"""
tests/conftest.py - pytest 공통 픽스처

가짜 다중 계정 AWS(FakeCloud), moto 기반 Route 53 모킹, 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(cloud, stage_ctx):
        # cloud: FakeCloud (호출 기록/실패 주입)
        # stage_ctx: 세 계정 세션이 연결된 StageContext
        pass
"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# 프로젝트 루트와 tests 디렉토리를 sys.path에 추가 (fake_aws 임포트용)
project_root = Path(__file__).parent.parent
tests_root = Path(__file__).parent
for _path in (tests_root, project_root):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from core.config import ENV_VARS  # noqa: E402
from fake_aws import FakeCloud  # noqa: E402

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정

    VPCE_* 환경 변수를 비우고, 테스트 중 Settings.to_env()로 추가된 값은
    테스트가 끝나면 원래대로 복원합니다.
    """
    with patch.dict(os.environ):
        for var in ENV_VARS.values():
            os.environ.pop(var, None)
        os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-2")
        os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
        os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
        yield


@pytest.fixture(autouse=True)
def no_sleep():
    """폴링/재시도 대기 제거 (호출 인자는 검증 가능)"""
    with patch("time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture(autouse=True)
def reset_lang():
    """테스트 간 UI 언어 초기화 (--lang 옵션은 ContextVar에 남음)"""
    from cli.i18n import DEFAULT_LANG, set_lang

    set_lang(DEFAULT_LANG)
    yield
    set_lang(DEFAULT_LANG)


# =============================================================================
# 가짜 AWS 픽스처
# =============================================================================


@pytest.fixture
def cloud():
    """세 계정 가짜 AWS"""
    return FakeCloud()


@pytest.fixture
def stage_ctx(cloud, tmp_path):
    """허브/spoke-dev/spoke-test 세션이 모두 연결된 StageContext"""
    return cloud.stage_context(tmp_path / "state")


# =============================================================================
# 유틸리티 함수
# =============================================================================


def create_mock_client_error(
    error_code: str,
    error_message: str = "Test error",
    operation: str = "TestOperation",
) -> Exception:
    """ClientError 생성 헬퍼"""
    from botocore.exceptions import ClientError

    return ClientError(
        {
            "Error": {
                "Code": error_code,
                "Message": error_message,
            }
        },
        operation,
    )


# =============================================================================
# moto 통합 (선택적)
# =============================================================================

try:
    import moto

    @pytest.fixture
    def aws_credentials():
        """moto 사용 시 AWS 자격 증명 설정"""
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
        os.environ["AWS_DEFAULT_REGION"] = "us-east-2"

    @pytest.fixture
    def moto_route53(aws_credentials):
        """moto를 사용한 Route 53 + EC2 모킹 (VPC 하나 생성)"""
        with moto.mock_aws():
            import boto3

            ec2 = boto3.client("ec2", region_name="us-east-2")
            vpc_id = ec2.create_vpc(CidrBlock="10.0.0.0/16")["Vpc"]["VpcId"]
            route53 = boto3.client("route53", region_name="us-east-2")

            yield route53, ec2, vpc_id

except ImportError:
    # moto가 설치되지 않은 경우 더미 픽스처
    @pytest.fixture
    def moto_route53():
        pytest.skip("moto not installed")
