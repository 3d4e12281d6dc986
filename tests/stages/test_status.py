"""
tests/stages/test_status.py - 상태 조회 테스트
"""

from fake_aws import PREFIX, client_error

from cli.ui import console
from core.auth import AccountRole
from stages.hub import run_hub
from stages.spoke import run_spoke
from stages.status import list_prefixed_endpoints, list_prefixed_stacks, run_status


class TestStatus:
    """run_status 테스트"""

    def test_empty_accounts(self, cloud, stage_ctx):
        """배포 전에는 모든 섹션이 비어 있고 실패 없음"""
        assert run_status(stage_ctx) == 0

    def test_after_hub_deploy(self, cloud, stage_ctx):
        run_hub(stage_ctx)
        hub = stage_ctx.hub

        stacks = list_prefixed_stacks(hub.client("cloudformation"), PREFIX)
        endpoints = list_prefixed_endpoints(hub.client("ec2"), PREFIX)

        assert stacks == [[f"{PREFIX}-endpoint-vpc", "CREATE_COMPLETE"]]
        assert len(endpoints) == 4
        assert run_status(stage_ctx) == 0

    def test_listing_failures_are_tolerated(self, cloud, stage_ctx):
        """조회 실패는 섹션 경고로만 처리"""
        cloud.fail("list_stacks", client_error("AccessDenied", "denied"))
        cloud.fail("list_service_networks", client_error("ExpiredToken", "expired"))

        assert run_status(stage_ctx) == 2

    def test_missing_profiles_skipped(self, cloud, tmp_path):
        ctx = cloud.stage_context(tmp_path, roles=[AccountRole.HUB])

        assert run_status(ctx) == 0
        assert {c.account for c in cloud.calls} == {"111111111111"}

    def test_read_only(self, cloud, stage_ctx):
        run_status(stage_ctx)
        assert cloud.creation_calls() == []
        assert not any(c.operation.startswith("delete_") for c in cloud.calls)


class TestSavedOutputs:
    """저장된 단계 출력 요약"""

    def test_spoke_outputs_summarized(self, cloud, stage_ctx):
        run_hub(stage_ctx)
        spoke = run_spoke(stage_ctx, "dev")

        with console.capture() as capture:
            run_status(stage_ctx)

        output = capture.get()
        assert "spoke-dev 출력 저장됨" in output
        assert spoke.vpc_id in output
        assert "spoke-test 출력 저장됨" not in output

    def test_unreadable_spoke_outputs_warned(self, cloud, stage_ctx):
        path = stage_ctx.store.spoke_path("test")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{not json", encoding="utf-8")

        with console.capture() as capture:
            assert run_status(stage_ctx) == 0

        assert "spoke-test 출력을 읽을 수 없습니다" in capture.get()
