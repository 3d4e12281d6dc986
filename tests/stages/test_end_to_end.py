"""
tests/stages/test_end_to_end.py - 허브 -> spoke-dev -> spoke-test -> 정리 시나리오

세 계정 가짜 AWS에서 전체 흐름을 실행하고 최종 토폴로지를 검증합니다.
"""

from fake_aws import DEV_ACCOUNT, HUB_ACCOUNT, TEST_ACCOUNT

from stages.hub import run_hub
from stages.services import ENDPOINT_SERVICES
from stages.spoke import run_spoke
from stages.teardown import run_teardown


class TestFullDeployment:
    """전체 배포 후 토폴로지"""

    def test_topology(self, cloud, stage_ctx):
        run_hub(stage_ctx)
        # spoke는 파일로 저장된 허브 출력을 사용 (별도 프로세스 실행과 동일)
        dev = run_spoke(stage_ctx, "dev")
        test = run_spoke(stage_ctx, "test")

        assert len(cloud.service_networks) == 1
        assert len(cloud.configurations) == len(ENDPOINT_SERVICES)

        owners = sorted(a["_owner"] for a in cloud.vpc_associations.values())
        assert owners == sorted([HUB_ACCOUNT, DEV_ACCOUNT, TEST_ACCOUNT])

        assert len(cloud.zones) == len(ENDPOINT_SERVICES)
        for zone_id, zone in cloud.zones.items():
            assert len(cloud.zone_records(zone_id)) == 1
            vpc_ids = {v["VPCId"] for v in zone["VPCs"]}
            assert {dev.vpc_id, test.vpc_id} <= vpc_ids

        # spoke VPC는 같은 CIDR을 쓰지만 각자 다른 VPC
        assert dev.vpc_id != test.vpc_id

    def test_deploy_then_cleanup(self, cloud, stage_ctx):
        hub_outputs = run_hub(stage_ctx)
        run_spoke(stage_ctx, "dev", hub_outputs=hub_outputs)
        run_spoke(stage_ctx, "test", hub_outputs=hub_outputs)

        report = run_teardown(stage_ctx)

        assert not report.has_failures
        assert cloud.service_networks == {}
        assert cloud.zones == {}
        assert cloud.vpc_associations == {}

    def test_redeploy_after_cleanup(self, cloud, stage_ctx):
        """정리 후 다시 배포하면 새 리소스 생성"""
        run_hub(stage_ctx)
        run_teardown(stage_ctx)

        outputs = run_hub(stage_ctx)

        assert len(cloud.service_networks) == 1
        assert outputs.service_network_id in cloud.service_networks
        # 삭제된 공유는 재사용하지 않음
        assert cloud.count("create_resource_share") == 2
