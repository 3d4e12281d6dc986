"""
tests/stages/test_hub.py - 허브 단계 테스트

테스트 대상:
- 생성 결과와 저장된 출력
- 재실행 시 생성 호출 없음
- 리소스 구성 ACTIVE 전에는 리소스 연결을 시도하지 않음
- 리소스 연결 스로틀링 재시도 상한
- 비필수 단계(허브 VPC 연결, CNAME) 실패는 경고
"""

from unittest.mock import patch

import pytest
from fake_aws import DEV_ACCOUNT, HUB_ACCOUNT, PREFIX, REGION, TEST_ACCOUNT, client_error

from core.aws.client import DEFAULT_MAX_ATTEMPTS
from core.config import ASSOCIATION_SPACING, MAX_RETRIES
from core.exceptions import (
    PreconditionError,
    ResourceCreationError,
    RetryExhaustedError,
    StateTransitionError,
    WaitTimeoutError,
)
from stages import lattice
from stages.hub import run_hub
from stages.services import ENDPOINT_SERVICES


def _spacing_sleeps(no_sleep) -> int:
    return sum(1 for c in no_sleep.call_args_list if c.args == (ASSOCIATION_SPACING,))


class TestHubProvisioning:
    """정상 프로비저닝"""

    def test_creates_all_resources(self, cloud, stage_ctx):
        outputs = run_hub(stage_ctx)

        assert outputs.account_id == HUB_ACCOUNT
        assert len(cloud.service_networks) == 1
        assert len(cloud.gateways) == 1
        assert len(cloud.configurations) == len(ENDPOINT_SERVICES)
        assert len(cloud.resource_associations) == len(ENDPOINT_SERVICES)
        assert len(cloud.zones) == len(ENDPOINT_SERVICES)
        assert set(outputs.resource_configurations) == {s.name for s in ENDPOINT_SERVICES}
        assert outputs.hub_vpc_association_id in cloud.vpc_associations

    def test_share_principals(self, cloud, stage_ctx):
        """RAM 공유는 두 spoke 계정만 대상, 외부 주체 불허"""
        outputs = run_hub(stage_ctx)

        call = cloud.calls_for("create_resource_share")[0]
        assert call.params["principals"] == [DEV_ACCOUNT, TEST_ACCOUNT]
        assert call.params["allowExternalPrincipals"] is False
        assert call.params["resourceArns"] == [outputs.service_network_arn]

    def test_resource_configuration_targets_endpoint_dns(self, cloud, stage_ctx):
        run_hub(stage_ctx)

        call = cloud.calls_for("create_resource_configuration")[0]
        domain = call.params["resourceConfigurationDefinition"]["dnsResource"]["domainName"]
        assert domain.endswith(".vpce.amazonaws.com")
        assert call.params["portRanges"] == ["443"]
        assert call.params["name"] == f"{PREFIX}-ssm-resource"

    def test_each_zone_has_one_cname(self, cloud, stage_ctx):
        """PHZ마다 서비스 이름 -> Lattice DNS 이름 CNAME 하나"""
        outputs = run_hub(stage_ctx)

        for service in ENDPOINT_SERVICES:
            zone_id = outputs.hosted_zones[service.name]
            records = cloud.zone_records(zone_id)
            assert len(records) == 1
            assert records[0]["Name"] == f"{service.phz_name(REGION)}."
            assert records[0]["ResourceRecords"] == [{"Value": outputs.dns_names[service.name]}]

    def test_outputs_saved(self, stage_ctx):
        outputs = run_hub(stage_ctx)
        assert stage_ctx.store.load_hub() == outputs


class TestHubIdempotency:
    """재실행"""

    def test_second_run_creates_nothing(self, cloud, stage_ctx):
        first = run_hub(stage_ctx)
        created_before = len(cloud.creation_calls())

        second = run_hub(stage_ctx)

        assert len(cloud.creation_calls()) == created_before
        assert second.service_network_id == first.service_network_id
        assert second.resource_associations == first.resource_associations
        assert second.hosted_zones == first.hosted_zones

    def test_spacing_only_after_actual_create(self, cloud, stage_ctx, no_sleep):
        """연결 간 간격은 실제로 생성한 경우에만"""
        run_hub(stage_ctx)
        assert _spacing_sleeps(no_sleep) == len(ENDPOINT_SERVICES) - 1

        no_sleep.reset_mock()
        run_hub(stage_ctx)
        assert _spacing_sleeps(no_sleep) == 0


class TestHubOrdering:
    """리소스 구성 -> 리소스 연결 순서"""

    def test_association_waits_for_active_configurations(self, cloud, stage_ctx):
        cloud.set_statuses(f"{PREFIX}-sts-resource", ["CREATE_IN_PROGRESS"] * 3 + ["ACTIVE"])

        run_hub(stage_ctx)

        last_poll = cloud.index_of("get_resource_configuration", last=True)
        first_association = cloud.index_of("create_service_network_resource_association")
        assert last_poll < first_association

    def test_stuck_configuration_times_out_without_association(self, cloud, stage_ctx):
        cloud.set_statuses(f"{PREFIX}-ssmmessages-resource", ["CREATE_IN_PROGRESS"])

        with pytest.raises(WaitTimeoutError):
            run_hub(stage_ctx)

        assert cloud.count("create_service_network_resource_association") == 0

    def test_failed_configuration_is_fatal(self, cloud, stage_ctx):
        cloud.set_statuses(f"{PREFIX}-ssm-resource", ["CREATE_IN_PROGRESS", "CREATE_FAILED"])

        with pytest.raises(StateTransitionError):
            run_hub(stage_ctx)

        assert cloud.count("create_service_network_resource_association") == 0

    def test_gateway_waits_for_active(self, cloud, stage_ctx):
        cloud.set_statuses(f"{PREFIX}-resource-gateway", ["CREATE_IN_PROGRESS", "ACTIVE"])

        run_hub(stage_ctx)

        assert cloud.index_of("get_resource_gateway", last=True) < cloud.index_of("create_resource_configuration")


class TestHubThrottling:
    """리소스 연결 스로틀링 재시도"""

    def test_recovers_within_limit(self, cloud, stage_ctx):
        cloud.fail("create_service_network_resource_association", client_error("ThrottlingException"), times=2)

        outputs = run_hub(stage_ctx)

        assert cloud.count("create_service_network_resource_association") == len(ENDPOINT_SERVICES) + 2
        assert len(outputs.resource_associations) == len(ENDPOINT_SERVICES)

    def test_gives_up_after_max_retries(self, cloud, stage_ctx):
        cloud.fail(
            "create_service_network_resource_association", client_error("ThrottlingException"), times=MAX_RETRIES
        )

        with pytest.raises(RetryExhaustedError):
            run_hub(stage_ctx)

        assert cloud.count("create_service_network_resource_association") == MAX_RETRIES
        assert cloud.count("create_resource_share") == 0

    def test_association_client_disables_botocore_retries(self, cloud, stage_ctx):
        """리소스 연결 생성 클라이언트는 botocore 재시도가 꺼져 있어 시도 횟수가 MAX_RETRIES로 제한"""
        with patch(
            "stages.lattice.ensure_resource_association", wraps=lattice.ensure_resource_association
        ) as ensure:
            run_hub(stage_ctx)

        assert ensure.call_count == len(ENDPOINT_SERVICES)
        for call in ensure.call_args_list:
            writer = call.kwargs["create_client"]
            assert writer.meta.config.retries == {"total_max_attempts": 1, "mode": "standard"}
            # 조회용 클라이언트는 기본 재시도 유지
            assert call.args[0].meta.config.retries["max_attempts"] == DEFAULT_MAX_ATTEMPTS


class TestHubNonFatalSteps:
    """경고로 처리되는 단계"""

    def test_hub_vpc_association_failure(self, cloud, stage_ctx):
        cloud.set_statuses(f"vpc-association:{HUB_ACCOUNT}", ["CREATE_FAILED"])

        outputs = run_hub(stage_ctx)

        assert outputs.hub_vpc_association_id is None
        assert len(outputs.hosted_zones) == len(ENDPOINT_SERVICES)

    def test_cname_failure(self, cloud, stage_ctx):
        cloud.fail("change_resource_record_sets", client_error("InvalidChangeBatch", "bad record"))

        outputs = run_hub(stage_ctx)

        # PHZ는 생성되었으므로 출력에 남음
        assert len(outputs.hosted_zones) == len(ENDPOINT_SERVICES)
        assert stage_ctx.store.has_hub()

    def test_hosted_zone_failure(self, cloud, stage_ctx):
        cloud.fail("create_hosted_zone", client_error("TooManyHostedZones", "limit"))

        outputs = run_hub(stage_ctx)

        assert len(outputs.hosted_zones) == len(ENDPOINT_SERVICES) - 1


class TestHubPreconditions:
    """사전 조건"""

    def test_missing_spoke_account(self, cloud, tmp_path):
        ctx = cloud.stage_context(tmp_path, spoke_test_account=None)

        with pytest.raises(PreconditionError) as exc_info:
            run_hub(ctx)

        assert "VPCE_SPOKE_TEST_ACCOUNT" in str(exc_info.value)
        assert cloud.calls == []

    def test_service_network_creation_failure(self, cloud, stage_ctx):
        cloud.fail("create_service_network", client_error("AccessDeniedException", "denied"))

        with pytest.raises(ResourceCreationError) as exc_info:
            run_hub(stage_ctx)

        assert exc_info.value.resource == f"{PREFIX}-service-network"
        assert exc_info.value.error_code == "AccessDeniedException"
        assert cloud.count("create_resource_gateway") == 0
