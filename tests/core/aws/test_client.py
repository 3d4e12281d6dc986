"""
tests/core/aws/test_client.py - client 생성/페이지네이션 헬퍼 테스트
"""

from unittest.mock import MagicMock

from botocore.config import Config

from core.aws.client import DEFAULT_MAX_ATTEMPTS, find_by_name, get_client, paginate


class TestGetClient:
    """get_client 테스트"""

    def test_retry_config(self):
        session = MagicMock()

        get_client(session, "vpc-lattice", region_name="us-east-2")

        args, kwargs = session.client.call_args
        assert args[0] == "vpc-lattice"
        assert kwargs["region_name"] == "us-east-2"
        config = kwargs["config"]
        assert config.retries == {"max_attempts": DEFAULT_MAX_ATTEMPTS, "mode": "standard"}

    def test_total_max_attempts_disables_botocore_retries(self):
        """total_max_attempts=1이면 botocore 재시도 없이 한 번만 호출"""
        session = MagicMock()

        get_client(session, "vpc-lattice", total_max_attempts=1)

        config = session.client.call_args.kwargs["config"]
        assert config.retries == {"total_max_attempts": 1, "mode": "standard"}

    def test_merge_existing_config(self):
        """호출자가 넘긴 config가 기본값 위에 병합"""
        session = MagicMock()

        get_client(session, "route53", config=Config(read_timeout=5))

        config = session.client.call_args.kwargs["config"]
        assert config.read_timeout == 5
        assert config.retries["mode"] == "standard"


class TestPaginate:
    """paginate 테스트"""

    def test_flattens_pages(self):
        client = MagicMock()
        client.get_paginator.return_value.paginate.return_value = [
            {"items": [{"id": "a"}]},
            {"items": [{"id": "b"}, {"id": "c"}]},
            {},
        ]

        items = paginate(client, "list_resource_gateways", "items", vpcIdentifier="vpc-1")

        assert [i["id"] for i in items] == ["a", "b", "c"]
        client.get_paginator.assert_called_once_with("list_resource_gateways")
        client.get_paginator.return_value.paginate.assert_called_once_with(vpcIdentifier="vpc-1")


class TestFindByName:
    """find_by_name 테스트"""

    def test_exact_match(self):
        items = [{"name": "central-vpce-sn-x"}, {"name": "central-vpce-sn"}]
        assert find_by_name(items, "central-vpce-sn") == {"name": "central-vpce-sn"}

    def test_custom_key(self):
        assert find_by_name([{"Name": "a."}], "a.", key="Name") == {"Name": "a."}

    def test_missing(self):
        assert find_by_name([], "x") is None
