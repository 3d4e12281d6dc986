"""
core/state/store.py - 단계 간 출력 저장소

허브 단계 출력(HubOutputs)과 spoke 단계 출력(SpokeOutputs)을 타입이 있는
데이터클래스로 정의하고, 프로세스 간 전달을 위해 버전이 붙은 JSON으로
저장합니다.

저장 위치:
    <state_dir>/<prefix>-<region>/hub.json
    <state_dir>/<prefix>-<region>/spoke-<env>.json

같은 프로세스 안에서는(all 명령) 파일을 거치지 않고 HubOutputs를 직접
전달합니다.
"""

from __future__ import annotations

import json
import logging
import tempfile
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, TypeVar

from core.exceptions import StateError

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass
class HubOutputs:
    """허브 단계 출력

    Attributes:
        account_id: 허브 계정 ID
        region: 리전
        prefix: 리소스 이름 접두사
        vpc_id: 엔드포인트 VPC ID
        service_network_id: 서비스 네트워크 ID
        service_network_arn: 서비스 네트워크 ARN (spoke VPC 연결에 사용)
        resource_gateway_id: 리소스 게이트웨이 ID
        resource_share_arn: RAM 리소스 공유 ARN
        resource_configurations: 서비스 이름 -> 리소스 구성 ID
        resource_associations: 서비스 이름 -> 서비스 네트워크 리소스 연결 ID
        dns_names: 서비스 이름 -> Lattice DNS 이름
        hosted_zones: 서비스 이름 -> PHZ ID
        hub_vpc_association_id: 허브 VPC 연결 ID (실패 시 None)
    """

    account_id: str
    region: str
    prefix: str
    vpc_id: str
    service_network_id: str
    service_network_arn: str
    resource_gateway_id: str
    resource_share_arn: str | None = None
    resource_configurations: dict[str, str] = field(default_factory=dict)
    resource_associations: dict[str, str] = field(default_factory=dict)
    dns_names: dict[str, str] = field(default_factory=dict)
    hosted_zones: dict[str, str] = field(default_factory=dict)
    hub_vpc_association_id: str | None = None


@dataclass
class SpokeOutputs:
    """spoke 단계 출력

    Attributes:
        environment: 환경 이름 (dev/test)
        account_id: spoke 계정 ID
        region: 리전
        vpc_id: 워크로드 VPC ID
        subnet_id: 프라이빗 서브넷 ID
        instance_id: 테스트 인스턴스 ID
        vpc_association_id: 서비스 네트워크 VPC 연결 ID
        associated_zones: VPC에 연결된 PHZ ID 목록
        failed_zones: 연결에 실패한 PHZ ID 목록
    """

    environment: str
    account_id: str
    region: str
    vpc_id: str
    subnet_id: str | None = None
    instance_id: str | None = None
    vpc_association_id: str | None = None
    associated_zones: list[str] = field(default_factory=list)
    failed_zones: list[str] = field(default_factory=list)


OutputsT = TypeVar("OutputsT", HubOutputs, SpokeOutputs)


def _from_dict(cls: type[OutputsT], data: dict[str, Any]) -> OutputsT:
    """알 수 없는 필드는 무시하고 데이터클래스 생성"""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


class StateStore:
    """단계 출력 저장소

    Args:
        state_dir: 기본 디렉토리
        prefix: 리소스 이름 접두사
        region: 리전
    """

    HUB_FILE = "hub.json"

    def __init__(self, state_dir: str | Path, prefix: str, region: str):
        self._dir = Path(state_dir) / f"{prefix}-{region}"

    @property
    def directory(self) -> Path:
        return self._dir

    def hub_path(self) -> Path:
        return self._dir / self.HUB_FILE

    def spoke_path(self, environment: str) -> Path:
        return self._dir / f"spoke-{environment}.json"

    # -------------------------------------------------------------------------
    # 허브 / spoke 출력
    # -------------------------------------------------------------------------

    def save_hub(self, outputs: HubOutputs) -> Path:
        """허브 출력 저장"""
        return self._save(self.hub_path(), "hub", asdict(outputs))

    def load_hub(self) -> HubOutputs:
        """허브 출력 로드

        Raises:
            StateError: 파일이 없거나 읽을 수 없거나 버전이 다른 경우
        """
        return _from_dict(HubOutputs, self._load(self.hub_path(), "hub"))

    def has_hub(self) -> bool:
        return self.hub_path().exists()

    def save_spoke(self, outputs: SpokeOutputs) -> Path:
        """spoke 출력 저장"""
        return self._save(self.spoke_path(outputs.environment), "spoke", asdict(outputs))

    def load_spoke(self, environment: str) -> SpokeOutputs:
        """spoke 출력 로드

        Raises:
            StateError: 파일이 없거나 읽을 수 없거나 버전이 다른 경우
        """
        return _from_dict(SpokeOutputs, self._load(self.spoke_path(environment), "spoke"))

    def clear(self) -> list[Path]:
        """저장된 모든 출력 파일 삭제

        Returns:
            삭제한 파일 경로 목록
        """
        removed: list[Path] = []
        if not self._dir.exists():
            return removed
        for path in sorted(self._dir.glob("*.json")):
            path.unlink(missing_ok=True)
            removed.append(path)
        # 비어 있으면 디렉토리도 정리
        if not any(self._dir.iterdir()):
            self._dir.rmdir()
        return removed

    # -------------------------------------------------------------------------
    # 내부 구현
    # -------------------------------------------------------------------------

    def _save(self, path: Path, kind: str, payload: dict[str, Any]) -> Path:
        """파일에 원자적으로 저장 (write-to-temp-then-rename)"""
        document = {"schema_version": SCHEMA_VERSION, "kind": kind, "outputs": payload}
        content = json.dumps(document, ensure_ascii=False, indent=2)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=f".{path.stem}_")
            try:
                with open(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                Path(tmp_path).replace(path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StateError(str(path), "저장할 수 없습니다", e) from e

        logger.debug("상태 저장: %s", path)
        return path

    def _load(self, path: Path, kind: str) -> dict[str, Any]:
        if not path.exists():
            raise StateError(str(path), "파일이 없습니다. 이전 단계를 먼저 실행하세요")

        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise StateError(str(path), "파일을 읽을 수 없습니다", e) from e

        if not isinstance(document, dict):
            raise StateError(str(path), "형식이 올바르지 않습니다")

        version = document.get("schema_version")
        if version != SCHEMA_VERSION:
            raise StateError(str(path), f"지원하지 않는 스키마 버전입니다 ({version}, 필요: {SCHEMA_VERSION})")

        if document.get("kind") != kind:
            raise StateError(str(path), f"'{kind}' 출력 파일이 아닙니다")

        outputs = document.get("outputs")
        if not isinstance(outputs, dict):
            raise StateError(str(path), "outputs 항목이 없습니다")
        return outputs
