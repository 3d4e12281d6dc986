# core/state/__init__.py
"""
단계 간 출력 저장 (core/state)

    from core.state import HubOutputs, StateStore

    store = StateStore(settings.state_dir, settings.prefix, settings.region)
    hub = store.load_hub()
"""

from .store import SCHEMA_VERSION, HubOutputs, SpokeOutputs, StateStore

__all__ = ["SCHEMA_VERSION", "HubOutputs", "SpokeOutputs", "StateStore"]
