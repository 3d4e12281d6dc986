"""
cli/i18n/messages/common.py - Common Messages

Shared labels used across commands.
"""

from __future__ import annotations

COMMON_MESSAGES = {
    "hub": {
        "ko": "허브",
        "en": "Hub",
    },
    "spoke": {
        "ko": "spoke-{env}",
        "en": "spoke-{env}",
    },
    "cleanup": {
        "ko": "정리",
        "en": "Cleanup",
    },
    "status": {
        "ko": "상태 조회",
        "en": "Status",
    },
}
