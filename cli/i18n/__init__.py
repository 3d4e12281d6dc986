"""
cli/i18n/__init__.py - 다국어 메시지 (i18n)

CLI 수준 메시지(파라미터 검증 오류, 정리 확인 프롬프트, 도움말)를 번역합니다.
기본 언어는 한국어(ko)이며 --lang en으로 영어를 선택할 수 있습니다.

구조:
    - 메시지는 네임스페이스별로 등록 (common, cli)
    - t()는 format 문자열 치환 지원
    - 현재 언어는 ContextVar로 보관

Usage:
    from cli.i18n import t, set_lang

    set_lang("en")
    print(t("cli.missing_params", params="VPCE_HUB_PROFILE"))
    # "Missing required parameters: VPCE_HUB_PROFILE"
"""

from __future__ import annotations

import contextlib
from contextvars import ContextVar
from typing import Any

_current_lang: ContextVar[str] = ContextVar("lang", default="ko")

SUPPORTED_LANGS = ("ko", "en")
DEFAULT_LANG = "ko"


def get_lang() -> str:
    """현재 언어 코드"""
    return _current_lang.get()


def set_lang(lang: str) -> None:
    """현재 언어 설정 (지원하지 않는 코드는 기본 언어로)"""
    if lang not in SUPPORTED_LANGS:
        lang = DEFAULT_LANG
    _current_lang.set(lang)


def t(key: str, lang: str | None = None, **kwargs: Any) -> str:
    """메시지 키를 현재 언어로 번역

    Args:
        key: namespace.key 형식의 메시지 키 (예: "cli.cleanup_confirm")
        lang: 언어 강제 지정 (없으면 현재 언어)
        **kwargs: format 치환 인자

    Returns:
        번역된 문자열, 등록되지 않은 키는 키 그대로

    Examples:
        >>> t("cli.stage_failed", stage="hub", error="boom")
        "hub 단계 실패: boom"

        >>> t("cli.stage_failed", lang="en", stage="hub", error="boom")
        "hub stage failed: boom"
    """
    from cli.i18n.messages import MESSAGES

    if lang is None:
        lang = get_lang()

    if lang not in SUPPORTED_LANGS:
        lang = DEFAULT_LANG

    msg_dict = MESSAGES.get(key)
    if msg_dict is None:
        return key

    # 번역이 없으면 한국어로 대체
    text = msg_dict.get(lang)
    if text is None:
        text = msg_dict.get(DEFAULT_LANG, key)

    if kwargs:
        with contextlib.suppress(KeyError, ValueError):
            text = text.format(**kwargs)

    return text


__all__ = [
    "t",
    "get_lang",
    "set_lang",
    "SUPPORTED_LANGS",
    "DEFAULT_LANG",
]
