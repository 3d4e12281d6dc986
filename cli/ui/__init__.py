# cli/ui - 콘솔 출력 컴포넌트 (rich)
"""
콘솔 출력 모듈

배포/정리 단계에서 사용하는 Rich 기반 출력 함수들
"""

from .console import (
    INDENT,
    SYMBOL_ERROR,
    SYMBOL_INFO,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    configure_logging,
    console,
    get_console,
    print_error,
    print_header,
    print_info,
    print_key_values,
    print_panel_header,
    print_rule,
    print_step_header,
    print_sub_error,
    print_sub_info,
    print_sub_task,
    print_sub_task_done,
    print_sub_warning,
    print_success,
    print_table,
    print_warning,
)

__all__: list[str] = [
    "console",
    "get_console",
    "configure_logging",
    # 표준 출력 심볼
    "SYMBOL_SUCCESS",
    "SYMBOL_ERROR",
    "SYMBOL_WARNING",
    "SYMBOL_INFO",
    # 메시지 출력
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "print_header",
    "print_step_header",
    "print_sub_task",
    "print_sub_task_done",
    "print_sub_info",
    "print_sub_warning",
    "print_sub_error",
    "INDENT",
    "print_panel_header",
    "print_table",
    "print_key_values",
    "print_rule",
]
