"""
cli/ui/console.py - Rich 콘솔 유틸리티

배포/정리 단계의 일관된 콘솔 출력을 위한 함수들
"""

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

# botocore 노이즈 로그 제한
logging.getLogger("botocore.httpchecksum").setLevel(logging.WARNING)
logging.getLogger("botocore.credentials").setLevel(logging.WARNING)
logging.getLogger("botocore.loaders").setLevel(logging.WARNING)
logging.getLogger("botocore.session").setLevel(logging.WARNING)
logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)


def get_console() -> Console:
    """Rich Console 인스턴스를 생성하고 반환합니다."""
    is_windows = platform.system().lower() == "windows"

    return Console(
        color_system="auto",
        highlight=True,
        record=True,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# 전역 콘솔 인스턴스
console = get_console()


def configure_logging(verbose: bool = False) -> None:
    """루트 로거에 Rich 핸들러 설정

    기본 WARNING, verbose이면 DEBUG 레벨로 API 호출 상세를 출력합니다.

    Args:
        verbose: 상세 로그 여부
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # verbose에서도 botocore 내부 로그는 제한
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


# =============================================================================
# 표준 출력 스타일 (이모지 없이 Rich 스타일만 사용)
# =============================================================================

# 상태 심볼
SYMBOL_SUCCESS = "✓"  # 완료
SYMBOL_ERROR = "✗"  # 에러
SYMBOL_WARNING = "!"  # 경고
SYMBOL_INFO = "•"  # 정보


def print_success(message: str) -> None:
    """성공 메시지 출력 (초록색 체크마크)

    Args:
        message: 출력할 메시지
    """
    console.print(f"[green]{SYMBOL_SUCCESS} {message}[/green]")


def print_error(message: str) -> None:
    """에러 메시지 출력 (빨간색 X)

    Args:
        message: 출력할 메시지
    """
    console.print(f"[red]{SYMBOL_ERROR} {message}[/red]")


def print_warning(message: str) -> None:
    """경고 메시지 출력 (노란색 경고)"""
    console.print(f"[yellow]{SYMBOL_WARNING} {message}[/yellow]")


def print_info(message: str) -> None:
    """정보 메시지 출력 (파란색 정보)"""
    console.print(f"[blue]{SYMBOL_INFO} {message}[/blue]")


def print_header(title: str) -> None:
    """섹션 헤더 출력

    Args:
        title: 헤더 제목
    """
    console.print()
    console.print(f"[bold underline cyan]{title}[/bold underline cyan]")
    console.print()


def print_step_header(step: int, message: str) -> None:
    """Step 헤더 출력 (예: Step 1: 엔드포인트 VPC 배포 중...)

    Args:
        step: Step 번호
        message: Step 설명
    """
    console.print(f"[bold cyan]Step {step}: {message}[/bold cyan]")


INDENT = "   "  # Step 내 부작업 들여쓰기 (3칸)


def print_sub_task(message: str) -> None:
    """하위 작업 진행 중 출력 (들여쓰기)

    Example:
        print_step_header(3, "서비스 네트워크 생성 중...")
        print_sub_task("기존 서비스 네트워크 조회 중...")
        print_sub_task_done("서비스 네트워크: sn-0123")
    """
    console.print(f"{INDENT}{message}")


def print_sub_task_done(message: str) -> None:
    """하위 작업 완료 출력 (들여쓰기 + 체크마크)"""
    console.print(f"{INDENT}[green]{SYMBOL_SUCCESS} {message}[/green]")


def print_sub_info(message: str) -> None:
    """하위 작업 정보 출력 (들여쓰기 + 파란색)"""
    console.print(f"{INDENT}[blue]{message}[/blue]")


def print_sub_warning(message: str) -> None:
    """하위 작업 경고 출력 (들여쓰기 + 노란색)"""
    console.print(f"{INDENT}[yellow]{SYMBOL_WARNING} {message}[/yellow]")


def print_sub_error(message: str) -> None:
    """하위 작업 에러 출력 (들여쓰기 + 빨간색)"""
    console.print(f"{INDENT}[red]{SYMBOL_ERROR} {message}[/red]")


def print_panel_header(title: str, subtitle: str | None = None) -> None:
    """제목과 부제목을 포함한 패널 헤더를 출력합니다.

    Args:
        title: 제목
        subtitle: 부제목 (선택)
    """
    body = f"[bold blue]{title}[/]\n[dim]{subtitle}[/]" if subtitle else f"[bold blue]{title}[/]"
    console.print(Panel(body, border_style="blue", padding=(1, 2)))


def print_table(
    title: str,
    columns: list[str],
    rows: list[list],
) -> None:
    """테이블 형식으로 데이터를 출력합니다.

    Args:
        title: 테이블 제목
        columns: 컬럼 헤더 리스트
        rows: 행 데이터 리스트
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")

    for column in columns:
        table.add_column(column)

    for row in rows:
        table.add_row(*[str(cell) for cell in row])

    console.print(table)


def print_key_values(title: str, items: list[tuple[str, str]]) -> None:
    """키-값 요약 박스 출력 (단계 완료 요약용)

    Args:
        title: 박스 제목
        items: (라벨, 값) 튜플 리스트
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for label, value in items:
        table.add_row(label, value)
    console.print(Panel(table, title=title, border_style="#FF9900"))


def print_rule(title: str = "", style: str = "dim") -> None:
    """Rich Rule로 구분선 출력

    Args:
        title: 구분선 제목 (빈 문자열이면 제목 없는 구분선)
        style: 스타일 (기본: dim)
    """
    if title:
        console.print(Rule(title=title, style=style))
    else:
        console.print(Rule(style=style))
