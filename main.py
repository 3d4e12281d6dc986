"""
main.py - vpce 콘솔 스크립트 진입점

pyproject.toml의 [project.scripts] vpce = "main:main"에서 호출됩니다.
"""

from cli.app import cli


def main() -> None:
    """vpce CLI 실행 (종료 코드는 click이 처리)"""
    cli(prog_name="vpce")


if __name__ == "__main__":
    main()
