"""
cli/i18n/messages/cli_commands.py - CLI Command Messages

Contains translations for Click CLI commands, help text, and error messages.
"""

from __future__ import annotations

CLI_MESSAGES = {
    # =========================================================================
    # CLI Help Text
    # =========================================================================
    "help_intro": {
        "ko": "VPC Lattice로 VPC 엔드포인트를 허브 계정에 중앙화하고\nspoke 계정 VPC에 공유하는 배포 도구입니다.",
        "en": "Centralizes VPC endpoints in a hub account with VPC Lattice\nand shares them with spoke account VPCs.",
    },
    "help_commands": {
        "ko": "[명령어]",
        "en": "[Commands]",
    },
    "help_all": {
        "ko": "허브 -> spoke-dev -> spoke-test 순서로 전체 배포",
        "en": "Deploy hub, then spoke-dev, then spoke-test",
    },
    "help_hub": {
        "ko": "허브 계정 배포 (엔드포인트 VPC, Lattice, RAM, PHZ)",
        "en": "Deploy the hub account (endpoint VPC, Lattice, RAM, PHZ)",
    },
    "help_spoke_dev": {
        "ko": "spoke-dev 계정 배포",
        "en": "Deploy the spoke-dev account",
    },
    "help_spoke_test": {
        "ko": "spoke-test 계정 배포",
        "en": "Deploy the spoke-test account",
    },
    "help_cleanup": {
        "ko": "모든 리소스를 역순으로 삭제",
        "en": "Delete all resources in reverse order",
    },
    "help_status": {
        "ko": "배포 상태 조회 (읽기 전용)",
        "en": "Show deployment status (read-only)",
    },
    "help_examples": {
        "ko": "[예시]",
        "en": "[Examples]",
    },
    # =========================================================================
    # Option Help
    # =========================================================================
    "opt_hub_profile": {
        "ko": "허브(엔드포인트) 계정 AWS CLI 프로파일",
        "en": "AWS CLI profile of the hub (endpoint) account",
    },
    "opt_spoke_dev_profile": {
        "ko": "spoke-dev 계정 AWS CLI 프로파일",
        "en": "AWS CLI profile of the spoke-dev account",
    },
    "opt_spoke_test_profile": {
        "ko": "spoke-test 계정 AWS CLI 프로파일",
        "en": "AWS CLI profile of the spoke-test account",
    },
    "opt_region": {
        "ko": "AWS 리전",
        "en": "AWS region",
    },
    "opt_prefix": {
        "ko": "스택/리소스 이름 접두사",
        "en": "Stack and resource name prefix",
    },
    "opt_state_dir": {
        "ko": "단계 출력 저장 디렉토리",
        "en": "Directory for stage outputs",
    },
    "opt_verbose": {
        "ko": "API 호출 상세 로그 출력",
        "en": "Print detailed API call logs",
    },
    "opt_yes": {
        "ko": "삭제 확인 프롬프트 생략",
        "en": "Skip the deletion confirmation prompt",
    },
    # =========================================================================
    # Validation / Errors
    # =========================================================================
    "missing_params": {
        "ko": "필수 파라미터가 없습니다: {params}",
        "en": "Missing required parameters: {params}",
    },
    "invalid_config": {
        "ko": "설정 오류: {error}",
        "en": "Invalid configuration: {error}",
    },
    "stage_failed": {
        "ko": "{stage} 단계 실패: {error}",
        "en": "{stage} stage failed: {error}",
    },
    "interrupted": {
        "ko": "사용자에 의해 중단되었습니다.",
        "en": "Interrupted by user.",
    },
    "resolving_accounts": {
        "ko": "spoke 계정 ID 확인 중...",
        "en": "Resolving spoke account IDs...",
    },
    # =========================================================================
    # Cleanup
    # =========================================================================
    "cleanup_title": {
        "ko": "리소스 정리",
        "en": "Resource Cleanup",
    },
    "cleanup_warning": {
        "ko": "'{prefix}' 접두사로 생성된 {region} 리전의 모든 리소스를 삭제합니다.",
        "en": "All resources with prefix '{prefix}' in {region} will be deleted.",
    },
    "cleanup_confirm": {
        "ko": "계속하려면 'yes'를 입력하세요",
        "en": "Type 'yes' to continue",
    },
    "cleanup_cancelled": {
        "ko": "정리가 취소되었습니다.",
        "en": "Cleanup cancelled.",
    },
    "cleanup_partial": {
        "ko": "일부 리소스 삭제에 실패했습니다. 다시 실행하면 남은 리소스만 처리합니다.",
        "en": "Some deletions failed. Re-run cleanup to retry the remaining resources.",
    },
    # =========================================================================
    # All
    # =========================================================================
    "all_done": {
        "ko": "전체 배포 완료",
        "en": "Full deployment complete",
    },
}
