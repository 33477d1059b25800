"""
CI housekeeping plan

Which generated files the CI unit-test stage keeps in the repository.
"""

from pathlib import Path

from logix_cicd.core.config import Settings
from logix_cicd.housekeeping.retention import RetentionRule


def build_retention_plan(repo_path: Path, settings: Settings) -> list[RetentionRule]:
    """
    Build the retention rules for a repository checkout

    Args:
        repo_path: Root of the local repository
        settings: Settings holding the folders and retention counts

    Returns:
        Rules for text reports, Excel reports and generated L5X/ACD/BAK files
    """
    repo_path = Path(repo_path)
    generated = repo_path / settings.generated_files_dir
    return [
        RetentionRule(repo_path / settings.text_reports_dir, settings.text_reports_to_retain, ".txt", "text reports"),
        RetentionRule(
            repo_path / settings.excel_reports_dir, settings.excel_reports_to_retain, ".xlsx", "excel reports"
        ),
        RetentionRule(generated, settings.generated_l5x_files_to_retain, ".L5X", "L5X files"),
        RetentionRule(generated, settings.generated_acd_files_to_retain, ".ACD", "ACD files"),
        RetentionRule(generated, settings.generated_bak_files_to_retain, ".BAK", "BAK files"),
    ]
