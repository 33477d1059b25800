"""
Configuration management

Centralized settings using Pydantic BaseSettings for type-safe configuration
with environment variable support.

Tool paths, the controller allow-list, the device workbook layout and the
retention counts live here so a pipeline can override them from the
environment or a .env file.
"""

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_FLASH_TOOL_PATH = Path(
    r"C:\Lab Files\Device Management\ControlFlash_SDK\ControlFlash_SDK"
    r"\bin\x86\Release\net48\ControlFlash_SDK.exe"
)


class Settings(BaseSettings):
    """
    Application settings with environment variable support

    Settings can be overridden via environment variables:
    - FLASH_TOOL_PATH=D:\\Tools\\ControlFlash_SDK.exe
    - CONTROLLER_TYPES='["1756-L75", "1756-L85E", "1756-L83E"]'
    - TEXT_REPORTS_TO_RETAIN=10
    """

    # ControlFLASH Plus SDK executable
    flash_tool_path: Path = DEFAULT_FLASH_TOOL_PATH

    # Device types that need the full project upload/convert/download cycle
    controller_types: list[str] = ["1756-L75", "1756-L85E"]

    # Generated project artifacts
    project_extension: str = ".acd"
    timestamp_format: str = "%Y%m%d%H%M%S"

    # Console / logging
    console_width: int = 110
    log_level: str = "INFO"

    # Optional YAML file overriding the per-stage failure policies
    step_policy_file: Path | None = None

    # Device list workbook layout (1-based rows and columns)
    device_list_first_row: int = 7
    device_list_reference_column: int = 2
    device_list_header_rows: int = 2
    device_type_column: int = 2
    comm_path_column: int = 3
    target_revision_column: int = 4

    # File management (number of most recent files kept per folder/extension)
    text_reports_to_retain: int = 5
    excel_reports_to_retain: int = 5
    generated_acd_files_to_retain: int = 5
    generated_l5x_files_to_retain: int = 5
    generated_bak_files_to_retain: int = 0  # backups are not wanted in the git repo

    # CI folders, relative to the repository root
    text_reports_dir: Path = Path("4-test-reports") / "textreports"
    excel_reports_dir: Path = Path("4-test-reports") / "excelreports"
    generated_files_dir: Path = Path("3-cicd-config") / "ci-teststage" / "X_GeneratedFiles"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "text_reports_to_retain",
        "excel_reports_to_retain",
        "generated_acd_files_to_retain",
        "generated_l5x_files_to_retain",
        "generated_bak_files_to_retain",
    )
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("retention counts must be zero or greater")
        return value

    @field_validator("project_extension")
    @classmethod
    def _leading_dot(cls, value: str) -> str:
        if not value.startswith("."):
            raise ValueError("project_extension must start with '.'")
        return value


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get application settings (singleton)

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        logger.debug(f"Loaded settings: flash_tool_path={_settings.flash_tool_path}")
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment"""
    global _settings
    _settings = None
