"""
Device list loader - Excel/YAML parsing and validation

Handles loading the ordered device batch from the deployment workbook (or a
YAML equivalent) and loading stage policy overrides from YAML.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import openpyxl
import yaml

from logix_cicd.core.exceptions import ValidationError
from logix_cicd.deployment.exceptions import DeviceListError, PolicyLoadError
from logix_cicd.deployment.models import (
    DeviceDescriptor,
    OnFailureAction,
    ProvisioningStage,
    StepPolicy,
    default_step_policies,
)
from logix_cicd.deployment.naming import parse_revision

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")
YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class ExcelLayout:
    """
    Where the devices live in the deployment workbook (1-based)

    The number of devices is the count of non-blank cells in the reference
    column minus the header rows above the table that also use that column.
    """

    first_row: int = 7
    reference_column: int = 2
    header_rows: int = 2
    type_column: int = 2
    comm_path_column: int = 3
    revision_column: int = 4

    @classmethod
    def from_settings(cls, settings: Any) -> "ExcelLayout":
        return cls(
            first_row=settings.device_list_first_row,
            reference_column=settings.device_list_reference_column,
            header_rows=settings.device_list_header_rows,
            type_column=settings.device_type_column,
            comm_path_column=settings.comm_path_column,
            revision_column=settings.target_revision_column,
        )


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class DeviceListLoader:
    """
    Load and validate device lists

    Example:
        devices = DeviceListLoader.load_from_file(Path("FirmwareDeployment.xlsx"))
    """

    @staticmethod
    def load_from_file(file_path: Path, layout: ExcelLayout | None = None) -> list[DeviceDescriptor]:
        """
        Load a device list, choosing the parser from the file suffix

        Raises:
            DeviceListError: If the file is missing, unsupported or invalid
        """
        suffix = file_path.suffix.lower()
        if suffix in EXCEL_SUFFIXES:
            return DeviceListLoader.load_from_excel(file_path, layout or ExcelLayout())
        if suffix in YAML_SUFFIXES:
            return DeviceListLoader.load_from_yaml(file_path)
        raise DeviceListError(
            f"Unsupported file type '{file_path.suffix}'",
            file_path=str(file_path),
            recovery_hint=f"Use one of: {', '.join(EXCEL_SUFFIXES + YAML_SUFFIXES)}",
        )

    @staticmethod
    def load_from_excel(file_path: Path, layout: ExcelLayout | None = None) -> list[DeviceDescriptor]:
        """
        Load devices from the first worksheet of a workbook

        Args:
            file_path: Path to the .xlsx workbook
            layout: Row/column layout of the device table

        Returns:
            Devices in row order

        Raises:
            DeviceListError: If the workbook cannot be read or a row is invalid
        """
        layout = layout or ExcelLayout()
        if not file_path.exists():
            raise DeviceListError("File not found", file_path=str(file_path))

        try:
            workbook = openpyxl.load_workbook(file_path, data_only=True)
        except Exception as e:
            raise DeviceListError(f"Error reading workbook: {e}", file_path=str(file_path))

        try:
            sheet = workbook.worksheets[0]
            rows = list(sheet.iter_rows(values_only=True))
        finally:
            workbook.close()

        def cell(row_number: int, column: int) -> Any:
            if row_number > len(rows):
                return None
            values = rows[row_number - 1]
            return values[column - 1] if column <= len(values) else None

        populated = sum(
            1 for row_number in range(1, len(rows) + 1) if _cell_text(cell(row_number, layout.reference_column))
        )
        device_count = populated - layout.header_rows
        logger.debug(f"{file_path.name}: {populated} populated reference cells, {device_count} devices")

        devices = []
        for row_number in range(layout.first_row, layout.first_row + max(device_count, 0)):
            data = {
                "type": _cell_text(cell(row_number, layout.type_column)),
                "comm_path": _cell_text(cell(row_number, layout.comm_path_column)),
                "target_revision": _cell_text(cell(row_number, layout.revision_column)),
            }
            devices.append(DeviceListLoader._parse_device(data, row_number, file_path))

        return DeviceListLoader._require_devices(devices, file_path)

    @staticmethod
    def load_from_yaml(file_path: Path) -> list[DeviceDescriptor]:
        """
        Load devices from a YAML file with a top-level 'devices' list

        Raises:
            DeviceListError: If the YAML cannot be parsed or an entry is invalid
        """
        if not file_path.exists():
            raise DeviceListError("File not found", file_path=str(file_path))

        try:
            with open(file_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DeviceListError(f"Invalid YAML syntax: {e}", file_path=str(file_path))

        if not isinstance(data, dict) or not isinstance(data.get("devices"), list):
            raise DeviceListError("Expected a top-level 'devices' list", file_path=str(file_path))

        devices = []
        for index, entry in enumerate(data["devices"], start=1):
            if not isinstance(entry, dict):
                raise DeviceListError("Device entry must be a mapping", file_path=str(file_path), row=index)
            normalized = {key: _cell_text(entry.get(key)) for key in ("type", "comm_path", "target_revision")}
            devices.append(DeviceListLoader._parse_device(normalized, index, file_path))

        return DeviceListLoader._require_devices(devices, file_path)

    @staticmethod
    def _parse_device(data: dict[str, str], row: int, file_path: Path) -> DeviceDescriptor:
        for key in ("type", "comm_path", "target_revision"):
            if not data[key]:
                raise DeviceListError(f"Missing '{key}'", file_path=str(file_path), row=row)

        try:
            parse_revision(data["target_revision"])
        except ValidationError:
            raise DeviceListError(
                f"Invalid target revision '{data['target_revision']}' (expected 'major.minor')",
                file_path=str(file_path),
                row=row,
            )

        return DeviceDescriptor(
            type=data["type"],
            comm_path=data["comm_path"],
            target_revision=data["target_revision"],
            row=row,
        )

    @staticmethod
    def _require_devices(devices: list[DeviceDescriptor], file_path: Path) -> list[DeviceDescriptor]:
        if not devices:
            raise DeviceListError("No devices found", file_path=str(file_path))
        logger.info(f"Loaded {len(devices)} device(s) from {file_path}")
        return devices


def load_step_policies(file_path: Path | None = None) -> dict[ProvisioningStage, StepPolicy]:
    """
    Load stage policies, merged onto the defaults

    Args:
        file_path: YAML file mapping stage names to policy fields, or None

    Returns:
        Complete policy table for every stage

    Raises:
        PolicyLoadError: If the file is missing or names an unknown stage/action
    """
    policies = default_step_policies()
    if file_path is None:
        return policies

    if not file_path.exists():
        raise PolicyLoadError("File not found", file_path=str(file_path))

    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise PolicyLoadError(f"Invalid YAML syntax: {e}", file_path=str(file_path))

    if not isinstance(data, dict):
        raise PolicyLoadError("Expected a mapping of stage names", file_path=str(file_path))

    for stage_name, fields in data.items():
        try:
            stage = ProvisioningStage(stage_name)
        except ValueError:
            valid_stages = [s.value for s in ProvisioningStage]
            raise PolicyLoadError(
                f"Unknown stage '{stage_name}'. Valid stages: {', '.join(valid_stages)}",
                file_path=str(file_path),
            )

        fields = fields or {}
        if not isinstance(fields, dict):
            raise PolicyLoadError(f"Policy for '{stage_name}' must be a mapping", file_path=str(file_path))

        current = policies[stage]
        try:
            on_failure = OnFailureAction(fields.get("on_failure", current.on_failure.value))
        except ValueError:
            valid_actions = [a.value for a in OnFailureAction]
            raise PolicyLoadError(
                f"Invalid on_failure action '{fields['on_failure']}'. Valid actions: {', '.join(valid_actions)}",
                file_path=str(file_path),
            )

        try:
            policies[stage] = StepPolicy(
                on_failure=on_failure,
                retry_count=int(fields.get("retry_count", current.retry_count)),
                retry_delay=float(fields.get("retry_delay", current.retry_delay)),
            )
        except (TypeError, ValueError) as e:
            raise PolicyLoadError(f"Invalid policy for '{stage_name}': {e}", file_path=str(file_path))

    logger.info(f"Loaded stage policies from {file_path}")
    return policies
