"""
Deployment exceptions

Provides a consistent exception structure for deployment-related errors
with clear error messages, recovery hints, and context information.
"""

from typing import Any

from logix_cicd.core.exceptions import LogixCicdError, ValidationError


class DeploymentError(LogixCicdError):
    """
    Base exception for deployment errors

    Attributes:
        context: Additional context information
    """

    component = "Deployment"

    def __init__(
        self,
        message: str,
        recovery_hint: str = "",
        context: dict[str, Any] | None = None,
    ):
        self.context = context or {}
        super().__init__(message, recovery_hint=recovery_hint)


class DeviceListError(DeploymentError):
    """
    Error loading the device list

    Attributes:
        file_path: Path to the device list
        row: Optional row where the error occurred
    """

    component = "Device list"

    def __init__(
        self,
        message: str,
        file_path: str = "",
        row: int | None = None,
        recovery_hint: str = "",
    ):
        self.file_path = file_path
        self.row = row

        location = ""
        if file_path:
            location = f" in '{file_path}'"
            if row is not None:
                location += f" at row {row}"

        full_message = f"Failed to load device list{location}: {message}"

        default_hint = "Check the device list layout: type, communication path and target revision per row"
        super().__init__(
            full_message,
            recovery_hint=recovery_hint or default_hint,
            context={"file_path": file_path, "row": row},
        )


class PolicyLoadError(DeploymentError):
    """Error loading a stage policy file"""

    component = "Stage policy"

    def __init__(self, message: str, file_path: str = ""):
        self.file_path = file_path
        location = f" '{file_path}'" if file_path else ""
        super().__init__(
            f"Failed to load stage policy file{location}: {message}",
            recovery_hint="Map stage names to {on_failure: abort|continue, retry_count, retry_delay}",
            context={"file_path": file_path},
        )


class InvalidRevisionError(DeploymentError, ValidationError):
    """Target revision is not of the form 'major.minor'"""

    component = "Device list"

    def __init__(self, revision: str):
        self.revision = revision
        super().__init__(
            f"Invalid target revision '{revision}'",
            recovery_hint="Use '<major>.<minor>' with a numeric major revision, e.g. '33.011'",
            context={"revision": revision},
        )


class FlashToolError(DeploymentError):
    """The ControlFLASH Plus SDK executable could not be started"""

    component = "Flash tool"

    def __init__(self, message: str, command: list[str] | None = None):
        self.command = command or []
        super().__init__(
            message,
            recovery_hint="Set FLASH_TOOL_PATH to the ControlFlash_SDK executable",
            context={"command": self.command},
        )


class StageExecutionError(DeploymentError):
    """
    Error executing one provisioning stage

    Attributes:
        stage: Stage that failed
        device: Device description
        original_error: The underlying exception if any
    """

    def __init__(
        self,
        stage: str,
        message: str,
        device: str = "",
        original_error: Exception | None = None,
    ):
        self.stage = stage
        self.device = device
        self.original_error = original_error

        full_message = f"Stage '{stage}' failed: {message}"
        if device:
            full_message = f"Stage '{stage}' failed for {device}: {message}"

        super().__init__(
            full_message,
            context={
                "stage": stage,
                "device": device,
                "original_error": str(original_error) if original_error else None,
            },
        )
