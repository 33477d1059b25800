"""
Logix Designer SDK adapter

Binds the orchestrator's ILogixDesigner protocol to Rockwell Automation's
Logix Designer SDK Python package (logix_designer_sdk). The vendor package
ships with the SDK installer rather than PyPI, so it is imported on first
use; batches without controller-class devices never need it.
"""

import logging
from pathlib import Path
from typing import Any

from logix_cicd.core.exceptions import ConfigurationError
from logix_cicd.deployment.models import ControllerMode

logger = logging.getLogger(__name__)

_SDK_MODULE = "logix_designer_sdk"


def load_sdk() -> Any:
    """
    Import the vendor SDK module

    Raises:
        ConfigurationError: If the Logix Designer SDK is not installed
    """
    import importlib

    try:
        return importlib.import_module(_SDK_MODULE)
    except ImportError as e:
        raise ConfigurationError(
            f"Logix Designer SDK is not available: {e}",
            recovery_hint="Install the Logix Designer SDK Python wheel from the SDK installation folder",
        )


def _mode_from_sdk(value: Any) -> ControllerMode:
    name = getattr(value, "name", str(value)).lower()
    try:
        return ControllerMode(name)
    except ValueError:
        logger.warning(f"Unrecognised controller mode reported by SDK: {value!r}")
        return ControllerMode.UNKNOWN


class LogixProjectHandle:
    """ILogixProject backed by an SDK LogixProject instance"""

    def __init__(self, sdk: Any, project: Any):
        self._sdk = sdk
        self._project = project

    async def set_communications_path(self, comm_path: str) -> None:
        await self._project.set_communications_path(comm_path)

    async def read_controller_mode(self) -> ControllerMode:
        return _mode_from_sdk(await self._project.read_controller_mode())

    async def change_controller_mode(self, mode: ControllerMode) -> None:
        requested = getattr(self._sdk.RequestedControllerMode, mode.name)
        await self._project.change_controller_mode(requested)

    async def download(self) -> None:
        await self._project.download()

    async def save(self) -> None:
        await self._project.save()

    async def save_as(self, path: Path, overwrite: bool = True) -> None:
        await self._project.save_as(str(path), overwrite)


class LogixDesignerSdk:
    """
    ILogixDesigner backed by the vendor SDK

    The SDK module is resolved lazily, so constructing this class never fails;
    the first project operation raises ConfigurationError if the SDK is missing.
    """

    def __init__(self, sdk: Any | None = None):
        self._sdk = sdk

    @property
    def sdk(self) -> Any:
        if self._sdk is None:
            self._sdk = load_sdk()
        return self._sdk

    def _event_logger(self) -> Any:
        return self.sdk.StdOutEventLogger()

    async def upload_to_new_project(self, project_path: Path, comm_path: str) -> LogixProjectHandle:
        project = await self.sdk.LogixProject.upload_to_new_project(
            str(project_path), comm_path, self._event_logger()
        )
        return LogixProjectHandle(self.sdk, project)

    async def open_project(self, project_path: Path) -> LogixProjectHandle:
        project = await self.sdk.LogixProject.open_logix_project(str(project_path), self._event_logger())
        return LogixProjectHandle(self.sdk, project)

    async def convert(self, project_path: Path, major_revision: int) -> LogixProjectHandle:
        project = await self.sdk.LogixProject.convert(str(project_path), major_revision, self._event_logger())
        return LogixProjectHandle(self.sdk, project)
