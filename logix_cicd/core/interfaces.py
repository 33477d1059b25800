"""
Core interfaces and protocols

Defines the protocols the deployment orchestrator depends on, so the vendor
SDKs stay opaque collaborators and can be replaced by fakes in tests.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from logix_cicd.deployment.models import ControllerMode, FlashResult

LineCallback = Callable[[str], None]


class ILogixProject(Protocol):
    """Protocol for an opened Studio 5000 Logix Designer project"""

    async def set_communications_path(self, comm_path: str) -> None:
        """Point the project at a controller"""
        ...

    async def read_controller_mode(self) -> ControllerMode:
        """Read the operating mode of the connected controller"""
        ...

    async def change_controller_mode(self, mode: ControllerMode) -> None:
        """Request a controller mode transition (PROGRAM or RUN)"""
        ...

    async def download(self) -> None:
        """Download the project to the connected controller"""
        ...

    async def save(self) -> None:
        """Save the project in place"""
        ...

    async def save_as(self, path: Path, overwrite: bool = True) -> None:
        """Save the project to a new file"""
        ...


class ILogixDesigner(Protocol):
    """Protocol for the Logix Designer SDK entry points"""

    async def upload_to_new_project(self, project_path: Path, comm_path: str) -> ILogixProject:
        """Upload the controller's project into a new local file"""
        ...

    async def open_project(self, project_path: Path) -> ILogixProject:
        """Open a local project file"""
        ...

    async def convert(self, project_path: Path, major_revision: int) -> ILogixProject:
        """Convert a local project to another major firmware revision"""
        ...


class IFlashTool(Protocol):
    """Protocol for the firmware flashing tool"""

    async def flash(
        self,
        comm_path: str,
        target_revision: str,
        on_stdout: LineCallback | None = None,
        on_stderr: LineCallback | None = None,
    ) -> FlashResult:
        """Verify the module firmware and flash it to target_revision if needed"""
        ...
