"""
Tests for the Logix Designer SDK adapter, against a mocked SDK module
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from logix_cicd.core.exceptions import ConfigurationError
from logix_cicd.deployment import logix_sdk
from logix_cicd.deployment.logix_sdk import LogixDesignerSdk, load_sdk
from logix_cicd.deployment.models import ControllerMode


def _mock_project(mode_name="PROGRAM"):
    project = MagicMock()
    project.set_communications_path = AsyncMock()
    project.read_controller_mode = AsyncMock(return_value=SimpleNamespace(name=mode_name))
    project.change_controller_mode = AsyncMock()
    project.download = AsyncMock()
    project.save = AsyncMock()
    project.save_as = AsyncMock()
    return project


@pytest.fixture
def sdk_project():
    return _mock_project()


@pytest.fixture
def sdk(sdk_project):
    return SimpleNamespace(
        LogixProject=SimpleNamespace(
            upload_to_new_project=AsyncMock(return_value=sdk_project),
            open_logix_project=AsyncMock(return_value=sdk_project),
            convert=AsyncMock(return_value=sdk_project),
        ),
        StdOutEventLogger=MagicMock(return_value="event-logger"),
        RequestedControllerMode=SimpleNamespace(PROGRAM="requested-program", RUN="requested-run"),
    )


class TestLogixDesignerSdk:
    """Test the adapter calls"""

    @pytest.mark.asyncio
    async def test_upload(self, sdk):
        """Test upload passes the path as text with an event logger"""
        designer = LogixDesignerSdk(sdk)

        await designer.upload_to_new_project(Path("deploy/upload.acd"), "AB_ETH-1\\10.0.0.1")

        sdk.LogixProject.upload_to_new_project.assert_awaited_once_with(
            str(Path("deploy/upload.acd")), "AB_ETH-1\\10.0.0.1", "event-logger"
        )

    @pytest.mark.asyncio
    async def test_convert_and_save_as(self, sdk, sdk_project):
        """Test convert passes the major revision and save_as overwrites"""
        designer = LogixDesignerSdk(sdk)

        project = await designer.convert(Path("upload.acd"), 33)
        await project.save_as(Path("upload_v33.acd"), True)

        sdk.LogixProject.convert.assert_awaited_once_with("upload.acd", 33, "event-logger")
        sdk_project.save_as.assert_awaited_once_with("upload_v33.acd", True)

    @pytest.mark.asyncio
    async def test_mode_round_trip(self, sdk, sdk_project):
        """Test modes are translated in both directions"""
        project = await LogixDesignerSdk(sdk).open_project(Path("upload.acd"))

        mode = await project.read_controller_mode()
        await project.change_controller_mode(ControllerMode.RUN)

        assert mode == ControllerMode.PROGRAM
        sdk_project.change_controller_mode.assert_awaited_once_with("requested-run")

    @pytest.mark.asyncio
    async def test_unrecognised_mode(self, sdk, sdk_project):
        """Test an unknown SDK mode maps to UNKNOWN"""
        sdk_project.read_controller_mode.return_value = SimpleNamespace(name="REMOTE_PROGRAM_LOCKED")
        project = await LogixDesignerSdk(sdk).open_project(Path("upload.acd"))

        assert await project.read_controller_mode() == ControllerMode.UNKNOWN


class TestLoadSdk:
    """Test lazy SDK import"""

    def test_missing_sdk(self, monkeypatch):
        """Test a missing SDK package raises ConfigurationError"""
        monkeypatch.setattr(logix_sdk, "_SDK_MODULE", "logix_designer_sdk_not_installed")

        with pytest.raises(ConfigurationError, match="Logix Designer SDK is not available"):
            load_sdk()

    def test_construction_does_not_import(self, monkeypatch):
        """Test the SDK is only imported on first use"""
        monkeypatch.setattr(logix_sdk, "_SDK_MODULE", "logix_designer_sdk_not_installed")

        designer = LogixDesignerSdk()

        with pytest.raises(ConfigurationError):
            designer.sdk
