"""
Shared fixtures: in-memory stand-ins for the Logix Designer SDK and the
ControlFLASH Plus SDK executable, plus a reporter that prints to a buffer.
"""

import io
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from logix_cicd.core.config import reset_settings
from logix_cicd.deployment.models import ControllerMode, FlashResult, RunContext
from logix_cicd.reporting.console import ConsoleReporter


class FakeProject:
    """Opened project; every call is recorded on the owning designer"""

    def __init__(self, designer: "FakeDesigner", path: Path, mode: ControllerMode):
        self.designer = designer
        self.path = path
        self.mode = mode

    async def set_communications_path(self, comm_path):
        self.designer.record("set_comm", comm_path)

    async def read_controller_mode(self):
        self.designer.record("read_mode")
        return self.mode

    async def change_controller_mode(self, mode):
        self.designer.record("change_mode", mode)
        self.mode = mode

    async def download(self):
        self.designer.record("download", self.path)

    async def save(self):
        self.designer.record("save", self.path)

    async def save_as(self, path, overwrite=True):
        self.designer.record("save_as", path)
        self.path = path


class FakeDesigner:
    """
    Logix Designer stand-in

    fail(op, times) makes the next `times` calls of an operation raise
    RuntimeError before doing anything.
    """

    def __init__(self, initial_mode: ControllerMode = ControllerMode.RUN):
        self.initial_mode = initial_mode
        self.calls = []
        self._failures = {}

    def fail(self, op: str, times: int = 1) -> None:
        self._failures[op] = times

    def record(self, op, *args):
        self.calls.append((op, *args))
        remaining = self._failures.get(op, 0)
        if remaining:
            self._failures[op] = remaining - 1
            raise RuntimeError(f"{op} failed")

    @property
    def ops(self):
        return [call[0] for call in self.calls]

    async def upload_to_new_project(self, project_path, comm_path):
        self.record("upload", project_path, comm_path)
        return FakeProject(self, project_path, self.initial_mode)

    async def open_project(self, project_path):
        self.record("open", project_path)
        return FakeProject(self, project_path, self.initial_mode)

    async def convert(self, project_path, major_revision):
        self.record("convert", project_path, major_revision)
        return FakeProject(self, project_path, self.initial_mode)


class FakeFlashTool:
    """ControlFLASH stand-in returning a configured exit code per comm path"""

    def __init__(self, exit_codes=None):
        self.exit_codes = dict(exit_codes or {})
        self.calls = []

    async def flash(self, comm_path, target_revision, on_stdout=None, on_stderr=None):
        self.calls.append((comm_path, target_revision))
        result = FlashResult(exit_code=self.exit_codes.get(comm_path, 0))

        result.stdout_lines.append(f"Flashing {comm_path} to {target_revision}")
        if not result.succeeded:
            result.stderr_lines.append("Module did not respond")

        for line in result.stdout_lines:
            if on_stdout:
                on_stdout(line)
        for line in result.stderr_lines:
            if on_stderr:
                on_stderr(line)
        return result


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Isolate every test from a developer's .env and cached settings"""
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def run_context(tmp_path):
    artifact_dir = tmp_path / "artifacts"
    artifact_dir.mkdir()
    return RunContext.create(artifact_dir, started_at=datetime(2024, 5, 17, 8, 30, 15))


@pytest.fixture
def reporter():
    return ConsoleReporter(console=Console(file=io.StringIO(), width=110, highlight=False))


@pytest.fixture
def fake_designer():
    return FakeDesigner()


@pytest.fixture
def make_designer():
    return FakeDesigner


@pytest.fixture
def fake_flash_tool():
    return FakeFlashTool()


@pytest.fixture
def make_flash_tool():
    return FakeFlashTool
