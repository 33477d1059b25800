"""
Tests for the ControlFLASH Plus SDK subprocess wrapper

A small Python script stands in for the vendor executable.
"""

import sys
import textwrap

import pytest

from logix_cicd.deployment.exceptions import FlashToolError
from logix_cicd.deployment.flash_tool import ControlFlashTool

FAKE_FLASH_SCRIPT = textwrap.dedent(
    """
    import sys

    comm_path, revision = sys.argv[1], sys.argv[2]
    print(f"Verifying {comm_path}")
    print()
    print(f"Flashing revision {revision}")
    sys.stdout.flush()
    if revision == "0.000":
        print("Revision not available", file=sys.stderr)
        sys.exit(4)
    """
)


@pytest.fixture
def flash_tool(tmp_path):
    script = tmp_path / "fake_flash.py"
    script.write_text(FAKE_FLASH_SCRIPT, encoding="utf-8")
    return ControlFlashTool([sys.executable, script])


class TestControlFlashTool:
    """Test running the flash executable"""

    @pytest.mark.asyncio
    async def test_success_streams_stdout(self, flash_tool):
        """Test stdout lines are relayed in order and blank lines dropped"""
        received = []

        result = await flash_tool.flash("AB_ETH-1\\10.0.0.1", "33.011", on_stdout=received.append)

        assert result.succeeded is True
        assert result.exit_code == 0
        assert received == ["Verifying AB_ETH-1\\10.0.0.1", "Flashing revision 33.011"]
        assert result.stdout_lines == received
        assert result.stderr_lines == []

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, flash_tool):
        """Test a failing tool reports its exit code and stderr"""
        errors = []

        result = await flash_tool.flash("AB_ETH-1\\10.0.0.1", "0.000", on_stderr=errors.append)

        assert result.succeeded is False
        assert result.exit_code == 4
        assert errors == ["Revision not available"]

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        """Test a missing executable raises FlashToolError"""
        tool = ControlFlashTool([tmp_path / "ControlFlash_SDK.exe"])

        with pytest.raises(FlashToolError, match="Cannot start flash tool"):
            await tool.flash("AB_ETH-1\\10.0.0.1", "33.011")

    def test_empty_command_rejected(self):
        """Test an empty command is rejected"""
        with pytest.raises(ValueError):
            ControlFlashTool([])


LONG_LINE_SCRIPT = textwrap.dedent(
    """
    import sys

    sys.stdout.write("Progress " + "#" * 100000 + "\\n")
    sys.stdout.write("Flash complete\\n")
    sys.stderr.write("Warning " + "!" * 70000)
    """
)


class TestLongOutput:
    """Test output lines longer than the stream reader limit"""

    @pytest.mark.asyncio
    async def test_line_over_64_kib(self, tmp_path):
        """Test a 100 000 character progress line is relayed whole and the exit code kept"""
        script = tmp_path / "long_flash.py"
        script.write_text(LONG_LINE_SCRIPT, encoding="utf-8")
        tool = ControlFlashTool([sys.executable, script])
        received = []

        result = await tool.flash("AB_ETH-1\\10.0.0.1", "33.011", on_stdout=received.append)

        assert result.exit_code == 0
        assert received == ["Progress " + "#" * 100000, "Flash complete"]
        assert result.stderr_lines == ["Warning " + "!" * 70000]

    @pytest.mark.asyncio
    async def test_callback_error_stops_tool(self, flash_tool):
        """Test a failing output callback propagates after the tool is stopped"""

        def broken_callback(line):
            raise RuntimeError("console closed")

        with pytest.raises(RuntimeError, match="console closed"):
            await flash_tool.flash("AB_ETH-1\\10.0.0.1", "33.011", on_stdout=broken_callback)
