"""
Console reporting

Human-readable progress output for the CI/CD stages: stage banners, section
headers and typed status/error lines. Everything is printed through a rich
Console bound to the current sys.stdout, so an active AuditSink captures it.
"""

from datetime import datetime

from rich.console import Console
from rich.text import Text

DEFAULT_WIDTH = 110


class ConsoleReporter:
    """
    Typed console messages for pipeline logs

    Example:
        reporter = ConsoleReporter()
        reporter.section("STARTING the verification & flashing of '1756-L85E'")
        reporter.status("Upload to New Project Complete.")
        reporter.error("Upload Failed. Aborting.")
    """

    def __init__(self, console: Console | None = None, width: int = DEFAULT_WIDTH):
        self.width = width
        self.console = console or Console(width=width, highlight=False, soft_wrap=True, emoji=False)

    def _timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _message(self, kind: str, message: str, style: str) -> None:
        text = Text(f"[{self._timestamp()}] ", style="dim")
        text.append(f"{kind:<7} ", style=style)
        text.append(message)
        self.console.print(text)

    def section(self, message: str) -> None:
        """Start a new section (one per device, one per pipeline phase)"""
        self.console.print()
        self.console.print("-" * self.width, style="cyan", markup=False)
        self._message("SECTION", message, "bold cyan")

    def status(self, message: str) -> None:
        self._message("STATUS", message, "green")

    def error(self, message: str) -> None:
        self._message("ERROR", message, "bold red")

    def line(self, text: str) -> None:
        """Print text verbatim (e.g. output relayed from an external tool)"""
        self.console.print(text, markup=False, highlight=False, emoji=False)

    def banner(self, text: str) -> None:
        create_banner(text, console=self.console, width=self.width)


def create_banner(text: str, console: Console | None = None, width: int = DEFAULT_WIDTH) -> None:
    """
    Print text centred in a line of '=' characters

    Args:
        text: Banner contents
        console: Console to print on (default: a new console on sys.stdout)
        width: Total banner width
    """
    console = console or Console(width=width, highlight=False)
    label = f" {text} "
    console.print()
    console.print(label.center(width, "="), style="bold", markup=False)


def print_stage_banner(title: str, console: Console | None = None, width: int = DEFAULT_WIDTH) -> None:
    """
    Print the double banner that opens a pipeline stage

    The title is followed by the local date, time and time zone.
    """
    console = console or Console(width=width, highlight=False)
    now = datetime.now().astimezone()
    contents = f"{title} | {now:%Y-%m-%d %H:%M:%S} {now.tzname() or ''}".rstrip()

    console.print()
    console.print("  " + "=" * (width - 4), markup=False)
    console.print("=" * width, markup=False)
    console.print(contents.center(width), style="bold", markup=False)
    console.print("=" * width, markup=False)
    console.print("  " + "=" * (width - 4), markup=False)
    console.print()


def final_result_banner(
    failure_count: int,
    stage: str = "UNIT TEST",
    console: Console | None = None,
    width: int = DEFAULT_WIDTH,
) -> str:
    """
    Print the final PASS/FAIL banner of a stage

    Args:
        failure_count: Number of failed test cases, faults or devices
        stage: Stage name shown in the banner

    Returns:
        "PASS" when failure_count is 0, otherwise "FAIL"
    """
    result = "FAIL" if failure_count > 0 else "PASS"
    create_banner(f"{stage} FINAL RESULT: {result}", console=console, width=width)
    return result
