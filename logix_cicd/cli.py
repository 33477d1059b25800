"""
Command-line interface for Logix CI/CD
"""

import asyncio
import logging
import sys
from contextlib import nullcontext
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from logix_cicd import __version__
from logix_cicd.core.config import get_settings
from logix_cicd.core.exceptions import ResourceNotFoundError, ValidationError
from logix_cicd.deployment.exceptions import DeviceListError, PolicyLoadError
from logix_cicd.deployment.flash_tool import ControlFlashTool
from logix_cicd.deployment.loader import DeviceListLoader, ExcelLayout, load_step_policies
from logix_cicd.deployment.logix_sdk import LogixDesignerSdk
from logix_cicd.deployment.models import BatchReport, RunContext
from logix_cicd.deployment.orchestrator import ProvisioningOrchestrator
from logix_cicd.housekeeping.plan import build_retention_plan
from logix_cicd.housekeeping.retention import RetentionManager
from logix_cicd.reporting.audit import LOG_FORMAT, AuditSink
from logix_cicd.reporting.build_info import BuildInfo, print_build_info
from logix_cicd.reporting.console import ConsoleReporter, final_result_banner, print_stage_banner

console = Console()

EXIT_INVALID_INPUT = 2


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Logix CI/CD - firmware deployment and CI housekeeping for Studio 5000 projects"""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def _print_deployment_summary(report: BatchReport, reporter: ConsoleReporter) -> None:
    table = Table(title="Deployment Summary", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim")
    table.add_column("Device Type", style="cyan")
    table.add_column("Comm Path", style="white")
    table.add_column("Revision", style="white")
    table.add_column("Class", style="dim")
    table.add_column("Result", style="white")
    table.add_column("Failed Stage", style="yellow")
    table.add_column("Cause", style="dim", overflow="fold")

    for index, outcome in enumerate(report.outcomes, start=1):
        device = outcome.device
        table.add_row(
            str(index),
            device.type,
            device.comm_path,
            device.target_revision,
            "controller" if outcome.controller else "module",
            "[green]SUCCESS[/green]" if outcome.succeeded else "[red]FAILED[/red]",
            outcome.failed_stage.value if outcome.failed_stage else "",
            (outcome.cause or "").splitlines()[0] if outcome.cause else "",
        )

    reporter.console.print()
    reporter.console.print(table)


@main.command()
@click.argument("device_list", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("artifact_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option("--flash-tool", type=click.Path(path_type=Path), default=None, help="ControlFLASH Plus SDK executable")
@click.option(
    "--policy-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file overriding the per-stage failure policies",
)
@click.option(
    "--report-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write the console output to a timestamped text report here",
)
@click.option(
    "--retain-reports",
    type=click.IntRange(min=0),
    default=None,
    help="Number of text reports to keep in --report-dir (default: from settings)",
)
def deploy(
    device_list: Path,
    artifact_dir: Path,
    flash_tool: Path | None,
    policy_file: Path | None,
    report_dir: Path | None,
    retain_reports: int | None,
) -> None:
    """Verify and flash firmware on every device in DEVICE_LIST"""
    settings = get_settings()
    artifact_dir.mkdir(parents=True, exist_ok=True)
    context = RunContext.create(artifact_dir, timestamp_format=settings.timestamp_format)

    sink = AuditSink(report_dir / f"{context.timestamp}_deployment.txt") if report_dir else nullcontext()

    with sink:
        reporter = ConsoleReporter(width=settings.console_width)
        print_stage_banner("CD FIRMWARE DEPLOYMENT STAGE", console=reporter.console, width=settings.console_width)

        try:
            devices = DeviceListLoader.load_from_file(device_list, ExcelLayout.from_settings(settings))
            policies = load_step_policies(policy_file or settings.step_policy_file)
        except (DeviceListError, PolicyLoadError) as e:
            reporter.error(str(e))
            exit_code = EXIT_INVALID_INPUT
        else:
            orchestrator = ProvisioningOrchestrator(
                context,
                designer=LogixDesignerSdk(),
                flash_tool=ControlFlashTool([flash_tool or settings.flash_tool_path]),
                controller_types=settings.controller_types,
                policies=policies,
                reporter=reporter,
                project_extension=settings.project_extension,
            )
            report = asyncio.run(orchestrator.run(devices))

            _print_deployment_summary(report, reporter)
            final_result_banner(
                report.failed_count, stage="DEPLOYMENT", console=reporter.console, width=settings.console_width
            )
            exit_code = report.exit_code

    if report_dir:
        keep = settings.text_reports_to_retain if retain_reports is None else retain_reports
        RetentionManager(ConsoleReporter(width=settings.console_width)).retain_most_recent(report_dir, keep, ".txt")

    sys.exit(exit_code)


@main.command()
@click.argument("directory", type=click.Path(path_type=Path))
@click.option("--keep", "-k", type=int, required=True, help="Number of most recent files to keep")
@click.option("--extension", "-e", required=True, help="File extension including the leading '.', e.g. .txt")
def retain(directory: Path, keep: int, extension: str) -> None:
    """Keep only the most recently created EXTENSION files in DIRECTORY"""
    settings = get_settings()
    reporter = ConsoleReporter(width=settings.console_width)

    try:
        report = RetentionManager(reporter).retain_most_recent(directory, keep, extension)
    except (ValidationError, ResourceNotFoundError) as e:
        reporter.error(str(e))
        sys.exit(EXIT_INVALID_INPUT)

    console.print(
        f"\nKept [green]{len(report.retained)}[/green], deleted [yellow]{len(report.deleted)}[/yellow], "
        f"errors [red]{len(report.errors)}[/red]\n"
    )
    sys.exit(0 if report.succeeded else 1)


@main.command("ci-finalize")
@click.argument("repo_path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--failures", type=click.IntRange(min=0), required=True, help="Number of failed unit test cases")
@click.option("--commit-name", default="", help="Author of the most recent commit")
@click.option("--commit-email", default="", help="Author email of the most recent commit")
@click.option("--commit-message", default="", help="Message of the most recent commit")
@click.option("--commit-hash", default="", help="Hash of the most recent commit")
@click.option("--job-name", default="", help="Jenkins job name")
@click.option("--build-number", default="", help="Jenkins build number")
def ci_finalize(
    repo_path: Path,
    failures: int,
    commit_name: str,
    commit_email: str,
    commit_message: str,
    commit_hash: str,
    job_name: str,
    build_number: str,
) -> None:
    """Write the unit test report, trim generated files and print the final result"""
    settings = get_settings()
    timestamp = datetime.now().strftime(settings.timestamp_format)
    report_path = repo_path / settings.text_reports_dir / f"{timestamp}_unittestfile.txt"
    info = BuildInfo(
        commit_name=commit_name,
        commit_email=commit_email,
        commit_message=commit_message,
        commit_hash=commit_hash,
        job_name=job_name,
        build_number=build_number,
    )

    with AuditSink(report_path):
        reporter = ConsoleReporter(width=settings.console_width)
        print_stage_banner("CI UNIT TEST STAGE", console=reporter.console, width=settings.console_width)
        print_build_info(info, reporter.console)

        reporter.section("START retaining the most recent generated files.")
        RetentionManager(reporter).apply(build_retention_plan(repo_path, settings))

        final_result_banner(failures, stage="UNIT TEST", console=reporter.console, width=settings.console_width)

    sys.exit(1 if failures > 0 else 0)


@main.command()
@click.option("--verbose", "-v", is_flag=True, help="Show detailed information")
def verify(verbose: bool) -> None:
    """Verify installation and configuration"""
    from logix_cicd.core.exceptions import ConfigurationError
    from logix_cicd.deployment.logix_sdk import load_sdk

    console.print(Panel.fit(f"[bold cyan]Logix CI/CD[/bold cyan] {__version__}", border_style="cyan"))

    checks = []
    errors = []
    warnings = []

    # 1. Python version check
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    python_ok = sys.version_info >= (3, 10)
    checks.append(("Python Version", python_version, "✅" if python_ok else "❌"))
    if not python_ok:
        errors.append(f"Python 3.10+ required, found {python_version}")

    # 2. Settings
    try:
        settings = get_settings()
        checks.append(("Settings", "loaded", "✅"))
    except Exception as e:
        checks.append(("Settings", "ERROR", "❌"))
        errors.append(f"Settings could not be loaded: {e}")
        settings = None

    if settings is not None:
        # 3. ControlFLASH Plus SDK executable
        flash_ok = settings.flash_tool_path.exists()
        checks.append(("ControlFLASH Plus SDK", str(settings.flash_tool_path), "✅" if flash_ok else "⚠️"))
        if not flash_ok:
            warnings.append("Flash tool not found (set FLASH_TOOL_PATH or pass --flash-tool)")

        # 4. Stage policy file
        if settings.step_policy_file:
            try:
                load_step_policies(settings.step_policy_file)
                checks.append(("Stage Policy File", str(settings.step_policy_file), "✅"))
            except PolicyLoadError as e:
                checks.append(("Stage Policy File", str(settings.step_policy_file), "❌"))
                errors.append(str(e))

        if verbose:
            checks.append(("Controller Types", ", ".join(settings.controller_types), "✅"))
            checks.append(("Text Reports Folder", str(settings.text_reports_dir), "✅"))
            checks.append(("Generated Files Folder", str(settings.generated_files_dir), "✅"))

    # 5. Logix Designer SDK (needed only for controller-class devices)
    try:
        load_sdk()
        checks.append(("Logix Designer SDK", "installed", "✅"))
    except ConfigurationError:
        checks.append(("Logix Designer SDK", "NOT INSTALLED", "⚠️"))
        warnings.append("Logix Designer SDK not installed (controller devices cannot be provisioned)")

    # 6. Dependencies check
    for pkg in ["openpyxl", "yaml", "pydantic_settings", "rich"]:
        try:
            __import__(pkg)
            if verbose:
                checks.append((f"Package: {pkg}", "installed", "✅"))
        except ImportError:
            checks.append((f"Package: {pkg}", "NOT INSTALLED", "❌"))
            errors.append(f"Required package '{pkg}' not installed")

    # 7. .env file check (optional)
    env_file = Path(".env")
    env_ok = env_file.exists()
    if verbose or not env_ok:
        checks.append((".env Configuration", str(env_file.absolute()), "✅" if env_ok else "⚠️"))
        if not env_ok:
            warnings.append(".env file not found (defaults are used)")

    table = Table(title="Installation Verification", show_header=True, header_style="bold cyan")
    table.add_column("Check", style="white")
    table.add_column("Location/Value", style="dim")
    table.add_column("Status", style="white")

    for check_name, check_value, check_status in checks:
        if len(check_value) > 60 and not verbose:
            check_value = "..." + check_value[-57:]
        table.add_row(check_name, check_value, check_status)

    console.print(table)
    console.print()

    if warnings:
        console.print("[bold yellow]⚠️  Warnings:[/bold yellow]")
        for warning in warnings:
            console.print(f"  • {warning}")
        console.print()

    if errors:
        console.print("[bold red]❌ Errors:[/bold red]")
        for error in errors:
            console.print(f"  • {error}")
        console.print()
        sys.exit(1)

    if not warnings:
        console.print("[bold green]✅ All checks passed![/bold green]\n")
    else:
        console.print("[bold yellow]✅ Installation is functional but has warnings.[/bold yellow]\n")


if __name__ == "__main__":
    main()
