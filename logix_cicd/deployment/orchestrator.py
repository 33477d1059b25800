"""
Provisioning orchestrator

Main orchestration logic for the firmware deployment stage: walks the device
batch strictly in order and runs each device's stage sequence, applying the
per-stage failure policy.

Controller-class devices go through the full sequence:
    upload -> mode-change-pre -> flash -> convert -> download -> mode-change-post
Peripheral devices only go through flash.

There is no timeout or cancellation: a vendor call or flash tool that hangs
blocks the whole batch.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from logix_cicd.core.exceptions import ConfigurationError, ValidationError
from logix_cicd.core.interfaces import IFlashTool, ILogixDesigner, ILogixProject
from logix_cicd.deployment.exceptions import StageExecutionError
from logix_cicd.deployment.models import (
    CONTROLLER_STAGES,
    PERIPHERAL_STAGES,
    BatchReport,
    ControllerMode,
    DeviceDescriptor,
    DeviceOutcome,
    OnFailureAction,
    ProvisioningStage,
    RunContext,
    StageResult,
    StageStatus,
    StepPolicy,
    default_step_policies,
)
from logix_cicd.deployment.naming import (
    DEFAULT_CONTROLLER_TYPES,
    converted_artifact_path,
    is_controller,
    parse_revision,
    upload_artifact_path,
)
from logix_cicd.reporting.console import ConsoleReporter

logger = logging.getLogger(__name__)

STAGE_FAILURE_MESSAGES = {
    ProvisioningStage.UPLOAD: "Upload Failed.",
    ProvisioningStage.MODE_CHANGE_PRE: "Error changing controller mode!",
    ProvisioningStage.FLASH: "Firmware verification & flashing Failed.",
    ProvisioningStage.CONVERT: "Project Conversion Failed.",
    ProvisioningStage.DOWNLOAD: "Download Failed.",
    ProvisioningStage.MODE_CHANGE_POST: "Change to 'Run' mode Failed.",
}


@dataclass
class _DeviceSession:
    """Mutable state carried between the stages of one device"""

    device: DeviceDescriptor
    upload_path: Path
    converted_path: Path | None = None
    project: ILogixProject | None = None


class ProvisioningOrchestrator:
    """
    Verify and flash firmware on a batch of devices

    Example:
        context = RunContext.create(Path("C:/Deployments"))
        orchestrator = ProvisioningOrchestrator(
            context,
            designer=LogixDesignerSdk(),
            flash_tool=ControlFlashTool([settings.flash_tool_path]),
        )
        report = await orchestrator.run(devices)
        sys.exit(report.exit_code)
    """

    def __init__(
        self,
        context: RunContext,
        designer: ILogixDesigner | None,
        flash_tool: IFlashTool,
        controller_types: Iterable[str] = DEFAULT_CONTROLLER_TYPES,
        policies: Mapping[ProvisioningStage, StepPolicy] | None = None,
        reporter: ConsoleReporter | None = None,
        project_extension: str = ".acd",
    ):
        """
        Initialize the orchestrator

        Args:
            context: Shared run timestamp and artifact folder
            designer: Logix Designer SDK (only needed for controller-class devices)
            flash_tool: Firmware flashing tool
            controller_types: Allow-list of controller catalog numbers
            policies: Per-stage failure policies, merged onto the defaults
            reporter: Console reporter for progress output
            project_extension: Extension of uploaded/converted project files
        """
        self.context = context
        self.designer = designer
        self.flash_tool = flash_tool
        self.controller_types = frozenset(controller_types)
        self.policies = default_step_policies()
        self.policies.update(policies or {})
        self.reporter = reporter or ConsoleReporter()
        self.project_extension = project_extension

        self._stage_handlers: dict[ProvisioningStage, Callable[[_DeviceSession], Awaitable[None]]] = {
            ProvisioningStage.UPLOAD: self._upload,
            ProvisioningStage.MODE_CHANGE_PRE: self._mode_change_pre,
            ProvisioningStage.FLASH: self._flash,
            ProvisioningStage.CONVERT: self._convert,
            ProvisioningStage.DOWNLOAD: self._download,
            ProvisioningStage.MODE_CHANGE_POST: self._mode_change_post,
        }

    async def run(self, batch: list[DeviceDescriptor]) -> BatchReport:
        """
        Provision every device in batch order, one at a time

        Args:
            batch: Devices to provision

        Returns:
            BatchReport with one outcome per device

        Raises:
            ValidationError: If the batch is empty
        """
        if not batch:
            raise ValidationError("Device batch is empty", recovery_hint="Add at least one device to the device list")

        report = BatchReport(context=self.context)
        logger.info(f"Provisioning {len(batch)} device(s), run {self.context.timestamp}")

        for index, device in enumerate(batch, start=1):
            logger.info(f"Device {index}/{len(batch)}: {device}")
            report.outcomes.append(await self.provision_device(device))

        report.completed_at = datetime.now()
        logger.info(
            f"Provisioning finished: {len(batch) - report.failed_count} succeeded, {report.failed_count} failed"
        )
        return report

    async def provision_device(self, device: DeviceDescriptor) -> DeviceOutcome:
        """
        Run the stage sequence for one device

        A stage failure never escapes this method; it is recorded in the
        outcome and the stage policy decides whether the device continues.
        """
        controller = is_controller(device.type, self.controller_types)
        outcome = DeviceOutcome(device=device, controller=controller)
        stages = CONTROLLER_STAGES if controller else PERIPHERAL_STAGES
        session = _DeviceSession(
            device=device,
            upload_path=upload_artifact_path(self.context, device.comm_path, self.project_extension),
        )

        self.reporter.section(
            f"STARTING the verification & flashing of the '{device.type}' module located at '{device.comm_path}'."
        )

        for index, stage in enumerate(stages):
            result = await self._run_stage(stage, session)
            outcome.stage_results.append(result)

            if result.status == StageStatus.FAILED and self.policies[stage].on_failure == OnFailureAction.ABORT:
                outcome.aborted_at = stage
                self.reporter.error(f"Aborting the remaining stages for {device}.")
                for skipped in stages[index + 1 :]:
                    outcome.stage_results.append(
                        StageResult(stage=skipped, status=StageStatus.SKIPPED, started_at=datetime.now())
                    )
                break

        if outcome.succeeded:
            self.reporter.status(f"FINISHED {device}: SUCCESS.")
        else:
            self.reporter.error(f"FINISHED {device}: FAILED at '{outcome.failed_stage.value}'.")
        return outcome

    async def _run_stage(self, stage: ProvisioningStage, session: _DeviceSession) -> StageResult:
        """
        Execute a single stage with retries

        Args:
            stage: Stage to execute
            session: State of the device being provisioned

        Returns:
            Stage result
        """
        policy = self.policies[stage]
        handler = self._stage_handlers[stage]
        result = StageResult(stage=stage, status=StageStatus.FAILED, started_at=datetime.now())

        retry_count = 0
        last_error = None

        while retry_count <= policy.retry_count:
            try:
                await handler(session)

                result.status = StageStatus.COMPLETED
                result.completed_at = datetime.now()
                result.retry_count = retry_count
                return result

            except StageExecutionError as e:
                last_error = str(e)
                logger.warning(f"Stage {stage.value} failed for {session.device} (attempt {retry_count + 1}): {e}")
                self.reporter.error(last_error)

            except Exception as e:
                wrapped = StageExecutionError(stage.value, str(e), device=str(session.device), original_error=e)
                last_error = str(wrapped)
                logger.warning(
                    f"Stage {stage.value} failed for {session.device} (attempt {retry_count + 1}): "
                    f"{type(e).__name__}: {e}"
                )
                self.reporter.error(last_error)

            retry_count += 1

            if retry_count <= policy.retry_count:
                self.reporter.status(f"Retrying '{stage.value}' in {policy.retry_delay} seconds...")
                await asyncio.sleep(policy.retry_delay)

        # All retries exhausted
        action = "Aborting." if policy.on_failure == OnFailureAction.ABORT else "Continuing."
        self.reporter.error(f"{STAGE_FAILURE_MESSAGES[stage]} {action}")

        result.completed_at = datetime.now()
        result.error = last_error
        result.retry_count = retry_count - 1
        return result

    def _require_designer(self, stage: ProvisioningStage) -> ILogixDesigner:
        if self.designer is None:
            raise ConfigurationError(
                f"Stage '{stage.value}' needs the Logix Designer SDK but none was configured"
            )
        return self.designer

    async def _ensure_program_mode(self, project: ILogixProject) -> None:
        mode = await project.read_controller_mode()
        if mode != ControllerMode.PROGRAM:
            self.reporter.status("Setting controller mode to 'Program'.")
            await project.change_controller_mode(ControllerMode.PROGRAM)

    # Stage handlers

    async def _upload(self, session: _DeviceSession) -> None:
        designer = self._require_designer(ProvisioningStage.UPLOAD)
        self.reporter.status(f"START uploading the target controller's application to '{session.upload_path}'.")
        await designer.upload_to_new_project(session.upload_path, session.device.comm_path)
        self.reporter.status("Upload to New Project Complete.")

    async def _mode_change_pre(self, session: _DeviceSession) -> None:
        designer = self._require_designer(ProvisioningStage.MODE_CHANGE_PRE)
        self.reporter.status("Verifying if controller mode set to 'Program'.")
        session.project = await designer.open_project(session.upload_path)
        await session.project.set_communications_path(session.device.comm_path)
        await self._ensure_program_mode(session.project)

    async def _flash(self, session: _DeviceSession) -> None:
        device = session.device
        self.reporter.status(
            "Start executing the ControlFLASH Plus SDK executable that verifies and flashes the module."
        )
        result = await self.flash_tool.flash(
            device.comm_path,
            device.target_revision,
            on_stdout=self.reporter.line,
            on_stderr=lambda line: self.reporter.line(f"Error: {line}"),
        )
        if not result.succeeded:
            raise StageExecutionError(
                ProvisioningStage.FLASH.value,
                f"flash tool exited with code {result.exit_code}",
                device=str(device),
            )

    async def _convert(self, session: _DeviceSession) -> None:
        designer = self._require_designer(ProvisioningStage.CONVERT)
        device = session.device
        major = parse_revision(device.target_revision).major
        self.reporter.status(f"Converting the application at '{session.upload_path}' to version '{major}'.")

        project = await designer.convert(session.upload_path, major)
        converted_path = converted_artifact_path(self.context, device.comm_path, major, self.project_extension)
        await project.save_as(converted_path, True)

        session.project = project
        session.converted_path = converted_path

    async def _download(self, session: _DeviceSession) -> None:
        designer = self._require_designer(ProvisioningStage.DOWNLOAD)
        device = session.device
        if session.converted_path is None:
            raise StageExecutionError(
                ProvisioningStage.DOWNLOAD.value, "no converted project available", device=str(device)
            )

        self.reporter.status(
            f"Downloading the newly converted project at '{session.converted_path}' to '{device.comm_path}'."
        )
        session.project = await designer.open_project(session.converted_path)
        await session.project.set_communications_path(device.comm_path)
        await self._ensure_program_mode(session.project)
        await session.project.download()
        await session.project.save()
        self.reporter.status("Download Complete.")

    async def _mode_change_post(self, session: _DeviceSession) -> None:
        device = session.device
        self.reporter.status(f"Setting the '{device.type}' controller at '{device.comm_path}' back to 'Run' mode.")
        if session.project is None:
            raise StageExecutionError(
                ProvisioningStage.MODE_CHANGE_POST.value, "no project is connected to the controller", device=str(device)
            )
        await session.project.change_controller_mode(ControllerMode.RUN)
