"""
Deployment models and data structures

Defines the core data models for the firmware deployment stage: the devices
read from the device list, the provisioning stages and their failure
policies, and the per-stage / per-device / per-batch results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class ControllerMode(str, Enum):
    """Operating mode of a controller-class device"""

    PROGRAM = "program"
    RUN = "run"
    TEST = "test"
    FAULTED = "faulted"
    UNKNOWN = "unknown"


class ProvisioningStage(str, Enum):
    """Stage of the per-device provisioning sequence"""

    UPLOAD = "upload"
    MODE_CHANGE_PRE = "mode-change-pre"
    FLASH = "flash"
    CONVERT = "convert"
    DOWNLOAD = "download"
    MODE_CHANGE_POST = "mode-change-post"


CONTROLLER_STAGES: tuple[ProvisioningStage, ...] = (
    ProvisioningStage.UPLOAD,
    ProvisioningStage.MODE_CHANGE_PRE,
    ProvisioningStage.FLASH,
    ProvisioningStage.CONVERT,
    ProvisioningStage.DOWNLOAD,
    ProvisioningStage.MODE_CHANGE_POST,
)

PERIPHERAL_STAGES: tuple[ProvisioningStage, ...] = (ProvisioningStage.FLASH,)


class StageStatus(str, Enum):
    """Status of an individual stage"""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class OnFailureAction(str, Enum):
    """Action to take when a stage fails"""

    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class DeviceDescriptor:
    """
    One row of the device list

    Attributes:
        type: Catalog number of the module (e.g. 1756-L85E)
        comm_path: Communication path to the module (opaque to this toolkit)
        target_revision: Firmware revision to flash, "major.minor"
        row: Source row in the input file (only used in messages)
    """

    type: str
    comm_path: str
    target_revision: str
    row: int | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"'{self.type}' at '{self.comm_path}'"


@dataclass(frozen=True)
class RevisionParts:
    """Firmware revision split at the first '.'"""

    major: int
    minor: str


@dataclass
class StepPolicy:
    """
    Failure policy for one provisioning stage

    Attributes:
        on_failure: Abort the device or continue with the next stage
        retry_count: Number of retries on failure
        retry_delay: Delay between retries in seconds
    """

    on_failure: OnFailureAction = OnFailureAction.CONTINUE
    retry_count: int = 0
    retry_delay: float = 5

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must be zero or greater")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be zero or greater")


def default_step_policies() -> dict[ProvisioningStage, StepPolicy]:
    """
    Default policy table

    Only a failure to put the controller into Program mode stops work on
    the device; every other failure is logged and the sequence carries on
    with whatever state is available.
    """
    policies = {stage: StepPolicy() for stage in ProvisioningStage}
    policies[ProvisioningStage.MODE_CHANGE_PRE] = StepPolicy(on_failure=OnFailureAction.ABORT)
    return policies


@dataclass(frozen=True)
class RunContext:
    """
    Values shared by every device in one deployment run

    Attributes:
        started_at: When the run started
        timestamp: started_at rendered for artifact names
        artifact_dir: Folder receiving uploaded and converted projects
    """

    started_at: datetime
    timestamp: str
    artifact_dir: Path

    @classmethod
    def create(
        cls,
        artifact_dir: Path,
        started_at: datetime | None = None,
        timestamp_format: str = "%Y%m%d%H%M%S",
    ) -> "RunContext":
        started = started_at or datetime.now()
        return cls(
            started_at=started,
            timestamp=started.strftime(timestamp_format),
            artifact_dir=Path(artifact_dir),
        )


@dataclass
class FlashResult:
    """Outcome of one ControlFLASH Plus SDK invocation"""

    exit_code: int
    stdout_lines: list[str] = field(default_factory=list)
    stderr_lines: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass
class StageResult:
    """
    Result of one stage for one device

    Attributes:
        stage: Provisioning stage
        status: Stage status
        started_at: Start timestamp
        completed_at: Completion timestamp
        error: Error message if failed
        retry_count: Number of retries attempted
    """

    stage: ProvisioningStage
    status: StageStatus
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None
    retry_count: int = 0


@dataclass
class DeviceOutcome:
    """Everything that happened to one device"""

    device: DeviceDescriptor
    controller: bool
    stage_results: list[StageResult] = field(default_factory=list)
    aborted_at: ProvisioningStage | None = None

    @property
    def failures(self) -> list[StageResult]:
        return [r for r in self.stage_results if r.status == StageStatus.FAILED]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def failed_stage(self) -> ProvisioningStage | None:
        """Stage of the first failure, or None on success"""
        failures = self.failures
        return failures[0].stage if failures else None

    @property
    def cause(self) -> str | None:
        """Error detail of the first failure, or None on success"""
        failures = self.failures
        return failures[0].error if failures else None

    def get_stage_result(self, stage: ProvisioningStage) -> StageResult | None:
        for result in self.stage_results:
            if result.stage == stage:
                return result
        return None


@dataclass
class BatchReport:
    """Outcomes of a whole deployment run, in batch order"""

    context: RunContext
    outcomes: list[DeviceOutcome] = field(default_factory=list)
    completed_at: datetime | None = None

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)

    @property
    def succeeded(self) -> bool:
        return self.failed_count == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
