"""
Deployment - firmware verification and flashing of Logix devices

The orchestrator lives in logix_cicd.deployment.orchestrator; it is not
re-exported here because logix_cicd.core.interfaces imports this package's
models.
"""

from logix_cicd.deployment.exceptions import (
    DeploymentError,
    DeviceListError,
    FlashToolError,
    InvalidRevisionError,
    PolicyLoadError,
    StageExecutionError,
)
from logix_cicd.deployment.models import (
    BatchReport,
    ControllerMode,
    DeviceDescriptor,
    DeviceOutcome,
    FlashResult,
    OnFailureAction,
    ProvisioningStage,
    RevisionParts,
    RunContext,
    StageResult,
    StageStatus,
    StepPolicy,
    default_step_policies,
)
from logix_cicd.deployment.naming import (
    converted_artifact_path,
    is_controller,
    parse_revision,
    sanitize_comm_path,
    upload_artifact_path,
)

__all__ = [
    "DeploymentError",
    "DeviceListError",
    "FlashToolError",
    "InvalidRevisionError",
    "PolicyLoadError",
    "StageExecutionError",
    "BatchReport",
    "ControllerMode",
    "DeviceDescriptor",
    "DeviceOutcome",
    "FlashResult",
    "OnFailureAction",
    "ProvisioningStage",
    "RevisionParts",
    "RunContext",
    "StageResult",
    "StageStatus",
    "StepPolicy",
    "default_step_policies",
    "converted_artifact_path",
    "is_controller",
    "parse_revision",
    "sanitize_comm_path",
    "upload_artifact_path",
]
