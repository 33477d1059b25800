"""
Logix CI/CD

Pipeline automation for Studio 5000 Logix projects: firmware deployment to
controllers and modules, and housekeeping for the CI unit-test stage.
"""

__version__ = "1.0.0"

from logix_cicd.deployment.models import BatchReport, DeviceDescriptor, RunContext
from logix_cicd.deployment.orchestrator import ProvisioningOrchestrator
from logix_cicd.housekeeping.retention import RetentionManager
from logix_cicd.reporting.audit import AuditSink

__all__ = [
    "BatchReport",
    "DeviceDescriptor",
    "RunContext",
    "ProvisioningOrchestrator",
    "RetentionManager",
    "AuditSink",
]
