"""
Housekeeping - retention of generated reports and project files
"""

from logix_cicd.housekeeping.plan import build_retention_plan
from logix_cicd.housekeeping.retention import (
    RetentionManager,
    RetentionReport,
    RetentionRule,
    file_creation_time,
)

__all__ = [
    "build_retention_plan",
    "RetentionManager",
    "RetentionReport",
    "RetentionRule",
    "file_creation_time",
]
