"""
Reporting - console output, text reports and build metadata
"""

from logix_cicd.reporting.audit import AuditSink, DualWriter
from logix_cicd.reporting.build_info import BuildInfo, print_build_info
from logix_cicd.reporting.console import (
    ConsoleReporter,
    create_banner,
    final_result_banner,
    print_stage_banner,
)

__all__ = [
    "AuditSink",
    "DualWriter",
    "BuildInfo",
    "print_build_info",
    "ConsoleReporter",
    "create_banner",
    "final_result_banner",
    "print_stage_banner",
]
