"""
Build metadata block

Prints the Git and Jenkins details of the build under test at the top of a
CI report, so a text report can be traced back to the commit it verified.
"""

import platform
from dataclasses import dataclass, fields

from rich.console import Console
from rich.table import Table

import logix_cicd


@dataclass
class BuildInfo:
    """
    Git/Jenkins details passed in by the pipeline

    Attributes:
        commit_name: Author of the most recent commit
        commit_email: Author email of the most recent commit
        commit_message: Message of the most recent commit
        commit_hash: Hash of the most recent commit
        job_name: Jenkins job name
        build_number: Jenkins build number
    """

    commit_name: str = ""
    commit_email: str = ""
    commit_message: str = ""
    commit_hash: str = ""
    job_name: str = ""
    build_number: str = ""

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


_LABELS = {
    "commit_name": "Test initiated by",
    "commit_email": "Tester contact information",
    "commit_hash": "Git commit hash to be verified",
    "commit_message": "Git commit message to be verified",
    "job_name": "Jenkins job being executed",
    "build_number": "Jenkins job build number",
}


def print_build_info(info: BuildInfo, console: Console) -> None:
    """Print the GitHub & Jenkins block followed by the runtime versions"""
    table = Table(title="GITHUB & JENKINS INFO", show_header=False, box=None, title_justify="left")
    table.add_column("Field", style="cyan", min_width=40)
    table.add_column("Value", overflow="fold")
    for name, label in _LABELS.items():
        table.add_row(f"{label}:", getattr(info, name) or "-")
    console.print(table)

    runtime = Table(title="RUNTIME INFO", show_header=False, box=None, title_justify="left")
    runtime.add_column("Field", style="cyan", min_width=40)
    runtime.add_column("Value")
    runtime.add_row("Python version:", platform.python_version())
    runtime.add_row("logix-cicd version:", logix_cicd.__version__)
    console.print(runtime)
