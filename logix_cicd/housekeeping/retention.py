"""
Retention Service

Keeps only the most recently created files of one type in a folder, so
generated reports and project files do not pile up in the repository.
"""

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from logix_cicd.core.exceptions import ResourceNotFoundError, ValidationError
from logix_cicd.reporting.console import ConsoleReporter

logger = logging.getLogger(__name__)


def file_creation_time(path: Path) -> float:
    """
    Creation time of a file

    Uses st_birthtime where the platform records it (Windows, macOS, BSD),
    otherwise falls back to st_ctime.
    """
    stat = path.stat()
    return getattr(stat, "st_birthtime", stat.st_ctime)


@dataclass
class RetentionRule:
    """Keep the `keep` newest `extension` files directly inside `directory`"""

    directory: Path
    keep: int
    extension: str
    label: str = ""


@dataclass
class RetentionReport:
    """
    Decisions made by one retention run

    Attributes:
        retained: Files kept, newest first
        deleted: Files removed, newest first
        errors: Files that could not be removed, with the error text
    """

    directory: Path
    extension: str
    keep: int
    retained: list[Path] = field(default_factory=list)
    deleted: list[Path] = field(default_factory=list)
    errors: dict[Path, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class RetentionManager:
    """
    Enforce a maximum count of recent files per (folder, extension)

    Example:
        manager = RetentionManager()
        report = manager.retain_most_recent(Path("4-test-reports/textreports"), 5, ".txt")
    """

    def __init__(
        self,
        reporter: ConsoleReporter | None = None,
        timestamp: Callable[[Path], float] = file_creation_time,
    ):
        """
        Args:
            reporter: Console reporter for per-file decisions (optional)
            timestamp: Function giving the creation time used for ranking
        """
        self.reporter = reporter
        self.timestamp = timestamp

    def _status(self, message: str) -> None:
        if self.reporter:
            logger.debug(message)
            self.reporter.status(message)
        else:
            logger.info(message)

    def _error(self, message: str) -> None:
        if self.reporter:
            logger.debug(message)
            self.reporter.error(message)
        else:
            logger.error(message)

    def list_matching_files(self, directory: Path, extension: str) -> list[Path]:
        """
        List files with an extension, newest first

        Matching is case-insensitive and non-recursive. Files with the same
        timestamp are ordered by name.
        """
        wanted = extension.lower()
        files = [p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == wanted]
        files.sort(key=lambda p: (-self.timestamp(p), p.name))
        return files

    def retain_most_recent(self, directory: Path, keep: int, extension: str) -> RetentionReport:
        """
        Keep the `keep` most recently created files and delete the rest

        Args:
            directory: Folder to trim (must exist)
            keep: Number of files to retain; 0 deletes every matching file
            extension: File extension including the leading '.', e.g. ".txt"

        Returns:
            RetentionReport listing every decision

        Raises:
            ResourceNotFoundError: If the folder does not exist
            ValidationError: If keep is negative or extension has no leading '.'
        """
        directory = Path(directory)
        if isinstance(keep, bool) or not isinstance(keep, int) or keep < 0:
            raise ValidationError(f"Number of files to retain must be an integer >= 0, got {keep!r}")
        if not extension.startswith(".") or len(extension) < 2:
            raise ValidationError(
                f"Invalid file extension '{extension}'",
                recovery_hint="Include the leading '.', e.g. '.txt', '.xlsx', '.ACD'",
            )
        if not directory.is_dir():
            raise ResourceNotFoundError("Folder", str(directory))

        report = RetentionReport(directory=directory, extension=extension, keep=keep)
        files = self.list_matching_files(directory, extension)

        for path in files[:keep]:
            report.retained.append(path)
            self._status(f"Retained '{path.name}'")

        for path in files[keep:]:
            try:
                os.remove(path)
            except OSError as e:
                report.errors[path] = str(e)
                self._error(f"Error deleting file: {path.name}. Exception: {e}")
                continue
            report.deleted.append(path)
            self._status(f"Deleted '{path.name}'")

        logger.debug(
            f"Retention in {directory} ({extension}): kept {len(report.retained)}, "
            f"deleted {len(report.deleted)}, errors {len(report.errors)}"
        )
        return report

    def apply(self, rules: Iterable[RetentionRule]) -> list[RetentionReport]:
        """
        Run several retention rules in order

        A missing folder is reported and skipped so one bad rule does not
        stop the others.
        """
        reports = []
        for rule in rules:
            label = rule.label or f"{rule.extension.lstrip('.')} files"
            self._status(f"Set to retain '{rule.keep}' {label} at '{rule.directory}'")
            try:
                reports.append(self.retain_most_recent(rule.directory, rule.keep, rule.extension))
            except ResourceNotFoundError as e:
                self._error(str(e))
        return reports
