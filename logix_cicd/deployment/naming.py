"""
Device classification, revision parsing and artifact naming

Small pure helpers shared by the device list loader and the orchestrator.
"""

import re
from collections.abc import Collection
from pathlib import Path

from logix_cicd.deployment.exceptions import InvalidRevisionError
from logix_cicd.deployment.models import RevisionParts, RunContext

DEFAULT_CONTROLLER_TYPES: frozenset[str] = frozenset({"1756-L75", "1756-L85E"})

# Characters in a communication path that cannot be used in a file name
_COMM_PATH_SPECIAL_CHARS = re.compile(r"[!\\\-.]")

_MAJOR_REVISION_RE = re.compile(r"^\d+$")


def is_controller(device_type: str, controller_types: Collection[str] = DEFAULT_CONTROLLER_TYPES) -> bool:
    """
    Check if a device type is on the controller allow-list

    Args:
        device_type: Catalog number read from the device list
        controller_types: Allow-list of controller catalog numbers

    Returns:
        True if the device needs the project upload/convert/download cycle
    """
    return device_type in controller_types


def parse_revision(revision: str) -> RevisionParts:
    """
    Split a firmware revision at its first '.'

    Args:
        revision: Revision string such as "33.011"

    Returns:
        RevisionParts with the integer major revision and the minor text

    Raises:
        InvalidRevisionError: If there is no '.' or the major part is not numeric
    """
    major, sep, minor = revision.strip().partition(".")
    if not sep or not _MAJOR_REVISION_RE.match(major):
        raise InvalidRevisionError(revision)
    return RevisionParts(major=int(major), minor=minor)


def sanitize_comm_path(comm_path: str) -> str:
    """
    Make a communication path usable inside a file name

    Every '!', '\\', '-' and '.' becomes '_'.
    """
    return _COMM_PATH_SPECIAL_CHARS.sub("_", comm_path)


def upload_artifact_path(context: RunContext, comm_path: str, extension: str = ".acd") -> Path:
    """Path of the project uploaded from a controller before flashing"""
    return context.artifact_dir / f"{context.timestamp}_{sanitize_comm_path(comm_path)}{extension}"


def converted_artifact_path(
    context: RunContext, comm_path: str, major_revision: int, extension: str = ".acd"
) -> Path:
    """Path of the uploaded project converted to the target major revision"""
    return context.artifact_dir / (
        f"{context.timestamp}_{sanitize_comm_path(comm_path)}_v{major_revision}{extension}"
    )
