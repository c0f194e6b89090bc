"""Syntactic checks that gate action execution. Never touches the filesystem."""

import ntpath
import posixpath
import re
from typing import Optional

from codeagent.domain.models import (
    Action,
    CreateDirectory,
    CreateFile,
    ExecuteCommand,
    ModifyFile,
    ReadFile,
)

_DRIVE_RE = re.compile(r"^[A-Za-z]:")

_PATH_LABELS = {
    CreateFile: "file path",
    CreateDirectory: "directory path",
    ModifyFile: "file path",
    ReadFile: "file path",
}


def check_path(path: str, label: str = "path") -> Optional[str]:
    """Return a violation message for an unsafe relative path, else None."""
    if not path:
        return f"{label} cannot be empty"
    if ".." in path:
        return f"{label} cannot contain '..'"
    if posixpath.isabs(path) or ntpath.isabs(path) or _DRIVE_RE.match(path):
        return f"{label} must be relative"
    return None


def validate_action(action: Action) -> Optional[str]:
    """Return None when the action may run, otherwise the violation."""
    if isinstance(action, ExecuteCommand):
        if not action.command.strip():
            return "command cannot be empty"
        return None

    label = _PATH_LABELS.get(type(action))
    if label is None:
        raise TypeError(f"unknown action: {action!r}")

    violation = check_path(action.path, label)
    if violation:
        return violation
    if isinstance(action, ModifyFile) and not action.search:
        return "search string cannot be empty"
    return None
