"""Action markup parsing — tag blocks and fenced JSON fallback.

Pure Python, no framework dependencies.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from codeagent.domain.models import (
    Action,
    CreateDirectory,
    CreateFile,
    ExecuteCommand,
    ModifyFile,
    ReadFile,
)

# <create_file><path>P</path><content>C</content></create_file>
CREATE_FILE_RE = re.compile(
    r"<create_file>\s*<path>(.*?)</path>\s*<content>(.*?)</content>\s*</create_file>",
    re.DOTALL,
)

# <execute_command><command>CMD</command>[<description>D</description>]</execute_command>
EXECUTE_COMMAND_RE = re.compile(
    r"<execute_command>\s*<command>(.*?)</command>"
    r"(?:\s*<description>(.*?)</description>)?\s*</execute_command>",
    re.DOTALL,
)

# Single-line paths for directory and read tags
CREATE_DIRECTORY_RE = re.compile(
    r"<create_directory>\s*<path>(.*?)</path>\s*</create_directory>",
)

MODIFY_FILE_RE = re.compile(
    r"<modify_file>\s*<path>(.*?)</path>\s*<search>(.*?)</search>"
    r"\s*<replace>(.*?)</replace>\s*</modify_file>",
    re.DOTALL,
)

READ_FILE_RE = re.compile(
    r"<read_file>\s*<path>(.*?)</path>\s*</read_file>",
)

# ```json {...} ``` or ``` [...] ```
JSON_BLOCK_RE = re.compile(
    r"```(?:json)?\s*(\{.*?\}|\[.*?\])\s*```",
    re.DOTALL,
)

TAG_PATTERNS = (
    CREATE_FILE_RE,
    EXECUTE_COMMAND_RE,
    CREATE_DIRECTORY_RE,
    MODIFY_FILE_RE,
    READ_FILE_RE,
)

_PATH_KEYS = ("path", "name")
_CONTENT_KEYS = ("content", "body")
_SINGLE_FILE_KEYS = ("create_file",)
_FILE_LIST_KEYS = ("create_files", "files")


def parse_actions(text: str) -> List[Action]:
    """Extract actions from LLM response text.

    JSON-block matches come first, then the tag passes in the order
    create_file, execute_command, create_directory, modify_file, read_file.
    Each pass keeps document order.
    """
    actions: List[Action] = []
    actions.extend(parse_json_blocks(text))
    actions.extend(parse_tag_blocks(text))
    return actions


def parse_tag_blocks(text: str) -> List[Action]:
    actions: List[Action] = []

    for path, content in CREATE_FILE_RE.findall(text):
        actions.append(CreateFile(path=path.strip(), content=content.strip()))

    for command, description in EXECUTE_COMMAND_RE.findall(text):
        actions.append(
            ExecuteCommand(command=command.strip(), description=description.strip())
        )

    for path in CREATE_DIRECTORY_RE.findall(text):
        actions.append(CreateDirectory(path=path.strip()))

    for path, search, replace in MODIFY_FILE_RE.findall(text):
        actions.append(
            ModifyFile(path=path.strip(), search=search.strip(), replace=replace.strip())
        )

    for path in READ_FILE_RE.findall(text):
        actions.append(ReadFile(path=path.strip()))

    return actions


def parse_json_blocks(text: str) -> List[CreateFile]:
    """Read file-creation instructions from fenced JSON blocks."""
    actions: List[CreateFile] = []
    for block in JSON_BLOCK_RE.findall(text):
        try:
            parsed = json.loads(block.strip())
        except ValueError:
            continue

        if isinstance(parsed, list):
            actions.extend(_files_from_list(parsed))
        elif isinstance(parsed, dict):
            for key, value in parsed.items():
                lowered = str(key).lower()
                if lowered in _SINGLE_FILE_KEYS and isinstance(value, dict):
                    action = _file_from_object(value)
                    if action is not None:
                        actions.append(action)
                elif lowered in _FILE_LIST_KEYS and isinstance(value, list):
                    actions.extend(_files_from_list(value))
    return actions


def _files_from_list(items: List[Any]) -> List[CreateFile]:
    actions = []
    for item in items:
        if isinstance(item, dict):
            action = _file_from_object(item)
            if action is not None:
                actions.append(action)
    return actions


def _first_string(obj: Dict[str, Any], keys) -> Optional[str]:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return None


def _file_from_object(obj: Dict[str, Any]) -> Optional[CreateFile]:
    path = (_first_string(obj, _PATH_KEYS) or "").strip()
    content = _first_string(obj, _CONTENT_KEYS) or ""
    if not path or not content:
        return None
    return CreateFile(path=path, content=content)


def strip_actions(text: str) -> str:
    """Remove all recognised action tags from text."""
    for pattern in TAG_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


def describe_action(action: Action) -> str:
    """One-line description shown before execution."""
    if isinstance(action, CreateFile):
        return f"CREATE_FILE: {action.path} ({len(action.content.encode('utf-8'))} bytes)"
    if isinstance(action, ExecuteCommand):
        return f"EXECUTE_COMMAND: {action.command} ({action.description or 'no description'})"
    if isinstance(action, CreateDirectory):
        return f"CREATE_DIRECTORY: {action.path}"
    if isinstance(action, ModifyFile):
        return f"MODIFY_FILE: {action.path}"
    if isinstance(action, ReadFile):
        return f"READ_FILE: {action.path}"
    raise TypeError(f"unknown action: {action!r}")
