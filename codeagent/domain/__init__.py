"""Domain layer — pure Python, no transport dependencies."""

from codeagent.domain.models import (
    Action,
    ActionOutcome,
    ChatMessage,
    CreateDirectory,
    CreateFile,
    ExecuteCommand,
    ExecutionReport,
    ModifyFile,
    ReadFile,
    ReassembledResponse,
    StreamStats,
)
from codeagent.domain.action_parser import describe_action, parse_actions, strip_actions
from codeagent.domain.validator import validate_action
from codeagent.domain.model_params import ModelParameters, parse_model_parameters
from codeagent.domain.pending import PendingActions

__all__ = [
    "Action",
    "ActionOutcome",
    "ChatMessage",
    "CreateDirectory",
    "CreateFile",
    "ExecuteCommand",
    "ExecutionReport",
    "ModifyFile",
    "ReadFile",
    "ReassembledResponse",
    "StreamStats",
    "describe_action",
    "parse_actions",
    "strip_actions",
    "validate_action",
    "ModelParameters",
    "parse_model_parameters",
    "PendingActions",
]
