"""codeagent — Ollama-powered coding agent with file and command actions."""

from codeagent.config import CONFIG, DEFAULT_MODEL, AgentConfig, __version__
from codeagent.domain.action_parser import parse_actions, strip_actions
from codeagent.domain.agent import CodingAgent
from codeagent.domain.errors import (
    AgentError,
    ExecutionFailed,
    PathEscapeError,
    StreamError,
    TransportError,
)
from codeagent.domain.stream import reassemble
from codeagent.executor import execute_actions

__all__ = [
    "__version__",
    "CONFIG",
    "DEFAULT_MODEL",
    "AgentConfig",
    "CodingAgent",
    "parse_actions",
    "strip_actions",
    "reassemble",
    "execute_actions",
    "AgentError",
    "ExecutionFailed",
    "PathEscapeError",
    "StreamError",
    "TransportError",
]
