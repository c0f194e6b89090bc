"""Error taxonomy for streaming and action execution.

Cancellation is not represented here: it is plain ``asyncio.CancelledError``
and is never wrapped, so callers can tell an interrupted interaction apart
from a backend or transport fault.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codeagent.domain.models import ExecutionReport


class AgentError(Exception):
    """Base class for agent errors."""


class StreamError(AgentError):
    """The backend sent an explicit error chunk."""


class TransportError(AgentError):
    """The chunk source failed (connection, HTTP status, read error)."""


class PathEscapeError(AgentError):
    """An action path resolved outside the working directory."""


class ExecutionFailed(AgentError):
    """One or more actions in a run failed."""

    def __init__(self, report: "ExecutionReport"):
        self.report = report
        super().__init__(report.summary())
