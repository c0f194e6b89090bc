"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from codeagent.domain.errors import ExecutionFailed


@dataclass(frozen=True)
class CreateFile:
    """Write (or overwrite) a file beneath the working directory."""

    path: str
    content: str


@dataclass(frozen=True)
class CreateDirectory:
    path: str


@dataclass(frozen=True)
class ExecuteCommand:
    """Run a program; the command is split on whitespace, never through a shell."""

    command: str
    description: str = ""


@dataclass(frozen=True)
class ModifyFile:
    """Replace the first occurrence of ``search`` with ``replace``."""

    path: str
    search: str
    replace: str


@dataclass(frozen=True)
class ReadFile:
    path: str


Action = Union[CreateFile, CreateDirectory, ExecuteCommand, ModifyFile, ReadFile]


@dataclass
class ActionOutcome:
    """Result of one action in an execution run."""

    index: int  # 1-based position in the action list
    action: Action
    success: bool
    stage: str = "execution"  # "validation" | "execution" | "cancelled"
    error: Optional[str] = None
    output: Optional[str] = None

    def message(self) -> str:
        if self.success:
            return "✓ Completed"
        if self.stage == "validation":
            return f"✖ Validation failed for action {self.index}: {self.error}"
        if self.stage == "cancelled":
            return f"✖ Cancelled during action {self.index}: {self.error}"
        return f"✖ Execution failed for action {self.index}: {self.error}"


@dataclass
class ExecutionReport:
    """Aggregate outcome of an execution run, in action order."""

    outcomes: List[ActionOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.success for o in self.outcomes)

    @property
    def failures(self) -> List[ActionOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        if self.ok:
            return f"all {len(self.outcomes)} action(s) succeeded"
        return f"completed with {self.failed_count} failure(s)"

    def raise_for_failures(self) -> None:
        if not self.ok:
            raise ExecutionFailed(self)


@dataclass(frozen=True)
class StreamStats:
    """Metrics carried by the terminal chunk of a generate stream.

    Durations are in nanoseconds, as the server reports them.
    """

    total_duration: int = 0
    load_duration: int = 0
    prompt_eval_count: int = 0
    prompt_eval_duration: int = 0
    eval_count: int = 0
    eval_duration: int = 0
    context: Tuple[int, ...] = ()

    @property
    def total_duration_ms(self) -> int:
        return self.total_duration // 1_000_000

    @property
    def load_duration_ms(self) -> int:
        return self.load_duration // 1_000_000


@dataclass(frozen=True)
class ReassembledResponse:
    """Full response text rebuilt from a chunk stream."""

    text: str
    stats: Optional[StreamStats] = None
    chunk_count: int = 0


@dataclass
class ChatMessage:
    role: str  # "system" | "user" | "assistant"
    content: str
