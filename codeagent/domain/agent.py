"""CodingAgent — conversation state, streaming and action handling.

Transport-agnostic: the backend is any LLMStreamPort, so tests drive the
agent with fake chunk streams.
"""

import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from codeagent.config import DEFAULT_MODEL
from codeagent.domain.action_parser import describe_action, parse_actions
from codeagent.domain.errors import TransportError
from codeagent.domain.model_params import ModelParameters, parse_model_parameters
from codeagent.domain.models import Action, ChatMessage, ExecutionReport, ReassembledResponse
from codeagent.domain.pending import PendingActions
from codeagent.domain.stream import reassemble
from codeagent.ports.outbound import LLMStreamPort


def _log(msg: str):
    print(msg, file=sys.stderr)


class CodingAgent:
    """Chat session that turns model replies into file and command actions.

    Handles:
    - Conversation history and system prompts
    - Streaming the reply through the reassembler
    - Extracting actions, parking them as pending, optional auto-execution
    """

    def __init__(
        self,
        client: LLMStreamPort,
        model: str = DEFAULT_MODEL,
        work_dir: Optional[str] = None,
        auto_execute: bool = False,
        command_timeout: Optional[float] = None,
        out: Callable[[str], None] = print,
    ):
        self.client = client
        self.model = model or DEFAULT_MODEL
        self.work_dir = work_dir or os.getcwd()
        self.auto_execute = auto_execute
        self.command_timeout = command_timeout
        self.system_prompt = ""
        self.system_prompts: Dict[str, str] = {}
        self.history: List[ChatMessage] = []
        self.pending = PendingActions()
        self.model_params: Optional[ModelParameters] = None
        self._out = out

    # -- system prompts --

    def load_system_prompt(self, name: str, path: str) -> None:
        try:
            self.system_prompts[name] = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise OSError(f"failed to read system prompt file: {e}") from e

    def load_prompt_directory(self, dir_path: str) -> int:
        """Load every ``*.txt`` file as a named prompt. Returns the count."""
        directory = Path(dir_path)
        if not directory.is_dir():
            raise OSError(f"failed to read prompt directory: {dir_path}")
        loaded = 0
        for entry in sorted(directory.iterdir()):
            if entry.is_file() and entry.suffix == ".txt":
                self.load_system_prompt(entry.stem, str(entry))
                loaded += 1
        return loaded

    def get_system_prompt(self, name: str) -> Optional[str]:
        return self.system_prompts.get(name)

    def set_system_prompt(self, prompt: str) -> None:
        self.system_prompt = prompt

    # -- session state --

    def clear_history(self) -> None:
        self.history = []
        _log("[agent] conversation history cleared")

    def set_work_dir(self, path: str) -> str:
        """Switch the action root. ``~`` is expanded; the directory must exist."""
        expanded = os.path.expanduser(path)
        if not os.path.isdir(expanded):
            raise NotADirectoryError(f"directory does not exist: {path}")
        self.work_dir = expanded
        return expanded

    async def refresh_model_params(self):
        """Fetch details for the active model and parse its parameters."""
        info = await self.client.show_model(self.model)
        self.model_params = parse_model_parameters(info.parameters)
        return info

    async def switch_model(self, name: str):
        """Switch models; details are best effort and may be None."""
        self.model = name
        try:
            return await self.refresh_model_params()
        except TransportError as e:
            _log(f"[agent] could not fetch details for {name}: {e}")
            return None

    # -- conversation --

    def build_prompt(self) -> str:
        """Flatten system prompt and history into ``Role: content`` blocks."""
        messages: List[ChatMessage] = []
        if self.system_prompt:
            messages.append(ChatMessage(role="system", content=self.system_prompt))
        messages.extend(self.history)
        return "\n\n".join(f"{m.role.title()}: {m.content}" for m in messages)

    def _context_message_count(self) -> int:
        return len(self.history) + (1 if self.system_prompt else 0)

    async def send_message(
        self,
        message: str,
        on_chunk: Callable[[str], None],
    ) -> List[Action]:
        """Stream a reply to ``message`` and handle any actions in it.

        Returns the extracted actions. Stream, transport and callback errors
        propagate unchanged, as does cancellation; in those cases no actions
        are extracted and the reply is not recorded.
        """
        self.history.append(ChatMessage(role="user", content=message))
        context_messages = self._context_message_count()
        chunks = self.client.stream_generate(
            self.build_prompt(),
            model=self.model,
            system=self.system_prompt or None,
        )
        response = await reassemble(chunks, on_chunk)
        self._print_stats(response, context_messages)

        self.history.append(ChatMessage(role="assistant", content=response.text))

        actions = parse_actions(response.text)
        if actions:
            await self._handle_actions(actions)
        return actions

    async def _handle_actions(self, actions: List[Action]) -> None:
        self._out(f"\n\n📋 Detected {len(actions)} action(s):")
        for i, action in enumerate(actions, start=1):
            self._out(f"  {i}. {describe_action(action)}")

        # Parked so /execute can run them later
        self.pending.replace(actions)

        if not self.auto_execute:
            self._out("\n💡 Tip: Use /execute to run these actions, or enable auto-execution with /auto on")
            return

        self._out("\n⚙️  Auto-executing actions...")
        report = await self.execute_pending()
        if report is not None:
            report.raise_for_failures()

    async def execute_pending(self) -> Optional[ExecutionReport]:
        """Run the pending actions against the current working directory."""
        report = await self.pending.run(self.work_dir, command_timeout=self.command_timeout)
        if report is None:
            return None
        if report.ok:
            self._out(f"✅ {report.summary()}")
        else:
            self._out(f"⚠️  {report.summary()}")
        return report

    def _print_stats(self, response: ReassembledResponse, context_messages: int) -> None:
        stats = response.stats
        lines = ["\n📊 Model Stats:"]
        params = self.model_params
        if params and params.context_length > 0:
            lines.append(f"  • Model Context: {params.context_length} tokens")
        lines.append(f"  • Context Messages: {context_messages}")
        lines.append(f"  • Response Length: {len(response.text)} chars")
        if stats is not None:
            lines.append(f"  • Total Duration: {stats.total_duration_ms}ms")
            lines.append(f"  • Load Duration: {stats.load_duration_ms}ms")
        if stats is not None and stats.context:
            used = len(stats.context)
            if params and params.context_length > 0:
                pct = used / params.context_length * 100
                lines.append(f"  • Context Usage: {used}/{params.context_length} tokens ({pct:.1f}%)")
            else:
                lines.append(f"  • Context Tokens Used: {used}")
        else:
            lines.append("  • Context Usage: No context used yet")
        self._out("\n".join(lines))
