"""Interactive REPL — terminal adapter for CodingAgent.

Each message (and each /execute) runs as its own asyncio task so Ctrl+C
cancels the in-flight interaction instead of exiting the program.
"""

import asyncio
import signal
import sys
from typing import Awaitable, Optional

from codeagent.domain.action_parser import describe_action
from codeagent.domain.agent import CodingAgent
from codeagent.domain.errors import AgentError, ExecutionFailed

BANNER = (
    "╔════════════════════════════════════════════════════════════╗\n"
    "║          Coding Agent REPL - Powered by Ollama             ║\n"
    "╚════════════════════════════════════════════════════════════╝"
)

HELP_TEXT = """Available Commands:
  /help          - Show this help message
  /clear         - Clear conversation history
  /model <name>  - Switch to a different model
  /system <msg>  - Set system prompt (or a loaded prompt by name)
  /prompt <name> - Load a saved system prompt
  /workdir <dir> - Set working directory for actions
  /auto <on|off> - Enable/disable auto-execution of actions
  /pending       - List actions waiting for /execute
  /execute       - Run pending actions
  /exit, /quit   - Exit the REPL"""

_ON = ("on", "true", "1", "yes")
_OFF = ("off", "false", "0", "no")


def _log(msg: str):
    print(msg, file=sys.stderr)


def _print_chunk(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


class Repl:
    """Reads user input, dispatches /commands and streams chat replies."""

    def __init__(self, agent: CodingAgent):
        self.agent = agent
        self._current_task: Optional[asyncio.Task] = None

    # -- interruption --

    def interrupt(self) -> bool:
        """Cancel the in-flight interaction. Returns True if one was running."""
        task = self._current_task
        if task is not None and not task.done():
            task.cancel()
            print("\n🛑 Interrupted! Stream stopped.")
            return True
        print("\n(nothing to interrupt, type /exit to quit)")
        return False

    async def _run_interruptible(self, coro: Awaitable) -> None:
        task = asyncio.ensure_future(coro)
        self._current_task = task
        try:
            await asyncio.wait({task})
        finally:
            self._current_task = None

        if task.cancelled():
            print("\n💡 Tip: The response was interrupted. Continue with your next question!")
            return
        exc = task.exception()
        if exc is None:
            return
        if isinstance(exc, ExecutionFailed):
            print(f"\nError: failed to execute actions: {exc}")
        elif isinstance(exc, AgentError):
            print(f"\nError: {exc}")
        else:
            _log(f"[repl] unexpected {type(exc).__name__}: {exc}")
            print(f"\nError: {exc}")

    # -- chat --

    async def send(self, message: str) -> None:
        print()
        await self._run_interruptible(self.agent.send_message(message, on_chunk=_print_chunk))
        print()

    # -- commands --

    async def handle_command(self, line: str) -> bool:
        """Dispatch a /command. Returns False when the REPL should exit."""
        parts = line.split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("/exit", "/quit"):
            return False

        if cmd == "/help":
            print(HELP_TEXT)
        elif cmd == "/clear":
            self.agent.clear_history()
            print("✓ Conversation history cleared")
        elif cmd == "/model":
            await self._cmd_model(args)
        elif cmd == "/system":
            self._cmd_system(args)
        elif cmd == "/prompt":
            self._cmd_prompt(args)
        elif cmd == "/workdir":
            self._cmd_workdir(args)
        elif cmd == "/auto":
            self._cmd_auto(args)
        elif cmd == "/pending":
            self._cmd_pending()
        elif cmd == "/execute":
            await self._cmd_execute()
        else:
            print(f"Error: unknown command: {parts[0]} (type /help for available commands)")
        return True

    async def _cmd_model(self, args) -> None:
        if not args:
            print(f"Current model: {self.agent.model}")
            print("Usage: /model <model-name>")
            return
        info = await self.agent.switch_model(args[0])
        if info is None:
            print(f"✓ Switched to model: {self.agent.model} (could not fetch details)")
            return

        print("\n🤖 Model Information:")
        print(f"  • Name: {self.agent.model}")
        details = info.details
        for label, value in (
            ("License", info.license.splitlines()[0] if info.license else ""),
            ("Format", details.format),
            ("Family", details.family),
            ("Size", details.parameter_size),
            ("Quantization", details.quantization_level),
        ):
            if value:
                print(f"  • {label}: {value}")

        params = self.agent.model_params
        if params is not None:
            print("\n⚙️ Model Parameters:")
            if params.context_length:
                print(f"  • Context Window: {params.context_length} tokens")
            if params.embedding_length:
                print(f"  • Embedding Size: {params.embedding_length}")
            if params.gpu_layers:
                print(f"  • GPU Layers: {params.gpu_layers}")
            if params.template:
                print(f"  • Template: {params.template}")
        print("\n✓ Successfully switched to model")

    def _cmd_system(self, args) -> None:
        if not args:
            if self.agent.system_prompt:
                print(f"Current system prompt:\n{self.agent.system_prompt}")
            else:
                print("No system prompt set")
            print("Usage: /system <name|message>  (a loaded prompt name is used if it matches)")
            return
        name_or_message = " ".join(args)
        prompt = self.agent.get_system_prompt(name_or_message)
        if prompt is not None:
            self.agent.set_system_prompt(prompt)
            print(f"✓ Loaded system prompt: {name_or_message}")
        else:
            self.agent.set_system_prompt(name_or_message)
            print("✓ System prompt updated")

    def _cmd_prompt(self, args) -> None:
        if not args:
            print("Available prompts:")
            for name in sorted(self.agent.system_prompts):
                print(f"  - {name}")
            print("Usage: /prompt <name>")
            return
        prompt = self.agent.get_system_prompt(args[0])
        if prompt is None:
            print(f"Error: prompt '{args[0]}' not found")
            return
        self.agent.set_system_prompt(prompt)
        print(f"✓ Loaded system prompt: {args[0]}")

    def _cmd_workdir(self, args) -> None:
        if not args:
            print(f"Current working directory: {self.agent.work_dir}")
            print("Usage: /workdir <directory>")
            return
        try:
            path = self.agent.set_work_dir(" ".join(args))
        except NotADirectoryError as e:
            print(f"Error: {e}")
            return
        print(f"✓ Working directory set to: {path}")

    def _cmd_auto(self, args) -> None:
        if not args:
            status = "enabled" if self.agent.auto_execute else "disabled"
            print(f"Auto-execution is currently: {status}")
            print("Usage: /auto <on|off>")
            return
        value = args[0].lower()
        if value in _ON:
            self.agent.auto_execute = True
            print("✓ Auto-execution enabled")
        elif value in _OFF:
            self.agent.auto_execute = False
            print("✓ Auto-execution disabled")
        else:
            print(f"Error: invalid value: {args[0]} (use 'on' or 'off')")

    def _cmd_pending(self) -> None:
        actions = self.agent.pending.peek()
        if not actions:
            print("No pending actions")
            return
        print(f"{len(actions)} pending action(s):")
        for i, action in enumerate(actions, start=1):
            print(f"  {i}. {describe_action(action)}")

    async def _cmd_execute(self) -> None:
        if not self.agent.pending:
            print("No pending actions to execute")
            return
        print("\n⚙️  Executing pending actions...")
        await self._run_interruptible(self._execute_and_check())

    async def _execute_and_check(self) -> None:
        report = await self.agent.execute_pending()
        if report is not None:
            report.raise_for_failures()

    # -- main loop --

    def _install_signal_handler(self, loop: asyncio.AbstractEventLoop) -> bool:
        try:
            loop.add_signal_handler(signal.SIGINT, self.interrupt)
        except (NotImplementedError, RuntimeError):
            # Not available on Windows event loops
            return False
        return True

    async def run(self) -> int:
        loop = asyncio.get_running_loop()
        installed = self._install_signal_handler(loop)

        print(BANNER)
        print(f"Model: {self.agent.model}")
        print(f"Working directory: {self.agent.work_dir}")
        print()
        print(HELP_TEXT)
        print("\nType your message and press Enter to chat.")

        try:
            while True:
                try:
                    line = await loop.run_in_executor(None, input, "\n> ")
                except EOFError:
                    print("\nGoodbye!")
                    return 0

                line = line.strip()
                if not line:
                    continue
                if line.startswith("/"):
                    if not await self.handle_command(line):
                        print("\nGoodbye!")
                        return 0
                    continue
                await self.send(line)
        finally:
            if installed:
                loop.remove_signal_handler(signal.SIGINT)
