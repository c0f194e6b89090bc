"""Action executor — applies validated actions beneath a working directory."""

import asyncio
import codecs
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from codeagent.domain.action_parser import describe_action
from codeagent.domain.errors import PathEscapeError
from codeagent.domain.models import (
    Action,
    ActionOutcome,
    CreateDirectory,
    CreateFile,
    ExecuteCommand,
    ExecutionReport,
    ModifyFile,
    ReadFile,
)
from codeagent.domain.validator import validate_action

Echo = Callable[[str], None]

_READ_SIZE = 4096


def _log(msg: str):
    print(msg, file=sys.stderr)


def _echo_stdout(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


def resolve_path(work_dir: str, relative: str) -> Path:
    """Resolve ``relative`` under ``work_dir``; raise if it lands outside."""
    root = Path(work_dir).resolve()
    target = (root / relative).resolve()
    if target != root and not target.is_relative_to(root):
        raise PathEscapeError(f"path {relative!r} resolves outside {root}")
    return target


def _kill(proc) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


async def run_cancellable(
    args: List[str],
    *,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
    echo: Echo = _echo_stdout,
) -> Tuple[int, str]:
    """Run a program, streaming merged stdout/stderr to ``echo`` as it arrives.

    Returns (returncode, captured output). If the run ends without an exit
    status (timeout, cancellation, read failure) the process is killed and
    reaped before the exception propagates.
    """
    proc = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    captured: List[str] = []
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def _emit(text: str) -> None:
        if text:
            captured.append(text)
            echo(text)

    async def _pump() -> int:
        # Fixed-size reads: output lines may exceed the stream buffer limit
        while True:
            chunk = await proc.stdout.read(_READ_SIZE)
            if not chunk:
                break
            _emit(decoder.decode(chunk))
        _emit(decoder.decode(b"", final=True))
        return await proc.wait()

    returncode: Optional[int] = None
    try:
        returncode = await asyncio.wait_for(_pump(), timeout=timeout)
    finally:
        if returncode is None:
            _kill(proc)
            await proc.wait()
    return returncode, "".join(captured)


async def _create_file(action: CreateFile, work_dir: str) -> None:
    target = resolve_path(work_dir, action.path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(action.content.encode("utf-8"))


async def _create_directory(action: CreateDirectory, work_dir: str) -> None:
    resolve_path(work_dir, action.path).mkdir(parents=True, exist_ok=True)


async def _modify_file(action: ModifyFile, work_dir: str) -> None:
    target = resolve_path(work_dir, action.path)
    content = target.read_bytes().decode("utf-8")
    if action.search not in content:
        raise LookupError(f"search string not found in file {action.path}")
    target.write_bytes(content.replace(action.search, action.replace, 1).encode("utf-8"))


async def _read_file(action: ReadFile, work_dir: str, echo: Echo) -> str:
    content = resolve_path(work_dir, action.path).read_bytes().decode("utf-8")
    echo(f"\n=== Content of {action.path} ===\n{content}\n=== End ===\n\n")
    return content


async def _execute_command(
    action: ExecuteCommand,
    work_dir: str,
    echo: Echo,
    timeout: Optional[float],
) -> str:
    parts = action.command.split()
    if not parts:
        raise ValueError("empty command")
    try:
        returncode, output = await run_cancellable(
            parts, cwd=work_dir, timeout=timeout, echo=echo
        )
    except asyncio.TimeoutError:
        raise TimeoutError(f"command timed out after {timeout:g}s") from None
    if returncode != 0:
        raise RuntimeError(f"command failed: exit code {returncode}")
    return output


async def apply_action(
    action: Action,
    work_dir: str,
    *,
    echo: Echo = _echo_stdout,
    command_timeout: Optional[float] = None,
) -> Optional[str]:
    """Perform one action. Returns captured output for commands and reads."""
    if isinstance(action, CreateFile):
        await _create_file(action, work_dir)
        return None
    if isinstance(action, CreateDirectory):
        await _create_directory(action, work_dir)
        return None
    if isinstance(action, ExecuteCommand):
        return await _execute_command(action, work_dir, echo, command_timeout)
    if isinstance(action, ModifyFile):
        await _modify_file(action, work_dir)
        return None
    if isinstance(action, ReadFile):
        return await _read_file(action, work_dir, echo)
    raise TypeError(f"unknown action: {action!r}")


async def execute_actions(
    actions: List[Action],
    work_dir: str,
    *,
    echo: Echo = _echo_stdout,
    command_timeout: Optional[float] = None,
) -> ExecutionReport:
    """Execute ``actions`` in order; one failure never stops the rest.

    Every outcome is echoed as it happens. Cancellation kills a running
    command, records it as that action's outcome and re-raises; later
    actions are not started.
    """
    report = ExecutionReport()
    total = len(actions)

    for index, action in enumerate(actions, start=1):
        echo(f"\n[{index}/{total}] {describe_action(action)}\n")

        violation = validate_action(action)
        if violation:
            outcome = ActionOutcome(
                index=index, action=action, success=False,
                stage="validation", error=violation,
            )
        else:
            try:
                output = await apply_action(
                    action, work_dir, echo=echo, command_timeout=command_timeout
                )
                outcome = ActionOutcome(index=index, action=action, success=True, output=output)
            except asyncio.CancelledError:
                outcome = ActionOutcome(
                    index=index, action=action, success=False,
                    stage="cancelled", error="interrupted",
                )
                report.outcomes.append(outcome)
                echo(outcome.message() + "\n")
                _log(f"[executor] cancelled at action {index}/{total}")
                raise
            except Exception as e:
                outcome = ActionOutcome(
                    index=index, action=action, success=False, error=str(e),
                )

        report.outcomes.append(outcome)
        echo(outcome.message() + "\n")
        if not outcome.success:
            _log(f"[executor] action {index} failed ({outcome.stage}): {outcome.error}")

    return report
