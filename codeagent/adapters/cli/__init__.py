"""Terminal adapter — interactive REPL."""

from codeagent.adapters.cli.repl import Repl

__all__ = ["Repl"]
