"""Configuration and shared defaults."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

_TRUTHY = ("1", "true", "yes", "on")

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_MODEL = "qwen3-coder:30b"
DEFAULT_PROMPT_DIR = "prompts"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default
    if value < 0:
        _stderr_print(f"Negative {name}={raw!r}, falling back to {default}")
        return default
    return value


CONFIG = {
    "ollama_url": os.getenv("OLLAMA_URL", DEFAULT_OLLAMA_URL).strip().rstrip("/"),
    "model": os.getenv("AGENT_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL,
    "prompt_dir": os.getenv("AGENT_PROMPT_DIR", DEFAULT_PROMPT_DIR).strip(),
    "system_prompt": os.getenv("AGENT_SYSTEM_PROMPT", ""),
    # Actions are held for /execute unless this is switched on
    "auto_execute": _env_flag("AGENT_AUTO_EXECUTE"),
    # 0 disables the per-command timeout
    "command_timeout": _env_float("AGENT_COMMAND_TIMEOUT", 0.0),
    # Non-streaming requests only; streams are bounded by cancellation
    "request_timeout": _env_float("AGENT_REQUEST_TIMEOUT", 30.0),
}


@dataclass
class AgentConfig:
    """Typed configuration for the agent and its CLI."""

    ollama_url: str = DEFAULT_OLLAMA_URL
    model: str = DEFAULT_MODEL
    prompt_dir: str = DEFAULT_PROMPT_DIR
    system_prompt: str = ""
    auto_execute: bool = False
    command_timeout: float = 0.0
    request_timeout: float = 30.0

    @property
    def command_timeout_or_none(self):
        return self.command_timeout or None

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Create AgentConfig from environment variables (via CONFIG)."""
        return cls(
            ollama_url=CONFIG["ollama_url"],
            model=CONFIG["model"],
            prompt_dir=CONFIG["prompt_dir"],
            system_prompt=CONFIG["system_prompt"],
            auto_execute=CONFIG["auto_execute"],
            command_timeout=CONFIG["command_timeout"],
            request_timeout=CONFIG["request_timeout"],
        )
