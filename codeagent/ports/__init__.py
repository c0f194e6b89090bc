"""Port interfaces (Hexagonal Architecture)."""

from codeagent.ports.outbound import LLMStreamPort

__all__ = [
    "LLMStreamPort",
]
