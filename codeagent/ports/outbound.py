"""Outbound ports — interfaces for external system adapters."""

from typing import Any, AsyncIterator, Optional, Protocol, runtime_checkable


@runtime_checkable
class LLMStreamPort(Protocol):
    """Interface for streaming text-generation backends."""

    def stream_generate(
        self,
        prompt: str,
        *,
        model: str,
        system: Optional[str] = None,
    ) -> AsyncIterator[str]: ...

    async def show_model(self, name: str) -> Any: ...
