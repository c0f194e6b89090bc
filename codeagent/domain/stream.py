"""Reassemble a streamed generate response into one document.

Chunks are newline-delimited records from the server. Each one is either a
JSON object (``response``/``delta`` text, ``done`` flag, optional ``error``)
or an opaque line of text that is passed through verbatim.
"""

from __future__ import annotations

from typing import AsyncIterable, Callable, List, Optional

from pydantic import BaseModel, ValidationError

from codeagent.domain.errors import AgentError, StreamError, TransportError
from codeagent.domain.models import ReassembledResponse, StreamStats

ChunkCallback = Callable[[str], None]


class GenerateChunk(BaseModel):
    """One JSON line of a generate stream. Unknown keys are ignored."""

    response: str = ""
    delta: str = ""
    done: bool = False
    error: str = ""
    total_duration: int = 0
    load_duration: int = 0
    prompt_eval_count: int = 0
    prompt_eval_duration: int = 0
    eval_count: int = 0
    eval_duration: int = 0
    context: Optional[List[int]] = None

    @property
    def text(self) -> str:
        return self.response or self.delta

    def stats(self) -> StreamStats:
        return StreamStats(
            total_duration=self.total_duration,
            load_duration=self.load_duration,
            prompt_eval_count=self.prompt_eval_count,
            prompt_eval_duration=self.prompt_eval_duration,
            eval_count=self.eval_count,
            eval_duration=self.eval_duration,
            context=tuple(self.context or ()),
        )


def parse_chunk(line: str) -> Optional[GenerateChunk]:
    """Parse a JSON object chunk; None means the line is raw text."""
    try:
        return GenerateChunk.model_validate_json(line)
    except ValidationError:
        return None


async def reassemble(
    chunks: AsyncIterable[str],
    on_chunk: ChunkCallback,
) -> ReassembledResponse:
    """Consume ``chunks`` in arrival order, echoing each fragment to ``on_chunk``.

    Raises StreamError on an error chunk and TransportError when the source
    itself fails. Exceptions from ``on_chunk`` propagate unchanged, and so
    does ``asyncio.CancelledError``.
    """
    parts: List[str] = []
    stats: Optional[StreamStats] = None
    iterator = chunks.__aiter__()
    try:
        while True:
            try:
                raw = await iterator.__anext__()
            except StopAsyncIteration:
                break
            except AgentError:
                raise
            except Exception as e:
                raise TransportError(f"error reading stream: {e}") from e

            line = raw.strip()
            if not line:
                continue

            chunk = parse_chunk(line)
            if chunk is None:
                on_chunk(line)
                parts.append(line)
                continue

            if chunk.error:
                raise StreamError(f"stream error: {chunk.error}")
            if chunk.text:
                on_chunk(chunk.text)
                parts.append(chunk.text)
            if chunk.done:
                stats = chunk.stats()
                break
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()

    return ReassembledResponse(text="".join(parts), stats=stats, chunk_count=len(parts))
