"""Ollama client using aiohttp. Implements LLMStreamPort."""

from typing import AsyncIterator, List, Optional

import aiohttp
from pydantic import BaseModel

from codeagent.config import CONFIG
from codeagent.domain.errors import TransportError


class GenerateRequest(BaseModel):
    model: str
    prompt: str
    system: Optional[str] = None
    stream: bool = True


class ModelDetails(BaseModel):
    format: str = ""
    family: str = ""
    families: Optional[List[str]] = None
    parameter_size: str = ""
    quantization_level: str = ""


class ShowModelResponse(BaseModel):
    license: str = ""
    modelfile: str = ""
    parameters: str = ""
    template: str = ""
    system: str = ""
    details: ModelDetails = ModelDetails()


class OllamaClient:
    """Async client for the Ollama HTTP API."""

    def __init__(self, base_url: Optional[str] = None, request_timeout: Optional[float] = None):
        self.base_url = (base_url or CONFIG["ollama_url"]).rstrip("/")
        self.request_timeout = (
            CONFIG["request_timeout"] if request_timeout is None else request_timeout
        )

    @staticmethod
    async def _raise_for_status(resp) -> None:
        if resp.status != 200:
            body = await resp.text()
            raise TransportError(f"unexpected status code: {resp.status}, body: {body}")

    async def stream_generate(
        self,
        prompt: str,
        *,
        model: str,
        system: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """POST /api/generate with streaming and yield response lines.

        No client-side total timeout: long generations are bounded by the
        caller cancelling the task.
        """
        request = GenerateRequest(
            model=model, prompt=prompt, system=system or None, stream=True,
        )
        payload = request.model_dump(exclude_none=True)
        url = f"{self.base_url}/api/generate"
        timeout = aiohttp.ClientTimeout(total=None)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload) as resp:
                    await self._raise_for_status(resp)
                    async for raw in resp.content:
                        yield raw.decode("utf-8", errors="replace")
        except aiohttp.ClientError as e:
            raise TransportError(f"failed to send request: {e}") from e

    async def show_model(self, name: str) -> ShowModelResponse:
        """POST /api/show and return model details."""
        url = f"{self.base_url}/api/show"
        timeout = aiohttp.ClientTimeout(total=self.request_timeout or None)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json={"name": name}) as resp:
                    await self._raise_for_status(resp)
                    data = await resp.json()
        except aiohttp.ClientError as e:
            raise TransportError(f"failed to send request: {e}") from e
        return ShowModelResponse.model_validate(data)
