"""LLM adapters — Ollama HTTP client."""

from codeagent.adapters.llm.ollama_client import (
    GenerateRequest,
    ModelDetails,
    OllamaClient,
    ShowModelResponse,
)

__all__ = [
    "GenerateRequest",
    "ModelDetails",
    "OllamaClient",
    "ShowModelResponse",
]
