"""Parse the ``parameters`` text returned by the model show endpoint."""

from dataclasses import dataclass
from typing import Optional

_INT_KEYS = ("context_length", "embedding_length", "gpu_layers")


@dataclass
class ModelParameters:
    context_length: int = 0
    embedding_length: int = 0
    gpu_layers: int = 0
    template: str = ""


def _to_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def parse_model_parameters(raw: str) -> ModelParameters:
    """Parse ``key: value`` lines. Unknown keys and bad numbers are ignored."""
    params = ModelParameters()
    for line in (raw or "").splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        key, _, value = line.partition(":")
        key = key.strip()
        value = value.strip().strip("\"'")

        if key in _INT_KEYS:
            number = _to_int(value)
            if number is not None:
                setattr(params, key, number)
        elif key == "template":
            # YAML-style block indicator
            if value.startswith("|"):
                value = value[1:]
            params.template = value.strip()
    return params
