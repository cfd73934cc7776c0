"""Embedding backend registry with lazy loading.

Usage:
    from internmatch.embeddings import get_backend

    backend = get_backend("openai")
    vector = backend.embed("Python, SQL")
"""

from __future__ import annotations

import importlib

from internmatch.embeddings.base import EmbeddingBackend

__all__ = ["EmbeddingBackend", "available_backends", "get_backend"]

# Lazy registry: maps backend name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "openai": ("internmatch.embeddings.openai", "OpenAIEmbeddingBackend"),
    "gemini": ("internmatch.embeddings.gemini", "GeminiEmbeddingBackend"),
    "ollama": ("internmatch.embeddings.ollama", "OllamaEmbeddingBackend"),
}


def get_backend(name: str) -> EmbeddingBackend:
    """Instantiate and return an embedding backend by name.

    Args:
        name: Backend identifier (openai, gemini, ollama).

    Returns:
        An EmbeddingBackend instance.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown embedding provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_backends() -> list[str]:
    """Return sorted list of registered backend names."""
    return sorted(_REGISTRY)
