"""Ollama local embedding backend (OpenAI-compatible API)."""

import logging

from internmatch.embeddings.base import EmbeddingBackend

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaEmbeddingBackend(EmbeddingBackend):
    """Embedding backend using a local Ollama instance via OpenAI-compatible API."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "nomic-embed-text"

    @property
    def dimensions(self) -> int:
        return 768

    @property
    def env_var(self) -> None:
        return None

    @property
    def sdk_module(self) -> str:
        return "openai"

    def embed(
        self, text: str, model: str | None = None, dimensions: int | None = None,
    ) -> list[float]:
        """Embed text with a local model. ``dimensions`` is ignored: Ollama
        models always return their native size.
        """
        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for Ollama (OpenAI-compatible API). "
                "Install with: pip install 'internmatch[openai]'"
            )
            raise ImportError(msg) from None

        client = openai.OpenAI(base_url=_OLLAMA_BASE_URL, api_key="ollama")
        use_model = model or self.default_model

        logger.info("Requesting embedding from Ollama (%s)...", use_model)
        response = client.embeddings.create(model=use_model, input=text)

        return list(response.data[0].embedding)
