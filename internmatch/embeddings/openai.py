"""OpenAI embedding backend."""

import logging
import os
from typing import Any

from internmatch.embeddings.base import EmbeddingBackend

logger = logging.getLogger(__name__)


class OpenAIEmbeddingBackend(EmbeddingBackend):
    """Embedding backend using the OpenAI embeddings API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "text-embedding-3-small"

    @property
    def dimensions(self) -> int:
        return 1536

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    @property
    def sdk_module(self) -> str:
        return "openai"

    def embed(
        self, text: str, model: str | None = None, dimensions: int | None = None,
    ) -> list[float]:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for embedding similarity. "
                "Install with: pip install 'internmatch[openai]'"
            )
            raise ImportError(msg) from None

        client = openai.OpenAI(api_key=api_key)
        use_model = model or self.default_model

        logger.info("Requesting embedding from OpenAI API (%s)...", use_model)
        kwargs: dict[str, Any] = {"model": use_model, "input": text}
        if dimensions is not None:
            kwargs["dimensions"] = dimensions
        response = client.embeddings.create(**kwargs)

        return list(response.data[0].embedding)
