"""Google Gemini embedding backend (google-genai SDK)."""

import logging
import os
from typing import Any

from internmatch.embeddings.base import EmbeddingBackend

logger = logging.getLogger(__name__)


class GeminiEmbeddingBackend(EmbeddingBackend):
    """Embedding backend using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "text-embedding-004"

    @property
    def dimensions(self) -> int:
        return 768

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    @property
    def sdk_module(self) -> str:
        return "google.genai"

    def embed(
        self, text: str, model: str | None = None, dimensions: int | None = None,
    ) -> list[float]:
        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GOOGLE_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            from google import genai
        except ImportError:
            msg = (
                "google-genai is required for embedding similarity. "
                "Install with: pip install 'internmatch[gemini]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model

        logger.info("Requesting embedding from Gemini API (%s)...", use_model)
        client = genai.Client(api_key=api_key)
        kwargs: dict[str, Any] = {"model": use_model, "contents": text}
        if dimensions is not None:
            kwargs["config"] = {"output_dimensionality": dimensions}
        response = client.models.embed_content(**kwargs)

        return list(response.embeddings[0].values)
