"""Abstract base class for embedding backends."""

from abc import ABC, abstractmethod


class EmbeddingBackend(ABC):
    """Base class that every embedding backend must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this backend (e.g. 'openai')."""

    @abstractmethod
    def embed(
        self, text: str, model: str | None = None, dimensions: int | None = None,
    ) -> list[float]:
        """Embed a single text and return its vector.

        Args:
            text: Text to embed (a comma-joined skill list in practice).
            model: Override the backend's default model. None uses default.
            dimensions: Requested output size for models that support
                shortening. None keeps the model's native size.

        Returns:
            Embedding vector of length ``dimensions`` when given, otherwise
            the model's native size.
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Output dimensionality of the default model."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    @property
    def sdk_module(self) -> str | None:
        """Import name of the SDK the backend needs, or None if it needs none."""
        return None
