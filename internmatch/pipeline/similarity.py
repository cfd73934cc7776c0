"""Skill-text embeddings and cosine similarity.

Embeddings are cached by exact input text in an injectable EmbeddingCache.
Backend failures never propagate: embed() returns a zero vector instead, so
similarity() against it is 0.0.
"""

import logging
import math

from internmatch.embeddings.base import EmbeddingBackend

logger = logging.getLogger(__name__)


class EmbeddingCache:
    """Append-only map from exact input text to its embedding vector.

    Entries are never evicted. Writes are idempotent, so concurrent readers
    need no locking beyond the dict's own guarantees.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[float]] = {}

    def get(self, text: str) -> list[float] | None:
        return self._entries.get(text)

    def put(self, text: str, vector: list[float]) -> None:
        self._entries[text] = vector

    def __contains__(self, text: object) -> bool:
        return text in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity in [-1, 1].

    Returns 0.0 if the vectors differ in length, either has zero norm, or the
    result is not finite.
    """
    if len(a) != len(b):
        return 0.0

    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    result = dot_product / (norm_a * norm_b)
    if not math.isfinite(result):
        return 0.0
    return result


class SimilarityProvider:
    """Embeds skill texts through a backend and compares them.

    Usage::

        provider = SimilarityProvider(get_backend("openai"), cache=EmbeddingCache())
        a = provider.embed("Python, SQL")
        b = provider.embed("Python, Machine Learning")
        provider.similarity(a, b)
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        *,
        model: str | None = None,
        dimensions: int | None = None,
        cache: EmbeddingCache | None = None,
    ) -> None:
        self._backend = backend
        self._model = model
        self._requested_dimensions = dimensions
        self._dimensions = dimensions or backend.dimensions
        self._cache = cache if cache is not None else EmbeddingCache()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def cache(self) -> EmbeddingCache:
        return self._cache

    def embed(self, text: str) -> list[float]:
        """Return the embedding for text, consulting the cache first.

        On any backend error, or a vector with a NaN or infinite component,
        logs a warning and returns an uncached zero vector of the configured
        dimensionality.
        """
        cached = self._cache.get(text)
        if cached is not None:
            logger.debug("Embedding cache hit for '%s'", text)
            return cached

        try:
            vector = self._backend.embed(
                text, model=self._model, dimensions=self._requested_dimensions,
            )
        except Exception:
            logger.warning(
                "Embedding request to '%s' failed - using zero vector",
                self._backend.provider_id,
                exc_info=True,
            )
            return [0.0] * self._dimensions

        if not all(math.isfinite(x) for x in vector):
            logger.warning(
                "Embedding from '%s' has non-finite values - using zero vector",
                self._backend.provider_id,
            )
            return [0.0] * self._dimensions

        self._cache.put(text, vector)
        return vector

    def similarity(self, a: list[float], b: list[float]) -> float:
        return cosine_similarity(a, b)
