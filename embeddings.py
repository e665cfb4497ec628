"""Embedding providers for semantic memory.

This module turns text into fixed-length float vectors. The vector store
only depends on the two-method EmbeddingProvider contract, so the model
behind it can be swapped without touching storage or search logic.

Model (default): sentence-transformers/all-MiniLM-L6-v2
    - 384 dimensions
    - Mean pooling, unit-normalized output
    - Fast inference on CPU

Usage:
    >>> from embeddings import SentenceTransformerProvider
    >>> provider = SentenceTransformerProvider()
    >>> vector = await provider.get_embedding("the sky is blue")
    >>> len(vector) == provider.get_dimensions()
    True
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from config import DEFAULT_EMBEDDING_DIM, DEFAULT_EMBEDDING_MODEL, Config
from errors import EmbeddingDimensionError

logger = logging.getLogger(__name__)

Embedding = list[float]


class EmbeddingProvider(ABC):
    """Produces fixed-length embeddings for text.

    Subclasses implement the blocking ``embed`` batch call. ``get_embedding``
    runs it in a worker thread so callers on the event loop never block.
    """

    @abstractmethod
    def get_dimensions(self) -> int:
        """Return the length of every vector this provider produces."""

    @abstractmethod
    def embed(self, texts: list[str]) -> list[Embedding]:
        """Embed a batch of texts, blocking until inference completes."""

    async def get_embedding(self, text: str) -> Embedding:
        """Embed a single text.

        Args:
            text: Input text (may be empty)

        Returns:
            List of exactly get_dimensions() floats
        """
        vectors = await asyncio.to_thread(self.embed, [text])
        return vectors[0]


class SentenceTransformerProvider(EmbeddingProvider):
    """Embedding provider backed by a sentence-transformers model.

    The model is loaded on first use and reused for the lifetime of the
    instance. Loading happens exactly once even when several threads ask
    for an embedding at the same time.

    Attributes:
        model_name: HuggingFace model identifier
        dimensions: Declared embedding dimension size
        device: Torch device, or None to let the library choose
        batch_size: Batch size for encoding
    """

    def __init__(
        self,
        model_name: str = DEFAULT_EMBEDDING_MODEL,
        dimensions: int = DEFAULT_EMBEDDING_DIM,
        device: str | None = None,
        batch_size: int = 32,
    ):
        """Initialize the provider without loading the model.

        Args:
            model_name: HuggingFace model identifier
            dimensions: Expected length of the produced vectors
            device: Torch device ('cpu', 'cuda', 'mps'), None for auto
            batch_size: Batch size for encoding
        """
        self.model_name = model_name
        self.dimensions = dimensions
        self.device = device
        self.batch_size = batch_size
        self._model: Any = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        """Whether the underlying model has been loaded."""
        return self._model is not None

    def get_dimensions(self) -> int:
        return self.dimensions

    def _load_model(self):
        """Lazily load the sentence-transformers model.

        Errors from the library propagate unchanged and leave the provider
        unloaded, so the next call tries again.
        """
        if self._model is not None:
            return self._model

        with self._lock:
            if self._model is None:
                logger.info("Loading embedding model: %s", self.model_name)
                from sentence_transformers import SentenceTransformer
                model = SentenceTransformer(self.model_name, device=self.device)
                self._model = model
                logger.info("Embedding model loaded | model=%s dim=%d", self.model_name, self.dimensions)
        return self._model

    def embed(self, texts: list[str]) -> list[Embedding]:
        """Encode texts to unit-normalized embedding vectors.

        Args:
            texts: List of input texts

        Returns:
            One list of floats per input text

        Raises:
            EmbeddingDimensionError: If the model output length differs from
                the declared dimensions

        Model loading and inference errors are the library's own and are
        not wrapped.
        """
        if not texts:
            return []

        model = self._load_model()
        embeddings = model.encode(
            texts,
            convert_to_numpy=True,
            normalize_embeddings=True,
            batch_size=self.batch_size,
            show_progress_bar=False,
        )

        embeddings = np.asarray(embeddings, dtype=np.float32)
        if embeddings.ndim != 2 or embeddings.shape[1] != self.dimensions:
            actual = embeddings.shape[-1] if embeddings.ndim else 0
            raise EmbeddingDimensionError(self.dimensions, actual)

        return embeddings.tolist()


def create_embedding_provider(config: Config) -> SentenceTransformerProvider:
    """Build the embedding provider described by the configuration.

    Args:
        config: Application configuration

    Returns:
        Provider with the model not yet loaded
    """
    return SentenceTransformerProvider(
        model_name=config.embedding_model,
        dimensions=config.embedding_dim,
        device=config.embedding_device or None,
        batch_size=config.embedding_batch_size,
    )
