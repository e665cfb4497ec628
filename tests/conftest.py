"""Shared fixtures: in-memory ChromaDB and a deterministic embedding provider."""

import hashlib
import logging
import math
import uuid

import chromadb
import pytest
from chromadb.config import Settings

from embeddings import EmbeddingProvider
from memory.chroma_store import ChromaVectorStore


class HashEmbeddingProvider(EmbeddingProvider):
    """Deterministic hash-based embeddings for tests.

    Identical texts map to identical unit vectors, so a document is always
    its own nearest neighbour. No model download is needed.
    """

    def __init__(self, dimensions: int = 384):
        self.dimensions = dimensions
        self.embedded: list[str] = []

    def get_dimensions(self) -> int:
        return self.dimensions

    def embed(self, texts: list[str]) -> list[list[float]]:
        self.embedded.extend(texts)
        return [self._vector(text) for text in texts]

    def _vector(self, text: str) -> list[float]:
        values = []
        counter = 0
        while len(values) < self.dimensions:
            digest = hashlib.sha256(f"{counter}:{text}".encode()).digest()
            values.extend((b / 127.5) - 1.0 for b in digest)
            counter += 1
        values = values[:self.dimensions]
        norm = math.sqrt(sum(v * v for v in values)) or 1.0
        return [v / norm for v in values]


class FailingEmbeddingProvider(EmbeddingProvider):
    """Provider whose inference always fails."""

    def get_dimensions(self) -> int:
        return 384

    def embed(self, texts: list[str]) -> list[list[float]]:
        raise RuntimeError("inference backend unavailable")


@pytest.fixture(scope="session")
def chroma_client():
    return chromadb.EphemeralClient(settings=Settings(anonymized_telemetry=False))


@pytest.fixture
def collection_name() -> str:
    return f"test-{uuid.uuid4().hex[:12]}"


@pytest.fixture
def provider() -> HashEmbeddingProvider:
    return HashEmbeddingProvider()


@pytest.fixture
def store(provider, chroma_client, collection_name) -> ChromaVectorStore:
    return ChromaVectorStore(provider, chroma_client, collection_name)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
