"""Semantic memory storage backed by ChromaDB.

This package stores text together with its embedding and answers
similarity queries over everything stored.

ChromaVectorStore:
    ChromaDB-based store implementing add, search, forget and clear.

MemoryItem / SearchResult / SearchOptions:
    Data models for stored items and search hits.

Requirements:
    pip install chromadb sentence-transformers

Configure via environment:
    CHROMA_MODE=persistent
    VECTOR_DB_PATH=./vectors

Example:
    >>> from config import Config
    >>> from memory import create_vector_store
    >>> store = create_vector_store(Config.load())
    >>> item = await store.add("the sky is blue", {"tag": "fact"})
    >>> results = await store.search("sky color")
"""

from memory.chroma_store import ChromaVectorStore, create_client, create_vector_store
from memory.embedding_function import MemoryEmbeddingFunction, register_embedding_function
from memory.models import MemoryItem, SearchOptions, SearchResult
from memory.store import VectorStore

__all__ = [
    "VectorStore",
    "ChromaVectorStore",
    "MemoryEmbeddingFunction",
    "MemoryItem",
    "SearchOptions",
    "SearchResult",
    "create_client",
    "create_vector_store",
    "register_embedding_function",
]
