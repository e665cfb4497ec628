"""ChromaDB-backed vector store for semantic memory.

This module persists text, embeddings and metadata in a ChromaDB collection
and answers similarity queries against it.

Features:
    - Lazy initialization (collection created or attached on first use)
    - Cosine distance, fixed when the collection is created
    - Query embedding delegated to ChromaDB through MemoryEmbeddingFunction
    - Blocking client calls run in worker threads

Client modes (CHROMA_MODE):
    ephemeral   In-memory, lost when the process exits
    persistent  On-disk at VECTOR_DB_PATH
    http        Remote ChromaDB server at CHROMA_HOST:CHROMA_PORT

Errors raised by ChromaDB propagate to the caller unchanged; nothing is
retried here.
"""

import asyncio
import logging
import uuid
from typing import Any

import chromadb
import numpy as np
from chromadb.api import ClientAPI
from chromadb.config import Settings

from config import DEFAULT_COLLECTION_NAME, Config
from embeddings import EmbeddingProvider, create_embedding_provider
from memory.embedding_function import MemoryEmbeddingFunction, register_embedding_function
from memory.models import (
    MemoryItem,
    Metadata,
    SearchOptions,
    SearchResult,
    decode_metadata,
    encode_metadata,
    validate_metadata,
)
from memory.store import VectorStore
from observability.tracing import trace_operation

logger = logging.getLogger(__name__)

DISTANCE_METRIC = "cosine"


def _generate_id() -> str:
    """Random 12-character hex id. Collisions are not checked."""
    return uuid.uuid4().hex[:12]


def _to_floats(vector: Any) -> list[float]:
    if vector is None:
        return []
    return np.asarray(vector, dtype=np.float64).tolist()


class ChromaVectorStore(VectorStore):
    """Vector store persisting memory items in a ChromaDB collection.

    The collection handle is created on first use. Initialization is
    serialized with a lock so concurrent first calls share one setup, and the
    handle is only assigned once setup succeeds; a failed initialization
    leaves the store uninitialized so the next call retries.

    clear() swaps the handle under the same lock, so operations that start
    while a clear is running wait for the recreated collection. A call that
    already sent a request on the old handle may still fail with ChromaDB's
    NotFoundError.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        client: ClientAPI,
        collection_name: str = DEFAULT_COLLECTION_NAME,
    ):
        """Initialize the vector store.

        Args:
            embedding_provider: Provider used for documents and queries
            client: ChromaDB client (ephemeral, persistent or http)
            collection_name: Name of the ChromaDB collection
        """
        self.embedding_provider = embedding_provider
        self.client = client
        self.collection_name = collection_name
        self._collection = None
        self._init_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._collection is not None

    async def _create_collection(self):
        register_embedding_function()
        return await asyncio.to_thread(
            self.client.get_or_create_collection,
            name=self.collection_name,
            metadata={"hnsw:space": DISTANCE_METRIC},
            embedding_function=MemoryEmbeddingFunction(self.embedding_provider),
        )

    async def initialize(self) -> None:
        """Create or attach to the collection.

        Calling this on an initialized store does nothing.
        """
        if self._collection is not None:
            return

        async with self._init_lock:
            if self._collection is not None:
                return

            with trace_operation("memory.initialize", {"collection": self.collection_name}):
                collection = await self._create_collection()

            self._collection = collection
            logger.info("Vector store initialized | collection=%s", self.collection_name)

    async def _ensure_initialized(self):
        if self._collection is None:
            await self.initialize()
        return self._collection

    async def add(self, content: str, metadata: Metadata | None = None) -> MemoryItem:
        """Embed content and add it to the collection.

        The embedding is computed once and stored alongside the document,
        so the returned item carries exactly the stored vector. Metadata is
        validated before anything is embedded or written.

        Args:
            content: Text to remember
            metadata: Optional free-form metadata

        Returns:
            The newly stored MemoryItem
        """
        metadata = validate_metadata(metadata)
        encoded = encode_metadata(metadata)
        item_id = _generate_id()

        with trace_operation("memory.add", {"collection": self.collection_name}) as outcome:
            embedding = await self.embedding_provider.get_embedding(content)
            # Fetched after embedding so a clear() in the meantime is picked up
            collection = await self._ensure_initialized()
            await asyncio.to_thread(
                collection.add,
                ids=[item_id],
                documents=[content],
                embeddings=[embedding],
                metadatas=[encoded] if encoded else None,
            )
            outcome["id"] = item_id

        logger.debug("Added memory | id=%s chars=%d", item_id, len(content))
        return MemoryItem(id=item_id, content=content, embedding=embedding, metadata=metadata)

    async def search(
        self,
        query: str,
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        """Search for items similar to the query text.

        Results keep ChromaDB's ranking; scores are the raw cosine
        distances it reports.

        Args:
            query: Search query text
            options: Result limit (default 5); the method is informational

        Returns:
            List of search results, most similar first
        """
        options = options or SearchOptions()

        if options.method != DISTANCE_METRIC:
            logger.debug(
                "Ignoring search method | requested=%s collection_metric=%s",
                options.method, DISTANCE_METRIC,
            )

        collection = await self._ensure_initialized()
        if options.limit == 0:
            return []

        with trace_operation("memory.search", {"collection": self.collection_name, "limit": options.limit}) as outcome:
            results = await asyncio.to_thread(
                collection.query,
                query_texts=[query],
                n_results=options.limit,
                include=["documents", "metadatas", "embeddings", "distances"],
            )

            ids = results["ids"][0] if results["ids"] else []
            documents = results.get("documents")
            metadatas = results.get("metadatas")
            embeddings = results.get("embeddings")
            distances = results.get("distances")

            search_results = []
            for i, item_id in enumerate(ids):
                item = MemoryItem(
                    id=item_id,
                    content=documents[0][i] if documents is not None else "",
                    embedding=_to_floats(embeddings[0][i]) if embeddings is not None else [],
                    metadata=decode_metadata(metadatas[0][i] if metadatas is not None else None),
                )
                score = distances[0][i] if distances is not None else 0.0
                search_results.append(SearchResult(item=item, score=float(score)))

            outcome["results"] = len(search_results)

        return search_results

    async def forget(self, id: str) -> None:
        """Delete one item. Unknown ids are ignored by ChromaDB."""
        collection = await self._ensure_initialized()
        with trace_operation("memory.forget", {"collection": self.collection_name, "id": id}):
            await asyncio.to_thread(collection.delete, ids=[id])

    async def clear(self) -> None:
        """Delete the whole collection and recreate it empty.

        Runs under the initialization lock; see the class docstring for how
        this interacts with concurrent operations.
        """
        with trace_operation("memory.clear", {"collection": self.collection_name}) as outcome:
            async with self._init_lock:
                if self._collection is None:
                    await self._create_collection()
                self._collection = None
                await asyncio.to_thread(self.client.delete_collection, name=self.collection_name)
                collection = self._collection = await self._create_collection()

            outcome["count"] = await asyncio.to_thread(collection.count)

        logger.info("Vector store cleared | collection=%s", self.collection_name)

    async def get(self, id: str) -> MemoryItem | None:
        """Fetch a single item by id.

        Returns:
            The stored item, or None if no item has this id
        """
        collection = await self._ensure_initialized()
        result = await asyncio.to_thread(
            collection.get,
            ids=[id],
            include=["documents", "metadatas", "embeddings"],
        )

        if not result["ids"]:
            return None

        documents = result.get("documents")
        metadatas = result.get("metadatas")
        embeddings = result.get("embeddings")
        return MemoryItem(
            id=result["ids"][0],
            content=documents[0] if documents is not None else "",
            embedding=_to_floats(embeddings[0]) if embeddings is not None else [],
            metadata=decode_metadata(metadatas[0] if metadatas is not None else None),
        )

    async def count(self) -> int:
        """Get the number of items in the collection."""
        collection = await self._ensure_initialized()
        return await asyncio.to_thread(collection.count)


def create_client(config: Config) -> ClientAPI:
    """Create a ChromaDB client for the configured mode.

    Args:
        config: Application configuration

    Returns:
        ChromaDB client

    Raises:
        ValueError: If CHROMA_MODE is not recognized
    """
    settings = Settings(anonymized_telemetry=False)

    if config.chroma_mode == "ephemeral":
        client = chromadb.EphemeralClient(settings=settings)
    elif config.chroma_mode == "persistent":
        config.vector_db_path.mkdir(parents=True, exist_ok=True)
        client = chromadb.PersistentClient(path=str(config.vector_db_path), settings=settings)
    elif config.chroma_mode == "http":
        client = chromadb.HttpClient(host=config.chroma_host, port=config.chroma_port, settings=settings)
    else:
        raise ValueError(f"Unknown CHROMA_MODE: {config.chroma_mode}")

    logger.debug("ChromaDB client created | mode=%s", config.chroma_mode)
    return client


def create_vector_store(
    config: Config,
    embedding_provider: EmbeddingProvider | None = None,
    client: ClientAPI | None = None,
) -> ChromaVectorStore:
    """Wire a ChromaVectorStore from configuration.

    Args:
        config: Application configuration
        embedding_provider: Provider to use (default: built from config)
        client: ChromaDB client to use (default: built from config)

    Returns:
        Uninitialized vector store
    """
    register_embedding_function()
    return ChromaVectorStore(
        embedding_provider=embedding_provider or create_embedding_provider(config),
        client=client or create_client(config),
        collection_name=config.collection_name,
    )
