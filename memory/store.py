"""Abstract vector store contract for semantic memory."""

from abc import ABC, abstractmethod

from memory.models import MemoryItem, Metadata, SearchOptions, SearchResult


class VectorStore(ABC):
    """Stores text with embeddings and answers similarity queries.

    Implementations initialize lazily: every operation initializes the store
    first if that has not happened yet.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create or attach to the backing collection. Safe to call repeatedly."""

    @abstractmethod
    async def add(self, content: str, metadata: Metadata | None = None) -> MemoryItem:
        """Embed and persist content, returning the stored item."""

    @abstractmethod
    async def search(
        self,
        query: str,
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        """Return up to options.limit items most similar to the query."""

    @abstractmethod
    async def forget(self, id: str) -> None:
        """Remove a single item by id."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every item, leaving the store ready for use."""

    @abstractmethod
    async def get(self, id: str) -> MemoryItem | None:
        """Fetch a single item by id, or None if it does not exist."""

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored items."""
