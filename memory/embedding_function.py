"""ChromaDB embedding function backed by an EmbeddingProvider.

ChromaDB computes query embeddings itself through the embedding function
attached to a collection. This adapter hands that work to our provider so
documents and queries are embedded by the same model.

The adapter class is registered with ChromaDB's embedding function registry
so that persisted collections can name it in their configuration. Call
register_embedding_function() during setup; repeated calls are no-ops.
"""

import logging
from typing import Any

from chromadb import Documents, EmbeddingFunction, Embeddings
from chromadb.utils import embedding_functions

from embeddings import EmbeddingProvider
from errors import EmbeddingProviderNotConfigured

logger = logging.getLogger(__name__)

EMBEDDING_FUNCTION_NAME = "semantic-memory-ef"

_registered = False


class MemoryEmbeddingFunction(EmbeddingFunction[Documents]):
    """Adapter exposing an EmbeddingProvider as a ChromaDB embedding function.

    When rebuilt from a persisted collection configuration there is no
    provider to delegate to, and any embedding request fails with
    EmbeddingProviderNotConfigured.
    """

    def __init__(self, provider: EmbeddingProvider | None = None):
        self.provider = provider

    def __call__(self, input: Documents) -> Embeddings:
        if self.provider is None:
            raise EmbeddingProviderNotConfigured(
                "EmbeddingProvider not initialized for MemoryEmbeddingFunction"
            )
        return self.provider.embed(list(input))

    @staticmethod
    def name() -> str:
        return EMBEDDING_FUNCTION_NAME

    def get_config(self) -> dict[str, Any]:
        if self.provider is None:
            return {}
        return {
            "model_name": getattr(self.provider, "model_name", type(self.provider).__name__),
            "dimensions": self.provider.get_dimensions(),
        }

    @staticmethod
    def build_from_config(config: dict[str, Any]) -> "MemoryEmbeddingFunction":
        return MemoryEmbeddingFunction()

    @staticmethod
    def validate_config(config: dict[str, Any]) -> None:
        return None

    def validate_config_update(
        self, old_config: dict[str, Any], new_config: dict[str, Any]
    ) -> None:
        return None

    def default_space(self) -> str:
        return "cosine"

    def supported_spaces(self) -> list[str]:
        return ["cosine", "l2", "ip"]


def register_embedding_function() -> None:
    """Register MemoryEmbeddingFunction with ChromaDB, once per process.

    ChromaDB rejects a second registration under the same name; that case
    is treated as already registered.
    """
    global _registered
    if _registered:
        return

    try:
        embedding_functions.register_embedding_function(MemoryEmbeddingFunction)
        logger.debug("Registered embedding function: %s", EMBEDDING_FUNCTION_NAME)
    except ValueError:
        logger.debug("Embedding function already registered: %s", EMBEDDING_FUNCTION_NAME)
    _registered = True
