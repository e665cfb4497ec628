"""Exception types raised by the semantic memory store.

Only conditions detected by this package get their own type. Failures in
sentence-transformers or ChromaDB propagate to the caller unchanged.
"""


class MemoryStoreError(Exception):
    """Base class for errors raised by this package."""


class EmbeddingProviderNotConfigured(MemoryStoreError):
    """The ChromaDB embedding function was invoked without a provider."""


class EmbeddingDimensionError(MemoryStoreError):
    """The model produced a vector whose length differs from the declared size.

    Attributes:
        expected: Dimensionality the provider was configured with
        actual: Length of the vector the model returned
    """

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Embedding dimension mismatch: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual
