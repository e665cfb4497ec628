"""Tests for the ChromaDB embedding function adapter."""

import pytest

from errors import EmbeddingProviderNotConfigured
from memory import embedding_function
from memory.embedding_function import (
    EMBEDDING_FUNCTION_NAME,
    MemoryEmbeddingFunction,
    register_embedding_function,
)


def test_embeds_batch_through_provider(provider):
    ef = MemoryEmbeddingFunction(provider)

    vectors = ef(["first", "second"])

    assert len(vectors) == 2
    assert all(len(v) == 384 for v in vectors)
    assert provider.embedded == ["first", "second"]


def test_missing_provider_fails_without_computing():
    ef = MemoryEmbeddingFunction()

    with pytest.raises(EmbeddingProviderNotConfigured):
        ef(["anything"])


def test_name_and_config(provider):
    ef = MemoryEmbeddingFunction(provider)

    assert MemoryEmbeddingFunction.name() == EMBEDDING_FUNCTION_NAME
    assert ef.get_config()["dimensions"] == 384
    assert ef.default_space() == "cosine"
    assert "cosine" in ef.supported_spaces()


def test_build_from_config_has_no_provider():
    ef = MemoryEmbeddingFunction.build_from_config({"dimensions": 384})

    assert ef.provider is None
    with pytest.raises(EmbeddingProviderNotConfigured):
        ef(["anything"])


def test_registration_is_idempotent(monkeypatch):
    register_embedding_function()
    register_embedding_function()

    # Force a second attempt against the library registry
    monkeypatch.setattr(embedding_function, "_registered", False)
    register_embedding_function()

    assert embedding_function._registered is True
