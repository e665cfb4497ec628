"""Tests for environment-based configuration."""

from pathlib import Path

import pytest

from config import DEFAULT_EMBEDDING_MODEL, Config

ENV_VARS = (
    "EMBEDDING_MODEL", "EMBEDDING_DIM", "EMBEDDING_DEVICE", "EMBEDDING_BATCH_SIZE",
    "CHROMA_MODE", "VECTOR_DB_PATH", "CHROMA_HOST", "CHROMA_PORT", "COLLECTION_NAME",
    "SEARCH_LIMIT", "LOG_DIR", "LOG_LEVEL", "LOG_BACKUP_COUNT", "LOG_MAX_BYTES",
    "LOG_FORMAT", "ENABLE_LOGFIRE", "LOGFIRE_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    config = Config.load()

    assert config.embedding_model == DEFAULT_EMBEDDING_MODEL
    assert config.embedding_dim == 384
    assert config.chroma_mode == "persistent"
    assert config.vector_db_path == Path("vectors")
    assert config.collection_name == "semantic-memory"
    assert config.search_limit == 5
    assert config.enable_logfire is False
    assert config.validate() is None


def test_load_from_environment(monkeypatch):
    monkeypatch.setenv("EMBEDDING_MODEL", "BAAI/bge-base-en-v1.5")
    monkeypatch.setenv("EMBEDDING_DIM", "768")
    monkeypatch.setenv("CHROMA_MODE", "HTTP")
    monkeypatch.setenv("CHROMA_HOST", "chroma.internal")
    monkeypatch.setenv("CHROMA_PORT", "9000")
    monkeypatch.setenv("COLLECTION_NAME", "agent-memory")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "JSON")
    monkeypatch.setenv("ENABLE_LOGFIRE", "yes")

    config = Config.load()

    assert config.embedding_model == "BAAI/bge-base-en-v1.5"
    assert config.embedding_dim == 768
    assert config.chroma_mode == "http"
    assert config.chroma_host == "chroma.internal"
    assert config.chroma_port == 9000
    assert config.collection_name == "agent-memory"
    assert config.log_level == "DEBUG"
    assert config.log_format == "json"
    assert config.enable_logfire is True
    assert config.validate() is None


def test_invalid_integer_raises(monkeypatch):
    monkeypatch.setenv("EMBEDDING_DIM", "large")

    with pytest.raises(ValueError, match="EMBEDDING_DIM"):
        Config.load()


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"embedding_dim": 0}, "EMBEDDING_DIM"),
        ({"embedding_batch_size": 0}, "EMBEDDING_BATCH_SIZE"),
        ({"chroma_mode": "sqlite"}, "CHROMA_MODE"),
        ({"chroma_mode": "http", "chroma_port": 0}, "CHROMA_PORT"),
        ({"collection_name": ""}, "COLLECTION_NAME"),
        ({"search_limit": -1}, "SEARCH_LIMIT"),
        ({"log_level": "LOUD"}, "LOG_LEVEL"),
        ({"log_format": "xml"}, "LOG_FORMAT"),
        ({"log_backup_count": -1}, "LOG_BACKUP_COUNT"),
    ],
)
def test_validate_reports_invalid_values(overrides, message):
    assert message in Config(**overrides).validate()
