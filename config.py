"""Configuration management for the semantic memory store.

This module provides centralized configuration for the embedding provider,
the ChromaDB client and the logging/tracing stack. All settings are loaded
from environment variables with sensible defaults.

Environment Variables:
    Embeddings:
        EMBEDDING_MODEL: sentence-transformers model identifier
        EMBEDDING_DIM: Declared embedding dimensionality
        EMBEDDING_DEVICE: Torch device for inference (empty = auto)
        EMBEDDING_BATCH_SIZE: Batch size used when encoding documents

    Vector Database:
        CHROMA_MODE: 'ephemeral', 'persistent' or 'http'
        VECTOR_DB_PATH: Directory for persistent storage
        CHROMA_HOST: ChromaDB server host (http mode)
        CHROMA_PORT: ChromaDB server port (http mode)
        COLLECTION_NAME: Name of the memory collection

    Search:
        SEARCH_LIMIT: Default number of results returned by the CLI

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_DIR: Directory for log files
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_EMBEDDING_DIM = 384
DEFAULT_COLLECTION_NAME = "semantic-memory"

CHROMA_MODES = ("ephemeral", "persistent", "http")


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Environment variable value or default
    """
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name
        default: Value to return if not set

    Returns:
        Parsed integer or default value

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'

    Args:
        key: Environment variable name
        default: Value to return if not set or unrecognized

    Returns:
        Parsed boolean or default value
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Embeddings ===
    embedding_model: str = DEFAULT_EMBEDDING_MODEL  # EMBEDDING_MODEL
    embedding_dim: int = DEFAULT_EMBEDDING_DIM  # EMBEDDING_DIM - Must match the model
    embedding_device: str = ""  # EMBEDDING_DEVICE - 'cpu', 'cuda', 'mps' or empty for auto
    embedding_batch_size: int = 32  # EMBEDDING_BATCH_SIZE

    # === Vector Database ===
    chroma_mode: str = "persistent"  # CHROMA_MODE - ephemeral, persistent or http
    vector_db_path: Path = field(default_factory=lambda: Path("vectors"))  # VECTOR_DB_PATH
    chroma_host: str = "localhost"  # CHROMA_HOST
    chroma_port: int = 8000  # CHROMA_PORT
    collection_name: str = DEFAULT_COLLECTION_NAME  # COLLECTION_NAME

    # === Search ===
    search_limit: int = 5  # SEARCH_LIMIT - Default result count for the CLI

    # === Output Directories ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR

    # === Logging Configuration ===
    log_level: str = "INFO"  # LOG_LEVEL - DEBUG, INFO, WARNING, ERROR
    log_backup_count: int = 30  # LOG_BACKUP_COUNT - Number of rotated logs to keep
    log_max_bytes: int = 0  # LOG_MAX_BYTES - Max file size (0 = time-based rotation)
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json' for structured logging

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE - Enable distributed tracing
    logfire_token: str = ""  # LOGFIRE_TOKEN - Authentication token

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            embedding_model=_env("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
            embedding_dim=_env_int("EMBEDDING_DIM", DEFAULT_EMBEDDING_DIM),
            embedding_device=_env("EMBEDDING_DEVICE"),
            embedding_batch_size=_env_int("EMBEDDING_BATCH_SIZE", 32),
            chroma_mode=_env("CHROMA_MODE", "persistent").lower(),
            vector_db_path=Path(_env("VECTOR_DB_PATH", "vectors")),
            chroma_host=_env("CHROMA_HOST", "localhost"),
            chroma_port=_env_int("CHROMA_PORT", 8000),
            collection_name=_env("COLLECTION_NAME", DEFAULT_COLLECTION_NAME),
            search_limit=_env_int("SEARCH_LIMIT", 5),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    def validate(self) -> str | None:
        """Validate configuration for valid values.

        Checks:
            - Embedding dimensions and batch size are positive
            - CHROMA_MODE is a known client mode
            - Collection name is set
            - Numeric values are in range

        Returns:
            Error message string if invalid, None if valid.
        """
        if not self.embedding_model:
            return "EMBEDDING_MODEL must not be empty"
        if self.embedding_dim <= 0:
            return "EMBEDDING_DIM must be positive"
        if self.embedding_batch_size <= 0:
            return "EMBEDDING_BATCH_SIZE must be positive"
        if self.chroma_mode not in CHROMA_MODES:
            return f"Invalid CHROMA_MODE '{self.chroma_mode}' - must be one of {', '.join(CHROMA_MODES)}"
        if self.chroma_mode == "http" and not 0 < self.chroma_port < 65536:
            return "CHROMA_PORT must be between 1 and 65535"
        if not self.collection_name:
            return "COLLECTION_NAME must not be empty"
        if self.search_limit < 0:
            return "SEARCH_LIMIT must be non-negative"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None
