from abc import ABC, abstractmethod
from typing import Any

from shared.exceptions.errors import ConfigurationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chunk import EmbeddingVector, SearchResult
from shared.models.config import EnvConfig


class VectorStoreInterface(ABC):
    """Storage and similarity search of chunk embeddings.

    Implementations are interchangeable: callers cannot tell the backend apart
    by the shape of results. search() returns at most top_k results, ordered by
    cosine similarity descending, each similarity in [-1, 1].
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Validates that all required configuration values for the store are set and valid.

        Raises:
            ConfigurationError: If any required configuration value is missing or invalid.
        """
        for config in self._get_required_config():
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_engine_name(self) -> str:
        """
        Returns the name of the storage engine in lowercase. E.g. "pgvector"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the name of the storage engine. E.g. "Pgvector"
        """
        pass

    def get_dimension(self) -> int | None:
        """
        Returns the vector dimension the store is bound to, or None while it is not known yet.
        """
        return None

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns all configuration keys of the store.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The full configuration key name. E.g. "VECTORSTORE_PGVECTOR_HOST"
        """
        return f"VECTORSTORE_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Retrieves the value of a configuration key for the store.

        Args:
            raw_key (str): The raw configuration key name
            default (Any): The default value to return if the configuration key is not set
            val_type (str): The type of the configuration value ("string", "number", "bool")
        """
        key = self._get_config_key_name(raw_key)
        if val_type == "string":
            return self._helper_config.get_string_val(key, default=default)
        elif val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        elif val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        else:
            raise ConfigurationError(f"Unsupported config value type '{val_type}' for env key '{raw_key}' in vector store '{self.get_engine_name()}'.")

    ##########################################
    ############## LIFECYCLE #################
    ##########################################

    async def initialize(self) -> None:
        """Prepare the store for use. Idempotent."""
        return None

    async def close(self) -> None:
        """Release all resources held by the store."""
        return None

    ##########################################
    ############### STORAGE ##################
    ##########################################

    @abstractmethod
    async def store(self, embedding: EmbeddingVector) -> None:
        """Insert or replace a single embedding."""
        pass

    @abstractmethod
    async def store_batch(self, embeddings: list[EmbeddingVector]) -> None:
        """Insert or replace several embeddings. Either all of them are stored or none."""
        pass

    @abstractmethod
    async def replace_batch(self, scope_id: str, embeddings: list[EmbeddingVector]) -> None:
        """Replace all embeddings of one source item with the given ones, atomically.

        Chunks of the item that are not part of the new set are removed, so a
        re-indexed item never mixes stale and fresh chunks.
        """
        pass

    @abstractmethod
    async def search(self, query_vector: list[float], top_k: int, scope_id: str | None = None) -> list[SearchResult]:
        """Return the top_k most similar chunks, optionally restricted to one source item.

        Ties in similarity are broken by chunk id ascending.
        """
        pass

    @abstractmethod
    async def clear(self, scope_id: str | None = None) -> None:
        """Delete all embeddings, or only those of one source item."""
        pass

    @abstractmethod
    async def count(self, scope_id: str | None = None) -> int:
        """Number of stored embeddings, optionally for one source item."""
        pass
