from shared.exceptions.errors import ConfigurationError, StoreInitializationError
from shared.helper.HelperConfig import HelperConfig
from shared.vectorstores.VectorStoreInterface import VectorStoreInterface

# VECTORSTORE_TYPE value -> engine module under shared.vectorstores
_STORE_ENGINES: dict[str, str] = {
    "memory": "Memory",
    "persistent": "Pgvector",
    "postgresql": "Pgvector",
}


class VectorStoreManager:
    """
    Manager class to create the vector store based on configuration.

    A persistent store that fails to initialize is replaced by the in-memory
    store unless strict mode is enabled, in which case the error propagates.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()

    def _get_type_from_env(self) -> str:
        """
        Reads the store type from ENV configuration.

        Returns:
            str: The store type in lowercase, e.g. "memory".

        Raises:
            ConfigurationError: If the type is not supported.
        """
        store_type = self.helper_config.get_string_val("VECTORSTORE_TYPE", default="memory").strip().lower()
        if store_type not in _STORE_ENGINES:
            raise ConfigurationError(
                f"Unsupported vector store type '{store_type}'. Expected one of: {', '.join(sorted(_STORE_ENGINES))}."
            )
        return store_type

    def _instantiate(self, engine: str) -> VectorStoreInterface:
        class_name = f"VectorStore{engine}"
        # engines live in shared.vectorstores.{engine}.{class_name}
        try:
            module = __import__(
                f"shared.vectorstores.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            store_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Unsupported vector store engine specified: '{engine}'. Error: {e}")
        store = store_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated vector store for engine: %s", engine)
        return store

    async def create_store(self, strict: bool | None = None) -> VectorStoreInterface:
        """
        Creates and initializes the configured vector store.

        Args:
            strict (bool | None): Propagate persistent initialization errors instead of
                falling back to memory. None reads VECTORSTORE_STRICT.

        Returns:
            VectorStoreInterface: A ready to use store.

        Raises:
            ConfigurationError: If the store configuration is invalid.
            StoreInitializationError: If strict mode is on and the persistent store cannot initialize.
        """
        store_type = self._get_type_from_env()
        if strict is None:
            strict = self.helper_config.get_bool_val("VECTORSTORE_STRICT", default=False)

        store = self._instantiate(_STORE_ENGINES[store_type])
        try:
            await store.initialize()
        except StoreInitializationError as exc:
            if strict:
                raise
            self.logging.error(
                "Failed to initialize %s vector store: %s. Falling back to in-memory store.",
                store.get_engine_name(), exc,
            )
            store = self._instantiate(_STORE_ENGINES["memory"])
            await store.initialize()

        self.logging.info("Using %s vector store", store.get_engine_name())
        return store

    def validate_config(self) -> list[str]:
        """
        Checks the configuration of the persistent store without connecting.

        Returns:
            list[str]: Human readable problems, empty if the configuration is usable.
        """
        errors: list[str] = []
        try:
            store_type = self._get_type_from_env()
        except ConfigurationError as exc:
            return [str(exc)]
        if _STORE_ENGINES[store_type] != "Pgvector":
            return errors

        prefix = "VECTORSTORE_PGVECTOR_"
        for key, default in (("HOST", "localhost"), ("DATABASE", "rag_vectors"), ("USER", "rag"), ("PASSWORD", None)):
            try:
                if not self.helper_config.get_string_val(prefix + key, default=default):
                    errors.append(f"PostgreSQL {key.lower()} is required")
            except ConfigurationError:
                errors.append(f"PostgreSQL {key.lower()} is required")
        try:
            port = self.helper_config.get_number_val(prefix + "PORT", default=5432)
            if not isinstance(port, int) or not 1 <= port <= 65535:
                errors.append("PostgreSQL port must be between 1 and 65535")
        except ConfigurationError:
            errors.append("PostgreSQL port must be between 1 and 65535")
        return errors
