"""Error taxonomy shared by clients, vector stores and the RAG services."""


class ProviderError(Exception):
    """An upstream provider (embedding, chat or content backend) failed or returned a malformed payload."""


class NotInitializedError(Exception):
    """A vector store was used before initialize() succeeded, or after close()."""


class ConfigurationError(ValueError):
    """A configuration value is missing or invalid."""


class NotFoundError(Exception):
    """The content provider has no item for the requested reference."""


class StoreInitializationError(Exception):
    """A persistent vector store could not verify connectivity, extension or schema."""
