from abc import ABC, abstractmethod

from services.rag.models.RAGDependencies import RAGDependencies
from shared.models.chunk import Chunk
from shared.models.rag import RAGAnswer, RAGContext


class RAGStrategyInterface(ABC):
    """Contract of all retrieval strategies.

    A strategy owns indexing (chunk, embed, store), retrieval (embed query,
    search) and answer composition. The RAG service only talks to this
    interface, so strategies can be swapped through RAG_STRATEGY.
    """

    def __init__(self, dependencies: RAGDependencies):
        self.logging = dependencies.helper_config.get_logger()
        self._helper_config = dependencies.helper_config
        self._embed_client = dependencies.embed_client
        self._llm_client = dependencies.llm_client
        self._vector_store = dependencies.vector_store
        self._chunker = dependencies.chunker
        self._content_client = dependencies.content_client

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_name(self) -> str:
        """
        Returns the name of the strategy in lowercase. E.g. "simple"
        """
        return self._get_name().lower()

    @abstractmethod
    def _get_name(self) -> str:
        """
        Returns the name of the strategy. E.g. "Simple"
        """
        pass

    ##########################################
    ############### INDEXING #################
    ##########################################

    @abstractmethod
    async def index_all(self) -> None:
        """
        Rebuilds the whole index from the content provider.

        Failures of single items are logged and skipped.
        """
        pass

    @abstractmethod
    async def index_entity(self, item_ref: str) -> None:
        """
        Indexes a single item.

        Args:
            item_ref (str): Reference of the item in the content provider.

        Raises:
            NotFoundError: If the item does not exist.
            ProviderError: If fetching or embedding fails.
        """
        pass

    ##########################################
    ############### RETRIEVAL ################
    ##########################################

    @abstractmethod
    async def retrieve(self, query: str, top_k: int | None = None, scope_id: str | None = None) -> list[Chunk]:
        """
        Returns the chunks most similar to the query, best first.

        Args:
            query (str): The question text.
            top_k (int | None): Maximum number of chunks. None uses the configured default.
            scope_id (str | None): Restrict the search to one source item.
        """
        pass

    @abstractmethod
    async def answer(self, context: RAGContext) -> RAGAnswer:
        """
        Answers a question, grounded on retrieved or precomputed context.

        Args:
            context (RAGContext): The question and its options.

        Returns:
            RAGAnswer: The answer, its source chunks and the model that produced it.
        """
        pass
