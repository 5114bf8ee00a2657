"""RAG orchestration service.

Single entry point for answering questions and for (re-)indexing. Holds the
indexing state of the process and guarantees that at most one full index run
is active at a time.
"""

import asyncio
from datetime import datetime, timezone

from services.rag.RAGStrategyInterface import RAGStrategyInterface
from services.rag.RAGStrategyManager import RAGStrategyManager
from services.rag.models.RAGDependencies import RAGDependencies
from shared.models.chunk import Chunk
from shared.models.rag import IndexingStatus, QuestionOptions, RAGAnswer, RAGContext


class RAGService:
    """Orchestrates indexing and question answering on top of a retrieval strategy."""

    def __init__(self, dependencies: RAGDependencies, strategy: RAGStrategyInterface | None = None) -> None:
        self.logging = dependencies.helper_config.get_logger()
        self._vector_store = dependencies.vector_store
        self._strategy = strategy or RAGStrategyManager(dependencies=dependencies).get_strategy()

        # indexing state, written only by index_all_documents()
        self._indexing_in_progress = False
        self._last_index_time: datetime | None = None
        self._index_task: asyncio.Task | None = None

    ##########################################
    ############### INDEXING #################
    ##########################################

    def is_indexing(self) -> bool:
        return self._indexing_in_progress

    async def index_all_documents(self) -> bool:
        """Rebuild the whole index.

        A call while another run is active is logged and ignored.

        Returns:
            bool: True if this call performed the run, False if it was rejected.

        Raises:
            Exception: Whatever aborted the run as a whole, e.g. a failing item listing.
        """
        # check and set before the first await, so a concurrent call sees the flag
        if self._indexing_in_progress:
            self.logging.warning("Indexing already in progress, skipping")
            return False
        self._indexing_in_progress = True

        try:
            self.logging.info("Starting full document indexing with strategy '%s'", self._strategy.get_name())
            await self._strategy.index_all()
            return True
        except Exception as exc:
            self.logging.error("Indexing failed: %s", exc)
            raise
        finally:
            self._last_index_time = datetime.now(timezone.utc)
            self._indexing_in_progress = False

    def start_index_all(self) -> bool:
        """Schedule a full index run in the background.

        Returns:
            bool: True if a run was started, False if one is already active.
        """
        if self._indexing_in_progress or (self._index_task is not None and not self._index_task.done()):
            self.logging.warning("Indexing already in progress, not starting another run")
            return False
        self._index_task = asyncio.create_task(self._run_index_all())
        return True

    async def _run_index_all(self) -> None:
        # nobody awaits the background task, so its failure ends here
        try:
            await self.index_all_documents()
        except Exception as exc:
            self.logging.error("Background indexing run failed: %s", exc)

    async def stop(self) -> None:
        """Cancel a running background index run and wait until it has ended.

        Must be called before the vector store is closed.
        """
        task = self._index_task
        if task is None or task.done():
            return
        self.logging.info("Cancelling running background indexing")
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def index_entity(self, item_ref: str) -> None:
        """Index a single item.

        Raises:
            NotFoundError: If the item does not exist.
            ProviderError: If fetching, embedding or storing fails.
        """
        try:
            await self._strategy.index_entity(item_ref)
        except Exception as exc:
            self.logging.error("Failed to index item %s: %s", item_ref, exc)
            raise

    async def get_indexing_status(self) -> IndexingStatus:
        return IndexingStatus(
            in_progress=self._indexing_in_progress,
            last_index_time=self._last_index_time,
            vector_count=await self._vector_store.count(),
        )

    ##########################################
    ############### QUESTIONS ################
    ##########################################

    async def retrieve_context(self, query: str, top_k: int | None = None, scope_id: str | None = None) -> list[Chunk]:
        """Return the chunks most relevant to a query."""
        try:
            return await self._strategy.retrieve(query, top_k, scope_id)
        except Exception as exc:
            self.logging.error("Context retrieval failed: %s", exc)
            raise

    async def generate_answer(self, query: str, context: list[Chunk], model: str | None = None) -> str:
        """Answer a query from already retrieved context, without embedding it again."""
        try:
            response = await self._strategy.answer(
                RAGContext(query=query, context=context, model=model, top_k=len(context) or None)
            )
        except Exception as exc:
            self.logging.error("Answer generation failed: %s", exc)
            raise
        return response.answer

    async def answer_question(self, query: str, options: QuestionOptions | None = None) -> RAGAnswer:
        """Answer a question, grounded on the indexed corpus.

        Args:
            query (str): The question.
            options (QuestionOptions | None): top_k, scope, model override or precomputed context.

        Returns:
            RAGAnswer: The answer, the chunks it is based on and the model used.
        """
        options = options or QuestionOptions()
        self.logging.info("Answering question (scope: %s): %r", options.scope_id or "all", query[:80])
        return await self._strategy.answer(
            RAGContext(
                query=query,
                top_k=options.top_k,
                scope_id=options.scope_id,
                model=options.model,
                context=options.context,
            )
        )
