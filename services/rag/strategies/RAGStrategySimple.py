"""Default retrieval strategy.

Indexing: item metadata and its techdocs are chunked, embedded in one call per
item and stored as one batch. Answering: the top-k chunks are put into a
single system message in front of the user question.
"""

import asyncio

from services.rag.RAGStrategyInterface import RAGStrategyInterface
from services.rag.models.RAGDependencies import RAGDependencies
from shared.clients.content.models.CatalogItem import CatalogItem
from shared.models.chat import ChatMessage
from shared.models.chunk import Chunk, EmbeddingVector
from shared.models.rag import RAGAnswer, RAGContext

DEFAULT_TOP_K = 5
DEFAULT_INDEX_BATCH_SIZE = 10  # items indexed concurrently

ORIGIN_CATALOG = "catalog"
ORIGIN_TECHDOCS = "techdocs"

SYSTEM_PROMPT = """You are a helpful assistant that answers questions about the projects and services in the software catalog.
Answer the user's question using only the context below. If the context does not contain the answer, say that you cannot answer it from the available information.
Always cite which item you are referring to when providing information.

Context:
{context}"""


def build_context_string(chunks: list[Chunk]) -> str:
    """Render chunks as numbered, source-labelled sections separated by "---"."""
    parts = [
        f"[{index}] Item: {chunk.source_item_name} (Source: {chunk.metadata.origin})\n{chunk.content}"
        for index, chunk in enumerate(chunks, start=1)
    ]
    return "\n\n---\n\n".join(parts)


class RAGStrategySimple(RAGStrategyInterface):
    def __init__(self, dependencies: RAGDependencies):
        super().__init__(dependencies=dependencies)
        self.batch_size = self._helper_config.get_positive_int_val("RAG_INDEX_BATCH_SIZE", default=DEFAULT_INDEX_BATCH_SIZE)
        self.default_top_k = self._helper_config.get_positive_int_val("RAG_TOP_K", default=DEFAULT_TOP_K)

    def _get_name(self) -> str:
        return "Simple"

    ##########################################
    ############### INDEXING #################
    ##########################################

    async def index_all(self) -> None:
        self.logging.info("[%s] Starting full indexing", self.get_name())
        await self._vector_store.clear()

        items = await self._content_client.do_fetch_all_items()
        self.logging.info("[%s] Indexing %d items", self.get_name(), len(items))

        indexed = skipped = errors = 0
        # batches run one after another, items within a batch concurrently
        for batch_start in range(0, len(items), self.batch_size):
            batch = items[batch_start: batch_start + self.batch_size]
            results = await asyncio.gather(
                *[self._index_item(item) for item in batch],
                return_exceptions=True,
            )
            for item, result in zip(batch, results):
                if isinstance(result, BaseException):
                    errors += 1
                    self.logging.error("[%s] Failed to index %s: %s", self.get_name(), item.name, result)
                elif result:
                    indexed += 1
                else:
                    skipped += 1
            self.logging.info(
                "Indexed %d/%d items", min(batch_start + self.batch_size, len(items)), len(items)
            )

        vector_count = await self._vector_store.count()
        self.logging.info(
            "[%s] Indexing complete: %d indexed, %d skipped, %d errors. Total vectors stored: %d",
            self.get_name(), indexed, skipped, errors, vector_count,
        )

    async def index_entity(self, item_ref: str) -> None:
        self.logging.info("[%s] Indexing item: %s", self.get_name(), item_ref)
        item = await self._content_client.do_fetch_item(item_ref)
        await self._index_item(item)

    async def _index_item(self, item: CatalogItem) -> bool:
        """Chunk, embed and store one item with its techdocs.

        Returns:
            bool: True if chunks were stored, False if the item produced no chunks.
            The item's previously stored chunks are replaced in both cases.

        Raises:
            ProviderError: If the documentation or embedding request fails.
        """
        item_ref = self._content_client.get_item_ref(item)

        chunks = self._chunker.chunk(
            self._content_client.extract_item_content(item), item_ref, item.name, ORIGIN_CATALOG
        )

        documentation = await self._content_client.do_fetch_supplementary_docs(item_ref)
        if documentation:
            chunks.extend(self._chunker.chunk(documentation, item_ref, item.name, ORIGIN_TECHDOCS))

        if not chunks:
            self.logging.debug("[%s] No chunks created for %s", self.get_name(), item.name)
            # drop whatever an earlier run stored for the item
            await self._vector_store.replace_batch(item_ref, [])
            return False

        # one embedding request per item, vectors aligned with chunks
        vectors = await self._embed_client.do_embed(texts=[chunk.content for chunk in chunks])
        embeddings = [
            EmbeddingVector(id=chunk.id, chunk_id=chunk.id, vector=vector, chunk=chunk)
            for chunk, vector in zip(chunks, vectors)
        ]
        await self._vector_store.replace_batch(item_ref, embeddings)

        self.logging.debug("[%s] Indexed %d chunks for %s", self.get_name(), len(embeddings), item.name)
        return True

    ##########################################
    ############### RETRIEVAL ################
    ##########################################

    async def retrieve(self, query: str, top_k: int | None = None, scope_id: str | None = None) -> list[Chunk]:
        top_k = top_k if top_k is not None else self.default_top_k
        self.logging.info("[%s] Retrieving context (top_k=%d)", self.get_name(), top_k)

        query_vector = (await self._embed_client.do_embed(texts=[query]))[0]
        results = await self._vector_store.search(query_vector, top_k, scope_id)

        chunks = [result.chunk for result in results]
        self.logging.info("[%s] Retrieved %d relevant chunks", self.get_name(), len(chunks))
        return chunks

    async def answer(self, context: RAGContext) -> RAGAnswer:
        if context.context is not None:
            chunks = context.context
        else:
            chunks = await self.retrieve(context.query, context.top_k, context.scope_id)
        model = context.model or self._llm_client.chat_model

        if not chunks:
            self.logging.warning("[%s] No relevant context found, falling back to direct LLM", self.get_name())
            answer = await self._llm_client.do_chat(
                [ChatMessage(role="user", content=context.query)], model=model
            )
            return RAGAnswer(answer=answer, sources=[], model=model)

        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT.format(context=build_context_string(chunks))),
            ChatMessage(role="user", content=context.query),
        ]
        answer = await self._llm_client.do_chat(messages, model=model)
        self.logging.info("[%s] Generated answer from %d chunks", self.get_name(), len(chunks))
        return RAGAnswer(answer=answer, sources=chunks, model=model)
