"""Index runner entry point.

Rebuilds the vector index from the content provider in one shot.

Usage:
    python -m services.rag.index_runner
"""

import asyncio

from services.rag.Chunker import Chunker
from services.rag.RAGService import RAGService
from services.rag.models.RAGDependencies import RAGDependencies
from shared.clients.content.ContentClientManager import ContentClientManager
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.vectorstores.VectorStoreInterface import VectorStoreInterface
from shared.vectorstores.VectorStoreManager import VectorStoreManager


async def main() -> int:
    """Run one full indexing pass.

    Returns:
        int: Process exit code, 0 on success.
    """
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    # init clients
    embed_client = EmbedClientManager(helper_config=config).get_client()
    llm_client = LLMClientManager(helper_config=config).get_client()
    content_client = ContentClientManager(helper_config=config).get_client()
    vector_store: VectorStoreInterface | None = None

    try:
        # embed and content clients are required, without them there is nothing to index
        try:
            await embed_client.boot()
            await embed_client.do_healthcheck()
            await content_client.boot()
            await content_client.do_healthcheck()
        except Exception as e:
            logger.error("Error booting clients: %s. Aborting.", e)
            return 1
        await llm_client.boot()

        vector_store = await VectorStoreManager(helper_config=config).create_store()

        rag_service = RAGService(
            dependencies=RAGDependencies(
                helper_config=config,
                embed_client=embed_client,
                llm_client=llm_client,
                vector_store=vector_store,
                chunker=Chunker(helper_config=config),
                content_client=content_client,
            )
        )
        await rag_service.index_all_documents()
        status = await rag_service.get_indexing_status()
        logger.info("Index run finished, %d vectors stored.", status.vector_count, color="green")
        return 0
    finally:
        await embed_client.close()
        await llm_client.close()
        await content_client.close()
        if vector_store is not None:
            await vector_store.close()


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
