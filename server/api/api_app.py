"""FastAPI application entry point for the RAG API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
from server.api.routers.AskRouter import ask_router
from server.api.routers.IndexRouter import index_router
from services.rag.Chunker import Chunker
from services.rag.RAGService import RAGService
from services.rag.models.RAGDependencies import RAGDependencies
from shared.clients.content.ContentClientManager import ContentClientManager
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.exceptions.errors import ConfigurationError, NotFoundError, ProviderError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.vectorstores.VectorStoreManager import VectorStoreManager

app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    app.state.logging = setup_logging()
    app.state.config = HelperConfig(logger=app.state.logging)

    # Initialise clients
    embed_client = EmbedClientManager(helper_config=app.state.config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.config).get_client()
    content_client = ContentClientManager(helper_config=app.state.config).get_client()
    await embed_client.boot()
    await llm_client.boot()
    await content_client.boot()

    # Health checks
    await embed_client.do_healthcheck()
    await content_client.do_healthcheck()

    # Vector store, falls back to memory unless VECTORSTORE_STRICT is set
    vector_store = await VectorStoreManager(helper_config=app.state.config).create_store()

    # Wire up services
    app.state.llm_client = llm_client
    app.state.rag_service = RAGService(
        dependencies=RAGDependencies(
            helper_config=app.state.config,
            embed_client=embed_client,
            llm_client=llm_client,
            vector_store=vector_store,
            chunker=Chunker(helper_config=app.state.config),
            content_client=content_client,
        )
    )

    app.state.logging.info("RAG API ready.", color="green")
    yield

    # Shutdown, a background index run must end before the store closes
    await app.state.rag_service.stop()
    await embed_client.close()
    await llm_client.close()
    await content_client.close()
    await vector_store.close()
    app.state.logging.info("RAG API shut down.")


def add_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto HTTP status codes."""

    def _handler(status_code: int, error: str):
        async def handle(request: Request, exc: Exception) -> JSONResponse:
            request.app.state.logging.error("%s: %s", error, exc)
            return JSONResponse(status_code=status_code, content={"error": error, "message": str(exc)})
        return handle

    app.add_exception_handler(NotFoundError, _handler(404, "Not found"))
    app.add_exception_handler(ProviderError, _handler(502, "Upstream provider failed"))
    app.add_exception_handler(ConfigurationError, _handler(400, "Invalid configuration"))
    app.add_exception_handler(Exception, _handler(500, "Internal server error"))


app = FastAPI(
    title="RAG Catalog Assistant",
    description="Retrieval-augmented question answering over a software catalog.",
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)
app.include_router(ask_router)
app.include_router(index_router)


# Server Start
if __name__ == "__main__":
    # start server
    import uvicorn
    setup_logging().info(f"Starting RAG API Server v{app_version} on port 8000...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
