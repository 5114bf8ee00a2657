"""Index router: triggers and monitors (re-)indexing of the catalog."""

from fastapi import APIRouter, HTTPException, Request

from server.models.requests import IndexEntityRequest
from server.models.responses import IndexResponse, IndexStatusResponse

index_router = APIRouter(prefix="/index", tags=["Index"])


@index_router.post("", response_model=IndexResponse)
async def handle_index_all(request: Request) -> IndexResponse:
    """Start a full index run in the background and return immediately."""
    request.app.state.logging.info("Triggering full indexing")
    if request.app.state.rag_service.start_index_all():
        return IndexResponse(message="Indexing started", status="in-progress")
    return IndexResponse(message="Indexing already running", status="already-running")


@index_router.post("/entity", response_model=IndexResponse)
async def handle_index_entity(request: Request, body: IndexEntityRequest) -> IndexResponse:
    """Index a single catalog item synchronously."""
    if not body.entity_ref.strip():
        raise HTTPException(status_code=400, detail="entity_ref is required")
    request.app.state.logging.info("Indexing item: %s", body.entity_ref)
    await request.app.state.rag_service.index_entity(body.entity_ref)
    return IndexResponse(message=f"Item {body.entity_ref} indexed successfully", status="done")


@index_router.get("/status", response_model=IndexStatusResponse)
async def handle_index_status(request: Request) -> IndexStatusResponse:
    status = await request.app.state.rag_service.get_indexing_status()
    return IndexStatusResponse(**status.model_dump())
