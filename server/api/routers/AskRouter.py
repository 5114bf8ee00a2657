"""Ask router: answers questions, grounded on the indexed catalog unless disabled."""

from fastapi import APIRouter, HTTPException, Request

from server.models.requests import AskRequest
from server.models.responses import AskResponse
from shared.models.chat import ChatMessage
from shared.models.rag import QuestionOptions

ask_router = APIRouter()


@ask_router.post("/ask", tags=["Ask"], response_model=AskResponse)
async def handle_ask(request: Request, body: AskRequest) -> AskResponse:
    """Answer a question.

    With use_rag the question goes through the RAG service, which falls back to
    a plain chat when nothing relevant is indexed. Without it, the LLM is asked
    directly and no sources are returned.

    Raises:
        HTTPException: 400 if the prompt is empty.
    """
    if not body.prompt.strip():
        raise HTTPException(status_code=400, detail="prompt is required")

    request.app.state.logging.info("Processing question: %r", body.prompt[:50])

    if body.use_rag:
        result = await request.app.state.rag_service.answer_question(
            body.prompt,
            QuestionOptions(top_k=body.top_k, scope_id=body.entity_id, model=body.model),
        )
        return AskResponse(answer=result.answer, sources=result.sources, model=result.model)

    llm_client = request.app.state.llm_client
    model = body.model or llm_client.chat_model
    answer = await llm_client.do_chat([ChatMessage(role="user", content=body.prompt)], model=model)
    return AskResponse(answer=answer, sources=None, model=model)
