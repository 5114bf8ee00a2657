"""Request/response models of the retrieval strategies and the RAG service."""

from datetime import datetime

from pydantic import BaseModel, Field

from shared.models.chunk import Chunk


class QuestionOptions(BaseModel):
    """Optional knobs for answering a question.

    Attributes:
        top_k:    Maximum number of chunks to retrieve. Falls back to RAG_TOP_K.
        scope_id: Restrict retrieval to chunks of one source item.
        model:    Chat model override.
        context:  Precomputed context; when set, retrieval is skipped.
    """

    top_k: int | None = Field(default=None, gt=0)
    scope_id: str | None = None
    model: str | None = None
    context: list[Chunk] | None = None


class RAGContext(QuestionOptions):
    """A question together with its options, passed between strategy steps."""

    query: str


class RAGAnswer(BaseModel):
    """An answer and the chunks it was grounded on."""

    answer: str
    sources: list[Chunk]
    model: str


class IndexingStatus(BaseModel):
    """Snapshot of the indexing state of one RAG service."""

    in_progress: bool
    last_index_time: datetime | None = None
    vector_count: int = 0
