from datetime import datetime

from pydantic import BaseModel

from shared.models.chunk import Chunk


class AskResponse(BaseModel):
    answer: str
    sources: list[Chunk] | None = None
    model: str


class IndexResponse(BaseModel):
    message: str
    status: str


class IndexStatusResponse(BaseModel):
    in_progress: bool
    last_index_time: datetime | None
    vector_count: int
