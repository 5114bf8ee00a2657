from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    prompt: str
    model: str | None = None
    entity_id: str | None = None
    use_rag: bool = True
    top_k: int | None = Field(default=None, gt=0)


class IndexEntityRequest(BaseModel):
    entity_ref: str
