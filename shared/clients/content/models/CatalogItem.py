"""Generic catalog item model, independent of the content backend."""

from pydantic import BaseModel


class ItemRelation(BaseModel):
    """A directed relation from one catalog item to another (e.g. ownedBy)."""

    type: str
    target_ref: str


class CatalogItem(BaseModel):
    """
    Represents a single item of the content provider with the metadata used for indexing.
    """
    engine: str
    kind: str
    namespace: str = "default"
    name: str
    title: str | None = None
    description: str | None = None
    tags: list[str] = []
    annotations: dict[str, str] = {}
    spec: dict = {}
    relations: list[ItemRelation] = []


class CatalogItemsListResponse(BaseModel):
    """
    Represents one page of items returned by a content provider.
    """
    engine: str
    items: list[CatalogItem] = []
    nextCursor: str | None = None
    totalItems: int | None = None
