"""Chunk, embedding and search result models shared by the chunker, the vector stores and the strategies."""

from pydantic import BaseModel, ConfigDict


class ChunkMetadata(BaseModel):
    """Positional metadata of a chunk within one item's text.

    Attributes:
        origin:       Where the text came from (e.g. "catalog" or "techdocs").
        chunk_index:  Zero-based position of the chunk in creation order.
        total_chunks: Number of chunks produced for the same item and origin.
    """

    model_config = ConfigDict(frozen=True)

    origin: str
    chunk_index: int
    total_chunks: int = 0


class Chunk(BaseModel):
    """A bounded slice of an item's text content.

    Chunks are immutable. Re-chunking produces new instances with the same
    deterministic ids, so re-indexing overwrites rather than duplicates.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    source_item_id: str
    source_item_name: str
    content: str
    metadata: ChunkMetadata


class EmbeddingVector(BaseModel):
    """A chunk together with its embedding, as owned by a vector store."""

    model_config = ConfigDict(frozen=True)

    id: str
    chunk_id: str
    vector: list[float]
    chunk: Chunk


class SearchResult(BaseModel):
    """A ranked hit returned by a vector store.

    Attributes:
        chunk:      The matching chunk.
        similarity: Cosine similarity to the query vector, in [-1, 1].
    """

    chunk: Chunk
    similarity: float
