"""In-memory vector store with exact cosine search.

Meant for development and small corpora: every query scans all stored vectors.
All access happens on one event loop, so no locking is needed; search() works
on a snapshot of the stored values.
"""

import math

from shared.helper.HelperConfig import HelperConfig
from shared.models.chunk import EmbeddingVector, SearchResult
from shared.models.config import EnvConfig
from shared.vectorstores.VectorStoreInterface import VectorStoreInterface


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors of equal length.

    A zero-norm vector has similarity 0 to everything. The result is clamped
    to [-1, 1] to absorb floating point drift.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors must have the same length, got {len(a)} and {len(b)}.")

    dot = norm_a = norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denominator == 0:
        return 0.0
    return max(-1.0, min(1.0, dot / denominator))


class VectorStoreMemory(VectorStoreInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._vectors: dict[str, EmbeddingVector] = {}
        self._dimension: int | None = None

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Memory"

    def _get_required_config(self) -> list[EnvConfig]:
        return []

    def get_dimension(self) -> int | None:
        return self._dimension

    ##########################################
    ############### STORAGE ##################
    ##########################################

    def _check_dimension(self, vector: list[float]) -> None:
        if self._dimension is not None and len(vector) != self._dimension:
            raise ValueError(
                f"Vector dimension {len(vector)} does not match the store dimension {self._dimension}."
            )

    async def store(self, embedding: EmbeddingVector) -> None:
        self._check_dimension(embedding.vector)
        self._vectors[embedding.id] = embedding
        self._dimension = len(embedding.vector)
        self.logging.debug("Stored embedding: %s", embedding.id)

    def _batch_dimension(self, embeddings: list[EmbeddingVector]) -> int:
        """Dimension shared by all vectors of a batch and the store.

        Raises:
            ValueError: If any vector deviates.
        """
        dimension = self._dimension if self._dimension is not None else len(embeddings[0].vector)
        for embedding in embeddings:
            if len(embedding.vector) != dimension:
                raise ValueError(
                    f"Vector dimension {len(embedding.vector)} of '{embedding.id}' does not match the store dimension {dimension}."
                )
        return dimension

    async def store_batch(self, embeddings: list[EmbeddingVector]) -> None:
        if not embeddings:
            return
        # validate everything first so a bad vector leaves the store untouched
        dimension = self._batch_dimension(embeddings)
        for embedding in embeddings:
            self._vectors[embedding.id] = embedding
        self._dimension = dimension
        self.logging.info("Stored batch of %d embeddings", len(embeddings))

    async def replace_batch(self, scope_id: str, embeddings: list[EmbeddingVector]) -> None:
        dimension = self._batch_dimension(embeddings) if embeddings else self._dimension
        stale = [key for key, v in self._vectors.items() if v.chunk.source_item_id == scope_id]
        for key in stale:
            del self._vectors[key]
        for embedding in embeddings:
            self._vectors[embedding.id] = embedding
        self._dimension = dimension
        self.logging.info(
            "Replaced %d embeddings of %s with %d new ones", len(stale), scope_id, len(embeddings)
        )

    async def search(self, query_vector: list[float], top_k: int, scope_id: str | None = None) -> list[SearchResult]:
        if top_k <= 0:
            return []
        self._check_dimension(query_vector)

        candidates = list(self._vectors.values())
        if scope_id is not None:
            candidates = [v for v in candidates if v.chunk.source_item_id == scope_id]

        results = [
            SearchResult(chunk=v.chunk, similarity=cosine_similarity(query_vector, v.vector))
            for v in candidates
        ]
        results.sort(key=lambda r: (-r.similarity, r.chunk.id))
        top_results = results[:top_k]

        self.logging.info("Found %d results for query (scope: %s)", len(top_results), scope_id or "all")
        return top_results

    async def clear(self, scope_id: str | None = None) -> None:
        if scope_id is None:
            count = len(self._vectors)
            self._vectors.clear()
            self._dimension = None
        else:
            stale = [key for key, v in self._vectors.items() if v.chunk.source_item_id == scope_id]
            for key in stale:
                del self._vectors[key]
            count = len(stale)
        self.logging.info("Cleared %d vectors from store%s", count, f" for {scope_id}" if scope_id else "")

    async def count(self, scope_id: str | None = None) -> int:
        if scope_id is None:
            return len(self._vectors)
        return sum(1 for v in self._vectors.values() if v.chunk.source_item_id == scope_id)
