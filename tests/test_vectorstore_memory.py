"""
Tests for the in-memory vector store and its cosine similarity.
"""

import math

import pytest

from shared.models.chunk import Chunk, ChunkMetadata, EmbeddingVector
from shared.vectorstores.memory.VectorStoreMemory import VectorStoreMemory, cosine_similarity


def make_embedding(chunk_id: str, vector: list[float], source_item_id: str = "item-a", content: str = "text") -> EmbeddingVector:
    chunk = Chunk(
        id=chunk_id,
        source_item_id=source_item_id,
        source_item_name=source_item_id,
        content=content,
        metadata=ChunkMetadata(origin="catalog", chunk_index=0, total_chunks=1),
    )
    return EmbeddingVector(id=chunk_id, chunk_id=chunk_id, vector=vector, chunk=chunk)


class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_zero_vector_is_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])

    def test_result_is_clamped(self):
        value = cosine_similarity([0.1, 0.2, 0.3], [0.1, 0.2, 0.3])
        assert -1.0 <= value <= 1.0


class TestVectorStoreMemory:
    @pytest.fixture
    def store(self, helper_config) -> VectorStoreMemory:
        return VectorStoreMemory(helper_config=helper_config)

    def test_engine_name(self, store):
        assert store.get_engine_name() == "memory"

    @pytest.mark.asyncio
    async def test_search_sorted_and_truncated(self, store):
        await store.store_batch([
            make_embedding("a", [1.0, 0.0, 0.0]),
            make_embedding("b", [0.7, 0.7, 0.0]),
            make_embedding("c", [0.0, 1.0, 0.0]),
            make_embedding("d", [-1.0, 0.0, 0.0]),
        ])

        results = await store.search([1.0, 0.0, 0.0], top_k=3)

        assert [r.chunk.id for r in results] == ["a", "b", "c"]
        similarities = [r.similarity for r in results]
        assert similarities == sorted(similarities, reverse=True)
        assert all(-1.0 <= s <= 1.0 for s in similarities)

    @pytest.mark.asyncio
    async def test_own_vector_has_similarity_one(self, store):
        embedding = make_embedding("only", [0.3, 0.1, 0.9])
        await store.store(embedding)

        results = await store.search(embedding.vector, top_k=1)

        assert len(results) == 1
        assert results[0].chunk.id == "only"
        assert results[0].similarity == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_scoped_search_ignores_other_items(self, store):
        await store.store(make_embedding("a-0", [0.5, 0.5, 0.0], source_item_id="A"))
        await store.store(make_embedding("b-0", [1.0, 0.0, 0.0], source_item_id="B"))

        results = await store.search([1.0, 0.0, 0.0], top_k=5, scope_id="A")

        assert [r.chunk.id for r in results] == ["a-0"]

    @pytest.mark.asyncio
    async def test_upsert_replaces_entry(self, store):
        await store.store(make_embedding("x", [1.0, 0.0], content="old"))
        await store.store(make_embedding("x", [1.0, 0.0], content="new"))

        assert await store.count() == 1
        results = await store.search([1.0, 0.0], top_k=5)
        assert results[0].chunk.content == "new"

    @pytest.mark.asyncio
    async def test_ties_broken_by_chunk_id(self, store):
        await store.store_batch([
            make_embedding("c", [1.0, 0.0]),
            make_embedding("a", [2.0, 0.0]),
            make_embedding("b", [3.0, 0.0]),
        ])

        results = await store.search([1.0, 0.0], top_k=3)

        assert [r.chunk.id for r in results] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_zero_query_vector_scores_zero(self, store):
        await store.store(make_embedding("a", [1.0, 1.0]))

        results = await store.search([0.0, 0.0], top_k=1)

        assert results[0].similarity == 0.0
        assert not math.isnan(results[0].similarity)

    @pytest.mark.asyncio
    async def test_non_positive_top_k_returns_nothing(self, store):
        await store.store(make_embedding("a", [1.0, 1.0]))

        assert await store.search([1.0, 1.0], top_k=0) == []

    @pytest.mark.asyncio
    async def test_dimension_mismatch_rejected(self, store):
        await store.store(make_embedding("a", [1.0, 0.0, 0.0]))

        with pytest.raises(ValueError):
            await store.store(make_embedding("b", [1.0, 0.0]))
        with pytest.raises(ValueError):
            await store.search([1.0, 0.0], top_k=1)

    @pytest.mark.asyncio
    async def test_invalid_batch_leaves_store_untouched(self, store):
        with pytest.raises(ValueError):
            await store.store_batch([
                make_embedding("a", [1.0, 0.0]),
                make_embedding("b", [1.0, 0.0, 0.0]),
            ])

        assert await store.count() == 0
        assert store.get_dimension() is None

    @pytest.mark.asyncio
    async def test_clear_scope_and_all(self, store):
        await store.store_batch([
            make_embedding("a-0", [1.0, 0.0], source_item_id="A"),
            make_embedding("a-1", [0.0, 1.0], source_item_id="A"),
            make_embedding("b-0", [1.0, 1.0], source_item_id="B"),
        ])

        await store.clear(scope_id="A")
        assert await store.count() == 1
        assert await store.count(scope_id="A") == 0
        assert await store.count(scope_id="B") == 1

        await store.clear()
        assert await store.count() == 0
        assert store.get_dimension() is None

    @pytest.mark.asyncio
    async def test_replace_batch_drops_stale_chunks_of_item(self, store):
        await store.store_batch([
            make_embedding("A-0", [1.0, 0.0], source_item_id="A"),
            make_embedding("A-1", [0.0, 1.0], source_item_id="A"),
            make_embedding("B-0", [1.0, 1.0], source_item_id="B"),
        ])

        await store.replace_batch("A", [make_embedding("A-0", [1.0, 0.0], source_item_id="A", content="fresh")])

        results = await store.search([0.0, 1.0], top_k=5, scope_id="A")
        assert [(r.chunk.id, r.chunk.content) for r in results] == [("A-0", "fresh")]
        assert await store.count(scope_id="B") == 1

    @pytest.mark.asyncio
    async def test_replace_batch_with_nothing_removes_item(self, store):
        await store.store(make_embedding("A-0", [1.0, 0.0], source_item_id="A"))

        await store.replace_batch("A", [])

        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_invalid_replace_keeps_old_chunks(self, store):
        await store.store(make_embedding("A-0", [1.0, 0.0], source_item_id="A"))

        with pytest.raises(ValueError):
            await store.replace_batch("A", [make_embedding("A-0", [1.0, 0.0, 0.0], source_item_id="A")])

        assert await store.count(scope_id="A") == 1
