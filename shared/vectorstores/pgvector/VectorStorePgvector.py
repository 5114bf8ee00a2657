"""PostgreSQL vector store backed by the pgvector extension.

Approximate nearest neighbour search runs on an HNSW index over the cosine
distance operator (<=>). The schema is created by migrations/, not by this
class: initialize() only verifies that connection, extension and table exist.
"""

import math
import re

import asyncpg

from shared.exceptions.errors import ConfigurationError, NotInitializedError, StoreInitializationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chunk import Chunk, ChunkMetadata, EmbeddingVector, SearchResult
from shared.models.config import EnvConfig
from shared.vectorstores.VectorStoreInterface import VectorStoreInterface

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def vector_to_sql(vector: list[float]) -> str:
    """Render a vector as a pgvector text literal, e.g. "[0.1,0.2]"."""
    return "[" + ",".join(str(float(value)) for value in vector) + "]"


class VectorStorePgvector(VectorStoreInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._host = self.get_config_val("HOST", default="localhost", val_type="string")
        self._port = self.get_config_val("PORT", default=5432, val_type="number")
        self._database = self.get_config_val("DATABASE", default="rag_vectors", val_type="string")
        self._user = self.get_config_val("USER", default="rag", val_type="string")
        self._password = self.get_config_val("PASSWORD", default=None, val_type="string")
        self._ssl = self.get_config_val("SSL", default=False, val_type="bool")
        self._table = self.get_config_val("TABLE", default="embeddings", val_type="string")
        self._max_connections = self.get_config_val("MAX_CONNECTIONS", default=10, val_type="number")
        self._connection_timeout = self.get_config_val("CONNECTION_TIMEOUT", default=5, val_type="number")
        self._idle_timeout = self.get_config_val("IDLE_TIMEOUT", default=30, val_type="number")

        if not isinstance(self._port, int) or not 1 <= self._port <= 65535:
            raise ConfigurationError(f"PostgreSQL port must be between 1 and 65535, got '{self._port}'.")
        if not _IDENTIFIER_RE.match(self._table):
            raise ConfigurationError(f"Invalid table name '{self._table}'.")
        if not isinstance(self._max_connections, int) or self._max_connections < 1:
            raise ConfigurationError(f"Max connections must be a positive integer, got '{self._max_connections}'.")

        self._pool: asyncpg.Pool | None = None
        self._initialized = False
        self._dimension: int | None = None

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Pgvector"

    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="HOST", val_type="string", default="localhost"),
            EnvConfig(env_key="PORT", val_type="number", default=5432),
            EnvConfig(env_key="DATABASE", val_type="string", default="rag_vectors"),
            EnvConfig(env_key="USER", val_type="string", default="rag"),
            EnvConfig(env_key="PASSWORD", val_type="string", default=None),
            EnvConfig(env_key="SSL", val_type="bool", default=False),
            EnvConfig(env_key="TABLE", val_type="string", default="embeddings"),
            EnvConfig(env_key="MAX_CONNECTIONS", val_type="number", default=10),
            EnvConfig(env_key="CONNECTION_TIMEOUT", val_type="number", default=5),
            EnvConfig(env_key="IDLE_TIMEOUT", val_type="number", default=30),
        ]

    def get_dimension(self) -> int | None:
        return self._dimension

    def is_initialized(self) -> bool:
        return self._initialized

    ##########################################
    ############## LIFECYCLE #################
    ##########################################

    async def initialize(self) -> None:
        """Open the connection pool and verify connection, pgvector extension and schema.

        Calling it again after a successful run is a no-op.

        Raises:
            StoreInitializationError: If any of the checks fails. The pool is released again.
        """
        if self._initialized:
            self.logging.debug("pgvector store already initialized")
            return

        self.logging.info("Initializing pgvector store on %s:%s/%s...", self._host, self._port, self._database)
        try:
            if self._pool is None:
                self._pool = await asyncpg.create_pool(
                    host=self._host,
                    port=self._port,
                    database=self._database,
                    user=self._user,
                    password=self._password,
                    ssl="require" if self._ssl else False,
                    min_size=1,
                    max_size=self._max_connections,
                    timeout=self._connection_timeout,
                    max_inactive_connection_lifetime=self._idle_timeout,
                )
            async with self._pool.acquire() as conn:
                now = await conn.fetchval("SELECT NOW()")
                self.logging.debug("Database connection successful: %s", now)

                installed = await conn.fetchval(
                    "SELECT EXISTS(SELECT 1 FROM pg_extension WHERE extname = 'vector')"
                )
                if not installed:
                    raise StoreInitializationError("pgvector extension is not installed. Please run: CREATE EXTENSION vector;")

                exists = await conn.fetchval(
                    "SELECT EXISTS(SELECT 1 FROM information_schema.tables WHERE table_name = $1)",
                    self._table,
                )
                if not exists:
                    raise StoreInitializationError(f"Table '{self._table}' not found. Run migrations first.")

                typmod = await conn.fetchval(
                    "SELECT atttypmod FROM pg_attribute WHERE attrelid = $1::regclass AND attname = 'embedding'",
                    self._table,
                )
                self._dimension = typmod if typmod and typmod > 0 else None
        except Exception as exc:
            self.logging.error("Failed to initialize pgvector store: %s", exc)
            await self._release_pool()
            if isinstance(exc, StoreInitializationError):
                raise
            raise StoreInitializationError(f"pgvector store initialization failed: {exc}") from exc

        self._initialized = True
        self.logging.info("pgvector store initialized (table '%s', dimension %s)", self._table, self._dimension)

    async def close(self) -> None:
        """Close the connection pool. Later calls fail with NotInitializedError."""
        await self._release_pool()
        self.logging.info("pgvector store connection pool closed")

    async def _release_pool(self) -> None:
        pool, self._pool = self._pool, None
        self._initialized = False
        if pool is not None:
            await pool.close()

    def _ensure_initialized(self) -> asyncpg.Pool:
        if not self._initialized or self._pool is None:
            raise NotInitializedError("pgvector store not initialized. Call initialize() first.")
        return self._pool

    ##########################################
    ################# SQL ####################
    ##########################################

    def _upsert_sql(self) -> str:
        return f"""
            INSERT INTO {self._table} (
                id, chunk_id, source_item_id, source_item_name, embedding,
                content, origin, chunk_index, total_chunks
            ) VALUES ($1, $2, $3, $4, $5::vector, $6, $7, $8, $9)
            ON CONFLICT (source_item_id, chunk_id)
            DO UPDATE SET
                embedding = EXCLUDED.embedding,
                content = EXCLUDED.content,
                source_item_name = EXCLUDED.source_item_name,
                origin = EXCLUDED.origin,
                chunk_index = EXCLUDED.chunk_index,
                total_chunks = EXCLUDED.total_chunks,
                updated_at = CURRENT_TIMESTAMP
        """

    @staticmethod
    def _to_row(embedding: EmbeddingVector) -> tuple:
        chunk = embedding.chunk
        return (
            embedding.id,
            embedding.chunk_id,
            chunk.source_item_id,
            chunk.source_item_name,
            vector_to_sql(embedding.vector),
            chunk.content,
            chunk.metadata.origin,
            chunk.metadata.chunk_index,
            chunk.metadata.total_chunks,
        )

    @staticmethod
    def _to_search_result(row) -> SearchResult:
        similarity = float(row["similarity"])
        # pgvector yields NaN for zero-norm vectors
        if math.isnan(similarity):
            similarity = 0.0
        return SearchResult(
            chunk=Chunk(
                id=row["id"],
                source_item_id=row["source_item_id"],
                source_item_name=row["source_item_name"],
                content=row["content"],
                metadata=ChunkMetadata(
                    origin=row["origin"],
                    chunk_index=row["chunk_index"],
                    total_chunks=row["total_chunks"],
                ),
            ),
            similarity=max(-1.0, min(1.0, similarity)),
        )

    ##########################################
    ############### STORAGE ##################
    ##########################################

    async def store(self, embedding: EmbeddingVector) -> None:
        pool = self._ensure_initialized()
        try:
            async with pool.acquire() as conn:
                await conn.execute(self._upsert_sql(), *self._to_row(embedding))
        except Exception as exc:
            self.logging.error("Failed to store embedding %s: %s", embedding.id, exc)
            raise
        self.logging.debug("Stored embedding: %s", embedding.id)

    async def store_batch(self, embeddings: list[EmbeddingVector]) -> None:
        pool = self._ensure_initialized()
        if not embeddings:
            return
        try:
            async with pool.acquire() as conn:
                async with conn.transaction():
                    await conn.executemany(self._upsert_sql(), [self._to_row(e) for e in embeddings])
        except Exception as exc:
            self.logging.error("Failed to store embedding batch of %d, rolled back: %s", len(embeddings), exc)
            raise
        self.logging.info("Stored batch of %d embeddings", len(embeddings))

    async def replace_batch(self, scope_id: str, embeddings: list[EmbeddingVector]) -> None:
        pool = self._ensure_initialized()
        try:
            async with pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(f"DELETE FROM {self._table} WHERE source_item_id = $1", scope_id)
                    if embeddings:
                        await conn.executemany(self._upsert_sql(), [self._to_row(e) for e in embeddings])
        except Exception as exc:
            self.logging.error("Failed to replace embeddings of %s, rolled back: %s", scope_id, exc)
            raise
        self.logging.info("Replaced embeddings of %s with %d new ones", scope_id, len(embeddings))

    async def search(self, query_vector: list[float], top_k: int, scope_id: str | None = None) -> list[SearchResult]:
        pool = self._ensure_initialized()
        if top_k <= 0:
            return []
        query = f"""
            SELECT
                id, chunk_id, source_item_id, source_item_name, content,
                origin, chunk_index, total_chunks,
                1 - (embedding <=> $1::vector) AS similarity
            FROM {self._table}
            WHERE ($2::TEXT IS NULL OR source_item_id = $2)
            ORDER BY embedding <=> $1::vector, id
            LIMIT $3
        """
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, vector_to_sql(query_vector), scope_id, top_k)
        except Exception as exc:
            self.logging.error("Failed to search vectors: %s", exc)
            raise

        results = [self._to_search_result(row) for row in rows]
        self.logging.info("Found %d results for query (scope: %s)", len(results), scope_id or "all")
        return results

    async def clear(self, scope_id: str | None = None) -> None:
        pool = self._ensure_initialized()
        try:
            async with pool.acquire() as conn:
                if scope_id is None:
                    status = await conn.execute(f"DELETE FROM {self._table}")
                else:
                    status = await conn.execute(f"DELETE FROM {self._table} WHERE source_item_id = $1", scope_id)
        except Exception as exc:
            self.logging.error("Failed to clear vectors: %s", exc)
            raise
        # status looks like "DELETE 42"
        count = status.rsplit(" ", 1)[-1] if isinstance(status, str) else "?"
        self.logging.info("Cleared %s vectors%s", count, f" for {scope_id}" if scope_id else "")

    async def count(self, scope_id: str | None = None) -> int:
        pool = self._ensure_initialized()
        async with pool.acquire() as conn:
            if scope_id is None:
                value = await conn.fetchval(f"SELECT COUNT(*) FROM {self._table}")
            else:
                value = await conn.fetchval(f"SELECT COUNT(*) FROM {self._table} WHERE source_item_id = $1", scope_id)
        return int(value or 0)
