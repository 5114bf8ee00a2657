"""
Tests for store selection, persistent fallback and strict mode.
"""

import pytest

from shared.exceptions.errors import ConfigurationError, StoreInitializationError
from shared.vectorstores.VectorStoreManager import VectorStoreManager
from shared.vectorstores.memory.VectorStoreMemory import VectorStoreMemory
from shared.vectorstores.pgvector import VectorStorePgvector as pgvector_module
from shared.vectorstores.pgvector.VectorStorePgvector import VectorStorePgvector


@pytest.fixture
def refuse_connections(monkeypatch):
    async def refuse(**kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(pgvector_module.asyncpg, "create_pool", refuse)


@pytest.fixture
def persistent_env(clean_env):
    clean_env.setenv("VECTORSTORE_TYPE", "persistent")
    clean_env.setenv("VECTORSTORE_PGVECTOR_PASSWORD", "secret")
    return clean_env


class TestCreateStore:
    @pytest.mark.asyncio
    async def test_memory_is_default(self, helper_config):
        store = await VectorStoreManager(helper_config=helper_config).create_store()

        assert isinstance(store, VectorStoreMemory)

    @pytest.mark.asyncio
    async def test_persistent_falls_back_to_memory(self, persistent_env, helper_config, refuse_connections):
        store = await VectorStoreManager(helper_config=helper_config).create_store()

        assert isinstance(store, VectorStoreMemory)

    @pytest.mark.asyncio
    async def test_strict_mode_propagates(self, persistent_env, helper_config, refuse_connections):
        with pytest.raises(StoreInitializationError):
            await VectorStoreManager(helper_config=helper_config).create_store(strict=True)

    @pytest.mark.asyncio
    async def test_strict_mode_from_env(self, persistent_env, helper_config, refuse_connections):
        persistent_env.setenv("VECTORSTORE_STRICT", "true")

        with pytest.raises(StoreInitializationError):
            await VectorStoreManager(helper_config=helper_config).create_store()

    @pytest.mark.asyncio
    async def test_persistent_store_returned_when_ready(self, persistent_env, helper_config, monkeypatch):
        async def initialize(self):
            self._initialized = True

        monkeypatch.setattr(VectorStorePgvector, "initialize", initialize)

        store = await VectorStoreManager(helper_config=helper_config).create_store()

        assert isinstance(store, VectorStorePgvector)
        assert store.get_engine_name() == "pgvector"

    @pytest.mark.asyncio
    async def test_missing_credentials_are_not_masked(self, clean_env, helper_config):
        clean_env.setenv("VECTORSTORE_TYPE", "persistent")

        with pytest.raises(ConfigurationError):
            await VectorStoreManager(helper_config=helper_config).create_store()

    @pytest.mark.asyncio
    async def test_unknown_type_raises(self, clean_env, helper_config):
        clean_env.setenv("VECTORSTORE_TYPE", "redis")

        with pytest.raises(ConfigurationError):
            await VectorStoreManager(helper_config=helper_config).create_store()


class TestValidateConfig:
    def test_memory_has_no_problems(self, helper_config):
        assert VectorStoreManager(helper_config=helper_config).validate_config() == []

    def test_complete_persistent_config(self, persistent_env, helper_config):
        assert VectorStoreManager(helper_config=helper_config).validate_config() == []

    def test_reports_password_and_port(self, clean_env, helper_config):
        clean_env.setenv("VECTORSTORE_TYPE", "postgresql")
        clean_env.setenv("VECTORSTORE_PGVECTOR_PORT", "0")

        problems = VectorStoreManager(helper_config=helper_config).validate_config()

        assert "PostgreSQL password is required" in problems
        assert "PostgreSQL port must be between 1 and 65535" in problems
