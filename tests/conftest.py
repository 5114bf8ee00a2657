"""
Shared test fixtures.

Provides: helper config with a clean environment, deterministic fake embedding,
spec'd mocks for the embed/llm/content clients, catalog item factory.
"""

import logging
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from services.rag.Chunker import Chunker
from services.rag.models.RAGDependencies import RAGDependencies
from shared.clients.content.ContentClientInterface import ContentClientInterface
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.vectorstores.memory.VectorStoreMemory import VectorStoreMemory
from tests.fakes import fake_embed

_MANAGED_ENV_PREFIXES = ("EMBED_", "LLM_", "CONTENT_", "VECTORSTORE_", "RAG_")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove all project settings from the environment and set the required client ones."""
    for key in list(os.environ):
        if key.startswith(_MANAGED_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("EMBED_ENGINE", "ollama")
    monkeypatch.setenv("EMBED_OLLAMA_BASE_URL", "http://ollama.test")
    monkeypatch.setenv("LLM_ENGINE", "ollama")
    monkeypatch.setenv("LLM_OLLAMA_BASE_URL", "http://ollama.test")
    monkeypatch.setenv("CONTENT_ENGINE", "backstage")
    monkeypatch.setenv("CONTENT_BACKSTAGE_BASE_URL", "http://backstage.test")
    return monkeypatch


@pytest.fixture
def helper_config(clean_env) -> HelperConfig:
    return HelperConfig(logger=ColorLogger(logging.getLogger("rag.tests")))


@pytest.fixture
def embed_client() -> MagicMock:
    client = MagicMock(spec=EmbedClientInterface)
    client.do_embed = AsyncMock(side_effect=fake_embed)
    return client


@pytest.fixture
def llm_client() -> MagicMock:
    client = MagicMock(spec=LLMClientInterface)
    client.chat_model = "llama3.2"
    client.do_chat = AsyncMock(return_value="The answer.")
    return client


@pytest.fixture
def content_client() -> MagicMock:
    client = MagicMock(spec=ContentClientInterface)
    client.get_item_ref = MagicMock(side_effect=lambda item: f"{item.kind}:{item.namespace}/{item.name}")
    client.extract_item_content = MagicMock(side_effect=lambda item: item.description or "")
    client.do_fetch_all_items = AsyncMock(return_value=[])
    client.do_fetch_item = AsyncMock()
    client.do_fetch_supplementary_docs = AsyncMock(return_value=None)
    return client


@pytest.fixture
def memory_store(helper_config: HelperConfig) -> VectorStoreMemory:
    return VectorStoreMemory(helper_config=helper_config)


@pytest.fixture
def dependencies(helper_config, embed_client, llm_client, content_client, memory_store) -> RAGDependencies:
    return RAGDependencies(
        helper_config=helper_config,
        embed_client=embed_client,
        llm_client=llm_client,
        vector_store=memory_store,
        chunker=Chunker(helper_config=helper_config, chunk_size=10, chunk_overlap=2),
        content_client=content_client,
    )
