from pydantic import BaseModel, ConfigDict

from services.rag.Chunker import Chunker
from shared.clients.content.ContentClientInterface import ContentClientInterface
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.vectorstores.VectorStoreInterface import VectorStoreInterface


class RAGDependencies(BaseModel):
    """Collaborators injected into a retrieval strategy."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    helper_config: HelperConfig
    embed_client: EmbedClientInterface
    llm_client: LLMClientInterface
    vector_store: VectorStoreInterface
    chunker: Chunker
    content_client: ContentClientInterface
