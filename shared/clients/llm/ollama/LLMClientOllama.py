from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.exceptions.errors import ProviderError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatMessage
from shared.models.config import EnvConfig


class LLMClientOllama(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Ollama"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    def _get_endpoint_chat(self) -> str:
        return "/api/chat"

    ################ PAYLOAD BUILDER ##################
    def get_chat_payload(self, messages: list[ChatMessage], model: str) -> dict:
        """Build the Ollama chat request body.

        Returns:
            dict: {"model": "...", "messages": [...], "stream": False}
        """
        return {
            "model": model,
            "messages": [message.model_dump() for message in messages],
            "stream": False,
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from an Ollama /api/chat response."""
        message = response_data.get("message") if isinstance(response_data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            keys = list(response_data.keys()) if isinstance(response_data, dict) else type(response_data).__name__
            raise ProviderError(
                "Ollama chat response does not contain a valid message. "
                "Response keys: %s" % keys
            )
        return content
