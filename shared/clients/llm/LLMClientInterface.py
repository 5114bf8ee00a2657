from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.chat import ChatMessage


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default="llama3.2")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        """Returns the endpoint path for chat/completion requests (e.g. "/api/chat")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_chat_payload(self, messages: list[ChatMessage], model: str) -> dict:
        """Build the backend-specific request body for a chat/completion request.

        Args:
            messages (list[ChatMessage]): The conversation to send.
            model (str): The chat model to use.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from a raw chat API response.

        Raises:
            ProviderError: If the response does not contain a reply.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_chat(self, messages: list[ChatMessage], model: str | None = None) -> str:
        """Send a chat/completion request and return the assistant reply text.

        Args:
            messages (list[ChatMessage]): The conversation, e.g. [system, user].
            model (str | None): Overrides the configured chat model.

        Returns:
            str: The assistant reply text.

        Raises:
            ProviderError: If the request fails or the response carries no reply.
        """
        model_name = model or self.chat_model
        self.logging.info("Generating chat completion with model: %s", model_name)
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_chat(),
            json=self.get_chat_payload(messages, model_name),
            raise_on_error=True,
        )
        return self.extract_chat_response(self.parse_json(response))
