from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.exceptions.errors import ConfigurationError
from shared.helper.HelperConfig import HelperConfig


class LLMClientManager:
    """
    Manager class to handle the LLM client based on configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the LLM engine from ENV configuration.

        Returns:
            str: The name of the LLM engine, capitalized (e.g. "Ollama").

        Raises:
            ConfigurationError: If no LLM engine is specified in the configuration.
        """
        engine = self.helper_config.get_string_val("LLM_ENGINE")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> LLMClientInterface:
        """
        Initializes the LLM client based on the engine specified in the configuration.

        Raises:
            ConfigurationError: If the engine is unsupported.
        """
        engine = self._get_engine_from_env()
        class_name = f"LLMClient{engine}"
        try:
            module = __import__(
                f"shared.clients.llm.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Unsupported LLM engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated LLM client for engine: %s", engine)
        return client

    def get_client(self) -> LLMClientInterface:
        """
        Returns the instantiated LLM client.

        Returns:
            LLMClientInterface: The LLM client instance.
        """
        return self.client
