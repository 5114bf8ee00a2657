from shared.clients.content.ContentClientInterface import ContentClientInterface
from shared.exceptions.errors import ConfigurationError
from shared.helper.HelperConfig import HelperConfig


class ContentClientManager:
    """
    Manager class to handle the content provider client based on configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the content engine from ENV configuration.

        Returns:
            str: The name of the content engine, capitalized (e.g. "Backstage").

        Raises:
            ConfigurationError: If CONTENT_ENGINE is not set.
        """
        engine = self.helper_config.get_string_val("CONTENT_ENGINE")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> ContentClientInterface:
        """
        Initializes the content client for the configured engine.

        Raises:
            ConfigurationError: If the engine is unsupported.
        """
        engine = self._get_engine_from_env()
        class_name = f"ContentClient{engine}"
        try:
            module = __import__(
                f"shared.clients.content.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Unsupported content engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated content client for engine: %s", engine)
        return client

    def get_client(self) -> ContentClientInterface:
        """
        Returns the instantiated content client.
        """
        return self.client
