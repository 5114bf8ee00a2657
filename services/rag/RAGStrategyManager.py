from services.rag.RAGStrategyInterface import RAGStrategyInterface
from services.rag.models.RAGDependencies import RAGDependencies
from shared.exceptions.errors import ConfigurationError


class RAGStrategyManager:
    """
    Manager class to create the retrieval strategy based on configuration.
    """

    def __init__(self, dependencies: RAGDependencies):
        self.dependencies = dependencies
        self.helper_config = dependencies.helper_config
        self.logging = dependencies.helper_config.get_logger()
        self.strategy = self._initialize_strategy()

    def _get_strategy_from_env(self) -> str:
        """
        Reads the strategy name from ENV configuration.

        Returns:
            str: The name of the strategy, capitalized (e.g. "Simple").
        """
        strategy = self.helper_config.get_string_val("RAG_STRATEGY", default="simple")
        return strategy.strip().lower().capitalize()

    def _initialize_strategy(self) -> RAGStrategyInterface:
        """
        Instantiates the configured strategy.

        Raises:
            ConfigurationError: If the strategy is unknown.
        """
        name = self._get_strategy_from_env()
        class_name = f"RAGStrategy{name}"
        # strategies live in services.rag.strategies.{class_name}
        try:
            module = __import__(f"services.rag.strategies.{class_name}", fromlist=[class_name])
            strategy_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Unsupported RAG strategy specified: '{name}'. Error: {e}")
        strategy = strategy_class(dependencies=self.dependencies)
        self.logging.debug("Instantiated RAG strategy: %s", name)
        return strategy

    def get_strategy(self) -> RAGStrategyInterface:
        """
        Returns the instantiated strategy.
        """
        return self.strategy
