from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.exceptions.errors import ProviderError
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default="all-minilm")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "embed"
        """
        return "embed"

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/api/embed")
        """
        pass

    @abstractmethod
    def get_endpoint_model_details(self) -> str:
        """
        Returns the endpoint path for model details requests.

        Returns:
            str: The endpoint path for model details requests (e.g. "/api/show")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str], model: str) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str]): The texts to embed.
            model (str): The embedding model to use.

        Returns:
            dict: JSON-serialisable request body (e.g. {"model": "...", "input": [...]}).
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_vector_size_from_model_info(self, model_info: dict) -> int:
        """
        Extracts the embedding vector size from the model information response.

        Args:
            model_info (dict): The raw response from the model details endpoint.

        Returns:
            int: The dimension of the embedding vectors produced by the model.

        Raises:
            ProviderError: If the vector size cannot be determined.
        """
        pass

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from a raw embedding API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the input texts.

        Raises:
            ProviderError: If the response does not contain a vector array.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_embedding_vector_size(self, model: str | None = None) -> int:
        """
        Fetch the output vector dimension of the configured embedding model.

        Returns:
            int: The number of dimensions produced by the embedding model.

        Raises:
            ProviderError: If the backend cannot be reached or the dimension cannot be determined.
        """
        response = await self.do_request(
            method="POST",
            json={"name": model or self.embed_model},
            endpoint=self.get_endpoint_model_details(),
            raise_on_error=True,
        )
        return self.extract_vector_size_from_model_info(model_info=self.parse_json(response))

    async def do_embed(self, texts: list[str] | str, model: str | None = None) -> list[list[float]]:
        """Send one batched embedding request and return the extracted vectors.

        The returned list is aligned 1:1 with the input: vector[k] belongs to texts[k].

        Args:
            texts (list[str] | str): One or more texts to embed.
            model (str | None): Overrides the configured embedding model.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the inputs.

        Raises:
            ProviderError: If the request fails, the status is not 200, or the payload is
                malformed (missing, empty or non-numeric vectors, vectors of
                different lengths, or a count that differs from the input).
        """
        texts = [texts] if isinstance(texts, str) else list(texts)
        if not texts:
            return []
        model_name = model or self.embed_model
        self.logging.debug("Generating embeddings for %d inputs with model: %s", len(texts), model_name)

        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=self.get_embed_payload(texts, model_name),
        )
        if response.status_code != 200:
            self.logging.error(
                "Embedding request failed: status %d, body: %s",
                response.status_code,
                response.text[:200],
            )
            raise ProviderError("Embedding request failed with status %d." % response.status_code)

        embeddings = self.extract_embeddings_from_response(self.parse_json(response))
        if len(embeddings) != len(texts):
            raise ProviderError(
                "Embedding response contains %d vectors for %d inputs." % (len(embeddings), len(texts))
            )
        for vector in embeddings:
            if not isinstance(vector, list) or not vector:
                raise ProviderError("Embedding response contains an empty or non-list vector.")
            if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in vector):
                raise ProviderError("Embedding response contains a non-numeric vector element.")
        if len({len(vector) for vector in embeddings}) > 1:
            raise ProviderError("Embedding response contains vectors of different lengths.")
        return embeddings
