from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.content.models.CatalogItem import CatalogItem, CatalogItemsListResponse
from shared.exceptions.errors import NotFoundError, ProviderError
from shared.helper.HelperConfig import HelperConfig


class ContentClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "content"
        """
        return "content"

    @abstractmethod
    def get_item_ref(self, item: CatalogItem) -> str:
        """
        Returns the stable reference string of an item. It is used as the source item id of its chunks.

        Args:
            item (CatalogItem): The item.

        Returns:
            str: The reference, e.g. "Component:default/payments".
        """
        pass

    @abstractmethod
    def extract_item_content(self, item: CatalogItem) -> str:
        """
        Renders the indexable text of an item from its metadata.

        Args:
            item (CatalogItem): The item.

        Returns:
            str: Plain text, one fact per line.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_items(self, cursor: str | None = None, page_size: int = 100) -> str:
        """
        Returns the endpoint path for paginated item listing requests.

        Args:
            cursor (str | None): Cursor of the page to fetch. None fetches the first page.
            page_size (int): Number of items per page.
        """
        pass

    @abstractmethod
    def _get_endpoint_item_details(self, item_ref: str) -> str:
        """
        Returns the endpoint path for a single item, addressed by its reference.
        """
        pass

    @abstractmethod
    def _get_endpoint_supplementary_docs(self, item_ref: str) -> str:
        """
        Returns the endpoint path of the supplementary documentation of an item.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def _parse_endpoint_items(self, response: dict) -> CatalogItemsListResponse:
        """
        Parses one page of the item listing.
        """
        pass

    @abstractmethod
    def _parse_endpoint_item(self, response: dict) -> CatalogItem:
        """
        Parses a single item.
        """
        pass

    @abstractmethod
    def _parse_supplementary_docs(self, raw: str) -> str:
        """
        Converts the raw supplementary documentation body into plain text.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_all_items(self) -> list[CatalogItem]:
        """
        Fetches all items from the content backend, following the pagination cursor.

        Returns:
            list[CatalogItem]: All items.

        Raises:
            ProviderError: If a page cannot be fetched or parsed.
        """
        items: list[CatalogItem] = []
        cursor: str | None = None
        page = 1
        page_size = 200
        while True:
            resp = await self.do_request(
                method="GET",
                endpoint=self._get_endpoint_items(cursor=cursor, page_size=page_size),
                raise_on_error=True,
            )
            list_response = self._parse_endpoint_items(self.parse_json(resp))
            items.extend(list_response.items)
            self.logging.info(
                "Fetched items page %d from %s, total items so far: %d of %s",
                page, self.get_engine_name(), len(items), list_response.totalItems,
            )
            cursor = list_response.nextCursor
            if not cursor or not list_response.items:
                break
            page += 1
        return items

    async def do_fetch_item(self, item_ref: str) -> CatalogItem:
        """
        Fetches a single item by reference.

        Args:
            item_ref (str): The item reference as returned by get_item_ref().

        Returns:
            CatalogItem: The item.

        Raises:
            NotFoundError: If the backend has no item for the reference.
            ProviderError: If the request fails for any other reason.
        """
        self.logging.info("Fetching item: %s", item_ref)
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_item_details(item_ref))
        if resp.status_code == 404:
            raise NotFoundError(f"Item not found: {item_ref}")
        if resp.status_code >= 300:
            self.logging.error("Fetching item %s failed with status %d", item_ref, resp.status_code)
            raise ProviderError(f"Fetching item {item_ref} failed with status {resp.status_code}")
        return self._parse_endpoint_item(self.parse_json(resp))

    async def do_fetch_supplementary_docs(self, item_ref: str) -> str | None:
        """
        Fetches the supplementary documentation of an item as plain text.

        Missing documentation is normal, so a 404, a failed request or an empty
        body all yield None instead of an error.

        Args:
            item_ref (str): The item reference.

        Returns:
            str | None: The documentation text, or None if there is none.
        """
        try:
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_supplementary_docs(item_ref))
        except ProviderError as exc:
            self.logging.warning("Failed to fetch documentation for %s: %s", item_ref, exc)
            return None
        if resp.status_code == 404:
            self.logging.debug("No documentation found for %s", item_ref)
            return None
        if resp.status_code >= 300:
            self.logging.warning("Failed to fetch documentation for %s: status %d", item_ref, resp.status_code)
            return None
        text = self._parse_supplementary_docs(resp.text)
        return text or None

    async def do_check_supplementary_docs(self, item_ref: str) -> bool:
        """
        Checks whether an item has non-empty supplementary documentation.
        """
        return await self.do_fetch_supplementary_docs(item_ref) is not None
