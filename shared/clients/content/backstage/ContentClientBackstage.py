import html
import re
from urllib.parse import quote, urlencode

from shared.clients.content.ContentClientInterface import ContentClientInterface
from shared.clients.content.models.CatalogItem import CatalogItem, CatalogItemsListResponse, ItemRelation
from shared.exceptions.errors import ProviderError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


class ContentClientBackstage(ContentClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Backstage"

    def get_item_ref(self, item: CatalogItem) -> str:
        return f"{item.kind}:{item.namespace or 'default'}/{item.name}"

    @staticmethod
    def split_item_ref(item_ref: str) -> tuple[str, str, str]:
        """Split an entity ref "kind:namespace/name" into its parts.

        Kind defaults to "component" and namespace to "default" when omitted.
        """
        kind, _, rest = item_ref.partition(":") if ":" in item_ref else ("component", "", item_ref)
        namespace, _, name = rest.partition("/") if "/" in rest else ("default", "", rest)
        return kind, namespace or "default", name

    def extract_item_content(self, item: CatalogItem) -> str:
        parts: list[str] = [f"Entity: {item.name}", f"Kind: {item.kind}"]

        if item.description:
            parts.append(f"Description: {item.description}")
        if item.tags:
            parts.append(f"Tags: {', '.join(item.tags)}")

        # backstage.io/* annotations are plumbing, not content
        annotations = ", ".join(
            f"{key}: {value}" for key, value in item.annotations.items() if not key.startswith("backstage.io/")
        )
        if annotations:
            parts.append(f"Annotations: {annotations}")

        spec = item.spec or {}
        if item.kind == "Component":
            for field, label in (("type", "Type"), ("lifecycle", "Lifecycle"), ("owner", "Owner"), ("system", "System")):
                if spec.get(field):
                    parts.append(f"{label}: {spec[field]}")
        elif item.kind == "API":
            for field, label in (("type", "API Type"), ("lifecycle", "Lifecycle"), ("owner", "Owner")):
                if spec.get(field):
                    parts.append(f"{label}: {spec[field]}")
            if spec.get("definition"):
                parts.append("Definition available: Yes")

        if item.relations:
            parts.append("Relations: " + ", ".join(f"{rel.type}: {rel.target_ref}" for rel in item.relations))

        return "\n".join(parts)

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default="")
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/.backstage/health/v1/liveness"

    def _get_endpoint_items(self, cursor: str | None = None, page_size: int = 100) -> str:
        query = {"limit": page_size}
        if cursor:
            query["cursor"] = cursor
        return f"/api/catalog/entities/by-query?{urlencode(query)}"

    def _get_endpoint_item_details(self, item_ref: str) -> str:
        kind, namespace, name = self.split_item_ref(item_ref)
        return f"/api/catalog/entities/by-name/{quote(kind.lower(), safe='')}/{quote(namespace, safe='')}/{quote(name, safe='')}"

    def _get_endpoint_supplementary_docs(self, item_ref: str) -> str:
        kind, namespace, name = self.split_item_ref(item_ref)
        return f"/api/techdocs/static/docs/{quote(namespace, safe='')}/{quote(kind.lower(), safe='')}/{quote(name, safe='')}/index.html"

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_endpoint_items(self, response: dict) -> CatalogItemsListResponse:
        if not isinstance(response, dict) or not isinstance(response.get("items"), list):
            raise ProviderError("Backstage catalog response does not contain an 'items' list.")
        return CatalogItemsListResponse(
            engine=self._get_engine_name(),
            items=[self._parse_endpoint_item(raw) for raw in response["items"]],
            nextCursor=(response.get("pageInfo") or {}).get("nextCursor"),
            totalItems=response.get("totalItems"),
        )

    def _parse_endpoint_item(self, response: dict) -> CatalogItem:
        if not isinstance(response, dict):
            raise ProviderError("Backstage entity is not a JSON object.")
        metadata = response.get("metadata") or {}
        if not metadata.get("name") or not response.get("kind"):
            raise ProviderError("Backstage entity is missing 'kind' or 'metadata.name'.")
        return CatalogItem(
            engine=self._get_engine_name(),
            kind=response["kind"],
            namespace=metadata.get("namespace") or "default",
            name=metadata["name"],
            title=metadata.get("title"),
            description=metadata.get("description"),
            tags=metadata.get("tags") or [],
            annotations={k: str(v) for k, v in (metadata.get("annotations") or {}).items()},
            spec=response.get("spec") or {},
            relations=[
                ItemRelation(type=rel["type"], target_ref=rel["targetRef"])
                for rel in response.get("relations") or []
                if rel.get("type") and rel.get("targetRef")
            ],
        )

    def _parse_supplementary_docs(self, raw: str) -> str:
        text = _SCRIPT_RE.sub("", raw)
        text = _STYLE_RE.sub("", text)
        text = _TAG_RE.sub(" ", text)
        text = html.unescape(text)
        return _WHITESPACE_RE.sub(" ", text).strip()
