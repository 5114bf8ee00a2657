"""
Tests for the Backstage content client: pagination, entity lookup, techdocs and text extraction.
"""

import httpx
import pytest

from shared.clients.content.ContentClientManager import ContentClientManager
from shared.clients.content.backstage.ContentClientBackstage import ContentClientBackstage
from shared.clients.content.models.CatalogItem import CatalogItem, ItemRelation
from shared.exceptions.errors import NotFoundError, ProviderError


def entity(name: str, kind: str = "Component", **metadata) -> dict:
    return {
        "apiVersion": "backstage.io/v1alpha1",
        "kind": kind,
        "metadata": {"name": name, "namespace": "default", **metadata},
        "spec": {"type": "service", "lifecycle": "production", "owner": "team-a"},
        "relations": [{"type": "ownedBy", "targetRef": "group:default/team-a"}],
    }


@pytest.fixture
def client(helper_config) -> ContentClientBackstage:
    return ContentClientBackstage(helper_config=helper_config)


class TestItemRefs:
    def test_item_ref_format(self, client):
        item = CatalogItem(engine="Backstage", kind="Component", name="payments")

        assert client.get_item_ref(item) == "Component:default/payments"

    @pytest.mark.parametrize(
        "ref, expected",
        [
            ("component:default/payments", ("component", "default", "payments")),
            ("API:billing/orders", ("API", "billing", "orders")),
            ("payments", ("component", "default", "payments")),
            ("system:platform", ("system", "default", "platform")),
        ],
    )
    def test_split_item_ref(self, ref, expected):
        assert ContentClientBackstage.split_item_ref(ref) == expected


class TestRequests:
    @pytest.mark.asyncio
    async def test_fetch_all_items_follows_cursor(self, client):
        seen_cursors = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/catalog/entities/by-query"
            cursor = request.url.params.get("cursor")
            seen_cursors.append(cursor)
            if cursor is None:
                return httpx.Response(200, json={
                    "items": [entity("a"), entity("b")],
                    "totalItems": 3,
                    "pageInfo": {"nextCursor": "page-2"},
                })
            return httpx.Response(200, json={"items": [entity("c")], "totalItems": 3, "pageInfo": {}})

        await client.boot(transport=httpx.MockTransport(handler))

        items = await client.do_fetch_all_items()

        assert [item.name for item in items] == ["a", "b", "c"]
        assert seen_cursors == [None, "page-2"]

    @pytest.mark.asyncio
    async def test_fetch_all_items_rejects_malformed_page(self, client):
        await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=["not", "a", "page"])))

        with pytest.raises(ProviderError):
            await client.do_fetch_all_items()

    @pytest.mark.asyncio
    async def test_fetch_item_by_ref(self, client):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json=entity("payments", description="Takes money."))

        await client.boot(transport=httpx.MockTransport(handler))

        item = await client.do_fetch_item("Component:default/payments")

        assert paths == ["/api/catalog/entities/by-name/component/default/payments"]
        assert item.description == "Takes money."
        assert item.relations == [ItemRelation(type="ownedBy", target_ref="group:default/team-a")]

    @pytest.mark.asyncio
    async def test_fetch_item_not_found(self, client):
        await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(404, json={})))

        with pytest.raises(NotFoundError):
            await client.do_fetch_item("component:default/missing")

    @pytest.mark.asyncio
    async def test_fetch_item_server_error(self, client):
        await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(503, text="down")))

        with pytest.raises(ProviderError):
            await client.do_fetch_item("component:default/payments")

    @pytest.mark.asyncio
    async def test_supplementary_docs_are_plain_text(self, client):
        html_page = """
            <html><head><style>body { color: red; }</style><script>var x = 1;</script></head>
            <body><h1>Payments</h1><p>Refunds take 3&nbsp;days &amp; more.</p></body></html>
        """
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, text=html_page)

        await client.boot(transport=httpx.MockTransport(handler))

        docs = await client.do_fetch_supplementary_docs("Component:default/payments")

        assert paths == ["/api/techdocs/static/docs/default/component/payments/index.html"]
        assert docs == "Payments Refunds take 3 days & more."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, body",
        [(404, "Not found"), (500, "error"), (200, "<html></html>")],
        ids=["missing", "server-error", "empty"],
    )
    async def test_supplementary_docs_absent(self, client, status_code, body):
        await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(status_code, text=body)))

        assert await client.do_fetch_supplementary_docs("component:default/payments") is None
        assert await client.do_check_supplementary_docs("component:default/payments") is False

    @pytest.mark.asyncio
    async def test_supplementary_docs_transport_failure_is_none(self, client):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        await client.boot(transport=httpx.MockTransport(refuse))

        assert await client.do_fetch_supplementary_docs("component:default/payments") is None


class TestExtractItemContent:
    def test_component_content(self, client):
        item = CatalogItem(
            engine="Backstage",
            kind="Component",
            name="payments",
            description="Handles card payments.",
            tags=["java", "payments"],
            annotations={"backstage.io/managed-by-location": "url:x", "github.com/project-slug": "acme/payments"},
            spec={"type": "service", "lifecycle": "production", "owner": "team-a", "system": "billing"},
            relations=[ItemRelation(type="ownedBy", target_ref="group:default/team-a")],
        )

        content = client.extract_item_content(item)

        assert content.splitlines() == [
            "Entity: payments",
            "Kind: Component",
            "Description: Handles card payments.",
            "Tags: java, payments",
            "Annotations: github.com/project-slug: acme/payments",
            "Type: service",
            "Lifecycle: production",
            "Owner: team-a",
            "System: billing",
            "Relations: ownedBy: group:default/team-a",
        ]

    def test_api_content(self, client):
        item = CatalogItem(
            engine="Backstage",
            kind="API",
            name="orders",
            spec={"type": "openapi", "lifecycle": "beta", "owner": "team-b", "definition": "openapi: 3.0.0"},
        )

        content = client.extract_item_content(item)

        assert "API Type: openapi" in content
        assert "Definition available: Yes" in content
        assert "openapi: 3.0.0" not in content


class TestManager:
    def test_engine_from_env(self, helper_config):
        assert isinstance(ContentClientManager(helper_config=helper_config).get_client(), ContentClientBackstage)
