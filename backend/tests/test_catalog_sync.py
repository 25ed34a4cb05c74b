"""
Tests for product and collection sync.
"""
import json
from decimal import Decimal

import pytest

from app.repositories.order import OrderRepository
from app.repositories.product import ProductRepository
from app.services.catalog_sync import CollectionSync, ProductSync, map_variant
from app.services.order_sync import OrderSync
from factories import collection_node, line_item_node, order_node, product_node, variant_node


@pytest.fixture
def product_sync(db, settings, shopify_client, sleeper) -> ProductSync:
    return ProductSync(db, settings, shopify_client, sleep=sleeper)


@pytest.fixture
def collection_sync(db, settings, shopify_client, sleeper) -> CollectionSync:
    return CollectionSync(db, settings, shopify_client, sleep=sleeper)


class TestProductSync:
    """Tests for ProductSync.run."""

    async def test_creates_product_variants_and_links(self, db, product_sync, shopify_api, shopify_store):
        shopify_api.add_page(
            "products",
            [
                product_node(
                    777,
                    variants=[variant_node(1), variant_node(2, price="30.00")],
                    collections=[collection_node(10), collection_node(11), collection_node(10)],
                )
            ],
        )

        result = await product_sync.run(shopify_store)

        assert result.processed == 1
        assert result.created == 1
        assert result.details["variantsProcessed"] == 2
        assert result.details["collectionsCreated"] == 2

        async with db.session() as session:
            products = ProductRepository(session)
            product = await products.get_by_shopify_id("777")
            assert json.loads(product.tags) == ["summer", "sale"]
            variants = await products.get_variants(product.id)
            assert {v.shopify_variant_id for v in variants} == {"1", "2"}
            assert len(await products.get_collection_ids(product.id)) == 2

    async def test_resync_replaces_variants_and_links(self, db, product_sync, shopify_api, shopify_store):
        shopify_api.add_page(
            "products",
            [product_node(777, variants=[variant_node(1), variant_node(2)], collections=[collection_node(10)])],
        )
        await product_sync.run(shopify_store)

        shopify_api.add_page(
            "products",
            [product_node(777, variants=[variant_node(2)], collections=[collection_node(12)])],
        )
        result = await product_sync.run(shopify_store)

        assert result.updated == 1
        assert result.details.get("collectionsCreated") == 1
        async with db.session() as session:
            products = ProductRepository(session)
            product = await products.get_by_shopify_id("777")
            variants = await products.get_variants(product.id)
            assert [v.shopify_variant_id for v in variants] == ["2"]
            linked = await products.get_collection_ids(product.id)
            collection = await products.get_collection_by_shopify_id("12")
            assert linked == [collection.id]

    async def test_products_filter_on_created_at(self, product_sync, shopify_api, shopify_store):
        await product_sync.run(shopify_store)

        query = shopify_api.calls_for("products")[0]["variables"]["query"]
        assert query.startswith("created_at:>=")

    def test_map_variant_prices(self):
        data = map_variant(variant_node(5, price="19.99"))
        assert data["shopify_variant_id"] == "5"
        assert data["price"] == Decimal("19.99")
        assert data["compare_at_price"] is None


class TestCollectionSync:
    async def test_creates_then_updates(self, db, collection_sync, shopify_api, shopify_store):
        shopify_api.add_page("collections", [collection_node(10), collection_node(11)])
        first = await collection_sync.run(shopify_store)

        shopify_api.add_page("collections", [collection_node(10, title="Renamed")])
        second = await collection_sync.run(shopify_store)

        assert first.created == 2
        assert second.updated == 1
        async with db.session() as session:
            collection = await ProductRepository(session).get_collection_by_shopify_id("10")
            assert collection.title == "Renamed"

        query = shopify_api.calls_for("collections")[0]["variables"]["query"]
        assert query.startswith("updated_at:>=")


class TestLineItemVariantLink:
    async def test_line_items_link_to_synced_variants(
        self, db, settings, shopify_client, sleeper, product_sync, shopify_api, shopify_store
    ):
        shopify_api.add_page("products", [product_node(777, variants=[variant_node(555)])])
        await product_sync.run(shopify_store)

        shopify_api.add_page(
            "orders",
            [
                order_node(
                    1001,
                    line_items=[
                        line_item_node(1, variant_id=555, product_id=777),
                        line_item_node(2, variant_id=999),
                    ],
                )
            ],
        )
        await OrderSync(db, settings, shopify_client, sleep=sleeper).run(shopify_store)

        async with db.session() as session:
            variant = await ProductRepository(session).get_variant_by_shopify_id("555")
            orders = OrderRepository(session)
            order = await orders.get_by_shopify_id("1001")
            items = {i.shopify_line_item_id: i for i in await orders.get_line_items(order.id)}

        assert items["1"].product_variant_id == variant.id
        assert items["1"].shopify_product_id == "777"
        assert items["2"].product_variant_id is None
        assert items["2"].shopify_variant_id == "999"
