import unittest
from decimal import Decimal
from typing import Callable, List

import httpx

from catalog.client import CatalogClient, parse_product, search_products
from utils.exceptions import CatalogInvalidResponse, CatalogUnavailable

PRODUCTS = [
    {
        "id": 1,
        "title": "Fjallraven Backpack",
        "price": 109.95,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://example.com/1.jpg",
        "rating": {"rate": 3.9, "count": 120},
    },
    {
        "id": 5,
        "title": "Dragon Station Chain Bracelet",
        "price": 695,
        "description": "From our Legends Collection",
        "category": "jewelery",
        "image": "https://example.com/5.jpg",
    },
]


class CatalogClientTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.requests: List[httpx.Request] = []
        self.sleeps: List[float] = []
        self.now = 1000.0

    def make_client(self, handler: Callable[[httpx.Request], httpx.Response]):
        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        async def fake_sleep(seconds: float) -> None:
            self.sleeps.append(seconds)

        client = CatalogClient(
            "https://catalog.test",
            transport=httpx.MockTransport(recording_handler),
            sleep=fake_sleep,
            clock=lambda: self.now,
        )
        self.addAsyncCleanup(client.aclose)
        return client

    # ---------- listing ----------

    async def test_list_products(self):
        client = self.make_client(lambda r: httpx.Response(200, json=PRODUCTS))
        products = await client.list_products()

        self.assertEqual([p.id for p in products], [1, 5])
        self.assertEqual(products[0].price, Decimal("109.95"))
        self.assertEqual(products[0].rating.count, 120)
        # missing rating defaults to zero
        self.assertEqual((products[1].rating.rate, products[1].rating.count), (0, 0))
        self.assertEqual(self.requests[0].url.path, "/products")
        self.assertEqual(self.sleeps, [])

    async def test_freshness_cache_and_force(self):
        client = self.make_client(lambda r: httpx.Response(200, json=PRODUCTS))
        self.assertFalse(client.is_fresh())

        await client.list_products()
        await client.list_products()
        self.assertEqual(len(self.requests), 1)
        self.assertTrue(client.is_fresh())

        await client.list_products(force=True)
        self.assertEqual(len(self.requests), 2)

        self.now += client.freshness_seconds + 1
        self.assertFalse(client.is_fresh())
        await client.list_products()
        self.assertEqual(len(self.requests), 3)

    async def test_list_categories_and_by_category(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/products/categories":
                return httpx.Response(200, json=["electronics", "jewelery"])
            return httpx.Response(200, json=PRODUCTS[1:])

        client = self.make_client(handler)
        self.assertEqual(await client.list_categories(), ["electronics", "jewelery"])

        products = await client.list_products_by_category("jewelery")
        self.assertEqual([p.id for p in products], [5])
        self.assertEqual(self.requests[-1].url.path, "/products/category/jewelery")

    # ---------- retries ----------

    async def test_retries_then_raises_with_status(self):
        client = self.make_client(lambda r: httpx.Response(500))

        with self.assertRaises(CatalogUnavailable) as ctx:
            await client.list_products()

        self.assertEqual(len(self.requests), 3)
        self.assertEqual(self.sleeps, [1.0, 2.0])
        self.assertEqual(ctx.exception.status, 500)
        self.assertIn("500", ctx.exception.message)

    async def test_recovers_on_second_attempt(self):
        responses = [httpx.Response(503), httpx.Response(200, json=PRODUCTS)]
        client = self.make_client(lambda r: responses.pop(0))

        products = await client.list_products()
        self.assertEqual(len(products), 2)
        self.assertEqual(self.sleeps, [1.0])

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = self.make_client(handler)
        with self.assertRaises(CatalogUnavailable) as ctx:
            await client.list_products()
        self.assertIsNone(ctx.exception.status)
        self.assertEqual(len(self.requests), 3)

    async def test_failed_fetch_keeps_previous_cache(self):
        responses = [httpx.Response(200, json=PRODUCTS)]
        responses += [httpx.Response(502) for _ in range(3)]
        client = self.make_client(lambda r: responses.pop(0))

        await client.list_products()
        with self.assertRaises(CatalogUnavailable):
            await client.list_products(force=True)
        self.assertEqual([p.id for p in client.cached_products], [1, 5])

    # ---------- malformed payloads ----------

    async def test_invalid_json_is_not_retried(self):
        client = self.make_client(lambda r: httpx.Response(200, content=b"<html>"))
        with self.assertRaises(CatalogInvalidResponse):
            await client.list_products()
        self.assertEqual(len(self.requests), 1)

    async def test_wrong_shape(self):
        client = self.make_client(lambda r: httpx.Response(200, json={"items": []}))
        with self.assertRaises(CatalogInvalidResponse):
            await client.list_products()

        client = self.make_client(
            lambda r: httpx.Response(200, json=[{"id": "1", "title": "x", "price": 1}])
        )
        with self.assertRaises(CatalogInvalidResponse):
            await client.list_products()

    # ---------- single product ----------

    async def test_get_product(self):
        client = self.make_client(lambda r: httpx.Response(200, json=PRODUCTS[0]))
        product = await client.get_product(1)

        self.assertEqual(product.title, "Fjallraven Backpack")
        self.assertEqual(self.requests[0].url.path, "/products/1")
        self.assertEqual([p.id for p in client.cached_products], [1])

    async def test_get_product_not_found(self):
        client = self.make_client(lambda r: httpx.Response(404))
        self.assertIsNone(await client.get_product(999))
        self.assertEqual(len(self.requests), 1)
        self.assertEqual(self.sleeps, [])

    async def test_get_product_empty_body(self):
        client = self.make_client(lambda r: httpx.Response(200, content=b""))
        self.assertIsNone(await client.get_product(999))

        client = self.make_client(lambda r: httpx.Response(200, content=b"null"))
        self.assertIsNone(await client.get_product(999))

    async def test_context_manager_closes(self):
        async with self.make_client(
            lambda r: httpx.Response(200, json=[])
        ) as client:
            self.assertEqual(await client.list_products(), [])
        self.assertTrue(client._http.is_closed)


class ParseAndSearchTestCase(unittest.TestCase):
    def test_parse_product_validation(self):
        base = {"id": 3, "title": "Mug", "price": "4.5", "category": "home"}
        product = parse_product(base)
        self.assertEqual(product.price, Decimal("4.5"))
        self.assertEqual(product.description, "")

        for bad in (
            {**base, "id": True},
            {**base, "title": None},
            {**base, "price": -1},
            {**base, "price": "abc"},
            {**base, "rating": "great"},
            "not an object",
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(CatalogInvalidResponse):
                    parse_product(bad)

    def test_search_products(self):
        products = [parse_product(p) for p in PRODUCTS]

        self.assertEqual(len(search_products(products, "")), 2)
        self.assertEqual([p.id for p in search_products(products, "BACKPACK")], [1])
        # words may appear in any field, in any order
        self.assertEqual(
            [p.id for p in search_products(products, "legends bracelet")], [5]
        )
        self.assertEqual(search_products(products, "backpack", "jewelery"), [])
        self.assertEqual([p.id for p in search_products(products, "", "jewelery")], [5])
        self.assertEqual(search_products(products, "laptop"), [])


if __name__ == "__main__":
    unittest.main()
