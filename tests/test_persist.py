import os
import tempfile
import unittest
from datetime import datetime, timezone
from decimal import Decimal

from db import database as db_database
from db import persist
from db.models import CustomerInfo, Product, Rating
from stores.checkout import place_order
from utils.exceptions import PersistenceError
from utils.state import AppState


class PersistTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "nested", "test.sqlite")
        self.orig_db_path = db_database.DB_PATH
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    def tearDown(self):
        db_database.DB_PATH = self.orig_db_path
        db_database._initialized = False
        self.temp_dir.cleanup()

    def _populated_state(self) -> AppState:
        state = AppState()
        backpack = Product(
            1,
            "Backpack",
            Decimal("29.99"),
            "Everyday pack",
            "bags",
            "",
            Rating(3.9, 120),
        )
        mug = Product(2, "Mug", Decimal("4.50"), "", "home", "")
        state.cart.add_item(backpack)
        state.cart.add_item(backpack)
        place_order(
            state,
            CustomerInfo("Jane Doe", "123 Main Street, Springfield", "555-123-4567"),
            now=datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc),
        )
        state.cart.add_item(mug)
        state.auth.login("admin", "admin123")
        return state

    # ---------- raw blob ----------

    async def test_load_missing_returns_none(self):
        self.assertIsNone(await persist.load_state())
        # parent folder is created on first connect
        self.assertTrue(os.path.isfile(self.db_path))

    async def test_schema_version_is_recorded(self):
        async with db_database.connect() as conn:
            cur = await conn.execute("PRAGMA user_version;")
            self.assertEqual((await cur.fetchone())[0], db_database.SCHEMA_VERSION)
            await cur.close()

    async def test_save_overwrites_and_clear(self):
        await persist.save_state({"version": 1, "cart": []})
        await persist.save_state({"version": 1, "cart": [], "orders": []})
        self.assertEqual(
            await persist.load_state(), {"version": 1, "cart": [], "orders": []}
        )

        async with db_database.connect() as conn:
            cur = await conn.execute("SELECT COUNT(*) FROM kv_store;")
            self.assertEqual((await cur.fetchone())[0], 1)
            await cur.close()

        await persist.clear_state()
        self.assertIsNone(await persist.load_state())

    async def test_corrupt_blob_is_discarded(self):
        async with db_database.connect() as conn:
            await conn.execute(
                "INSERT INTO kv_store(key, value) VALUES (?, ?);", ("root", "{nope")
            )
            await conn.commit()
        self.assertIsNone(await persist.load_state())

        state = AppState()
        self.assertFalse(await state.load())
        self.assertTrue(state.cart.is_empty())

    async def test_unserializable_blob_raises(self):
        with self.assertRaises(PersistenceError):
            await persist.save_state({"when": object()})

    async def test_unwritable_database_raises(self):
        # a directory cannot be opened as a database file
        db_database.DB_PATH = self.temp_dir.name
        with self.assertRaises(PersistenceError):
            await persist.save_state({"version": 1})
        with self.assertRaises(PersistenceError):
            await persist.load_state()

    # ---------- app state ----------

    async def test_state_roundtrip(self):
        state = self._populated_state()
        await state.save()

        restored = AppState()
        self.assertTrue(await restored.load())

        self.assertEqual(restored.cart.items, state.cart.items)
        self.assertEqual(restored.cart.item_count, 1)
        self.assertEqual(restored.cart.total, Decimal("4.50"))
        self.assertEqual(restored.orders.orders, state.orders.orders)
        order = restored.orders.latest
        self.assertEqual(order.total, Decimal("64.78"))
        self.assertEqual(order.items[0].product.rating, Rating(3.9, 120))
        self.assertEqual(order.order_date.tzinfo, timezone.utc)
        self.assertTrue(restored.auth.is_authenticated)
        self.assertEqual(restored.auth.user.username, "admin")

    async def test_snapshot_shape(self):
        blob = self._populated_state().snapshot()
        self.assertEqual(set(blob), {"version", "cart", "orders", "auth"})
        self.assertEqual(blob["version"], 1)
        self.assertEqual(blob["cart"][0]["product"]["price"], "4.50")
        self.assertEqual(blob["orders"][0]["total"], "64.78")
        self.assertEqual(
            blob["auth"], {"id": "1", "username": "admin", "role": "admin"}
        )
        # customer details stay nested under the order
        self.assertEqual(blob["orders"][0]["customer_info"]["full_name"], "Jane Doe")

    async def test_logged_out_state_roundtrip(self):
        state = self._populated_state()
        state.auth.logout()
        await state.save()

        restored = AppState()
        await restored.load()
        self.assertFalse(restored.auth.is_authenticated)

    async def test_version_mismatch_is_ignored(self):
        blob = self._populated_state().snapshot()
        blob["version"] = 99
        await persist.save_state(blob)

        state = AppState()
        self.assertFalse(await state.load())
        self.assertEqual(len(state.orders), 0)

    async def test_malformed_entries_keep_current_state(self):
        product = {"id": 1, "title": "x", "price": "1"}
        blobs = [
            {"cart": [{"product": {"title": "x"}}]},
            {"cart": [{"product": dict(product, rating="bad"), "quantity": 1}]},
            {"cart": [{"product": dict(product, rating=[1]), "quantity": 1}]},
            {"cart": [{"product": "x", "quantity": 1}]},
            {"cart": ["x"]},
            {"cart": {"product": product}},
            {"orders": ["x"]},
            {"orders": [{"customer_info": "x"}]},
            {"auth": ["admin"]},
        ]
        for blob in blobs:
            with self.subTest(blob=blob):
                await persist.save_state(dict({"version": 1}, **blob))
                state = AppState()
                state.auth.login("admin", "admin123")
                self.assertFalse(await state.load())
                self.assertTrue(state.auth.is_authenticated)
                self.assertTrue(state.cart.is_empty())

    def test_users_are_not_persisted(self):
        state = AppState()
        state.users.delete_user("1")
        self.assertNotIn("users", state.snapshot())


if __name__ == "__main__":
    unittest.main()
