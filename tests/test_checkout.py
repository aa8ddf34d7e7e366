import unittest
from datetime import datetime, timezone
from decimal import Decimal

from db.models import CustomerInfo, Product
from stores.checkout import build_customer_info, place_order, validate_customer_info
from stores.pricing import compute_totals
from utils.exceptions import EmptyCartError, ValidationError
from utils.state import AppState

VALID = {
    "full_name": "Jane Doe",
    "shipping_address": "123 Main Street, Springfield",
    "phone_number": "(555) 123-4567",
}


class ValidateCustomerInfoTestCase(unittest.TestCase):
    def _errors(self, **overrides):
        return validate_customer_info(**{**VALID, **overrides})

    def test_valid(self):
        self.assertEqual(self._errors(), {})
        # surrounding whitespace is ignored
        self.assertEqual(self._errors(full_name="  Jane Doe  "), {})

    def test_full_name_rules(self):
        self.assertIn("full_name", self._errors(full_name="J"))
        self.assertIn("full_name", self._errors(full_name="   "))
        self.assertIn("full_name", self._errors(full_name="J" * 51))
        self.assertIn("full_name", self._errors(full_name="Jane D0e"))
        self.assertEqual(self._errors(full_name="J" * 50), {})

    def test_shipping_address_rules(self):
        self.assertIn("shipping_address", self._errors(shipping_address="short"))
        self.assertIn("shipping_address", self._errors(shipping_address="x" * 201))
        self.assertEqual(self._errors(shipping_address="x" * 10), {})

    def test_phone_rules(self):
        self.assertIn("phone_number", self._errors(phone_number="12345"))
        self.assertIn("phone_number", self._errors(phone_number="1" * 16))
        self.assertIn("phone_number", self._errors(phone_number="555-123-45x7"))
        self.assertEqual(self._errors(phone_number="+1 555 123 4567"), {})

    def test_reports_every_bad_field(self):
        errors = validate_customer_info("", "", "")
        self.assertEqual(
            set(errors), {"full_name", "shipping_address", "phone_number"}
        )

    def test_build_customer_info(self):
        address = VALID["shipping_address"]
        info = build_customer_info(" Jane Doe ", address, "5551234567")
        self.assertEqual(info.full_name, "Jane Doe")
        with self.assertRaises(ValidationError) as ctx:
            build_customer_info("J", address, "5551234567")
        self.assertEqual(list(ctx.exception.errors), ["full_name"])
        self.assertIn("full_name", str(ctx.exception))


class PlaceOrderTestCase(unittest.TestCase):
    def setUp(self):
        self.state = AppState()
        self.product = Product(1, "Backpack", Decimal("29.99"), "", "bags", "")
        self.info = CustomerInfo(**VALID)

    def test_place_order_records_and_clears(self):
        self.state.cart.add_item(self.product)
        self.state.cart.add_item(self.product)
        expected = compute_totals(self.state.cart.snapshot())
        now = datetime(2025, 11, 1, 9, 30, tzinfo=timezone.utc)

        order = place_order(self.state, self.info, now=now)

        self.assertEqual(order.total, expected.grand_total)
        self.assertEqual(order.total, Decimal("64.78"))
        self.assertEqual(order.items[0].quantity, 2)
        self.assertEqual(order.customer_info, self.info)
        self.assertEqual(order.order_date, now)
        self.assertIs(self.state.orders.latest, order)
        self.assertTrue(self.state.cart.is_empty())
        self.assertEqual(self.state.cart.item_count, 0)

    def test_empty_cart_raises_and_changes_nothing(self):
        with self.assertRaises(EmptyCartError):
            place_order(self.state, self.info)
        self.assertEqual(len(self.state.orders), 0)

    def test_invalid_info_raises_and_changes_nothing(self):
        self.state.cart.add_item(self.product)
        bad = CustomerInfo("J", "nowhere", "12")

        with self.assertRaises(ValidationError) as ctx:
            place_order(self.state, bad)

        self.assertEqual(
            set(ctx.exception.errors),
            {"full_name", "shipping_address", "phone_number"},
        )
        self.assertEqual(len(self.state.orders), 0)
        self.assertEqual(self.state.cart.item_count, 1)


if __name__ == "__main__":
    unittest.main()
