import unittest
from decimal import Decimal

from db.models import Product
from stores.cart import CartStore
from stores.pricing import compute_totals
from utils.pure import format_price, generate_markdown_table, round_money


def _cart(*prices: str) -> CartStore:
    cart = CartStore()
    for pid, price in enumerate(prices, start=1):
        cart.add_item(Product(pid, f"P{pid}", Decimal(price), "", "misc", ""))
    return cart


class PricingTestCase(unittest.TestCase):
    def test_two_items_under_threshold(self):
        cart = _cart("29.99")
        cart.set_quantity(1, 2)

        totals = compute_totals(cart.snapshot())
        self.assertEqual(totals.subtotal, Decimal("59.98"))
        # 59.98 is over the threshold, so shipping is free
        self.assertEqual(totals.shipping, Decimal("0.00"))
        self.assertEqual(totals.tax, Decimal("4.80"))
        self.assertEqual(totals.grand_total, Decimal("64.78"))
        self.assertTrue(totals.free_shipping)
        self.assertEqual(totals.free_shipping_remaining, Decimal("0.00"))

    def test_exactly_threshold_is_charged_shipping(self):
        totals = compute_totals(_cart("50.00").snapshot())
        self.assertEqual(totals.shipping, Decimal("5.99"))
        self.assertFalse(totals.free_shipping)
        self.assertEqual(totals.tax, Decimal("4.00"))
        self.assertEqual(totals.grand_total, Decimal("59.99"))

    def test_just_over_threshold_ships_free(self):
        totals = compute_totals(_cart("50.01").snapshot())
        self.assertEqual(totals.shipping, Decimal("0.00"))
        self.assertEqual(totals.grand_total, Decimal("54.01"))

    def test_free_shipping_hint(self):
        totals = compute_totals(_cart("12.50", "7.50").snapshot())
        self.assertEqual(totals.subtotal, Decimal("20.00"))
        self.assertEqual(totals.free_shipping_remaining, Decimal("30.00"))
        self.assertEqual(totals.grand_total, Decimal("27.59"))

    def test_tax_is_reported_in_cents(self):
        # 10.99 * 0.08 = 0.8792
        totals = compute_totals(_cart("10.99").snapshot())
        self.assertEqual(totals.tax, Decimal("0.88"))
        self.assertEqual(totals.grand_total, Decimal("17.86"))

    def test_empty_cart(self):
        totals = compute_totals(CartStore().snapshot())
        self.assertEqual(totals.subtotal, Decimal("0.00"))
        self.assertEqual(totals.tax, Decimal("0.00"))

    def test_custom_rates(self):
        totals = compute_totals(
            _cart("20.00").snapshot(),
            free_shipping_threshold=Decimal("10"),
            shipping_fee=Decimal("3"),
            tax_rate=Decimal("0.10"),
        )
        self.assertEqual(totals.shipping, Decimal("0.00"))
        self.assertEqual(totals.grand_total, Decimal("22.00"))


class PureHelpersTestCase(unittest.TestCase):
    def test_round_money(self):
        self.assertEqual(round_money(Decimal("2.675")), Decimal("2.68"))
        self.assertEqual(round_money(1.005), Decimal("1.01"))
        self.assertEqual(round_money("3"), Decimal("3.00"))

    def test_format_price(self):
        self.assertEqual(format_price(Decimal("1234.5")), "$1,234.50")
        self.assertEqual(format_price(0), "$0.00")

    def test_generate_markdown_table(self):
        md = generate_markdown_table(["A", "B"], [["x|y", 1]], ["l", "r"])
        self.assertEqual(md.splitlines()[1], "| :--- | ---: |")
        self.assertIn("x\\|y", md)
        self.assertEqual(generate_markdown_table(["A"], []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [["1", "2"]], ["l"])


if __name__ == "__main__":
    unittest.main()
