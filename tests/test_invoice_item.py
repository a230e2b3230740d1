from decimal import Decimal

import pytest

from invoices.exceptions import InvalidLineItem
from invoices.invoice_item import LineItem, canonical_field, to_quantity


class TestLineItemFromDict:
    def test_accepts_camel_case_and_skips_computed_keys(self):
        line = LineItem.from_dict({
            "productId": "p1",
            "hsnCode": "8471",
            "quantity": "2",
            "mrp": "120",
            "discountPercent": "10",
            "price": "108",
            "taxRate": "12",
            "total": "999",
            "_id": "line-1",
        })

        assert line.product_ref == "p1"
        assert line.hsn_code == "8471"
        assert line.quantity == 2
        assert line.mrp == Decimal("120.00")
        assert line.discount_percent == Decimal("10.00")
        assert line.price == Decimal("108.00")
        assert line.tax_rate == Decimal("12")
        assert line.line_total == Decimal("216.00")

    def test_missing_tax_rate_uses_default(self):
        line = LineItem.from_dict({"product": "p1", "price": 10}, default_tax_rate=Decimal("5"))

        assert line.tax_rate == Decimal("5")
        assert line.quantity == 1

    def test_negative_discount_is_clamped(self):
        line = LineItem.from_dict({"product": "p1", "price": 10, "discount": -5})

        assert line.discount_percent == Decimal("0.00")

    def test_negative_price_is_rejected(self):
        with pytest.raises(InvalidLineItem):
            LineItem.from_dict({"product": "p1", "price": -1})

    def test_unknown_field_is_rejected(self):
        with pytest.raises(InvalidLineItem, match="colour"):
            LineItem.from_dict({"product": "p1", "colour": "red"})


class TestLineItemPayload:
    def test_mrp_falls_back_to_price(self):
        line = LineItem(product_ref="p1", quantity=2, price=Decimal("45.50"), mrp=Decimal("0.00"))

        payload = line.to_payload()

        assert payload["mrp"] == 45.5
        assert payload["price"] == 45.5
        assert payload["total"] == 91.0
        assert payload["taxRate"] == 18.0

    def test_to_dict_is_string_money(self):
        line = LineItem(product_ref="p1", quantity=3, price=Decimal("19.99"))

        assert line.to_dict()["total"] == "59.97"

    def test_copy_is_independent(self):
        line = LineItem(product_ref="p1", quantity=1, price=Decimal("1.00"))

        clone = line.copy()
        clone.quantity = 5

        assert line.quantity == 1


class TestFieldHelpers:
    def test_aliases(self):
        assert canonical_field("qty") == "quantity"
        assert canonical_field("discount") == "discount_percent"
        assert canonical_field("taxRatePercent") == "tax_rate"

    def test_quantity_must_be_whole(self):
        assert to_quantity("4") == 4
        assert to_quantity("") == 0
        with pytest.raises(InvalidLineItem):
            to_quantity("1.5")
        with pytest.raises(InvalidLineItem):
            to_quantity(-2)

    def test_oversized_price_is_rejected(self):
        with pytest.raises(InvalidLineItem, match="too large"):
            LineItem.from_dict({"product": "p1", "price": 1e30})
