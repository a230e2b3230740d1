from decimal import Decimal

import pytest

from invoices.exceptions import InvalidLineItem
from invoices.invoice_calculator import canonical_rate, compute_totals, quantize, to_decimal
from invoices.invoice_item import LineItem
from settings.company_settings import BillingContext


def item(quantity, price, tax_rate):
    return LineItem(quantity=quantity, price=Decimal(str(price)), tax_rate=Decimal(str(tax_rate)))


class TestComputeTotals:
    def test_mixed_rates(self):
        totals = compute_totals([item(2, 100, 18), item(1, 50, 5)])

        assert totals.subtotal == Decimal("250.00")
        assert [(b.rate, b.taxable, b.tax) for b in totals.breakdown] == [
            (Decimal("5"), Decimal("50.00"), Decimal("2.50")),
            (Decimal("18"), Decimal("200.00"), Decimal("36.00")),
        ]
        assert totals.total_tax == Decimal("38.50")
        assert totals.total == Decimal("288.50")
        assert totals.cgst_amount == Decimal("19.25")
        assert totals.sgst_amount == Decimal("19.25")
        assert totals.igst_amount == Decimal("0.00")

    def test_empty_invoice(self):
        totals = compute_totals([])

        assert totals.subtotal == Decimal("0.00")
        assert totals.total_tax == Decimal("0.00")
        assert totals.total == Decimal("0.00")
        assert totals.breakdown == []
        assert totals.tax_details["gstType"] == "none"

    def test_total_is_subtotal_plus_tax_to_the_cent(self):
        totals = compute_totals([item(3, "33.33", 12), item(7, "0.99", 28), item(1, "0.01", 5)])

        assert totals.total == totals.subtotal + totals.total_tax
        assert totals.total_tax == sum(b.tax for b in totals.breakdown)
        assert totals.subtotal == sum(b.taxable for b in totals.breakdown)

    def test_tax_rounded_once_per_bucket(self):
        # 3 lines of 0.10 at 5%: per-line rounding would give 0.03, per-bucket 0.02
        totals = compute_totals([item(1, "0.10", 5), item(1, "0.10", 5), item(1, "0.10", 5)])

        assert totals.breakdown[0].taxable == Decimal("0.30")
        assert totals.total_tax == Decimal("0.02")

    def test_order_does_not_matter(self):
        items = [item(2, 100, 18), item(1, 50, 5), item(4, "12.5", 12)]

        forward = compute_totals(items)
        backward = compute_totals(list(reversed(items)))

        assert forward.to_dict() == backward.to_dict()

    def test_equal_rates_share_a_bucket(self):
        totals = compute_totals([item(1, 10, "18"), item(1, 10, "18.00"), item(1, 10, 18.0)])

        assert len(totals.breakdown) == 1
        assert totals.breakdown[0].taxable == Decimal("30.00")
        assert totals.breakdown[0].to_dict()["rate"] == "18"

    def test_cgst_and_sgst_add_up_to_total_tax(self):
        totals = compute_totals([item(1, 1, 3)])

        assert totals.total_tax == Decimal("0.03")
        assert totals.cgst_amount == Decimal("0.02")
        assert totals.sgst_amount == Decimal("0.01")
        assert totals.cgst_amount + totals.sgst_amount == totals.total_tax

    def test_igst_takes_whole_tax(self):
        totals = compute_totals([item(2, 100, 18)], gst_type="igst")

        assert totals.igst_amount == Decimal("36.00")
        assert totals.cgst_amount == Decimal("0.00")
        assert totals.sgst_amount == Decimal("0.00")
        details = totals.tax_details
        assert details["gstType"] == "igst"
        assert details["igst"] == Decimal("18.00")
        assert details["cgst"] == Decimal("0")

    def test_context_gst_type_is_the_default(self):
        context = BillingContext(gst_type="igst")

        totals = compute_totals([item(1, 100, 18)], context)

        assert totals.igst_amount == Decimal("18.00")

    def test_effective_rate_split_for_cgst_sgst(self):
        details = compute_totals([item(1, 100, 18)]).tax_details

        assert details["gstType"] == "cgst_sgst"
        assert details["cgst"] == Decimal("9.00")
        assert details["sgst"] == Decimal("9.00")

    def test_zero_precision_currency(self):
        context = BillingContext(currency="JPY", money_precision=0)

        totals = compute_totals([item(1, "99.5", 18)], context)

        assert totals.subtotal == Decimal("100")
        assert totals.total_tax == Decimal("18")
        assert totals.total == Decimal("118")

    def test_zero_quantity_line_contributes_nothing(self):
        totals = compute_totals([item(0, 100, 18), item(1, 10, 18)])

        assert totals.subtotal == Decimal("10.00")

    @pytest.mark.parametrize("quantity,price,rate", [(-1, 10, 18), (1, -10, 18), (1, 10, -5)])
    def test_negative_inputs_are_rejected(self, quantity, price, rate):
        with pytest.raises(InvalidLineItem):
            compute_totals([item(quantity, price, rate)])

    def test_unknown_gst_type(self):
        with pytest.raises(InvalidLineItem):
            compute_totals([item(1, 10, 18)], gst_type="vat")

    def test_to_dict_uses_strings(self):
        data = compute_totals([item(2, 100, 18), item(1, 50, 5)]).to_dict()

        assert data["total"] == "288.50"
        assert data["totalTax"] == "38.50"
        assert data["breakdown"][1] == {"rate": "18", "taxable": "200.00", "tax": "36.00"}
        assert data["taxDetails"]["gstType"] == "cgst_sgst"


class TestToDecimal:
    def test_blank_is_zero(self):
        assert to_decimal("") == Decimal("0")
        assert to_decimal(None) == Decimal("0")

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", ["abc", True, "NaN", "Infinity", "1e30", -1e12])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(InvalidLineItem):
            to_decimal(value, "price")

    def test_canonical_rate_keeps_plain_notation(self):
        assert str(canonical_rate(Decimal("20.00"))) == "20"
        assert str(canonical_rate(Decimal("12.50"))) == "12.5"

    def test_quantize_out_of_range_is_an_invalid_line(self):
        with pytest.raises(InvalidLineItem, match="out of range"):
            quantize(Decimal("1e40"))
