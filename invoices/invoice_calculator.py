from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from invoices.exceptions import InvalidLineItem
from settings.company_settings import BillingContext

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONEY = Decimal("0.01")
# per-field ceiling; keeps line and invoice sums inside the decimal context
MAX_VALUE = Decimal("1e9")


def to_decimal(value, field="value"):
    """Parse user/backend input into a Decimal. Blank means zero."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise InvalidLineItem(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidLineItem(f"{field} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidLineItem(f"{field} must be a finite number")
    if abs(result) >= MAX_VALUE:
        raise InvalidLineItem(f"{field} is too large")
    return result


def quantize(value, quantum=MONEY):
    try:
        return value.quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidLineItem(f"{value} is out of range")


def canonical_rate(rate):
    """18, 18.0 and 18.00 are the same rate (and 20 must not print as 2E+1)."""
    rate = rate.normalize()
    if rate.as_tuple().exponent > 0:
        rate = rate.quantize(Decimal(1))
    return rate


class TaxBucket:
    """Taxable value and tax accumulated for one tax rate."""

    def __init__(self, rate, taxable=ZERO, tax=ZERO):
        self.rate = rate
        self.taxable = taxable
        self.tax = tax

    def to_dict(self):
        return {"rate": str(self.rate), "taxable": str(self.taxable), "tax": str(self.tax)}

    def __eq__(self, other):
        return (
            isinstance(other, TaxBucket)
            and (self.rate, self.taxable, self.tax) == (other.rate, other.taxable, other.tax)
        )

    def __repr__(self):
        return f"TaxBucket(rate={self.rate}, taxable={self.taxable}, tax={self.tax})"


class InvoiceTotals:
    def __init__(self, subtotal, breakdown, total_tax, cgst_amount, sgst_amount, igst_amount, gst_type, quantum=MONEY):
        self.subtotal = subtotal
        self.breakdown = breakdown
        self.total_tax = total_tax
        self.total = subtotal + total_tax
        self.cgst_amount = cgst_amount
        self.sgst_amount = sgst_amount
        self.igst_amount = igst_amount
        self.gst_type = gst_type
        self.quantum = quantum

    @property
    def effective_rate(self):
        if self.subtotal <= 0:
            return ZERO
        return quantize(self.total_tax / self.subtotal * HUNDRED, MONEY)

    @property
    def tax_details(self):
        rate = self.effective_rate
        if self.total_tax == 0:
            gst_type = "none"
            cgst = sgst = igst = ZERO
        elif self.gst_type == "igst":
            gst_type = "igst"
            cgst = sgst = ZERO
            igst = rate
        else:
            gst_type = "cgst_sgst"
            cgst = sgst = quantize(rate / 2, MONEY)
            igst = ZERO
        return {
            "gstType": gst_type,
            "cgst": cgst,
            "sgst": sgst,
            "igst": igst,
            "cgstAmount": self.cgst_amount,
            "sgstAmount": self.sgst_amount,
            "igstAmount": self.igst_amount,
            "totalTax": self.total_tax,
        }

    def to_dict(self):
        return {
            "subtotal": str(self.subtotal),
            "breakdown": [bucket.to_dict() for bucket in self.breakdown],
            "totalTax": str(self.total_tax),
            "total": str(self.total),
            "cgstAmount": str(self.cgst_amount),
            "sgstAmount": str(self.sgst_amount),
            "igstAmount": str(self.igst_amount),
            "taxDetails": {key: (value if isinstance(value, str) else str(value))
                           for key, value in self.tax_details.items()},
        }


def compute_totals(items, context=None, gst_type=None):
    """Reduce line items to subtotal, per-rate tax breakdown and grand total.

    Each item contributes ``price * quantity`` to the taxable value of its
    rate bucket. Tax is rounded once per bucket, so the bucket taxes add up to
    ``total_tax`` exactly and ``total == subtotal + total_tax`` holds to the
    cent. Negative quantities, prices or rates are rejected.

    For ``cgst_sgst`` CGST is half the tax rounded half-up and SGST the remainder;
    for ``igst`` the whole tax is IGST.
    """
    context = context or BillingContext()
    gst_type = gst_type or context.gst_type
    if gst_type not in ("cgst_sgst", "igst"):
        raise InvalidLineItem(f"Unknown GST type {gst_type!r}")
    q = context.quantum

    buckets = {}
    for position, item in enumerate(items, start=1):
        quantity = to_decimal(getattr(item, "quantity", 0), f"Item {position} quantity")
        price = to_decimal(getattr(item, "price", 0), f"Item {position} price")
        rate = to_decimal(getattr(item, "tax_rate", None), f"Item {position} tax rate")
        if quantity < 0:
            raise InvalidLineItem(f"Item {position}: quantity cannot be negative")
        if price < 0:
            raise InvalidLineItem(f"Item {position}: price cannot be negative")
        if rate < 0:
            raise InvalidLineItem(f"Item {position}: tax rate cannot be negative")

        rate = canonical_rate(rate)
        bucket = buckets.setdefault(rate, TaxBucket(rate))
        bucket.taxable += quantize(price * quantity, q)

    breakdown = []
    for rate in sorted(buckets):
        bucket = buckets[rate]
        bucket.taxable = quantize(bucket.taxable, q)
        bucket.tax = quantize(bucket.taxable * rate / HUNDRED, q)
        breakdown.append(bucket)

    subtotal = quantize(sum((b.taxable for b in breakdown), ZERO), q)
    total_tax = quantize(sum((b.tax for b in breakdown), ZERO), q)

    if gst_type == "igst":
        cgst_amount = sgst_amount = quantize(ZERO, q)
        igst_amount = total_tax
    else:
        cgst_amount = quantize(total_tax / 2, q)
        sgst_amount = total_tax - cgst_amount
        igst_amount = quantize(ZERO, q)

    return InvoiceTotals(
        subtotal=subtotal,
        breakdown=breakdown,
        total_tax=total_tax,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        igst_amount=igst_amount,
        gst_type=gst_type,
        quantum=q,
    )
