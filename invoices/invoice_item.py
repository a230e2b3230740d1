from decimal import Decimal

from invoices.invoice_calculator import ZERO, quantize, to_decimal
from invoices.exceptions import InvalidLineItem

# camelCase / snake_case spellings accepted from the UI and the backend
FIELD_ALIASES = {
    "product": "product_ref",
    "productRef": "product_ref",
    "product_ref": "product_ref",
    "productId": "product_ref",
    "description": "description",
    "hsnCode": "hsn_code",
    "hsn_code": "hsn_code",
    "quantity": "quantity",
    "qty": "quantity",
    "mrp": "mrp",
    "discount": "discount_percent",
    "discountPercent": "discount_percent",
    "discount_percent": "discount_percent",
    "price": "price",
    "taxRate": "tax_rate",
    "taxRatePercent": "tax_rate",
    "tax_rate": "tax_rate",
}


def canonical_field(name):
    try:
        return FIELD_ALIASES[name]
    except KeyError:
        raise InvalidLineItem(f"Unknown line item field '{name}'")


def to_quantity(value, field="quantity"):
    if value is None or value == "":
        return 0
    number = to_decimal(value, field)
    if number != number.to_integral_value():
        raise InvalidLineItem(f"{field} must be a whole number")
    if number < 0:
        raise InvalidLineItem(f"{field} cannot be negative")
    return int(number)


def to_money(value, field, quantum):
    number = to_decimal(value, field)
    if number < 0:
        raise InvalidLineItem(f"{field} cannot be negative")
    return quantize(number, quantum)


class LineItem:
    """One invoice line as edited in the billing screen."""

    def __init__(self, product_ref=None, description="", hsn_code="", quantity=1,
                 mrp=ZERO, discount_percent=ZERO, price=ZERO, tax_rate=Decimal("18")):
        self.product_ref = product_ref
        self.description = description
        self.hsn_code = hsn_code
        self.quantity = quantity
        self.mrp = mrp
        self.discount_percent = discount_percent
        self.price = price
        self.tax_rate = tax_rate

    @classmethod
    def from_dict(cls, data, quantum=Decimal("0.01"), default_tax_rate=Decimal("18")):
        """Decode a line item posted by the UI (camelCase or snake_case keys)."""
        values = {}
        for key, value in (data or {}).items():
            if key in ("total", "id", "_id"):
                continue
            values[canonical_field(key)] = value

        tax_rate = values.get("tax_rate")
        discount = to_decimal(values.get("discount_percent"), "discount")
        return cls(
            product_ref=values.get("product_ref") or None,
            description=values.get("description") or "",
            hsn_code=values.get("hsn_code") or "",
            quantity=to_quantity(values.get("quantity", 1)),
            mrp=to_money(values.get("mrp"), "mrp", quantum),
            discount_percent=quantize(max(discount, ZERO)),
            price=to_money(values.get("price"), "price", quantum),
            tax_rate=default_tax_rate if tax_rate in (None, "") else to_decimal(tax_rate, "taxRate"),
        )

    @property
    def line_total(self):
        return quantize(self.price * self.quantity)

    def copy(self):
        return LineItem(**self.__dict__)

    def to_dict(self):
        return {
            "product": self.product_ref,
            "description": self.description,
            "hsnCode": self.hsn_code,
            "quantity": self.quantity,
            "mrp": str(self.mrp),
            "discount": str(self.discount_percent),
            "price": str(self.price),
            "taxRate": str(self.tax_rate),
            "total": str(self.line_total),
        }

    def to_payload(self):
        """Backend wire shape: JSON numbers, MRP falls back to price."""
        mrp = self.mrp if self.mrp > 0 else self.price
        return {
            "product": self.product_ref,
            "description": self.description,
            "hsnCode": self.hsn_code,
            "quantity": self.quantity,
            "price": float(self.price),
            "mrp": float(mrp),
            "discount": float(self.discount_percent),
            "taxRate": float(self.tax_rate),
            "total": float(self.line_total),
        }

    def __repr__(self):
        return f"<LineItem {self.product_ref} x{self.quantity} @ {self.price}>"
