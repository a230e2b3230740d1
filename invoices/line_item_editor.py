import logging

from invoices.exceptions import InvalidLineItem, StockConflictError
from invoices.invoice_calculator import HUNDRED, ZERO, compute_totals, quantize, to_decimal
from invoices.invoice_item import LineItem, canonical_field, to_money, to_quantity
from settings.company_settings import BillingContext

logger = logging.getLogger(__name__)


class StockWarning:
    """Non-fatal, user-facing message raised while editing lines."""

    def __init__(self, message, level="warning", product_ref=None):
        self.message = message
        self.level = level
        self.product_ref = product_ref

    def to_dict(self):
        return {"message": self.message, "level": self.level, "product": self.product_ref}

    def __repr__(self):
        return f"StockWarning({self.level}: {self.message})"


def implied_discount(mrp, price):
    """Discount % that turns ``mrp`` into ``price``; 0 when there is nothing to discount."""
    if mrp > 0 and price < mrp:
        return quantize((mrp - price) / mrp * HUNDRED)
    return quantize(ZERO)


class LineItemEditor:
    """Ordered, mutable list of invoice lines with price/discount coupling.

    ``catalog`` is anything with ``get(product_id)`` and ``stock_of(product_id)``
    (normally a ``ProductCatalog`` snapshot).
    """

    def __init__(self, catalog, context=None, items=None):
        self.catalog = catalog
        self.context = context or BillingContext()
        self.items = list(items or [])
        self.warnings = []

    def __len__(self):
        return len(self.items)

    def _item(self, index):
        if not isinstance(index, int) or index < 0 or index >= len(self.items):
            raise IndexError(f"No line item at position {index}")
        return self.items[index]

    def _warn(self, message, level="warning", product_ref=None):
        logger.info("Line item warning: %s", message)
        self.warnings.append(StockWarning(message, level, product_ref))

    def pop_warnings(self):
        warnings, self.warnings = self.warnings, []
        return warnings

    def add_blank_item(self):
        item = LineItem(
            quantity=1,
            mrp=quantize(ZERO, self.context.quantum),
            discount_percent=quantize(ZERO),
            price=quantize(ZERO, self.context.quantum),
            tax_rate=self.context.default_tax_rate,
        )
        self.items.append(item)
        return item

    def add_from_catalog(self, product):
        """Quick add: bump the existing line for ``product`` or append a new one.

        Raises ``StockConflictError`` instead of exceeding the stock on hand.
        """
        stock = self.catalog.stock_of(product.id) if self.catalog.get(product.id) else product.stock
        if stock <= 0:
            raise StockConflictError(f"{product.name} is out of stock", product.id)

        for item in self.items:
            if item.product_ref == product.id:
                if item.quantity + 1 > stock:
                    raise StockConflictError(f"Cannot add more. Limit reached for {product.name}", product.id)
                item.quantity += 1
                return item

        q = self.context.quantum
        price = quantize(product.price, q)
        mrp = quantize(product.mrp, q)
        item = LineItem(
            product_ref=product.id,
            description=product.name,
            hsn_code=product.hsn_code,
            quantity=1,
            price=price,
            mrp=mrp,
            discount_percent=implied_discount(mrp, price),
            tax_rate=product.tax_rate if product.tax_rate is not None else self.context.default_tax_rate,
        )
        self.items.append(item)
        return item

    def remove_item(self, index):
        if not isinstance(index, int) or index < 0 or index >= len(self.items):
            return False
        del self.items[index]
        return True

    def update_item(self, index, changes):
        """Apply several ``set_field`` edits to one line, all or nothing."""
        original = self._item(index)
        pending = len(self.warnings)
        self.items[index] = original.copy()
        try:
            for field, value in changes.items():
                self.set_field(index, field, value)
        except ValueError:
            self.items[index] = original
            del self.warnings[pending:]
            raise
        return self.items[index]

    def set_field(self, index, field, value):
        item = self._item(index)
        field = canonical_field(field)
        q = self.context.quantum

        if field == "product_ref":
            self._select_product(item, value)
        elif field == "mrp":
            item.mrp = to_money(value, "mrp", q)
            self._reprice(item)
        elif field == "discount_percent":
            # negative discounts are clamped, not rejected
            item.discount_percent = quantize(max(to_decimal(value, "discount"), ZERO))
            self._reprice(item)
        elif field == "price":
            item.price = to_money(value, "price", q)
            if item.mrp > 0 and item.price <= item.mrp:
                item.discount_percent = implied_discount(item.mrp, item.price)
            elif item.mrp > 0:
                # No markups: a price above MRP just drops the discount
                item.discount_percent = quantize(ZERO)
        elif field == "quantity":
            item.quantity = to_quantity(value)
        elif field == "tax_rate":
            rate = to_decimal(value, "taxRate")
            if rate < 0:
                raise InvalidLineItem("taxRate cannot be negative")
            item.tax_rate = rate
        else:
            setattr(item, field, "" if value is None else str(value))
        return item

    def _reprice(self, item):
        price = item.mrp * (1 - item.discount_percent / HUNDRED)
        item.price = quantize(max(price, ZERO), self.context.quantum)

    def _select_product(self, item, product_ref):
        item.product_ref = str(product_ref) if product_ref not in (None, "") else None
        if item.product_ref is None:
            return

        product = self.catalog.get(item.product_ref)
        if product is None:
            self._warn(f"Product {item.product_ref} was not found in the catalog.", "warning", item.product_ref)
            return

        q = self.context.quantum
        item.price = quantize(product.price, q)
        item.mrp = quantize(product.mrp, q)
        item.discount_percent = quantize(ZERO)
        item.description = product.description or product.name or item.description
        item.hsn_code = product.hsn_code
        item.tax_rate = product.tax_rate if product.tax_rate is not None else self.context.default_tax_rate

        stock = self.catalog.stock_of(product.id)
        if stock <= 0:
            self._warn(f"{product.name} is currently out of stock.", "danger", product.id)
        elif stock < self.context.low_stock_threshold:
            self._warn(f"{product.name} is low in stock: {stock} units remaining.", "warning", product.id)

    def totals(self, gst_type=None):
        return compute_totals(self.items, self.context, gst_type)
