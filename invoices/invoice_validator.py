from collections import OrderedDict

from invoices.exceptions import InvoiceValidationError
from invoices.invoice import INVOICE_STATUSES, PAYMENT_TYPES, Invoice
from invoices.invoice_calculator import compute_totals


def _check_stock(items, catalog, errors):
    """Advisory check against the snapshot; quantities are summed per product."""
    requested = OrderedDict()
    for item in items:
        if item.product_ref and item.quantity:
            requested[item.product_ref] = requested.get(item.product_ref, 0) + item.quantity

    for product_ref, quantity in requested.items():
        product = catalog.get(product_ref)
        if product is None:
            errors.append(f"Product ID {product_ref} not found.")
            continue
        stock = catalog.stock_of(product_ref)
        if stock <= 0:
            errors.append(f"{product.name} is currently out of stock (0 available).")
        elif quantity > stock:
            errors.append(f"{product.name} only has {stock} units available. You requested {quantity}.")


def validate_and_build(items, customer_ref, catalog, context=None, notes="", payment_type="cash",
                       status="pending", due_date=None, created_by=None, gst_type=None):
    """Check a draft and assemble the Invoice payload.

    Collects every problem before giving up and raises
    ``InvoiceValidationError`` with the whole list.
    """
    errors = []
    items = list(items or [])

    if not customer_ref:
        errors.append("Please select a customer first.")
    if not items:
        errors.append("Please add at least one item.")

    for position, item in enumerate(items, start=1):
        if not item.product_ref or not item.quantity or item.price is None:
            errors.append(f"Item {position}: product, quantity and price are required.")

    if status not in INVOICE_STATUSES:
        errors.append(f"Status must be one of: {', '.join(INVOICE_STATUSES)}.")
    if payment_type not in PAYMENT_TYPES:
        errors.append(f"Payment type must be one of: {', '.join(PAYMENT_TYPES)}.")

    if items:
        _check_stock(items, catalog, errors)

    if errors:
        raise InvoiceValidationError(errors)

    totals = compute_totals(items, context, gst_type)
    return Invoice(
        customer_ref=customer_ref,
        items=items,
        totals=totals,
        notes=notes,
        payment_type=payment_type,
        status=status,
        due_date=due_date,
        created_by=created_by,
    )
