from decimal import Decimal

from invoices.invoice_calculator import ZERO, to_decimal


class Product:
    """Catalog entry as read from the backend ``/products`` resource."""

    def __init__(self, id, name, sku="", description="", hsn_code="", price=ZERO,
                 mrp=None, tax_rate=None, stock=0):
        self.id = id
        self.name = name
        self.sku = sku
        self.description = description
        self.hsn_code = hsn_code
        self.price = price
        # Products without an MRP sell at list price
        self.mrp = mrp if mrp is not None else price
        self.tax_rate = tax_rate
        self.stock = stock

    @classmethod
    def from_api(cls, data):
        product_id = data.get("_id") or data.get("id")
        if product_id is None:
            raise ValueError(f"Product without id: {data!r}")
        price = to_decimal(data.get("price"), "price")
        mrp = data.get("mrp")
        tax_rate = data.get("taxRate")
        try:
            stock = int(Decimal(str(data.get("stock") or 0)))
        except ArithmeticError:
            stock = 0
        return cls(
            id=str(product_id),
            name=data.get("name") or "",
            sku=data.get("sku") or "",
            description=data.get("description") or "",
            hsn_code=data.get("hsnCode") or "",
            price=price,
            mrp=None if mrp in (None, "") else to_decimal(mrp, "mrp"),
            tax_rate=None if tax_rate in (None, "") else to_decimal(tax_rate, "taxRate"),
            stock=stock,
        )

    @property
    def in_stock(self):
        return self.stock > 0

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "description": self.description,
            "hsnCode": self.hsn_code,
            "price": str(self.price),
            "mrp": str(self.mrp),
            "taxRate": None if self.tax_rate is None else str(self.tax_rate),
            "stock": self.stock,
        }

    def __repr__(self):
        return f"<Product {self.id} {self.name}>"
