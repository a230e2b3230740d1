from decimal import Decimal, InvalidOperation

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AUD": "A$",
    "CAD": "C$",
}

GST_TYPES = ("cgst_sgst", "igst")


def currency_symbol(code):
    return CURRENCY_SYMBOLS.get((code or "").upper(), code or "")


def format_currency(amount, code="INR", precision=2):
    """Display string for an amount, e.g. ``₹1,234.50``. Only used at the response edge."""
    try:
        value = Decimal(str(amount if amount is not None else 0))
    except InvalidOperation:
        value = Decimal("0")
    symbol = currency_symbol(code)
    formatted = f"{value:,.{precision}f}"
    if value < 0:
        return f"-{symbol}{formatted[1:]}"
    return f"{symbol}{formatted}"


class CompanySettings:
    """Tenant settings as served by the backend ``/settings`` resource."""

    def __init__(self, company=None, payment=None):
        self.company = company or {}
        self.payment = payment or {}

    @classmethod
    def from_api(cls, data, default_currency="INR"):
        data = data or {}
        company = dict(data.get("company") or {})
        company.setdefault("currency", default_currency)
        return cls(company=company, payment=dict(data.get("payment") or {}))

    @property
    def currency(self):
        return (self.company.get("currency") or "INR").upper()

    def to_dict(self):
        return {
            "company": self.company,
            "payment": self.payment,
            "currency": self.currency,
            "currencySymbol": currency_symbol(self.currency),
        }


class BillingContext:
    """Explicit inputs of the invoice maths: precision, defaults and thresholds.

    Built once per request from app config plus tenant settings and handed to
    the calculator, editor and validator instead of being read from globals.
    """

    def __init__(self, currency="INR", money_precision=2, default_tax_rate=18,
                 low_stock_threshold=5, gst_type="cgst_sgst"):
        if gst_type not in GST_TYPES:
            raise ValueError(f"gst_type must be one of {', '.join(GST_TYPES)}")
        if money_precision < 0:
            raise ValueError("money_precision must not be negative")
        self.currency = currency
        self.money_precision = money_precision
        self.default_tax_rate = Decimal(str(default_tax_rate))
        self.low_stock_threshold = low_stock_threshold
        self.gst_type = gst_type

    @property
    def quantum(self):
        return Decimal(1).scaleb(-self.money_precision)

    @classmethod
    def from_config(cls, config, settings=None):
        currency = settings.currency if settings else config.get("DEFAULT_CURRENCY", "INR")
        return cls(
            currency=currency,
            money_precision=config.get("MONEY_PRECISION", 2),
            default_tax_rate=config.get("DEFAULT_TAX_RATE", 18),
            low_stock_threshold=config.get("LOW_STOCK_THRESHOLD", 5),
            gst_type=config.get("DEFAULT_GST_TYPE", "cgst_sgst"),
        )

    def format(self, amount):
        return format_currency(amount, self.currency, self.money_precision)
