class InvalidLineItem(ValueError):
    pass


class StockConflictError(Exception):
    """Quick-add blocked because the catalog snapshot has no stock left for it."""

    def __init__(self, message, product_ref=None):
        super().__init__(message)
        self.message = message
        self.product_ref = product_ref


class InvoiceValidationError(Exception):
    """Carries every problem found while building an invoice, not just the first."""

    def __init__(self, errors):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class DraftNotFoundException(Exception):
    pass
