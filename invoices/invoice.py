from datetime import datetime, timezone

INVOICE_STATUSES = ("draft", "pending", "paid", "overdue", "cancelled")
PAYMENT_TYPES = ("cash", "card", "upi", "bank_transfer", "cheque")


def _money(value):
    return float(value)


class Invoice:
    """Invoice payload assembled client-side and handed to the backend once.

    After creation only ``status`` moves (``PATCH /invoices/:id/status``);
    edits always rebuild a fresh payload.
    """

    def __init__(self, customer_ref, items, totals, notes="", payment_type="cash",
                 status="pending", due_date=None, created_by=None, created_at=None):
        self.customer_ref = customer_ref
        self.items = [item.copy() for item in items]
        self.totals = totals
        self.notes = notes or ""
        self.payment_type = payment_type
        self.status = status
        self.due_date = due_date
        self.created_by = created_by
        self.created_at = created_at or datetime.now(timezone.utc)

    @property
    def total(self):
        return self.totals.total

    def to_payload(self):
        totals = self.totals
        tax_details = {
            key: (value if isinstance(value, str) else _money(value))
            for key, value in totals.tax_details.items()
        }
        return {
            "customer": self.customer_ref,
            "items": [item.to_payload() for item in self.items],
            "subtotal": _money(totals.subtotal),
            "breakdown": [
                {"rate": _money(b.rate), "taxable": _money(b.taxable), "tax": _money(b.tax)}
                for b in totals.breakdown
            ],
            "taxDetails": tax_details,
            "total": _money(totals.total),
            "notes": self.notes,
            "paymentType": self.payment_type,
            "status": self.status,
            "paymentDetails": {"type": self.payment_type, "status": self.status},
            "dueDate": self.due_date,
            "createdAt": self.created_at.isoformat().replace("+00:00", "Z"),
            "createdBy": self.created_by,
        }
