import threading
import uuid
from datetime import datetime, timezone

from cachetools import TTLCache

from invoices.exceptions import DraftNotFoundException
from invoices.invoice import INVOICE_STATUSES, PAYMENT_TYPES
from invoices.line_item_editor import LineItemEditor

HEADER_FIELDS = {
    "customer": "customer_ref",
    "customerRef": "customer_ref",
    "notes": "notes",
    "paymentType": "payment_type",
    "status": "status",
    "dueDate": "due_date",
    "gstType": "gst_type",
}


class InvoiceDraft:
    """Invoice being built: header fields plus a line item editor."""

    def __init__(self, owner, editor, draft_id=None):
        self.id = draft_id or uuid.uuid4().hex
        self.owner = owner
        self.editor = editor
        self.customer_ref = None
        self.notes = ""
        self.payment_type = "cash"
        self.status = "paid"
        self.due_date = None
        self.gst_type = editor.context.gst_type
        self.created_at = datetime.now(timezone.utc)

    def update(self, data):
        for key, value in (data or {}).items():
            attr = HEADER_FIELDS.get(key)
            if attr is None:
                raise ValueError(f"Unknown draft field '{key}'")
            if attr == "payment_type" and value not in PAYMENT_TYPES:
                raise ValueError(f"paymentType must be one of: {', '.join(PAYMENT_TYPES)}")
            if attr == "status" and value not in INVOICE_STATUSES:
                raise ValueError(f"status must be one of: {', '.join(INVOICE_STATUSES)}")
            if attr == "gst_type" and value not in ("cgst_sgst", "igst"):
                raise ValueError("gstType must be 'cgst_sgst' or 'igst'")
            if attr in ("customer_ref", "due_date") and not value:
                value = None
            setattr(self, attr, value)

    def rebind(self, catalog, context):
        """Point the editor at this request's catalog snapshot and context."""
        self.editor.catalog = catalog
        self.editor.context = context

    def to_dict(self, warnings=None):
        return {
            "id": self.id,
            "customer": self.customer_ref,
            "notes": self.notes,
            "paymentType": self.payment_type,
            "status": self.status,
            "dueDate": self.due_date,
            "gstType": self.gst_type,
            "items": [item.to_dict() for item in self.editor.items],
            "totals": self.editor.totals(self.gst_type).to_dict(),
            "warnings": [w.to_dict() for w in (warnings or [])],
            "createdAt": self.created_at.isoformat(),
        }


class DraftStore:
    """In-memory drafts keyed by id; they expire after ``DRAFT_TTL`` seconds."""

    def __init__(self, maxsize=1000, ttl=4 * 60 * 60):
        self._lock = threading.Lock()
        self._drafts = TTLCache(maxsize=maxsize, ttl=ttl)

    def init_app(self, app):
        self._drafts = TTLCache(maxsize=app.config.get("DRAFT_MAX", 1000), ttl=app.config.get("DRAFT_TTL", 4 * 60 * 60))
        app.extensions["drafts"] = self

    def create(self, owner, catalog, context):
        draft = InvoiceDraft(owner, LineItemEditor(catalog, context))
        with self._lock:
            self._drafts[draft.id] = draft
        return draft

    def get(self, draft_id, owner):
        with self._lock:
            draft = self._drafts.get(draft_id)
        # drafts of another tenant/user look the same as missing ones
        if draft is None or draft.owner != owner:
            raise DraftNotFoundException(f"Draft {draft_id} not found")
        return draft

    def touch(self, draft):
        with self._lock:
            self._drafts[draft.id] = draft

    def discard(self, draft_id, owner):
        draft = self.get(draft_id, owner)
        with self._lock:
            self._drafts.pop(draft.id, None)
        return draft

    def clear(self):
        with self._lock:
            self._drafts.clear()
