import logging

from backend.exceptions import ApiError
from invoices.invoice import INVOICE_STATUSES
from products.product_service import ProductService
from src.extensions import backend

logger = logging.getLogger(__name__)


class InvoiceService:
    @staticmethod
    def create_invoice(credentials, invoice):
        """
        POST the assembled payload to the backend, then refresh what it changed:
         - the product snapshot (stock was decremented server-side)
         - invoice stats
        A failing refresh is logged and does not undo the created invoice.
        """
        created = backend.post("/invoices", credentials, json=invoice.to_payload(),
                               fallback_message="Error creating invoice")
        logger.info("Invoice created for customer %s (total %s)", invoice.customer_ref, invoice.total)

        ProductService.invalidate(credentials)
        stats = None
        try:
            stats = InvoiceService.get_stats(credentials)
        except ApiError as e:
            logger.warning("Invoice created but stats refresh failed: %s", e.message)
        return created, stats

    @staticmethod
    def list_invoices(credentials, params=None):
        return backend.get_page("/invoices", credentials, params=params, key="invoices",
                                fallback_message="Error fetching invoices")

    @staticmethod
    def get_stats(credentials):
        return backend.get("/invoices/stats", credentials, fallback_message="Error fetching invoice stats")

    @staticmethod
    def update_status(credentials, invoice_id, status):
        if status not in INVOICE_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(INVOICE_STATUSES)}")
        return backend.patch(f"/invoices/{invoice_id}/status", credentials, json={"status": status},
                             fallback_message="Error updating invoice status")

    @staticmethod
    def delete_invoice(credentials, invoice_id):
        result = backend.delete(f"/invoices/{invoice_id}", credentials, fallback_message="Error deleting invoice")
        # deleting restocks server-side
        ProductService.invalidate(credentials)
        return result

    @staticmethod
    def restore_invoice(credentials, invoice_id):
        return backend.patch(f"/invoices/{invoice_id}/restore", credentials,
                             fallback_message="Error restoring invoice")

    @staticmethod
    def export_invoices(credentials, params=None):
        return backend.download("/invoices/export", credentials, params=params,
                                fallback_message="Error exporting invoices")
