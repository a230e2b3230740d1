import io

from flask import Blueprint, g, jsonify, request, send_file

from invoices.invoice_calculator import compute_totals
from invoices.invoice_item import LineItem
from invoices.invoice_service import InvoiceService
from settings.settings_service import SettingsService
from user.audit_logger import audit_decorator
from user.auth_middleware import tenant_auth_required

bp = Blueprint("invoices", __name__)

LIST_FILTERS = ("status", "customer", "page", "limit", "search", "start", "end")


@bp.route("/", methods=["GET"])
@tenant_auth_required
def list_invoices():
    params = {key: request.args[key] for key in LIST_FILTERS if request.args.get(key)}
    page = InvoiceService.list_invoices(g.credentials, params)
    return jsonify(page.to_dict()), 200


@bp.route("/stats", methods=["GET"])
@tenant_auth_required
def invoice_stats():
    return jsonify(InvoiceService.get_stats(g.credentials)), 200


@bp.route("/export", methods=["GET"])
@tenant_auth_required
def export_invoices():
    content = InvoiceService.export_invoices(g.credentials, request.args.to_dict() or None)
    return send_file(
        io.BytesIO(content),
        mimetype="text/csv",
        as_attachment=True,
        download_name="invoices.csv",
    )


@bp.route("/preview", methods=["POST"])
@tenant_auth_required
def preview_totals():
    """Totals for posted line items, without a draft."""
    payload = request.get_json() or {}
    raw_items = payload.get("items")
    if not isinstance(raw_items, list):
        return jsonify({"error": "items list is required"}), 400

    context = SettingsService.billing_context(g.credentials)
    try:
        items = [LineItem.from_dict(raw, context.quantum, context.default_tax_rate) for raw in raw_items]
        totals = compute_totals(items, context, payload.get("gstType"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    result = totals.to_dict()
    result["currency"] = context.currency
    result["display"] = {
        "subtotal": context.format(totals.subtotal),
        "totalTax": context.format(totals.total_tax),
        "total": context.format(totals.total),
    }
    return jsonify(result), 200


@bp.route("/<invoice_id>/status", methods=["PATCH"])
@tenant_auth_required
@audit_decorator("invoices", "UPDATE_STATUS")
def update_invoice_status(invoice_id):
    status = (request.get_json() or {}).get("status")
    try:
        invoice = InvoiceService.update_status(g.credentials, invoice_id, status)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(invoice), 200


@bp.route("/<invoice_id>", methods=["DELETE"])
@tenant_auth_required
@audit_decorator("invoices", "SOFT_DELETE")
def delete_invoice(invoice_id):
    return jsonify(InvoiceService.delete_invoice(g.credentials, invoice_id)), 200


@bp.route("/<invoice_id>/restore", methods=["PATCH"])
@tenant_auth_required
@audit_decorator("invoices", "RESTORE")
def restore_invoice(invoice_id):
    return jsonify(InvoiceService.restore_invoice(g.credentials, invoice_id)), 200
