import io
import logging

import pandas as pd
from flask import Blueprint, g, jsonify, request, send_file

from invoices.exceptions import InvoiceValidationError, StockConflictError
from invoices.invoice_service import InvoiceService
from invoices.invoice_validator import validate_and_build
from products.product_service import ProductService
from settings.settings_service import SettingsService
from src.extensions import drafts
from user.audit_logger import audit_decorator
from user.auth_middleware import draft_owner, tenant_auth_required

logger = logging.getLogger(__name__)

bp = Blueprint("drafts", __name__)


def _load_draft(draft_id):
    """Fetch the caller's draft and bind it to this request's catalog snapshot."""
    draft = drafts.get(draft_id, draft_owner())
    credentials = g.credentials
    draft.rebind(ProductService.catalog_for(credentials), SettingsService.billing_context(credentials))
    return draft


def _draft_response(draft, status=200):
    drafts.touch(draft)
    return jsonify(draft.to_dict(draft.editor.pop_warnings())), status


# -------------------- DRAFT HEADER --------------------
@bp.route("/", methods=["POST"])
@tenant_auth_required
@audit_decorator("drafts", "CREATE")
def create_draft():
    credentials = g.credentials
    draft = drafts.create(
        draft_owner(),
        ProductService.catalog_for(credentials),
        SettingsService.billing_context(credentials),
    )
    try:
        draft.update(request.get_json(silent=True) or {})
    except ValueError as e:
        drafts.discard(draft.id, draft.owner)
        return jsonify({"error": str(e)}), 400
    return _draft_response(draft, 201)


@bp.route("/<draft_id>", methods=["GET"])
@tenant_auth_required
def get_draft(draft_id):
    return _draft_response(_load_draft(draft_id))


@bp.route("/<draft_id>", methods=["PUT"])
@tenant_auth_required
@audit_decorator("drafts", "UPDATE")
def update_draft(draft_id):
    draft = _load_draft(draft_id)
    try:
        draft.update(request.get_json() or {})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _draft_response(draft)


@bp.route("/<draft_id>", methods=["DELETE"])
@tenant_auth_required
@audit_decorator("drafts", "DELETE")
def delete_draft(draft_id):
    drafts.discard(draft_id, draft_owner())
    return jsonify({"message": "Draft discarded"}), 200


# -------------------- LINE ITEMS --------------------
@bp.route("/<draft_id>/items", methods=["POST"])
@tenant_auth_required
@audit_decorator("drafts", "ADD_ITEM")
def add_blank_item(draft_id):
    draft = _load_draft(draft_id)
    draft.editor.add_blank_item()
    return _draft_response(draft, 201)


@bp.route("/<draft_id>/items/catalog", methods=["POST"])
@tenant_auth_required
@audit_decorator("drafts", "QUICK_ADD")
def add_catalog_item(draft_id):
    draft = _load_draft(draft_id)
    payload = request.get_json() or {}
    product_id = payload.get("productId") or payload.get("product")
    if not product_id:
        return jsonify({"error": "productId is required"}), 400

    product = draft.editor.catalog.get(product_id)
    if product is None:
        return jsonify({"error": f"Product {product_id} not found"}), 404

    try:
        draft.editor.add_from_catalog(product)
    except StockConflictError as e:
        return jsonify({"warning": e.message, "product": e.product_ref}), 409
    return _draft_response(draft)


@bp.route("/<draft_id>/items/<int:index>", methods=["PATCH"])
@tenant_auth_required
@audit_decorator("drafts", "UPDATE_ITEM")
def update_item(draft_id, index):
    """Body is ``{field: value, ...}``; fields are applied in the order given."""
    draft = _load_draft(draft_id)
    payload = request.get_json() or {}
    if not isinstance(payload, dict) or not payload:
        return jsonify({"error": "at least one field is required"}), 400

    try:
        draft.editor.update_item(index, payload)
    except IndexError as e:
        return jsonify({"error": str(e)}), 404
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _draft_response(draft)


@bp.route("/<draft_id>/items/<int:index>", methods=["DELETE"])
@tenant_auth_required
@audit_decorator("drafts", "REMOVE_ITEM")
def remove_item(draft_id, index):
    draft = _load_draft(draft_id)
    draft.editor.remove_item(index)
    return _draft_response(draft)


# -------------------- SUBMIT --------------------
@bp.route("/<draft_id>/submit", methods=["POST"])
@tenant_auth_required
@audit_decorator("invoices", "CREATE")
def submit_draft(draft_id):
    draft = _load_draft(draft_id)
    user = g.current_user or {}
    try:
        invoice = validate_and_build(
            draft.editor.items,
            draft.customer_ref,
            draft.editor.catalog,
            draft.editor.context,
            notes=draft.notes,
            payment_type=draft.payment_type,
            status=draft.status,
            due_date=draft.due_date,
            created_by=user.get("user_id"),
            gst_type=draft.gst_type,
        )
    except InvoiceValidationError as e:
        return jsonify({"errors": e.errors}), 422
    except ValueError as e:
        return jsonify({"errors": [str(e)]}), 422

    created, stats = InvoiceService.create_invoice(g.credentials, invoice)
    drafts.discard(draft.id, draft.owner)
    return jsonify({"invoice": created, "stats": stats}), 201


# -------------------- EXPORT --------------------
@bp.route("/<draft_id>/export", methods=["GET"])
@tenant_auth_required
def export_draft(draft_id):
    """CSV with one row per line followed by the tax breakdown and totals."""
    draft = _load_draft(draft_id)
    totals = draft.editor.totals(draft.gst_type)

    lines = pd.DataFrame(
        [
            {
                "Product": item.product_ref,
                "Description": item.description,
                "HSN": item.hsn_code,
                "Quantity": item.quantity,
                "MRP": str(item.mrp),
                "Discount %": str(item.discount_percent),
                "Price": str(item.price),
                "Tax Rate %": str(item.tax_rate),
                "Line Total": str(item.line_total),
            }
            for item in draft.editor.items
        ],
        columns=["Product", "Description", "HSN", "Quantity", "MRP", "Discount %", "Price", "Tax Rate %", "Line Total"],
    )
    breakdown = pd.DataFrame(
        [{"Tax Rate %": str(b.rate), "Taxable": str(b.taxable), "Tax": str(b.tax)} for b in totals.breakdown],
        columns=["Tax Rate %", "Taxable", "Tax"],
    )
    summary = pd.DataFrame(
        [
            {"Field": "Subtotal", "Amount": str(totals.subtotal)},
            {"Field": "CGST", "Amount": str(totals.cgst_amount)},
            {"Field": "SGST", "Amount": str(totals.sgst_amount)},
            {"Field": "IGST", "Amount": str(totals.igst_amount)},
            {"Field": "Total Tax", "Amount": str(totals.total_tax)},
            {"Field": "Total", "Amount": str(totals.total)},
        ]
    )

    output = io.StringIO()
    lines.to_csv(output, index=False)
    output.write("\n")
    breakdown.to_csv(output, index=False)
    output.write("\n")
    summary.to_csv(output, index=False)

    return send_file(
        io.BytesIO(output.getvalue().encode("utf-8")),
        mimetype="text/csv",
        as_attachment=True,
        download_name=f"draft_{draft.id}.csv",
    )
