from flask import Blueprint, g, jsonify, request

from customers.customer_service import CustomerService
from user.audit_logger import audit_decorator
from user.auth_middleware import tenant_auth_required

bp = Blueprint("customers", __name__)


@bp.route("/", methods=["GET"])
@tenant_auth_required
def list_customers():
    customers = CustomerService.list_customers(g.credentials)
    return jsonify([c.to_dict() for c in customers]), 200


@bp.route("/search", methods=["GET"])
@tenant_auth_required
def search_customer():
    try:
        customer = CustomerService.search(g.credentials, request.args.get("q", ""))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    if customer is None:
        return jsonify({"message": "Customer not found. Fill details and create new customer."}), 404
    return jsonify(customer.to_dict()), 200


@bp.route("/", methods=["POST"])
@tenant_auth_required
@audit_decorator("customers", "CREATE")
def create_customer():
    try:
        customer = CustomerService.create_customer(g.credentials, request.get_json() or {})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(customer.to_dict()), 201
