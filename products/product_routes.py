from flask import Blueprint, g, jsonify, request

from products.product_service import ProductService
from user.auth_middleware import tenant_auth_required

bp = Blueprint("products", __name__)


@bp.route("/", methods=["GET"])
@tenant_auth_required
def list_products():
    catalog = ProductService.catalog_for(g.credentials)
    products = catalog.search(request.args.get("search", ""))
    return jsonify([p.to_dict() for p in products]), 200


@bp.route("/<product_id>/stock", methods=["GET"])
@tenant_auth_required
def product_stock(product_id):
    catalog = ProductService.catalog_for(g.credentials)
    product = catalog.get(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"id": product.id, "name": product.name, "stock": product.stock}), 200


@bp.route("/refresh", methods=["POST"])
@tenant_auth_required
def refresh_products():
    ProductService.invalidate(g.credentials)
    catalog = ProductService.catalog_for(g.credentials)
    return jsonify({"count": len(catalog.all())}), 200
