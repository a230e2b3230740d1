from flask import Blueprint, g, jsonify, request

from activity.activity_routes import logs_response
from activity.activity_service import ActivityLogService
from src.extensions import backend
from superadmin.tenant_directory import TenantDirectory
from user.audit_logger import audit_decorator
from user.auth_middleware import super_admin_required

bp = Blueprint("superadmin", __name__)


def _directory():
    return TenantDirectory(backend, g.credentials)


def _is_true(value):
    return str(value).lower() in ("1", "true", "yes")


def _organizations_response(directory, result, status=200):
    return jsonify({
        "result": result,
        "organizations": [org.to_dict() for org in directory.organizations or []],
    }), status


def _tenants_response(directory, result, status=200):
    return jsonify({
        "result": result,
        "tenants": [tenant.to_dict() for tenant in directory.tenants or []],
    }), status


@bp.route("/verify", methods=["POST"])
@super_admin_required
def verify():
    _directory().verify()
    return jsonify({"success": True}), 200


# -------------------- ORGANIZATIONS --------------------
@bp.route("/organizations", methods=["GET"])
@super_admin_required
def list_organizations():
    directory = _directory()
    organizations = directory.list_organizations(deleted=_is_true(request.args.get("isDeleted")))
    return jsonify([org.to_dict() for org in organizations]), 200


@bp.route("/organizations", methods=["POST"])
@super_admin_required
@audit_decorator("organizations", "CREATE")
def create_organization():
    directory = _directory()
    try:
        created = directory.create_organization(request.get_json() or {})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _organizations_response(directory, created, 201)


@bp.route("/organizations/<org_id>", methods=["PUT"])
@super_admin_required
@audit_decorator("organizations", "UPDATE")
def update_organization(org_id):
    directory = _directory()
    try:
        updated = directory.update_organization(org_id, request.get_json() or {})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _organizations_response(directory, updated)


@bp.route("/organizations/<org_id>/status", methods=["PATCH"])
@super_admin_required
@audit_decorator("organizations", "UPDATE_STATUS")
def toggle_organization_status(org_id):
    directory = _directory()
    status = (request.get_json(silent=True) or {}).get("status")
    if status is None:
        directory.list_organizations()
    try:
        updated = directory.toggle_organization_status(org_id, status)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _organizations_response(directory, updated)


@bp.route("/organizations/<org_id>", methods=["DELETE"])
@super_admin_required
@audit_decorator("organizations", "DELETE")
def delete_organization(org_id):
    directory = _directory()
    if _is_true(request.args.get("permanent")):
        result = directory.hard_delete_organization(org_id)
    else:
        result = directory.delete_organization(org_id)
    return _organizations_response(directory, result)


@bp.route("/organizations/<org_id>/restore", methods=["PATCH"])
@super_admin_required
@audit_decorator("organizations", "RESTORE")
def restore_organization(org_id):
    directory = _directory()
    # a record still in the active list is not in the trash
    directory.list_organizations()
    try:
        result = directory.restore_organization(org_id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _organizations_response(directory, result)


@bp.route("/organizations/<org_id>/aggregated-stats", methods=["GET"])
@super_admin_required
def aggregated_stats(org_id):
    return jsonify(_directory().aggregated_stats(org_id)), 200


@bp.route("/organizations/<org_id>/branches/<slug>/dashboard", methods=["GET"])
@super_admin_required
def branch_dashboard(org_id, slug):
    return jsonify(_directory().branch_dashboard(org_id, slug)), 200


# -------------------- TENANTS --------------------
@bp.route("/tenants", methods=["GET"])
@super_admin_required
def list_tenants():
    directory = _directory()
    tenants = directory.list_tenants(
        organization_id=request.args.get("organizationId"),
        deleted=_is_true(request.args.get("isDeleted")),
    )
    return jsonify([tenant.to_dict() for tenant in tenants]), 200


@bp.route("/tenants", methods=["POST"])
@super_admin_required
@audit_decorator("tenants", "CREATE")
def create_tenant():
    directory = _directory()
    data = request.get_json() or {}
    directory.list_organizations()
    directory.list_tenants(organization_id=data.get("organizationId"))
    try:
        created = directory.create_tenant(data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _tenants_response(directory, created, 201)


@bp.route("/tenants/<tenant_id>", methods=["PUT"])
@super_admin_required
@audit_decorator("tenants", "UPDATE")
def update_tenant(tenant_id):
    directory = _directory()
    try:
        updated = directory.update_tenant(tenant_id, request.get_json() or {})
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _tenants_response(directory, updated)


@bp.route("/tenants/<tenant_id>/status", methods=["PATCH"])
@super_admin_required
@audit_decorator("tenants", "UPDATE_STATUS")
def toggle_tenant_status(tenant_id):
    directory = _directory()
    status = (request.get_json(silent=True) or {}).get("status")
    if status is None:
        directory.list_tenants()
    try:
        updated = directory.toggle_tenant_status(tenant_id, status)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _tenants_response(directory, updated)


@bp.route("/tenants/<tenant_id>", methods=["DELETE"])
@super_admin_required
@audit_decorator("tenants", "DELETE")
def delete_tenant(tenant_id):
    directory = _directory()
    if _is_true(request.args.get("permanent")):
        result = directory.hard_delete_tenant(tenant_id)
    else:
        result = directory.delete_tenant(tenant_id)
    return _tenants_response(directory, result)


@bp.route("/tenants/<tenant_id>/restore", methods=["PATCH"])
@super_admin_required
@audit_decorator("tenants", "RESTORE")
def restore_tenant(tenant_id):
    directory = _directory()
    directory.list_tenants()
    try:
        result = directory.restore_tenant(tenant_id)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _tenants_response(directory, result)


# -------------------- ACTIVITY LOGS --------------------
@bp.route("/activity-logs", methods=["GET"])
@super_admin_required
def activity_logs():
    try:
        page, logs = ActivityLogService.list_all_logs(g.credentials, request.args)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return logs_response(page, logs)
