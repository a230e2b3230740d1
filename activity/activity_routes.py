from flask import Blueprint, g, jsonify, request

from activity.activity_service import ActivityLogService
from user.auth_middleware import tenant_auth_required

bp = Blueprint("activity", __name__)


def logs_response(page, logs):
    body = page.to_dict()
    body["items"] = [log.to_dict() for log in logs]
    return jsonify(body), 200


@bp.route("/", methods=["GET"])
@tenant_auth_required
def list_activity_logs():
    try:
        page, logs = ActivityLogService.list_logs(g.credentials, request.args)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return logs_response(page, logs)
