from flask import Blueprint, g, jsonify

from settings.settings_service import SettingsService
from user.auth_middleware import tenant_auth_required

bp = Blueprint("settings", __name__)


@bp.route("/", methods=["GET"])
@tenant_auth_required
def get_settings():
    settings = SettingsService.get_company_settings(g.credentials)
    return jsonify(settings.to_dict()), 200
