import logging

from activity.activity_log import ACTIONS, MODULES, ActivityLog
from src.extensions import backend

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200
TENANT_FILTERS = ("module", "action", "search", "startDate", "endDate")
ADMIN_FILTERS = TENANT_FILTERS + ("organizationId", "slug")


def _positive_int(value, name, default):
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a whole number")
    if number < 1:
        raise ValueError(f"{name} must be at least 1")
    return number


def build_query(args, allowed):
    """Backend query params from request args; unknown module/action names are refused."""
    params = {name: args.get(name) for name in allowed if args.get(name)}
    if params.get("module") and params["module"] not in MODULES:
        raise ValueError(f"Unknown module '{params['module']}'")
    if params.get("action") and params["action"] not in ACTIONS:
        raise ValueError(f"Unknown action '{params['action']}'")
    params["page"] = _positive_int(args.get("page"), "page", 1)
    params["limit"] = min(_positive_int(args.get("limit"), "limit", DEFAULT_LIMIT), MAX_LIMIT)
    return params


class ActivityLogService:
    @staticmethod
    def list_logs(credentials, args):
        """Staff activity for the caller's own tenant, newest first."""
        params = build_query(args, TENANT_FILTERS)
        page = backend.get_page("/activity-logs", credentials, params=params, key="logs",
                                fallback_message="Failed to fetch activity logs")
        return page, [ActivityLog.from_api(item) for item in page.items]

    @staticmethod
    def list_all_logs(credentials, args):
        """Super-admin view across branches, optionally narrowed to one organization or branch slug."""
        params = build_query(args, ADMIN_FILTERS)
        logger.info("Activity logs requested (organization=%s, branch=%s)",
                    params.get("organizationId"), params.get("slug"))
        page = backend.get_page("/super-admin/activity-logs", credentials, params=params, key="logs",
                                fallback_message="Failed to fetch activity logs")
        return page, [ActivityLog.from_api(item) for item in page.items]
