import logging
from functools import wraps

from flask import g, request

# Only log these HTTP methods
AUDITED_METHODS = {'POST', 'PUT', 'PATCH', 'DELETE'}
RECORD_KEYS = ('id', 'draft_id', 'invoice_id', 'org_id', 'tenant_id')

audit_log = logging.getLogger("audit")


def _status_code(result):
    if isinstance(result, tuple) and len(result) > 1 and isinstance(result[1], int):
        return result[1]
    return getattr(result, 'status_code', 200)


def log_user_action(action, module, record_id=None, status_code=None):
    """Write one audit line for a mutating console request."""
    if request.method not in AUDITED_METHODS:
        return

    current_user = getattr(g, 'current_user', None) or {}
    credentials = getattr(g, 'credentials', None)

    audit_log.info(
        "%s_%s module=%s record=%s status=%s user=%s role=%s tenant=%s ip=%s",
        request.method,
        action,
        module,
        record_id,
        status_code,
        current_user.get('user_id') or current_user.get('username'),
        current_user.get('role'),
        getattr(credentials, 'tenant_id', None),
        request.environ.get('HTTP_X_REAL_IP', request.remote_addr),
    )


def audit_decorator(module, action_type=None):
    """Decorator for automatic audit logging - only POST, PUT, PATCH, DELETE"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            result = f(*args, **kwargs)
            action = action_type or request.method
            record_id = next((kwargs[key] for key in RECORD_KEYS if kwargs.get(key)), None)
            log_user_action(action, module, record_id, _status_code(result))
            return result
        return decorated_function
    return decorator
