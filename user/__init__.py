from .auth_middleware import tenant_auth_required, super_admin_required, get_current_user, draft_owner
from .audit_logger import audit_decorator, log_user_action

__all__ = [
    'tenant_auth_required', 'super_admin_required', 'get_current_user', 'draft_owner',
    'audit_decorator', 'log_user_action',
]
