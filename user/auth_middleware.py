from functools import wraps

from flask import current_app, g, jsonify, request

from backend.api_client import RequestCredentials
from user.exceptions import InvalidTokenException
from user.jwt_utils import decode_access_token, get_token_from_header, identity_from_claims

ADMIN_KEY_HEADER = 'x-admin-key'
TENANT_HEADER = 'X-Tenant-Id'


def tenant_auth_required(f):
    """Bearer-token decorator for tenant-scoped routes.

    Stores the caller in ``g.current_user`` and the outgoing backend
    credentials in ``g.credentials``.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_token_from_header(request)
        if not token:
            return jsonify({
                'error': 'Access token missing',
                'error_code': 'TOKEN_MISSING'
            }), 401

        try:
            payload = decode_access_token(token)
        except InvalidTokenException as e:
            return jsonify({
                'error': str(e),
                'error_code': 'TOKEN_INVALID'
            }), 401

        identity = identity_from_claims(payload)
        tenant_id = request.headers.get(TENANT_HEADER) or identity.get('tenant_id')

        g.current_user = identity
        g.credentials = RequestCredentials(
            token=token,
            tenant_id=tenant_id,
            # a signed token only vouches for the tenant named in its own claims
            verified=bool(current_app.config.get('JWT_SECRET_KEY')) and identity.get('tenant_id') == tenant_id,
        )
        return f(*args, **kwargs)
    return decorated_function


def super_admin_required(f):
    """Admin-key decorator for the super-admin console routes."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        admin_key = request.headers.get(ADMIN_KEY_HEADER)
        if not admin_key:
            return jsonify({
                'error': 'Super admin key missing',
                'error_code': 'ADMIN_KEY_MISSING'
            }), 401

        g.current_user = {'user_id': None, 'username': 'superadmin', 'role': 'superadmin', 'tenant_id': None}
        g.credentials = RequestCredentials(admin_key=admin_key)
        return f(*args, **kwargs)
    return decorated_function


def get_current_user():
    """Get current user from Flask g object"""
    return getattr(g, 'current_user', None)


def draft_owner():
    """Drafts belong to one tenant and one user."""
    user = get_current_user() or {}
    credentials = getattr(g, 'credentials', None)
    tenant_key = credentials.tenant_key if credentials else 'default'
    return f"{tenant_key}:{user.get('user_id') or 'anonymous'}"
