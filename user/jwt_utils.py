import jwt
from flask import current_app

from user.exceptions import InvalidTokenException


def get_token_from_header(request):
    """Extract token from Authorization header"""
    auth_header = request.headers.get('Authorization')
    if auth_header and auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1].strip() or None
    return None


def decode_access_token(token):
    """Decode the backend-issued access token.

    With ``JWT_SECRET_KEY`` configured the signature and expiry are verified.
    Without it the claims are only read for identity (who created an invoice,
    which tenant to address); the backend still rejects bad tokens.
    """
    secret = current_app.config.get('JWT_SECRET_KEY')
    algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')
    try:
        if secret:
            return jwt.decode(token, secret, algorithms=[algorithm])
        return jwt.decode(token, options={'verify_signature': False})
    except jwt.ExpiredSignatureError:
        raise InvalidTokenException('Access token expired')
    except jwt.InvalidTokenError:
        raise InvalidTokenException('Invalid access token')


def identity_from_claims(payload):
    """Normalize the claim names the backend has used over time."""
    return {
        'user_id': payload.get('userId') or payload.get('id') or payload.get('user_id') or payload.get('_id'),
        'username': payload.get('name') or payload.get('username'),
        'email': payload.get('email'),
        'role': payload.get('role'),
        'tenant_id': payload.get('tenantId'),
    }
