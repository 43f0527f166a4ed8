from functools import wraps

from flask import g, request
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError


def get_bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1].strip() or None
    return None


def decode_access_token(token):
    """Claims of a valid access token, or None."""
    try:
        data = decode_token(token)
    except (PyJWTError, JWTExtendedException):
        return None
    if data.get('type') != 'access':
        return None
    return {
        'id': data['sub'],
        'email': data.get('email'),
        'role': data.get('role'),
        'clinic_id': data.get('clinic_id')
    }


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = get_bearer_token()
        if not token:
            return {'error': 'Access denied', 'message': 'No token provided'}, 401

        user = decode_access_token(token)
        if user is None:
            return {'error': 'Invalid token', 'message': 'Token is not valid'}, 403

        g.user = user
        return f(*args, **kwargs)
    return decorated


def token_optional(f):
    # public routes: a valid bearer token only attributes the write to its user
    @wraps(f)
    def decorated(*args, **kwargs):
        token = get_bearer_token()
        g.user = decode_access_token(token) if token else None
        return f(*args, **kwargs)
    return decorated


def current_user():
    return g.get('user')
