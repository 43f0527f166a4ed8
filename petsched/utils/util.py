from functools import wraps

from flask import g

from .auth_middleware import token_required


def role_required(*roles):
    allowed = [getattr(role, 'value', role) for role in roles]

    def wrapper(fn):
        @wraps(fn)
        @token_required
        def decorator(*args, **kwargs):
            if g.user.get('role') not in allowed:
                return {'error': 'Forbidden', 'message': 'Insufficient permissions'}, 403
            return fn(*args, **kwargs)
        return decorator
    return wrapper


def api_response(data=None, message=None, status=200, count=None):
    body = {'success': True}
    if message is not None:
        body['message'] = message
    if data is not None:
        body['data'] = data
    if count is not None:
        body['count'] = count
    return body, status
