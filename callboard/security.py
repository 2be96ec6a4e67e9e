# -*- coding: utf-8 -*-
from functools import wraps
from flask import jsonify
from flask_login import current_user

from .errors import AuthorizationError

def roles_required(*roles):
    """
    Not logged in -> 401 JSON.
    Role not in the list -> AuthorizationError (403).
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({"error": "Unauthorized"}), 401
            if current_user.role not in roles:
                raise AuthorizationError(f"{roles[0].capitalize()} access required")
            return f(*args, **kwargs)
        return wrapper
    return decorator
