# practice_backend/authentication/rbac.py

from enum import Enum
from functools import wraps

from flask import current_app, g, request

from practice_backend.context import EXTENSION_KEY
from practice_backend.errors import Forbidden, Unauthorized

# Access control gate: bearer-token authentication followed by a role check.
# The checks themselves are pure functions of (header/claims, roles).


class UserRole(Enum):
    USER = "user"
    ADMIN = "admin"


def extract_bearer_token(header):
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def authenticate(header, tokens):
    """Return verified claims for an ``Authorization`` header value."""
    token = extract_bearer_token(header)
    if not token:
        raise Unauthorized("Access token required")
    return tokens.verify(token)


def authorize(claims, roles):
    if claims is None:
        raise Unauthorized("Access token required")
    allowed = {r.value if isinstance(r, Enum) else str(r) for r in roles}
    if claims.role not in allowed:
        raise Forbidden("Insufficient permissions")
    return claims


def _services():
    return current_app.extensions[EXTENSION_KEY]


def require_auth(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        services = _services()
        try:
            g.user = authenticate(request.headers.get("Authorization"), services.tokens)
        except Forbidden:
            services.audit.log_security_event('invalid_token', {'path': request.path, 'ip': request.remote_addr})
            raise
        return func(*args, **kwargs)
    return wrapper


# Must sit below require_auth so identity is verified first
def require_role(*roles):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            claims = g.get("user")
            try:
                authorize(claims, roles)
            except Forbidden:
                _services().audit.log_security_event(
                    'access_denied',
                    {'path': request.path, 'role': claims.role},
                    user_id=claims.id,
                )
                raise
            return func(*args, **kwargs)
        return wrapper
    return decorator
