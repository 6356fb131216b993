# practice_backend/security/token_manager.py

import logging
from dataclasses import dataclass
from datetime import timedelta

from flask import Flask
from flask_jwt_extended import JWTManager, create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from practice_backend.errors import Forbidden, Unauthorized

# Stateless signed session tokens carrying identity and role claims.
# Nothing is persisted: there is no revocation list, logout is client-side.

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)


@dataclass(frozen=True)
class Claims:
    id: int
    email: str
    role: str

    def to_dict(self):
        return {"id": self.id, "email": self.email, "role": self.role}


class TokenManager:
    def __init__(self, app: Flask = None):
        self.lifetime = DEFAULT_TOKEN_LIFETIME
        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        app.config.setdefault("JWT_ACCESS_TOKEN_EXPIRES", DEFAULT_TOKEN_LIFETIME)
        if not app.config.get("JWT_SECRET_KEY"):
            raise RuntimeError("JWT_SECRET_KEY must be configured")
        self.lifetime = app.config["JWT_ACCESS_TOKEN_EXPIRES"]
        if "flask-jwt-extended" not in app.extensions:
            JWTManager(app)

    def issue(self, user, expires_in=None) -> str:
        """Sign a token for ``user``.

        ``expires_in`` is in seconds and overrides the configured lifetime.
        """
        expires_delta = self.lifetime if expires_in is None else timedelta(seconds=expires_in)
        return create_access_token(
            identity=str(user.id),
            additional_claims={"email": user.email, "role": user.role},
            expires_delta=expires_delta,
        )

    def verify(self, token) -> Claims:
        if not token:
            raise Unauthorized("Access token required")
        try:
            decoded = decode_token(token, allow_expired=False)
        except (PyJWTError, JWTExtendedException) as e:
            logger.warning("Token validation failed: %s", e)
            raise Forbidden("Invalid or expired token")

        try:
            return Claims(
                id=int(decoded["sub"]),
                email=decoded["email"],
                role=decoded["role"],
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Token is missing identity claims")
            raise Forbidden("Invalid or expired token")
