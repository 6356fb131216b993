# practice_backend/authentication/credential_store.py

import logging

from sqlalchemy.exc import IntegrityError

from practice_backend.database.models import USER_ROLES, User
from practice_backend.errors import BadRequest, Conflict, NotFound, Unauthorized

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class CredentialStore:
    """Persists accounts and turns credentials into signed session tokens."""

    def __init__(self, session, hasher, tokens, validator):
        self.session = session
        self.hasher = hasher
        self.tokens = tokens
        self.validator = validator

    def get_user_by_email(self, email):
        return self.session.query(User).filter_by(email=email).first()

    def get_user(self, user_id):
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def register(self, email, password, role=None):
        email = self.validator.normalize_email(email)
        if not email or not password:
            raise BadRequest("Email and password required")
        if not isinstance(password, str):
            raise BadRequest("Password must be a string")
        if not self.validator.validate_email(email):
            raise BadRequest("Invalid email address")
        role = role or "user"
        if role not in USER_ROLES:
            raise BadRequest(f"Role must be one of: {', '.join(USER_ROLES)}")

        if self.get_user_by_email(email) is not None:
            raise Conflict("User already exists", status_code=400)

        user = User(email=email, password_hash=self.hasher.hash_password(password), role=role)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            self.session.rollback()
            raise Conflict("User already exists", status_code=400)

        logger.info("Registered user %s with role %s", user.id, user.role)
        return user, self.tokens.issue(user)

    def login(self, email, password):
        email = self.validator.normalize_email(email)
        user = self.get_user_by_email(email) if email else None
        # same answer for unknown email and wrong password
        if user is None or not isinstance(password, str) or not self.hasher.verify_password(password, user.password_hash):
            raise Unauthorized(INVALID_CREDENTIALS)
        return user, self.tokens.issue(user)

    def list_users(self, q=None, page=1, limit=20):
        query = self.session.query(User)
        if q:
            query = query.filter(User.email.ilike(f"%{q}%"))
        total = query.count()
        users = query.order_by(User.id).offset((page - 1) * limit).limit(limit).all()
        return users, total
