# practice_backend/context.py

from dataclasses import dataclass
from typing import Any

from practice_backend.audit.audit_logger import AuditLogger
from practice_backend.authentication.credential_store import CredentialStore
from practice_backend.catalog.product_cache import ProductCatalog
from practice_backend.forms.idempotency import IdempotencyLedger
from practice_backend.resources.blog import BlogService
from practice_backend.resources.orders import OrderService
from practice_backend.security.input_validator import InputValidator
from practice_backend.security.token_manager import TokenManager

EXTENSION_KEY = "practice_backend"


@dataclass
class ServiceContext:
    """Everything a request handler needs, built once per app.

    Handlers reach it through ``current_app.extensions``; there is no
    module-level store, cache or signing key.
    """
    session: Any
    cache: Any
    tokens: TokenManager
    validator: InputValidator
    audit: AuditLogger
    credentials: CredentialStore
    ledger: IdempotencyLedger
    catalog: ProductCatalog
    orders: OrderService
    blog: BlogService


def build_services(app, session, cache, hasher):
    tokens = TokenManager(app)
    validator = InputValidator()
    return ServiceContext(
        session=session,
        cache=cache,
        tokens=tokens,
        validator=validator,
        audit=AuditLogger(log_dir=app.config["AUDIT_LOG_DIR"]),
        credentials=CredentialStore(session, hasher, tokens, validator),
        ledger=IdempotencyLedger(session),
        catalog=ProductCatalog(session, cache, ttl=app.config["PRODUCT_CACHE_TTL"]),
        orders=OrderService(session),
        blog=BlogService(session),
    )
