"""
Caller identity as asserted by the upstream gateway.

Token verification happens before requests reach this service; the gateway
forwards the authenticated account id and role as headers.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from uuid import UUID

from orders.domain.exceptions import Forbidden, Unauthorized


ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLES = {ROLE_CUSTOMER, ROLE_ADMIN}


@dataclass(frozen=True)
class Identity:
    user_id: UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_identity(request) -> Identity | None:
    """Read identity headers; None when absent or unusable."""
    user_id = request.headers.get("X-User-ID")
    role = request.headers.get("X-User-Role", ROLE_CUSTOMER)
    if not user_id or role not in ROLES:
        return None
    try:
        return Identity(user_id=UUID(user_id), role=role)
    except ValueError:
        return None


def check_identity(request, *roles: str) -> Identity:
    """Return the caller identity or raise Unauthorized/Forbidden."""
    identity = get_identity(request)
    if identity is None:
        raise Unauthorized("Authentication required")
    if roles and identity.role not in roles:
        raise Forbidden(f"Access denied. Required role: {' or '.join(roles)}")
    return identity


def require_identity(*roles: str):
    """View decorator: attach ``request.identity`` or fail with 401/403."""
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            request.identity = check_identity(request, *roles)
            return view(request, *args, **kwargs)
        return wrapper
    return decorator


def check_order_access(identity: Identity, order) -> None:
    """Customers only reach their own orders; admins reach all."""
    if identity.is_admin or (order.user_id is not None and order.user_id == identity.user_id):
        return
    raise Forbidden("Access denied to this order")
