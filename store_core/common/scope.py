# store_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import NotAuthenticated, PermissionDenied, ValidationError

from store_core.stores.selectors import store_for_owner


@dataclass(frozen=True)
class StoreScope:
    store_id: UUID


# Preferred header name + legacy variant
HDR_STORE = "X-Store-Id"
HDR_STORE_LEGACY = "X-Store-ID"

NO_STORE_MSG = "No store is associated with this account."
INVALID_STORE_MSG = "Invalid X-Store-Id header. Provide a valid store UUID."
FOREIGN_STORE_MSG = "You do not have access to the selected store."


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fallback to META for RequestFactory/test client.
    """
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(name)
        if v:
            return v

    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def store_header(request) -> Optional[str]:
    return _get_header(request, HDR_STORE) or _get_header(request, HDR_STORE_LEGACY)


def resolve_store_id(*, user, raw_store_id: Optional[str]) -> UUID:
    """
    Tenant resolver: authenticated caller -> store id.

    - No header: the caller's (oldest) owned store.
    - Header present: must be a valid UUID of a store the caller owns.
    Raises DRF exceptions (400/401/403); never returns None.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated()

    requested = None
    if raw_store_id:
        requested = _parse_uuid(raw_store_id)
        if requested is None:
            raise ValidationError({"detail": INVALID_STORE_MSG})

    store = store_for_owner(owner_user_id=user.id, store_id=requested)
    if store is None:
        raise PermissionDenied(FOREIGN_STORE_MSG if requested else NO_STORE_MSG)
    return store.id


def require_store_scope(request) -> StoreScope:
    """
    Returns the request's StoreScope, resolving and attaching it on first use.

    Middleware only sees session-authenticated users; JWT-authenticated requests
    are resolved here, after DRF authentication has run.
    """
    scope = getattr(request, "store_scope", None)
    if scope is not None:
        return scope

    store_id = resolve_store_id(user=getattr(request, "user", None), raw_store_id=store_header(request))
    scope = StoreScope(store_id=store_id)

    request.store_scope = scope
    request.store_id = store_id
    return scope
