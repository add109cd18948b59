from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from store_core.stores.models import Store, UserPreference


def owned_stores(*, owner_user_id: int, active_only: bool = True) -> QuerySet[Store]:
    qs = Store.objects.filter(owner_user_id=owner_user_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("created_at")


def store_for_owner(*, owner_user_id: int, store_id: Optional[UUID] = None) -> Optional[Store]:
    qs = owned_stores(owner_user_id=owner_user_id)
    if store_id is not None:
        qs = qs.filter(id=store_id)
    return qs.first()


def get_preference(*, user_id: int, key: str) -> Optional[str]:
    pref = UserPreference.objects.filter(user_id=user_id, key=key).only("value").first()
    return pref.value if pref else None
