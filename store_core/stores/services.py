# store_core/stores/services.py
from __future__ import annotations

from typing import Optional

from django.db import transaction
from rest_framework.exceptions import ValidationError

from store_core.stores.models import Store, UserPreference
from store_core.stores.selectors import get_preference


class StoreService:
    @staticmethod
    @transaction.atomic
    def create(*, name: str, code: str, owner_user_id: int) -> Store:
        code = (code or "").strip()
        name = (name or "").strip()

        if not code:
            raise ValidationError({"code": "This field is required."})
        if not name:
            raise ValidationError({"name": "This field is required."})

        return Store.objects.create(name=name, code=code, owner_user_id=owner_user_id)


class PreferenceService:
    PERSONNEL_LAST_PERIOD = "personnel_charge_last_period"
    PERIOD_VALUES = ("week", "month")

    @staticmethod
    def get_personnel_last_period(*, user_id: int) -> Optional[str]:
        return get_preference(user_id=user_id, key=PreferenceService.PERSONNEL_LAST_PERIOD)

    @staticmethod
    @transaction.atomic
    def set_personnel_last_period(*, user_id: int, period: str) -> str:
        period = (period or "").strip().lower()
        if period not in PreferenceService.PERIOD_VALUES:
            raise ValidationError({"period": "Period must be 'week' or 'month'."})

        UserPreference.objects.update_or_create(
            user_id=user_id,
            key=PreferenceService.PERSONNEL_LAST_PERIOD,
            defaults={"value": period},
        )
        return period
