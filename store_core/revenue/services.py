from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import ValidationError

from store_core.common.money import q2, to_decimal
from store_core.revenue.models import DailyRevenue

logger = logging.getLogger(__name__)


class DailyRevenueService:
    @staticmethod
    @transaction.atomic
    def record(*, store_id: UUID, day: date, amount) -> DailyRevenue:
        """Creates or replaces the revenue figure of one day."""
        value = q2(to_decimal(amount, "amount"))
        if value < 0:
            raise ValidationError({"amount": "Amount must be >= 0."})

        row, created = DailyRevenue.objects.update_or_create(
            store_id=store_id,
            date=day,
            defaults={"amount": value},
        )
        logger.info("Daily revenue %s store=%s date=%s amount=%s", "recorded" if created else "replaced", store_id, day, value)
        return row
