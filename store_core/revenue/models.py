# store_core/revenue/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from store_core.common.models import StoreScopedModel


class DailyRevenue(StoreScopedModel):
    """
    Revenue of one store for one day, computed upstream (sales ingestion).
    A missing day means "no figure", which roll-ups treat as zero.
    """
    date = models.DateField()
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "revenue_daily_revenue"
        constraints = [
            models.UniqueConstraint(fields=["store_id", "date"], name="uq_daily_revenue_store_date"),
        ]
        indexes = [
            models.Index(fields=["store_id", "date"]),
        ]
