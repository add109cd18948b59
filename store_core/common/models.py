# store_core/common/models.py
from __future__ import annotations

import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StoreScopedModel(TimeStampedModel):
    """
    Enforces store (tenant) ownership at the data layer.
    (Scope resolution picks the caller's store; this enforces persistence scope.)
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True
