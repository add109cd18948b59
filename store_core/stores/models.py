# store_core/stores/models.py
import uuid
from django.db import models

from store_core.common.models import TimeStampedModel


class Store(TimeStampedModel):
    """
    A shop owned by one user.
    Root of all scoping in the system: every charge row carries its store_id.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)

    # auth user id of the owner (kept as a plain id, like other actor references)
    owner_user_id = models.BigIntegerField(db_index=True)

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "stores_store"
        indexes = [
            models.Index(fields=["owner_user_id", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class UserPreference(TimeStampedModel):
    """
    Small per-user key/value settings remembered between sessions
    (e.g. the last period used for personnel charges).
    """
    user_id = models.BigIntegerField(db_index=True)
    key = models.CharField(max_length=64)
    value = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "stores_user_preference"
        constraints = [
            models.UniqueConstraint(fields=["user_id", "key"], name="uq_user_preference_key"),
        ]
