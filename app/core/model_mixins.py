"""
Model mixins shared by billing models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key

Usage:
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin

    class Withdrawal(UUIDPrimaryKeyMixin, BaseModel):
        amount = models.DecimalField(max_digits=12, decimal_places=2)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    User ids, message ids and withdrawal ids all travel through the API
    and Stripe metadata, so they are UUIDs rather than sequential ints.

    Fields:
        id: UUIDField as primary key (auto-generated)

    Usage:
        class Conversation(UUIDPrimaryKeyMixin, BaseModel):
            ...

        conversation = Conversation.objects.create(seeker=s, earner=e)
        str(conversation.id)  # "550e8400-e29b-41d4-a716-446655440000"
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True
