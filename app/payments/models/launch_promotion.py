"""
LaunchPromotion model for early-adopter rewards.

Usage:
    from payments.models import LaunchPromotion
    from payments.state_machines import PromotionType

    claimed = LaunchPromotion.objects.filter(
        promotion_type=PromotionType.LAUNCH_BONUS_500,
    ).count()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import PromotionType


class LaunchPromotion(UUIDPrimaryKeyMixin, BaseModel):
    """
    One claimed launch promotion.

    The (user, promotion_type) unique constraint makes claiming
    idempotent: the row is inserted before any reward is granted.

    Fields:
        user: User who claimed the promotion
        promotion_type: Which promotion was claimed
        user_type: Role of the user at claim time
        bonus_credits: Credits granted (0 for featured placement)
        featured_until: End of featured placement (earners only)
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="launch_promotions",
        help_text="User who claimed the promotion",
    )

    promotion_type = models.CharField(
        max_length=30,
        choices=PromotionType.choices,
        db_index=True,
        help_text="Promotion claimed",
    )

    user_type = models.CharField(
        max_length=10,
        help_text="seeker or earner at claim time",
    )

    bonus_credits = models.PositiveIntegerField(
        default=0,
        help_text="Bonus credits granted by this promotion",
    )

    featured_until = models.DateTimeField(
        null=True,
        blank=True,
        help_text="End of featured placement",
    )

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Launch Promotion"
        verbose_name_plural = "Launch Promotions"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "promotion_type"],
                name="launch_promotion_unique_per_user",
            ),
        ]

    def __str__(self) -> str:
        return f"LaunchPromotion({self.user_id}, {self.promotion_type})"
