"""
Launch promotion service.

Early seekers receive bonus credits and early earners a period of
featured placement, each capped by the number of claims so far.

Usage:
    from payments.services import LaunchPromotionService

    result = LaunchPromotionService.claim(user)
    result.data  # {"success": True, "promotion": "launch_bonus_500", ...}
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError
from django.utils import timezone

from core.services import BaseService, ServiceResult

from authentication.models import UserType
from payments.ledger.models import TransactionType
from payments.ledger.services import WalletLedger
from payments.models import LaunchPromotion
from payments.state_machines import PromotionType

if TYPE_CHECKING:
    from authentication.models import User


class LaunchPromotionService(BaseService):
    """
    Claim the launch promotion offered to the caller's role.

    The promotion row is inserted before the reward is granted, inside
    the same transaction. The (user, promotion_type) unique constraint
    therefore turns a repeated or concurrent claim into a no-op.

    Note:
        The cap is checked with a count before the insert, so two
        simultaneous last claims can both succeed.
    """

    @classmethod
    def claim(cls, user: User) -> ServiceResult[dict]:
        """
        Returns:
            ServiceResult with {success, promotion, bonusCredits,
            featuredUntil}, or {success: False, reason} when the
            promotion is sold out or already claimed
        """
        if user.user_type == UserType.EARNER:
            return cls._claim(
                user,
                PromotionType.LAUNCH_FEATURED_30D,
                cap=settings.LAUNCH_EARNER_FEATURED_CAP,
                bonus_credits=0,
                featured_until=timezone.now() + timedelta(days=settings.LAUNCH_FEATURED_DAYS),
            )
        return cls._claim(
            user,
            PromotionType.LAUNCH_BONUS_500,
            cap=settings.LAUNCH_SEEKER_BONUS_CAP,
            bonus_credits=settings.LAUNCH_BONUS_CREDITS,
            featured_until=None,
        )

    @classmethod
    def remaining(cls, promotion_type: str) -> int:
        cap = (
            settings.LAUNCH_EARNER_FEATURED_CAP
            if promotion_type == PromotionType.LAUNCH_FEATURED_30D
            else settings.LAUNCH_SEEKER_BONUS_CAP
        )
        claimed = LaunchPromotion.objects.filter(promotion_type=promotion_type).count()
        return max(cap - claimed, 0)

    @classmethod
    def _claim(
        cls,
        user: User,
        promotion_type: str,
        cap: int,
        bonus_credits: int,
        featured_until,
    ) -> ServiceResult[dict]:
        logger = cls.get_logger()

        if LaunchPromotion.objects.filter(user=user, promotion_type=promotion_type).exists():
            return ServiceResult.success({"success": False, "reason": "already_claimed"})

        if LaunchPromotion.objects.filter(promotion_type=promotion_type).count() >= cap:
            logger.info(
                "Launch promotion sold out",
                extra={"user_id": str(user.pk), "promotion_type": promotion_type},
            )
            return ServiceResult.success({"success": False, "reason": "sold_out"})

        try:
            with cls.atomic():
                promotion = LaunchPromotion.objects.create(
                    user=user,
                    promotion_type=promotion_type,
                    user_type=user.user_type,
                    bonus_credits=bonus_credits,
                    featured_until=featured_until,
                )
                if bonus_credits:
                    WalletLedger.credit_balance(
                        user,
                        bonus_credits,
                        TransactionType.LAUNCH_BONUS,
                        description=f"Launch bonus: {bonus_credits} free credits",
                    )
        except IntegrityError:
            return ServiceResult.success({"success": False, "reason": "already_claimed"})

        logger.info(
            "Launch promotion claimed",
            extra={"user_id": str(user.pk), "promotion_type": promotion_type},
        )

        return ServiceResult.success(
            {
                "success": True,
                "promotion": promotion.promotion_type,
                "bonusCredits": promotion.bonus_credits,
                "featuredUntil": promotion.featured_until,
            }
        )
