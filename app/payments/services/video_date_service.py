"""
Video date billing: reservations, extensions and settlement.

Credits for a video date are taken when it is booked and held against
the VideoDate row. Everything after that moves credits out of, or back
into, that reservation:

1. reserve: debit the booked price (video_date) and create the row
2. extend: debit more minutes at the booked per-minute rate
   (video_extension) and add them to the reservation
3. complete: charge the minutes actually used, return the rest
   (video_date_refund) and hold the earner's share as pending earnings
4. cancel: return the whole reservation (video_date_refund)

Every step locks the VideoDate row, so a double-clicked "end call" or
two participants ending at once settle the call exactly once.

Usage:
    from payments.services import VideoDateBillingService

    result = VideoDateBillingService.extend(seeker, video_date.id, 15)
    result = VideoDateBillingService.complete(earner, video_date.id)
    result.data["creditsCharged"]
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from core.services import BaseService, ServiceResult

from payments.ledger.exceptions import InsufficientFunds
from payments.ledger.models import TransactionType
from payments.ledger.services import WalletLedger
from payments.ledger.types import EarningsSplit
from payments.models import VideoDate
from payments.state_machines import VideoDateStatus

if TYPE_CHECKING:
    from datetime import datetime
    from typing import Any

    from authentication.models import User


def prorate(credits: int, minutes: int, duration: int) -> int:
    """Credits for minutes out of duration booked at credits, rounded up."""
    return -(-credits * minutes // duration)


def billable_minutes(start: datetime, end: datetime, scheduled: int) -> int:
    """Started minutes between start and end, at least 1 and at most scheduled."""
    elapsed = max(0.0, (end - start).total_seconds())
    return min(max(1, math.ceil(elapsed / 60)), scheduled)


class VideoDateBillingService(BaseService):
    """
    Service for video date credit reservations.

    Methods:
        reserve: Book a call and take its price from the seeker
        start: Mark the call connected (first caller wins)
        extend: Buy more minutes for an open call
        complete: Settle a call on the minutes used
        cancel: Return the reservation of a call that never started
    """

    @classmethod
    def reserve(
        cls,
        seeker: User,
        earner: User,
        scheduled_start: datetime,
        duration_minutes: int,
        credits: int,
    ) -> ServiceResult[VideoDate]:
        """
        Book a video date and reserve its price.

        The price comes from the caller (the earner's video rate for the
        chosen length); this service only guarantees that the credits
        are taken atomically with the booking.

        Error codes:
            INVALID_INPUT: Bad duration, price or participants
            INSUFFICIENT_CREDITS: Seeker cannot cover the price
        """
        if seeker.pk == earner.pk:
            return ServiceResult.failure(
                "Cannot book a video date with yourself", error_code="INVALID_INPUT"
            )
        for value in (duration_minutes, credits):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                return ServiceResult.failure(
                    "Duration and price must be positive integers",
                    error_code="INVALID_INPUT",
                )

        try:
            with cls.atomic():
                WalletLedger.debit_balance(
                    seeker,
                    credits,
                    TransactionType.VIDEO_DATE,
                    description=f"Video date reserved ({duration_minutes} min)",
                )
                video_date = VideoDate.objects.create(
                    seeker=seeker,
                    earner=earner,
                    scheduled_start=scheduled_start,
                    scheduled_duration=duration_minutes,
                    credits_reserved=credits,
                )
        except InsufficientFunds as e:
            return ServiceResult.from_exception(e)

        cls.get_logger().info(
            "Video date reserved",
            extra={
                "video_date_id": str(video_date.id),
                "seeker_id": str(seeker.pk),
                "earner_id": str(earner.pk),
                "credits": credits,
            },
        )
        return ServiceResult.success(video_date)

    @classmethod
    def start(cls, user: User, video_date_id: Any) -> ServiceResult[dict]:
        """
        Record that the call connected.

        Later calls are no-ops, so both participants may report it.

        Error codes:
            NOT_FOUND: No such video date for this user
            VIDEO_DATE_CLOSED: Already completed or cancelled
        """
        try:
            with cls.atomic():
                video_date = cls._lock(user, video_date_id)
                if video_date.status == VideoDateStatus.SCHEDULED:
                    video_date.start()
                    video_date.save()
                elif not video_date.is_open:
                    raise cls._closed(video_date)
        except (NotFoundError, ValidationError) as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(
            {
                "success": True,
                "status": video_date.status,
                "actualStart": video_date.actual_start,
            }
        )

    @classmethod
    def extend(cls, user: User, video_date_id: Any, minutes: Any) -> ServiceResult[dict]:
        """
        Add minutes to an open video date, paid by the seeker.

        The extension is priced at the date's booked per-minute rate and
        joins the reservation, so unused extension minutes are returned
        at settlement like any other reserved minute.

        Error codes:
            INVALID_INPUT: minutes not one of VIDEO_EXTENSION_MINUTES
            NOT_FOUND: No such video date for this user
            FORBIDDEN: Caller is the earner
            VIDEO_DATE_CLOSED: Already completed or cancelled
            INSUFFICIENT_CREDITS: Seeker cannot cover the extension
        """
        allowed = tuple(settings.VIDEO_EXTENSION_MINUTES)
        if isinstance(minutes, bool) or minutes not in allowed:
            return ServiceResult.failure(
                f"Extension must be one of {', '.join(str(m) for m in allowed)} minutes",
                error_code="INVALID_INPUT",
            )

        try:
            with cls.atomic():
                video_date = cls._lock(user, video_date_id)
                if user.pk != video_date.seeker_id:
                    raise PermissionDeniedError("Only the seeker can extend a video date")
                if not video_date.is_open:
                    raise cls._closed(video_date)

                credits = prorate(
                    video_date.credits_reserved, minutes, video_date.scheduled_duration
                )
                WalletLedger.debit_balance(
                    user,
                    credits,
                    TransactionType.VIDEO_EXTENSION,
                    description=f"Video date extended by {minutes} min",
                )
                video_date.scheduled_duration += minutes
                video_date.credits_reserved += credits
                video_date.save(
                    update_fields=["scheduled_duration", "credits_reserved", "updated_at"]
                )
                new_balance = WalletLedger.get_wallet(user).credit_balance
        except (InsufficientFunds, NotFoundError, PermissionDeniedError, ValidationError) as e:
            return ServiceResult.from_exception(e)

        cls.get_logger().info(
            "Video date extended",
            extra={
                "video_date_id": str(video_date.id),
                "minutes": minutes,
                "credits": credits,
            },
        )
        return ServiceResult.success(
            {
                "success": True,
                "creditsCharged": credits,
                "scheduledDuration": video_date.scheduled_duration,
                "creditsReserved": video_date.credits_reserved,
                "newBalance": new_balance,
            }
        )

    @classmethod
    def complete(cls, user: User, video_date_id: Any) -> ServiceResult[dict]:
        """
        Settle a video date on the minutes actually used.

        Billed minutes are the started minutes since actual_start, at
        least one and never more than booked. The seeker keeps paying
        for those minutes only; the remainder of the reservation is
        returned. A call that never connected is cancelled with a full
        refund. Settling twice returns the first result with
        alreadySettled set and moves no money.

        Error codes:
            NOT_FOUND: No such video date for this user
        """
        logger = cls.get_logger()

        try:
            with cls.atomic():
                video_date = cls._lock(user, video_date_id)
                if not video_date.is_open:
                    return ServiceResult.success(cls._settlement(video_date, already_settled=True))

                if video_date.status == VideoDateStatus.SCHEDULED:
                    cls._refund_reservation(video_date, reason="Call never started")
                else:
                    cls._charge(video_date)
        except NotFoundError as e:
            return ServiceResult.from_exception(e)

        logger.info(
            "Video date settled",
            extra={
                "video_date_id": str(video_date.id),
                "status": video_date.status,
                "billed_minutes": video_date.billed_minutes,
                "credits_charged": video_date.credits_charged,
            },
        )
        return ServiceResult.success(cls._settlement(video_date))

    @classmethod
    def cancel(cls, user: User, video_date_id: Any) -> ServiceResult[dict]:
        """
        Cancel a video date that has not started and refund it in full.

        Error codes:
            NOT_FOUND: No such video date for this user
            VIDEO_DATE_CLOSED: Already started, completed or cancelled
        """
        try:
            with cls.atomic():
                video_date = cls._lock(user, video_date_id)
                if video_date.status != VideoDateStatus.SCHEDULED:
                    raise cls._closed(video_date)
                cls._refund_reservation(video_date, reason="user_cancelled")
        except (NotFoundError, ValidationError) as e:
            return ServiceResult.from_exception(e)

        cls.get_logger().info(
            "Video date cancelled",
            extra={"video_date_id": str(video_date.id), "user_id": str(user.pk)},
        )
        return ServiceResult.success(cls._settlement(video_date))

    # ==========================================================================
    # Internals
    # ==========================================================================

    @classmethod
    def _lock(cls, user: User, video_date_id: Any) -> VideoDate:
        """
        Raises:
            NotFoundError: Unknown id, or user is not a participant
        """
        video_date = (
            VideoDate.objects.select_for_update()
            .filter(Q(seeker=user) | Q(earner=user), pk=video_date_id)
            .first()
        )
        if video_date is None:
            raise NotFoundError("Video date not found")
        return video_date

    @classmethod
    def _closed(cls, video_date: VideoDate) -> ValidationError:
        return ValidationError(
            f"Video date is {video_date.get_status_display().lower()}",
            error_code="VIDEO_DATE_CLOSED",
        )

    @classmethod
    def _charge(cls, video_date: VideoDate) -> None:
        minutes = billable_minutes(
            video_date.actual_start, timezone.now(), video_date.scheduled_duration
        )
        charged = prorate(video_date.credits_reserved, minutes, video_date.scheduled_duration)
        split = EarningsSplit.for_credits(charged) if charged else EarningsSplit.zero()

        unused = video_date.credits_reserved - charged
        if unused > 0:
            WalletLedger.credit_balance(
                video_date.seeker,
                unused,
                TransactionType.VIDEO_DATE_REFUND,
                description=f"Unused video date minutes ({minutes} of {video_date.scheduled_duration} used)",
            )
        if split.earner_amount > 0:
            WalletLedger.hold_earner_amount(
                video_date.earner,
                split.earner_amount,
                description=f"Video date earnings ({minutes} min)",
            )

        video_date.complete(
            billed_minutes=minutes,
            credits_charged=charged,
            earner_amount=split.earner_amount,
            platform_fee=split.platform_fee,
        )
        video_date.save()

    @classmethod
    def _refund_reservation(cls, video_date: VideoDate, reason: str) -> None:
        if video_date.credits_reserved > 0:
            WalletLedger.credit_balance(
                video_date.seeker,
                video_date.credits_reserved,
                TransactionType.VIDEO_DATE_REFUND,
                description=f"Video date credits refunded: {reason}",
            )
        video_date.cancel(reason=reason)
        video_date.save()

    @classmethod
    def _settlement(cls, video_date: VideoDate, already_settled: bool = False) -> dict:
        charged = video_date.credits_charged or 0
        data = {
            "success": True,
            "status": video_date.status,
            "billedMinutes": video_date.billed_minutes or 0,
            "creditsCharged": charged,
            "creditsRefunded": video_date.credits_reserved - charged,
            "earnerAmount": video_date.earner_amount,
        }
        if already_settled:
            data["alreadySettled"] = True
        return data
