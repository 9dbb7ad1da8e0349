"""
State enums for payments models.

These are Django TextChoices used for database storage, admin filters and
django-fsm transitions.

State Machines Overview:

Withdrawal States:
    pending → processing → completed
    pending → failed

VideoDate States:
    scheduled → in_progress → completed
    scheduled → cancelled

pending means earnings are reserved but no transfer exists yet. A failed
withdrawal has had its reservation returned to available earnings.
"""

from django.db import models


class WithdrawalStatus(models.TextChoices):
    """
    States for the Withdrawal model lifecycle.

    Terminal states: COMPLETED, FAILED

    State Flow:
        PENDING → PROCESSING (Stripe transfer created)
        PROCESSING → COMPLETED (funds landed)
        PENDING → FAILED (transfer rejected, reservation restored)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class WithdrawalSource(models.TextChoices):
    """
    What initiated a withdrawal.

    MANUAL: Earner requested it (bounded by WITHDRAWAL_MIN/MAX_USD)
    WEEKLY: Friday payout sweep (bounded by PAYOUT_MINIMUM_USD only)
    """

    MANUAL = "manual", "Manual"
    WEEKLY = "weekly", "Weekly"


class PromotionType(models.TextChoices):
    """
    Launch promotions and the role each one is offered to.

    LAUNCH_BONUS_500: 500 bonus credits for early seekers
    LAUNCH_FEATURED_30D: 30 days of featured placement for early earners
    """

    LAUNCH_BONUS_500 = "launch_bonus_500", "Launch bonus (500 credits)"
    LAUNCH_FEATURED_30D = "launch_featured_30d", "Launch featured (30 days)"


class VideoDateStatus(models.TextChoices):
    """
    States for the VideoDate model lifecycle.

    Terminal states: COMPLETED, CANCELLED

    State Flow:
        SCHEDULED → IN_PROGRESS (first participant connected)
        IN_PROGRESS → COMPLETED (call settled, unused credits returned)
        SCHEDULED → CANCELLED (cancelled or never started, full refund)
    """

    SCHEDULED = "scheduled", "Scheduled"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
