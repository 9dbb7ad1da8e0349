"""
VideoDate model for billing paid video calls.

A seeker books a video date with an earner for a number of minutes and
the full price is reserved from their credits up front. Extensions add
minutes and credits to the same reservation. When the call ends only
the minutes actually used are charged; the rest of the reservation goes
back to the seeker and the earner's share is held as pending earnings.

Usage:
    from payments.models import VideoDate

    video_date = VideoDate.objects.select_for_update().get(pk=video_date_id)
    video_date.start()
    video_date.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import VideoDateStatus


class VideoDate(UUIDPrimaryKeyMixin, BaseModel):
    """
    A booked video call between a seeker and an earner.

    State Flow:
        SCHEDULED -> IN_PROGRESS -> COMPLETED
        SCHEDULED -> CANCELLED

    Fields:
        seeker: Participant paying for the call
        earner: Participant being paid
        scheduled_start: When the call was booked for
        scheduled_duration: Booked minutes, including extensions
        credits_reserved: Credits taken from the seeker for those minutes
        status: Current FSM state
        actual_start: When the call connected
        actual_end: When the call was settled
        billed_minutes: Minutes charged (1 to scheduled_duration)
        credits_charged: Credits kept out of the reservation
        earner_amount: USD share held for the earner
        platform_fee: USD kept by the platform
        cancel_reason: Why the reservation was returned in full

    Note:
        Balances are only moved by VideoDateBillingService, under a row
        lock on this record.
    """

    # ==========================================================================
    # Participants
    # ==========================================================================

    seeker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="video_dates_booked",
        help_text="Seeker paying for the call",
    )

    earner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="video_dates_hosted",
        help_text="Earner being paid for the call",
    )

    # ==========================================================================
    # Booking
    # ==========================================================================

    scheduled_start = models.DateTimeField(
        help_text="When the call is booked to start",
    )

    scheduled_duration = models.PositiveIntegerField(
        help_text="Booked minutes, including extensions",
    )

    credits_reserved = models.PositiveIntegerField(
        help_text="Credits reserved from the seeker for the booked minutes",
    )

    status = FSMField(
        default=VideoDateStatus.SCHEDULED,
        choices=VideoDateStatus.choices,
        db_index=True,
        help_text="Current state of the video date (managed by FSM)",
    )

    # ==========================================================================
    # Settlement
    # ==========================================================================

    actual_start = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the call connected",
    )

    actual_end = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the call was settled",
    )

    billed_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Minutes charged to the seeker",
    )

    credits_charged = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Credits kept out of the reservation",
    )

    earner_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="USD share held for the earner",
    )

    platform_fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="USD kept by the platform",
    )

    cancel_reason = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Why the reservation was returned in full",
    )

    class Meta:
        ordering = ["-scheduled_start"]
        verbose_name = "Video Date"
        verbose_name_plural = "Video Dates"
        indexes = [
            models.Index(fields=["seeker", "status"], name="videodate_seeker_status_idx"),
            models.Index(fields=["earner", "status"], name="videodate_earner_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(scheduled_duration__gt=0),
                name="videodate_duration_positive",
            ),
            models.CheckConstraint(
                condition=~models.Q(seeker=models.F("earner")),
                name="videodate_distinct_participants",
            ),
        ]

    def __str__(self) -> str:
        return f"VideoDate({self.id}, {self.status}, {self.scheduled_duration}min)"

    @property
    def is_open(self) -> bool:
        """Whether the call can still be extended or settled."""
        return self.status in (VideoDateStatus.SCHEDULED, VideoDateStatus.IN_PROGRESS)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=VideoDateStatus.SCHEDULED,
        target=VideoDateStatus.IN_PROGRESS,
    )
    def start(self):
        """
        Record that the call connected.

        Transition: SCHEDULED -> IN_PROGRESS
        """
        self.actual_start = timezone.now()

    @transition(
        field=status,
        source=VideoDateStatus.IN_PROGRESS,
        target=VideoDateStatus.COMPLETED,
    )
    def complete(self, billed_minutes: int, credits_charged: int, earner_amount, platform_fee):
        """
        Record the settled charge.

        Transition: IN_PROGRESS -> COMPLETED
        """
        self.actual_end = timezone.now()
        self.billed_minutes = billed_minutes
        self.credits_charged = credits_charged
        self.earner_amount = earner_amount
        self.platform_fee = platform_fee

    @transition(
        field=status,
        source=VideoDateStatus.SCHEDULED,
        target=VideoDateStatus.CANCELLED,
    )
    def cancel(self, reason: str = ""):
        """
        Close a call that never started.

        Transition: SCHEDULED -> CANCELLED

        The caller returns credits_reserved in the same transaction.
        """
        self.actual_end = timezone.now()
        self.credits_charged = 0
        self.cancel_reason = reason
