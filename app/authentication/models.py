"""
Authentication models.

This module defines the User model consumed by the billing subsystem.
Sign-up, login and token issuance happen outside this service; here the
user is the owner of a wallet, a sender/recipient of billable messages
and (for earners) the holder of a payout account.

Related files:
    - managers.py: Custom user manager for email-based creation
    - signals.py: Auto-create wallet on user creation

Roles:
    - seeker: pays credits to message earners
    - earner: receives earnings from seeker spend
    - admin: staff flag, orthogonal to user_type
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from core.model_mixins import UUIDPrimaryKeyMixin


class UserType(models.TextChoices):
    """Marketplace role of a user."""

    SEEKER = "seeker", "Seeker"
    EARNER = "earner", "Earner"


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        id: UUID primary key (also the subject of issued JWTs)
        email: Primary identifier, unique; also keys the Stripe customer
        user_type: seeker or earner
        is_active: Whether the user account is active
        is_staff: Admin role (payout schedule bulk updates, etc.)
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        seeker = User.objects.create_user(
            email="seeker@example.com",
            password="securepassword",
            user_type=UserType.SEEKER,
        )
        seeker.wallet.credit_balance  # 0, created by signal
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )

    user_type = models.CharField(
        max_length=10,
        choices=UserType.choices,
        default=UserType.SEEKER,
        db_index=True,
        help_text="Marketplace role: seekers pay, earners get paid",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user has the admin role.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    @property
    def is_admin(self) -> bool:
        """Admin role check used by payout schedule management."""
        return self.is_staff or self.is_superuser

    @property
    def is_seeker(self) -> bool:
        return self.user_type == UserType.SEEKER

    @property
    def is_earner(self) -> bool:
        return self.user_type == UserType.EARNER
