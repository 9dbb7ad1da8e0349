"""
DRF serializers for the billing API.

Request serializers only map the camelCase wire names; value rules
(package ids, withdrawal bounds, intent id format) live in the services
so the webhook and the sweeps share them.

Related files:
    - views.py: Billing API views
    - services/: CreditPurchaseService, WithdrawalService, ...
"""

from __future__ import annotations

from rest_framework import serializers


class CreatePaymentIntentSerializer(serializers.Serializer):
    """
    Payload for POST /api/v1/billing/create-payment-intent/.

    Fields:
        packageId: starter, popular, premium or vip
    """

    packageId = serializers.JSONField(required=False, allow_null=True, default=None)


class ConfirmPaymentSerializer(serializers.Serializer):
    """Payload for POST /api/v1/billing/confirm-payment/."""

    paymentIntentId = serializers.JSONField(required=False, allow_null=True, default=None)


class ProcessWithdrawalSerializer(serializers.Serializer):
    """
    Payload for POST /api/v1/billing/process-withdrawal/.

    amount is passed through raw: WithdrawalService rejects strings and
    booleans itself, which a DecimalField would coerce.
    """

    amount = serializers.JSONField(required=False, allow_null=True, default=None)


class UpdatePayoutScheduleSerializer(serializers.Serializer):
    """
    Payload for POST /api/v1/billing/update-payout-schedule/.

    Fields:
        accountId: Stripe account to update (defaults to the caller's)
        updateAll: Update every connected account (admin only)
    """

    accountId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    updateAll = serializers.BooleanField(required=False, default=False)


class ExtendVideoDateSerializer(serializers.Serializer):
    """
    Payload for POST /api/v1/billing/video-dates/<id>/extend/.

    minutes is passed through raw so VideoDateBillingService can reject
    anything outside VIDEO_EXTENSION_MINUTES, strings included.
    """

    minutes = serializers.JSONField(required=False, allow_null=True, default=None)


# =============================================================================
# Response schemas
# =============================================================================


class PaymentIntentResponseSerializer(serializers.Serializer):
    clientSecret = serializers.CharField()
    packageName = serializers.CharField()
    credits = serializers.IntegerField()
    amount = serializers.FloatField()


class ConfirmPaymentResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    newBalance = serializers.IntegerField(required=False)
    creditsAdded = serializers.IntegerField(required=False)
    message = serializers.CharField(required=False)


class WithdrawalResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    transferId = serializers.CharField()
    newBalance = serializers.FloatField()
    message = serializers.CharField()


class ConnectOnboardingResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    onboardingComplete = serializers.BooleanField()
    accountId = serializers.CharField()
    onboardingUrl = serializers.URLField(required=False)


class PayoutScheduleResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    accountId = serializers.CharField(required=False)
    schedule = serializers.DictField(required=False)
    results = serializers.DictField(required=False)


class LaunchPromotionResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    promotion = serializers.CharField(required=False)
    bonusCredits = serializers.IntegerField(required=False)
    featuredUntil = serializers.DateTimeField(required=False, allow_null=True)
    reason = serializers.CharField(required=False)


class VideoDateExtensionResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    creditsCharged = serializers.IntegerField()
    scheduledDuration = serializers.IntegerField()
    creditsReserved = serializers.IntegerField()
    newBalance = serializers.IntegerField()


class VideoDateSettlementResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    status = serializers.CharField()
    billedMinutes = serializers.IntegerField()
    creditsCharged = serializers.IntegerField()
    creditsRefunded = serializers.IntegerField()
    earnerAmount = serializers.FloatField(allow_null=True)
    alreadySettled = serializers.BooleanField(required=False)
