"""
Payments services for the billing gateway.

This module provides:
- CreditPurchaseService: Payment intents and credit purchases
- WithdrawalService: Earner withdrawals (reserve, transfer, record)
- ConnectOnboardingService: Stripe Connect account onboarding
- PayoutScheduleService: Stripe Connect payout cadence
- VideoDateBillingService: Video date reservations and settlement
- LaunchPromotionService: Early-adopter promotions

Usage:
    from payments.services import CreditPurchaseService

    result = CreditPurchaseService.create_payment_intent(user, "starter")

    from payments.services import WithdrawalService

    result = WithdrawalService.process_withdrawal(user, 50)
"""

from payments.services.credit_purchase_service import CreditPurchaseService
from payments.services.onboarding_service import ConnectOnboardingService
from payments.services.payout_schedule_service import PayoutScheduleService
from payments.services.promotion_service import LaunchPromotionService
from payments.services.video_date_service import VideoDateBillingService
from payments.services.withdrawal_service import PayoutOutcome, WithdrawalService

__all__ = [
    "CreditPurchaseService",
    "ConnectOnboardingService",
    "LaunchPromotionService",
    "PayoutOutcome",
    "PayoutScheduleService",
    "VideoDateBillingService",
    "WithdrawalService",
]
