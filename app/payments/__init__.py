"""
Payments app for credit billing and earner payouts.

This app handles:
- Credit purchases through Stripe PaymentIntents
- The wallet ledger charged by chat message billing
- Withdrawals and weekly payouts to Stripe Connect accounts
- Scheduled sweeps: message refunds and earnings maturation
- Stripe webhook handling
- Launch promotions

Related apps:
    - authentication: User model and marketplace roles
    - chat: Billable messages resolved by the refund sweep

Usage:
    from payments.services import CreditPurchaseService, WithdrawalService

    result = CreditPurchaseService.create_payment_intent(user, "popular")
    result = WithdrawalService.process_withdrawal(user, 50)
"""
