"""
Workers for scheduled billing sweeps.

This module contains Celery tasks driven by celery-beat:
- RefundSweep: Refunds billable messages left unanswered past the deadline
- EarningsMaturation: Moves held earnings to available after 48 hours
- WeeklyPayoutExecutor: Pays out available earnings every Friday

The sweeps are also callable synchronously (see payments.views) so an
external scheduler can trigger them over HTTP.

Usage:
    from payments.workers import (
        process_message_refunds,
        process_pending_earnings,
        run_weekly_payouts,
    )

    process_message_refunds.delay()
"""

from payments.workers.earnings_maturation import (
    EarningsMaturation,
    process_pending_earnings,
)
from payments.workers.payout_executor import (
    WeeklyPayoutExecutor,
    run_weekly_payouts,
)
from payments.workers.refund_sweep import (
    RefundSweep,
    RefundSweepResult,
    process_message_refunds,
)

__all__ = [
    # Refund sweep
    "RefundSweep",
    "RefundSweepResult",
    "process_message_refunds",
    # Earnings maturation
    "EarningsMaturation",
    "process_pending_earnings",
    # Weekly payouts
    "WeeklyPayoutExecutor",
    "run_weekly_payouts",
]
