"""
Celery tasks for billing.

Celery autodiscovery imports this module; the task bodies live in
payments.workers. Schedules are created by migration
0002_billing_beat_schedules:
- process_message_refunds: every 15 minutes
- process_pending_earnings: hourly
- run_weekly_payouts: Fridays 12:00 UTC

Usage:
    from payments.tasks import process_message_refunds

    process_message_refunds.delay()
"""

from payments.workers import (
    process_message_refunds,
    process_pending_earnings,
    run_weekly_payouts,
)

__all__ = [
    "process_message_refunds",
    "process_pending_earnings",
    "run_weekly_payouts",
]
