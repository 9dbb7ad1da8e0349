"""
State machine enums for payments models.

Withdrawal uses WithdrawalStatus and VideoDate uses VideoDateStatus, both
with django-fsm transitions.
"""

from payments.state_machines.states import (
    PromotionType,
    VideoDateStatus,
    WithdrawalSource,
    WithdrawalStatus,
)

__all__ = [
    "PromotionType",
    "VideoDateStatus",
    "WithdrawalSource",
    "WithdrawalStatus",
]
