"""
Ledger-specific exceptions for wallet operations.

This module provides a hierarchy of exceptions for ledger operations,
inheriting from the core exception base class for API consistency.

Exception Hierarchy:
    LedgerError (base)
    ├── WalletNotFound - Wallet lookup failures
    └── InsufficientBalance - Conditional debit matched no row
        └── InsufficientFunds - Not enough credits

Usage:
    from payments.ledger.exceptions import InsufficientFunds

    try:
        WalletLedger.debit_balance(user, 2, TransactionType.MESSAGE_SENT)
    except InsufficientFunds as e:
        return Response(e.to_dict(), status=e.status_code)
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


class LedgerError(BaseApplicationError):
    """
    Base exception for all ledger operations.

    All ledger-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent API error responses.
    """

    default_error_code: str = "LEDGER_ERROR"


class WalletNotFound(LedgerError):
    """Raised when a user has no wallet row."""

    default_error_code: str = "WALLET_NOT_FOUND"
    status_code: int = 404


class InsufficientBalance(LedgerError):
    """
    Raised when available earnings cannot cover a debit.

    Stores the required amount and the balance seen at failure time
    for detailed error reporting.

    Attributes:
        required: The amount that was required
        available: The amount that was available

    Example:
        raise InsufficientBalance(
            required=Decimal("50.00"),
            available=Decimal("12.34"),
        )
        # "Insufficient balance. Available: $12.34"
    """

    default_error_code: str = "INSUFFICIENT_BALANCE"

    def __init__(
        self,
        required: Any,
        available: Any,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize with amounts.

        Args:
            required: Amount required
            available: Amount available
            message: Optional message override
            error_code: Optional custom error code
            details: Optional additional error context
        """
        self.required = required
        self.available = available

        if message is None:
            message = f"Insufficient balance. Available: ${Decimal(available):.2f}"

        full_details = {
            "required": str(required),
            "available": str(available),
        }
        if details:
            full_details.update(details)

        super().__init__(
            message=message,
            error_code=error_code,
            details=full_details,
        )


class InsufficientFunds(InsufficientBalance):
    """
    Raised when the credit balance cannot cover a charge.

    Example:
        raise InsufficientFunds(required=2, available=1)
        # "Insufficient credits. Need 2, have 1"
    """

    default_error_code: str = "INSUFFICIENT_CREDITS"

    def __init__(
        self,
        required: int,
        available: int,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            required=required,
            available=available,
            message=f"Insufficient credits. Need {required}, have {available}",
            error_code=error_code,
            details=details,
        )
