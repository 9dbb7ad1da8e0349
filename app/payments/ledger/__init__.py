"""
Ledger - wallet balances and the append-only transaction log.

Public API:
    Models:
        Wallet - Per-user credit and earnings balances
        Transaction - Append-only log of balance changes
        EarningsRelease - Marker ending an earning's hold period
        TransactionType, TransactionStatus, ReleaseOutcome - Choices

    Service:
        WalletLedger - All wallet mutations

    Types:
        EarningsSplit - Credit charge split into earner share and fee
        WalletSnapshot - Balances handed to balance_changed subscribers

    Exceptions:
        LedgerError - Base exception for ledger operations
        WalletNotFound - Wallet lookup failures
        InsufficientBalance - Available earnings too low
        InsufficientFunds - Credit balance too low

Usage:
    from payments.ledger.services import WalletLedger
    from payments.ledger.models import TransactionType

    WalletLedger.debit_balance(seeker, 1, TransactionType.MESSAGE_SENT)
"""
