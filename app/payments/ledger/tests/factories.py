"""
Factory Boy factories for ledger test data.

Factories write Transaction rows directly; they do not move wallet
balances. Use WalletLedger (or the fund_wallet fixture) when balances
matter.

Usage:
    from payments.ledger.tests.factories import TransactionFactory

    # Held earning of $7.00
    earning = TransactionFactory(earning=True, user=earner)

    # Credit purchase
    purchase = TransactionFactory(stripe_payment_id="pi_123")
"""

from decimal import Decimal

import factory

from authentication.tests.factories import UserFactory
from payments.ledger.models import Transaction, TransactionStatus, TransactionType


class TransactionFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating Transaction instances.

    Default creates a completed 100-credit purchase.

    Traits:
        earning: $7.00 EARNING row held in pending earnings
    """

    class Meta:
        model = Transaction

    user = factory.SubFactory(UserFactory)
    transaction_type = TransactionType.CREDIT_PURCHASE
    credits_amount = 100
    usd_amount = Decimal("10.00")
    status = TransactionStatus.COMPLETED
    description = factory.Faker("sentence", nb_words=4)

    class Params:
        earning = factory.Trait(
            user=factory.SubFactory(UserFactory, earner=True),
            transaction_type=TransactionType.EARNING,
            credits_amount=0,
            usd_amount=Decimal("7.00"),
        )
