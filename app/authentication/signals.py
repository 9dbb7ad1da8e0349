"""
Django signals for authentication.

Every user gets a zero-balance wallet the moment the account exists, so
ledger code can assume the row is there.

Related files:
    - apps.py: Signal import in ready()
    - payments/ledger/services.py: WalletLedger.get_or_create_wallet
"""

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_wallet(sender, instance, created, **kwargs):
    """
    Create a Wallet for newly created users.

    Args:
        sender: The User model class
        instance: The User instance that was saved
        created: Boolean indicating if this is a new record
        **kwargs: Additional signal arguments
    """
    if created:
        from payments.ledger.services import WalletLedger

        WalletLedger.get_or_create_wallet(instance)
        logger.debug(
            "Wallet created for new user",
            extra={"user_id": str(instance.pk)},
        )
