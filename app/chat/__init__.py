"""
Chat app for billed seeker/earner messaging.

This app handles:
- Conversations between one seeker and one earner
- Message sending with volley billing
- Reply deadlines and their resolution (replied/refunded)

Related apps:
    - authentication: User model and marketplace roles
    - payments: Wallet ledger charged on send, refund sweep

Usage:
    from chat.services import MessageService

    result = MessageService.send_message(
        sender=seeker,
        recipient_id=earner.id,
        content="Hello!",
    )
"""
