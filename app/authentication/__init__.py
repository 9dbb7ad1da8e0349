"""
Authentication application.

Owns the email-identified User model with its marketplace role
(seeker/earner) and admin flag. Token issuance lives outside this
service; API requests are authenticated with simplejwt bearer tokens.

Usage:
    from authentication.models import User, UserType
"""
