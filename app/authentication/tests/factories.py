"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import UserFactory

    seeker = UserFactory()
    earner = UserFactory(earner=True)
    admin = UserFactory(admin=True)
"""

import factory

from authentication.models import User, UserType


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Users are created through UserManager.create_user(), so the wallet
    signal fires exactly as in production.

    Traits:
        earner: user_type=earner
        admin: is_staff=True
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    user_type = UserType.SEEKER
    is_active = True
    is_staff = False

    class Params:
        earner = factory.Trait(user_type=UserType.EARNER)
        admin = factory.Trait(is_staff=True)

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )
