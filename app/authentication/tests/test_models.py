"""
Tests for the User model.

Test Organization:
    - Role properties (seeker, earner, admin)
    - Field constraints (unique email)
    - String representation
"""

import pytest
from django.db import IntegrityError

from authentication.models import User, UserType
from authentication.tests.factories import UserFactory


class TestUserRoles:
    def test_default_user_is_seeker(self, db):
        user = UserFactory()

        assert user.user_type == UserType.SEEKER
        assert user.is_seeker
        assert not user.is_earner

    def test_earner_trait(self, db):
        user = UserFactory(earner=True)

        assert user.is_earner
        assert not user.is_seeker

    def test_staff_is_admin(self, db):
        assert UserFactory(admin=True).is_admin

    def test_superuser_is_admin_without_staff_flag(self, db):
        user = UserFactory(is_superuser=True)

        assert user.is_staff is False
        assert user.is_admin

    def test_regular_user_is_not_admin(self, db):
        assert not UserFactory().is_admin


class TestUserFields:
    def test_email_is_unique(self, db):
        UserFactory(email="taken@example.com")

        with pytest.raises(IntegrityError):
            User.objects.create(email="taken@example.com")

    def test_primary_key_is_uuid(self, db):
        user = UserFactory()

        assert len(str(user.pk)) == 36

    def test_str_returns_email(self, db):
        assert str(UserFactory(email="shown@example.com")) == "shown@example.com"

    def test_username_field_is_email(self):
        assert User.USERNAME_FIELD == "email"
        assert User.REQUIRED_FIELDS == []
