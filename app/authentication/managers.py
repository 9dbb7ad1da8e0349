"""
Custom user manager for email-based users.

Related files:
    - models.py: User model that uses this manager
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Manager for User with email as the identifier.

    Usage:
        user = User.objects.create_user(
            email="earner@example.com",
            password="securepassword",
            user_type="earner",
        )
        admin = User.objects.create_superuser(
            email="admin@example.com",
            password="adminpassword",
        )
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a user with the given email and password.

        Args:
            email: User's email address (required)
            password: User's password (optional; tokens are issued elsewhere)
            **extra_fields: Additional fields (user_type, is_staff, ...)

        Raises:
            ValueError: If email is not provided
        """
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email)
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and save an admin user.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)
