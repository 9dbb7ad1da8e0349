"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the billing apps. No billing rules live
here; authentication, chat and payments extend these classes.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError, UnauthenticatedError, PermissionDeniedError,
      NotFoundError, InfrastructureError
    - api_exception_handler: DRF EXCEPTION_HANDLER

Cache (import from core.cache):
    - ServiceCache: Namespaced get/put/invalidate over a Django cache alias

Note:
    Django models and model mixins are NOT imported here to avoid
    AppRegistryNotReady errors. Import them directly from their modules.
"""

from .exceptions import (
    BaseApplicationError,
    InfrastructureError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
    ValidationError,
)
from .services import BaseService, ServiceResult

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "UnauthenticatedError",
    "PermissionDeniedError",
    "NotFoundError",
    "InfrastructureError",
]
