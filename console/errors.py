"""
Error types raised by the tenant console core.

Every error carries a status code and a category so the HTTP layer can tell
rejected input apart from an unavailable upstream.
"""

import enum
from typing import Optional


class ErrorCategory(str, enum.Enum):
    REJECTED_INPUT = "rejected_input"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"


class ValidationErrorKind(str, enum.Enum):
    INVALID_CAPACITY = "InvalidCapacity"
    INVALID_SERVER_COUNT = "InvalidServerCount"
    INVALID_VOLUME_COUNT = "InvalidVolumeCount"
    DUPLICATE_ZONE_NAME = "DuplicateZoneName"


class LookupErrorKind(str, enum.Enum):
    SECRET_LOOKUP_FAILED = "SecretLookupFailed"
    SERVICE_LOOKUP_FAILED = "ServiceLookupFailed"
    INCOMPLETE_CREDENTIALS = "IncompleteCredentials"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    STORE_UNAVAILABLE = "StoreUnavailable"


class MutationStep(str, enum.Enum):
    """Step of the fetch -> mutate -> patch pipeline where a failure happened."""
    FETCHING = "fetching"
    MUTATING = "mutating"
    SUBMITTING = "submitting"


class TenantError(Exception):
    status_code = 500
    category = ErrorCategory.UPSTREAM_UNAVAILABLE

    def __init__(self, message: str, step: Optional[MutationStep] = None):
        super().__init__(message)
        self.message = message
        self.step = step

    def at_step(self, step: MutationStep) -> "TenantError":
        if self.step is None:
            self.step = step
        return self


class ZoneValidationError(TenantError):
    status_code = 400
    category = ErrorCategory.REJECTED_INPUT

    def __init__(self, kind: ValidationErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class TenantLookupError(TenantError):
    status_code = 503

    def __init__(self, kind: LookupErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        if kind == LookupErrorKind.RESOURCE_NOT_FOUND:
            self.status_code = 404
            self.category = ErrorCategory.NOT_FOUND


class StoreWriteError(TenantError):
    status_code = 503


class StoreConflictError(StoreWriteError):
    status_code = 409
    category = ErrorCategory.CONFLICT


class OperationTimeout(TenantError):
    status_code = 504
