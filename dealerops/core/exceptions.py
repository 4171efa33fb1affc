"""Domain exceptions for DealerOps.

Every error carries a stable ``kind`` and the HTTP status the API maps it to.
"""


class DealerOpsError(Exception):
    """Base exception for DealerOps."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(DealerOpsError):
    """Raised when required input is missing or malformed."""

    kind = "validation"
    status_code = 400


class PermissionDeniedError(DealerOpsError):
    """Raised when the caller's role lacks a capability."""

    kind = "permission"
    status_code = 403


class NotFoundError(DealerOpsError):
    """Raised when a referenced entity does not exist."""

    kind = "not_found"
    status_code = 404

    def __init__(self, resource_name: str = "Resource", resource_id=None):
        if resource_id is not None:
            message = f"{resource_name} with id {resource_id} not found"
        else:
            message = f"{resource_name} not found"
        super().__init__(message)
        self.resource_name = resource_name
        self.resource_id = resource_id


class ConflictError(DealerOpsError):
    """Raised when current state forbids the requested transition."""

    kind = "conflict"
    status_code = 409


class TransactionError(DealerOpsError):
    """Raised when an atomic unit of work could not commit."""

    kind = "transaction"
    status_code = 500
