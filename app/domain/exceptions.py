"""
Custom exceptions for domain-specific errors
"""
from app.domain.enums import FilterType, ResolutionTarget


class ServiceError(Exception):
    """Base class for errors raised by the services"""

    error_code = "service_error"

    def __init__(self, message: str, code: int = 500):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ResolutionError(ServiceError):
    """
    Raised when a recipe reference cannot be resolved through its collaborator.
    `target` names the collaborator (tag, user, rating, ...).
    """

    error_code = "resolution_failed"

    def __init__(self, target: ResolutionTarget, message: str, code: int = 502):
        self.target = target
        super().__init__(message, code)

    def __str__(self):
        return f"[{self.target.value}] {self.message}"


class StorageError(ServiceError):
    """Raised when a document store call fails"""

    error_code = "storage_error"

    def __init__(self, message: str, collection: str, operation: str, code: int = 500):
        self.collection = collection
        self.operation = operation
        super().__init__(message, code)

    def __str__(self):
        return f"{self.collection}.{self.operation}: {self.message}"


class DataIntegrityError(ServiceError):
    """
    Raised when stored data breaks a uniqueness rule
    (several tags with one name, several rating collections for one recipe).
    Never resolved by picking one of the matches.
    """

    error_code = "data_integrity"

    def __init__(self, message: str, collection: str):
        self.collection = collection
        super().__init__(message, 500)


class AuthorizationError(ServiceError):
    """Raised when the requesting user may not perform an operation"""

    error_code = "not_authorized"

    def __init__(self, message: str, code: int = 403):
        super().__init__(message, code)


class FilterError(ServiceError):
    """Raised when a recipe query cannot be executed"""

    error_code = "filter_error"

    def __init__(self, message: str, filter_type: FilterType, code: int = 500):
        self.filter_type = filter_type
        super().__init__(message, code)
