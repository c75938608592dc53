"""
Custom exception classes for the Eden Genesis curation registry.
"""


class RegistryError(Exception):
    """Base exception class for registry-related errors."""
    status_code = 500


class InvalidInputError(RegistryError):
    """Exception raised for malformed or missing request values."""
    status_code = 400


class PermissionDeniedError(RegistryError):
    """Exception raised when a curator may not perform an operation."""
    status_code = 403


class NotFoundError(RegistryError):
    """Exception raised when a collaboration, collection, session or work is missing."""
    status_code = 404


class ConflictError(RegistryError):
    """Exception raised when a record already exists."""
    status_code = 409


class CriteriaNotMetError(RegistryError):
    """Exception raised when a work fails a collection's acceptance criteria."""
    status_code = 422


class StoreError(RegistryError):
    """Exception raised when a data file cannot be read or parsed."""
    pass
