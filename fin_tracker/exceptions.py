"""Custom exception hierarchy for fin-tracker."""


class FinTrackerError(Exception):
    """Base exception for all fin-tracker errors."""


class EntityNotFoundError(FinTrackerError):
    """Raised when a referenced entity does not exist for the requesting user."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(FinTrackerError):
    """Raised when an entity is in an invalid state for the operation."""


class ValidationError(FinTrackerError):
    """Raised when user-supplied values are out of range or malformed."""


class ConfigurationError(FinTrackerError):
    """Raised when configuration is invalid or missing."""


class StorageError(FinTrackerError):
    """Raised when a storage operation fails. Nothing was persisted."""


class ConcurrentUpdateError(StorageError):
    """Raised when a record changed between read and write."""
