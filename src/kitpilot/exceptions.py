"""Custom exception hierarchy for KitPilot."""


class KitPilotError(Exception):
    """Base exception for all KitPilot errors."""


class ConfigurationError(KitPilotError):
    """Raised when settings are invalid or missing."""


class PersistenceError(KitPilotError):
    """Raised when the history store cannot be read or written."""


class GenerationError(KitPilotError):
    """Raised when the asset generator fails or returns an unusable payload."""


class InvalidTransitionError(KitPilotError):
    """Raised when a pipeline mutation is given input it cannot apply."""


class InvalidStageError(InvalidTransitionError):
    """Raised when a stage index falls outside the record's stage list."""


class DeletionNotAllowedError(InvalidTransitionError):
    """Raised when deleting a record whose status is not ``rejected``."""


class RecordNotFoundError(KitPilotError):
    """Raised when no record matches the requested ID."""
