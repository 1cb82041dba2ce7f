class UploadError(Exception):
    """Base exception for all avatar upload errors."""


class UploadValidationError(UploadError):
    """Raised when upload input fails validation before any side effect."""


class RecordUpdateError(UploadError):
    """Raised when the profile record cannot be updated with the avatar URL."""


class ProfileNotFoundError(RecordUpdateError):
    """Raised when no profile row exists for the user."""
