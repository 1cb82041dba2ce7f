import os
from pathlib import Path

from avatar_pipeline.imaging.models import LocalImageHandle
from avatar_pipeline.upload.exceptions import UploadValidationError
from avatar_pipeline.upload.models import UploadOptions

SUPPORTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
MIN_MAX_SIZE = 50
MAX_MAX_SIZE = 2000

_EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
# The user ID becomes a storage path segment and part of a URL.
_UNSAFE_USER_ID_CHARS = frozenset("/\\#?%")


def format_file_size(num_bytes: int) -> str:
    """Human-readable size, e.g. 1536 -> '1.5 KB', 10 MiB -> '10 MB'."""
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def mime_type_from_path(path: str | Path) -> str | None:
    return _EXTENSION_MIME_TYPES.get(Path(path).suffix.lower())


def validate_upload_options(options: UploadOptions) -> None:
    """Check caller-supplied options.

    Raises:
        UploadValidationError: on the first violated precondition.
    """
    if not options.user_id or not options.user_id.strip():
        raise UploadValidationError("User ID is required")
    if options.user_id in (".", ".."):
        raise UploadValidationError("User ID must not be '.' or '..'")
    if any(ch in _UNSAFE_USER_ID_CHARS or not ch.isprintable() for ch in options.user_id):
        raise UploadValidationError(
            "User ID must not contain '/', '\\', '#', '?', '%' or control characters"
        )
    if not 0 <= options.quality <= 1:
        raise UploadValidationError("Quality must be between 0 and 1")
    if options.max_size < MIN_MAX_SIZE:
        raise UploadValidationError(
            f"Maximum size must be at least {MIN_MAX_SIZE} pixels"
        )
    if options.max_size > MAX_MAX_SIZE:
        raise UploadValidationError(
            f"Maximum size cannot exceed {MAX_MAX_SIZE} pixels"
        )


def validate_image(image: LocalImageHandle | None, max_file_size_bytes: int) -> LocalImageHandle:
    """Format and size gate applied before any processing.

    A missing mime type is inferred from the file extension. Returns the
    checked image.

    Raises:
        UploadValidationError: if the file is missing, unreadable, of an
                               unsupported format or too large.
    """
    if image is None or not image.uri:
        raise UploadValidationError("Invalid image provided for upload")
    path = image.path
    if not path.is_file() or not os.access(path, os.R_OK):
        raise UploadValidationError(f"Image file is not readable: {image.uri}")

    mime_type = (image.mime_type or mime_type_from_path(path) or "").lower()
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise UploadValidationError(
            f"Unsupported file format: {image.mime_type or 'unknown'}. "
            "Please use JPEG, PNG, or WebP."
        )

    byte_size = image.byte_size or path.stat().st_size
    if byte_size > max_file_size_bytes:
        raise UploadValidationError(
            f"File is too large ({format_file_size(byte_size)}). "
            f"Maximum size is {format_file_size(max_file_size_bytes)}."
        )
    return image
