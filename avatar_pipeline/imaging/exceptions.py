class ImagingError(Exception):
    """Base exception for image source and transform errors."""


class ImageSourceError(ImagingError):
    """Raised when a local file cannot be read as an image."""


class TransformError(ImagingError):
    """Raised when a transformer fails to produce an output image."""
