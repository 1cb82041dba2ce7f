from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LocalImageHandle:
    """A locally selected image, as produced by the image source."""

    uri: str
    width: int
    height: int
    byte_size: int
    mime_type: str

    @property
    def path(self) -> Path:
        return Path(self.uri)


@dataclass(frozen=True)
class TransformConstraints:
    """Target bounds for a single transform call."""

    max_width: int
    max_height: int
    quality: float


@dataclass(frozen=True)
class ProcessedImage:
    """Output of one transform call (primary or thumbnail)."""

    uri: str = ""
    width: int = 0
    height: int = 0
    byte_size: int = 0
    mime_type: str = "image/jpeg"
    success: bool = True
    error_reason: str | None = None

    @classmethod
    def failed(cls, reason: str) -> "ProcessedImage":
        return cls(success=False, error_reason=reason)

    @property
    def path(self) -> Path:
        return Path(self.uri)
