from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

AVATAR_OBJECT_NAME = "avatar.jpg"
THUMBNAIL_OBJECT_NAME = "avatar_thumbnail.jpg"


class UploadStage(str, Enum):
    """Pipeline stages in execution order."""

    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    UPDATING_PROFILE = "updating_profile"
    CLEANING_UP = "cleaning_up"
    COMPLETED = "completed"


@dataclass(frozen=True)
class UploadProgressEvent:
    """A single progress notification emitted during an upload."""

    stage: UploadStage
    progress: int
    message: str
    current_file: str | None = None


ProgressListener = Callable[[UploadProgressEvent], None]


@dataclass(frozen=True)
class UploadOptions:
    """Per-call upload configuration."""

    user_id: str
    compress: bool = True
    generate_multiple_sizes: bool = False
    quality: float = 0.8
    max_size: int = 400


@dataclass
class UploadResult:
    """Terminal outcome of one upload call."""

    success: bool
    avatar_url: str | None = None
    thumbnail_url: str | None = None
    error: str | None = None
    uploaded_files: dict[str, str] = field(default_factory=dict)
    # False on success means the objects are stored but the profile still
    # points elsewhere; see AvatarUploader.reconcile_profile.
    profile_updated: bool = False

    @classmethod
    def failure(cls, error: str) -> "UploadResult":
        return cls(success=False, error=error)


@dataclass
class RemovalResult:
    """Outcome of removing every object in a user's namespace."""

    success: bool
    error: str | None = None
    removed: list[str] = field(default_factory=list)
