from typing import Any

from avatar_pipeline.display.avatar_display import AvatarDisplay
from avatar_pipeline.imaging.models import LocalImageHandle
from avatar_pipeline.logging.logger import Log
from avatar_pipeline.upload.models import ProgressListener, UploadOptions
from avatar_pipeline.upload.orchestrator import AvatarUploader


class AvatarCoordinator:
    """Binds one user's avatar state to the uploader and the display."""

    def __init__(
        self,
        uploader: AvatarUploader,
        user_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> None:
        self._uploader = uploader
        self._user_id = user_id
        self._name = name
        self._email = email
        self.avatar_url: str | None = None
        self.thumbnail_url: str | None = None
        self.is_uploading = False
        self.error: str | None = None

    def refresh(self) -> str | None:
        """Reload the avatar URL from the profile record."""
        self.error = None
        try:
            self.avatar_url = self._uploader.get_avatar_url(self._user_id)
        except Exception as exc:
            self.error = str(exc) or "Failed to load avatar"
            Log.error(f"Error loading avatar for user {self._user_id}: {exc}")
        return self.avatar_url

    def upload_avatar(
        self,
        image: LocalImageHandle,
        on_progress: ProgressListener | None = None,
    ) -> bool:
        self.is_uploading = True
        self.error = None
        try:
            result = self._uploader.upload(
                image,
                UploadOptions(
                    user_id=self._user_id,
                    compress=True,
                    generate_multiple_sizes=True,
                ),
                on_progress,
            )
        finally:
            self.is_uploading = False

        if not result.success:
            self.error = result.error or "Upload failed"
            return False
        self.avatar_url = result.avatar_url
        self.thumbnail_url = result.thumbnail_url
        return True

    def remove_avatar(self) -> bool:
        self.error = None
        result = self._uploader.remove_avatar(self._user_id, clear_profile=True)
        if not result.success:
            self.error = result.error or "Failed to remove avatar"
            return False
        self.avatar_url = None
        self.thumbnail_url = None
        return True

    def display(self, **kwargs: Any) -> AvatarDisplay:
        """Build a display for the current avatar; kwargs go to AvatarDisplay."""
        fallback_uri = kwargs.pop("fallback_uri", self.thumbnail_url)
        kwargs.setdefault("name", self._name)
        kwargs.setdefault("email", self._email)
        return AvatarDisplay(self.avatar_url, fallback_uri, **kwargs)
