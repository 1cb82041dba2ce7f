from pathlib import Path
from unittest.mock import MagicMock

from avatar_pipeline.coordinator import AvatarCoordinator
from avatar_pipeline.display.state import ImageSource, PlaceholderRender
from avatar_pipeline.imaging.models import LocalImageHandle
from avatar_pipeline.upload.models import RemovalResult, UploadOptions, UploadResult
from avatar_pipeline.upload.orchestrator import AvatarUploader

AVATAR = "https://cdn.example.com/u1/avatar.jpg"
THUMB = "https://cdn.example.com/u1/avatar_thumbnail.jpg"


def _handle(tmp_path: Path) -> LocalImageHandle:
    return LocalImageHandle(
        uri=str(tmp_path / "photo.jpg"),
        width=800,
        height=600,
        byte_size=2048,
        mime_type="image/jpeg",
    )


def _make_coordinator() -> tuple[AvatarCoordinator, MagicMock]:
    uploader = MagicMock(spec=AvatarUploader)
    return AvatarCoordinator(uploader, "u1", name="Jane Doe", email="jane@example.com"), uploader


class TestRefresh:
    def test_loads_avatar_url(self) -> None:
        coordinator, uploader = _make_coordinator()
        uploader.get_avatar_url.return_value = AVATAR

        assert coordinator.refresh() == AVATAR
        assert coordinator.avatar_url == AVATAR
        assert coordinator.error is None

    def test_records_error(self) -> None:
        coordinator, uploader = _make_coordinator()
        uploader.get_avatar_url.side_effect = RuntimeError("db down")

        assert coordinator.refresh() is None
        assert coordinator.error == "db down"


class TestUploadAvatar:
    def test_success_updates_urls(self, tmp_path: Path) -> None:
        coordinator, uploader = _make_coordinator()
        uploader.upload.return_value = UploadResult(
            success=True, avatar_url=AVATAR, thumbnail_url=THUMB
        )
        listener = MagicMock()

        assert coordinator.upload_avatar(_handle(tmp_path), listener) is True

        image, options, on_progress = uploader.upload.call_args.args
        assert options == UploadOptions(user_id="u1", compress=True, generate_multiple_sizes=True)
        assert on_progress is listener
        assert coordinator.avatar_url == AVATAR
        assert coordinator.thumbnail_url == THUMB
        assert coordinator.is_uploading is False

    def test_failure_sets_error(self, tmp_path: Path) -> None:
        coordinator, uploader = _make_coordinator()
        coordinator.avatar_url = AVATAR
        uploader.upload.return_value = UploadResult.failure("File is too large")

        assert coordinator.upload_avatar(_handle(tmp_path)) is False
        assert coordinator.error == "File is too large"
        assert coordinator.avatar_url == AVATAR
        assert coordinator.is_uploading is False

    def test_is_uploading_during_call(self, tmp_path: Path) -> None:
        coordinator, uploader = _make_coordinator()
        seen: list[bool] = []

        def upload(*_args: object) -> UploadResult:
            seen.append(coordinator.is_uploading)
            return UploadResult(success=True, avatar_url=AVATAR)

        uploader.upload.side_effect = upload

        coordinator.upload_avatar(_handle(tmp_path))

        assert seen == [True]
        assert coordinator.is_uploading is False


class TestRemoveAvatar:
    def test_clears_urls(self) -> None:
        coordinator, uploader = _make_coordinator()
        coordinator.avatar_url = AVATAR
        coordinator.thumbnail_url = THUMB
        uploader.remove_avatar.return_value = RemovalResult(success=True)

        assert coordinator.remove_avatar() is True
        uploader.remove_avatar.assert_called_once_with("u1", clear_profile=True)
        assert coordinator.avatar_url is None
        assert coordinator.thumbnail_url is None

    def test_failure_keeps_urls(self) -> None:
        coordinator, uploader = _make_coordinator()
        coordinator.avatar_url = AVATAR
        uploader.remove_avatar.return_value = RemovalResult(success=False, error="denied")

        assert coordinator.remove_avatar() is False
        assert coordinator.error == "denied"
        assert coordinator.avatar_url == AVATAR


class TestDisplay:
    def test_uses_thumbnail_as_fallback(self) -> None:
        coordinator, _uploader = _make_coordinator()
        coordinator.avatar_url = AVATAR
        coordinator.thumbnail_url = THUMB

        display = coordinator.display(size="lg")

        assert display.uri == AVATAR
        assert display.fallback_uri == THUMB
        assert display.size == 64
        render = display.resolve(lambda uri: uri == THUMB)
        assert render.source is ImageSource.FALLBACK

    def test_placeholder_without_avatar(self) -> None:
        coordinator, _uploader = _make_coordinator()

        render = coordinator.display().render()

        assert isinstance(render, PlaceholderRender)
        assert render.placeholder.initials == "JD"
        assert coordinator.display().accessibility_label == "Avatar for Jane Doe"

    def test_explicit_fallback_overrides_thumbnail(self) -> None:
        coordinator, _uploader = _make_coordinator()
        coordinator.avatar_url = AVATAR
        coordinator.thumbnail_url = THUMB

        assert coordinator.display(fallback_uri=None).fallback_uri is None
