from pathlib import Path

from avatar_pipeline.database.repositories.profile_repository import ProfileRepository
from avatar_pipeline.imaging.base import BaseImageTransformer
from avatar_pipeline.imaging.exceptions import TransformError
from avatar_pipeline.imaging.models import ProcessedImage, TransformConstraints
from avatar_pipeline.logging.logger import Log
from avatar_pipeline.storage.base import BaseObjectStore
from avatar_pipeline.upload.models import (
    AVATAR_OBJECT_NAME,
    THUMBNAIL_OBJECT_NAME,
    UploadStage,
)
from avatar_pipeline.upload.pipeline import UploadContext, UploadStep


def remove_temp_files(paths: list[Path]) -> None:
    """Delete local temporary files; failures are logged and swallowed."""
    for path in paths:
        try:
            path.unlink(missing_ok=True)
            Log.debug(f"Temporary file cleaned up: {path}")
        except OSError as exc:
            Log.warning(f"Failed to clean up temporary file {path}: {exc}")


class CompressStep(UploadStep):
    def __init__(self, transformer: BaseImageTransformer) -> None:
        self._transformer = transformer

    def run(self, context: UploadContext) -> UploadContext:
        context.reporter.emit(UploadStage.COMPRESSING, 10, "Optimizing image for upload...")
        options = context.options
        if options.compress:
            processed = self._transformer.compress(
                context.image.uri,
                TransformConstraints(
                    max_width=options.max_size,
                    max_height=options.max_size,
                    quality=options.quality,
                ),
            )
            if processed.success and processed.uri:
                context.temp_files.append(processed.path)
            if not processed.success:
                raise TransformError(processed.error_reason or "Failed to process image")
            Log.info(
                f"Compressed avatar for user {context.user_id}: "
                f"{context.image.byte_size} -> {processed.byte_size} bytes, "
                f"{processed.width}x{processed.height}"
            )
        else:
            processed = ProcessedImage(
                uri=context.image.uri,
                width=context.image.width,
                height=context.image.height,
                byte_size=context.image.byte_size,
                mime_type=context.image.mime_type,
            )
        context.processed = processed
        context.reporter.emit(UploadStage.COMPRESSING, 30, "Image optimization completed")
        return context


class ThumbnailStep(UploadStep):
    def __init__(
        self,
        transformer: BaseImageTransformer,
        dimension: int,
        quality: float,
    ) -> None:
        self._transformer = transformer
        self._dimension = dimension
        self._quality = quality

    def run(self, context: UploadContext) -> UploadContext:
        if not context.options.generate_multiple_sizes:
            return context
        if context.processed is None:
            raise ValueError("UploadContext.processed must be set before thumbnail generation")
        context.reporter.emit(UploadStage.COMPRESSING, 40, "Creating thumbnail...")
        try:
            thumbnail = self._transformer.compress(
                context.processed.uri,
                TransformConstraints(
                    max_width=self._dimension,
                    max_height=self._dimension,
                    quality=self._quality,
                ),
            )
        except Exception as exc:
            Log.warning(f"Thumbnail generation failed for user {context.user_id}: {exc}")
            thumbnail = ProcessedImage.failed(str(exc))
        if thumbnail.success and thumbnail.uri:
            context.temp_files.append(thumbnail.path)
        elif not thumbnail.success:
            Log.warning(
                f"Continuing without thumbnail for user {context.user_id}: "
                f"{thumbnail.error_reason}"
            )
        context.thumbnail = thumbnail
        return context


class UploadPrimaryStep(UploadStep):
    def __init__(self, object_store: BaseObjectStore) -> None:
        self._object_store = object_store

    def run(self, context: UploadContext) -> UploadContext:
        if context.processed is None:
            raise ValueError("UploadContext.processed must be set before upload")
        context.reporter.emit(
            UploadStage.UPLOADING,
            50,
            "Uploading profile picture...",
            current_file="main avatar",
        )
        stored = self._object_store.put(
            context.user_id,
            AVATAR_OBJECT_NAME,
            context.processed.path.read_bytes(),
            content_type=context.processed.mime_type,
            overwrite=True,
        )
        context.avatar_url = stored.public_url
        Log.info(f"Uploaded avatar for user {context.user_id} to {stored.path}")
        context.reporter.emit(
            UploadStage.UPLOADING,
            70,
            "Profile picture uploaded",
            current_file="main avatar",
        )
        return context


class UploadThumbnailStep(UploadStep):
    def __init__(self, object_store: BaseObjectStore) -> None:
        self._object_store = object_store

    def run(self, context: UploadContext) -> UploadContext:
        thumbnail = context.thumbnail
        if thumbnail is None or not thumbnail.success:
            return context
        context.reporter.emit(
            UploadStage.UPLOADING,
            70,
            "Uploading thumbnail...",
            current_file="thumbnail",
        )
        try:
            stored = self._object_store.put(
                context.user_id,
                THUMBNAIL_OBJECT_NAME,
                thumbnail.path.read_bytes(),
                content_type=thumbnail.mime_type,
                overwrite=True,
            )
        except Exception as exc:
            Log.warning(f"Thumbnail upload failed for user {context.user_id}: {exc}")
            return context
        context.thumbnail_url = stored.public_url
        Log.info(f"Uploaded thumbnail for user {context.user_id} to {stored.path}")
        return context


class UpdateProfileStep(UploadStep):
    def __init__(self, profile_repo: ProfileRepository) -> None:
        self._profile_repo = profile_repo

    def run(self, context: UploadContext) -> UploadContext:
        if context.avatar_url is None:
            raise ValueError("UploadContext.avatar_url must be set before profile update")
        context.reporter.emit(UploadStage.UPDATING_PROFILE, 85, "Updating profile...")
        try:
            self._profile_repo.update_avatar_url(context.user_id, context.avatar_url)
        except Exception as exc:
            # Objects are already stored; the profile now lags behind storage.
            Log.error(
                f"Avatar uploaded but profile update failed for user "
                f"{context.user_id}: {exc}",
                user_id=context.user_id,
                avatar_url=context.avatar_url,
                reconcile=True,
            )
            return context
        context.profile_updated = True
        Log.info(f"Profile {context.user_id} now points to {context.avatar_url}")
        return context


class CleanupStep(UploadStep):
    def run(self, context: UploadContext) -> UploadContext:
        context.reporter.emit(UploadStage.CLEANING_UP, 95, "Cleaning up...")
        remove_temp_files(context.temp_files)
        context.temp_files.clear()
        return context
