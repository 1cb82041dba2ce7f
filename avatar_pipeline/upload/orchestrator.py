from avatar_pipeline.config.settings import Settings
from avatar_pipeline.database.repositories.profile_repository import ProfileRepository
from avatar_pipeline.imaging.base import BaseImageTransformer
from avatar_pipeline.imaging.factory import ImageTransformerFactory
from avatar_pipeline.imaging.models import LocalImageHandle
from avatar_pipeline.logging.logger import Log
from avatar_pipeline.storage.base import BaseObjectStore
from avatar_pipeline.storage.factory import ObjectStoreFactory
from avatar_pipeline.upload.exceptions import UploadValidationError
from avatar_pipeline.upload.locks import KeyedLock
from avatar_pipeline.upload.models import (
    AVATAR_OBJECT_NAME,
    ProgressListener,
    RemovalResult,
    UploadOptions,
    UploadResult,
    UploadStage,
)
from avatar_pipeline.upload.pipeline import UploadContext, UploadStep
from avatar_pipeline.upload.progress import ProgressReporter, QueuedProgressListener
from avatar_pipeline.upload.steps import (
    CleanupStep,
    CompressStep,
    ThumbnailStep,
    UpdateProfileStep,
    UploadPrimaryStep,
    UploadThumbnailStep,
    remove_temp_files,
)
from avatar_pipeline.upload.validation import validate_image, validate_upload_options

PROGRESS_DELIVERY_MODES = ("sync", "queued")


class AvatarUploader:
    """Orchestrates the avatar upload pipeline.

    Pipeline: validate -> compress -> thumbnail -> upload primary ->
    upload thumbnail -> update profile -> cleanup -> completed.

    Validation failures return before any progress event or side effect.
    Transform or storage failures of the primary image abort the pipeline;
    thumbnail, profile update and cleanup failures are logged only.
    Calls for the same user are serialized.
    """

    def __init__(
        self,
        transformer: BaseImageTransformer,
        object_store: BaseObjectStore,
        profile_repo: ProfileRepository,
        *,
        max_file_size_bytes: int = 10 * 1024 * 1024,
        thumbnail_dimension: int = 100,
        thumbnail_quality: float = 0.8,
        progress_delivery: str = "sync",
        locks: KeyedLock | None = None,
    ) -> None:
        if progress_delivery not in PROGRESS_DELIVERY_MODES:
            raise ValueError(
                f"Unknown progress delivery '{progress_delivery}'. "
                f"Choose from: {list(PROGRESS_DELIVERY_MODES)}"
            )
        self._object_store = object_store
        self._profile_repo = profile_repo
        self._max_file_size_bytes = max_file_size_bytes
        self._progress_delivery = progress_delivery
        self._locks = locks if locks is not None else KeyedLock()
        self._steps: list[UploadStep] = [
            CompressStep(transformer),
            ThumbnailStep(transformer, thumbnail_dimension, thumbnail_quality),
            UploadPrimaryStep(object_store),
            UploadThumbnailStep(object_store),
            UpdateProfileStep(profile_repo),
            CleanupStep(),
        ]

    def upload(
        self,
        image: LocalImageHandle | None,
        options: UploadOptions,
        on_progress: ProgressListener | None = None,
    ) -> UploadResult:
        """Run the full pipeline for one image and return its terminal result."""
        try:
            validate_upload_options(options)
            checked = validate_image(image, self._max_file_size_bytes)
        except UploadValidationError as exc:
            Log.warning(f"Rejected avatar upload for user '{options.user_id}': {exc}")
            return UploadResult.failure(str(exc))

        queued: QueuedProgressListener | None = None
        if on_progress is not None and self._progress_delivery == "queued":
            queued = QueuedProgressListener(on_progress)
            on_progress = queued
        try:
            with self._locks.hold(options.user_id):
                return self._run_pipeline(checked, options, on_progress)
        finally:
            if queued is not None:
                queued.close(wait=False)

    def remove_avatar(self, user_id: str, clear_profile: bool = False) -> RemovalResult:
        """Delete every object in the user's namespace.

        An empty namespace is not an error. With clear_profile, the profile's
        avatar_url is cleared afterwards; a failure there is logged only.
        """
        if not user_id or not user_id.strip():
            return RemovalResult(success=False, error="User ID is required")

        with self._locks.hold(user_id):
            Log.info(f"Deleting avatar files for user {user_id}")
            try:
                names = [obj.name for obj in self._object_store.list_objects(user_id)]
                if names:
                    self._object_store.remove(user_id, names)
            except Exception as exc:
                Log.error(f"Failed to delete avatar files for user {user_id}: {exc}")
                return RemovalResult(success=False, error=str(exc))

            if names:
                Log.info(f"Deleted {len(names)} avatar files for user {user_id}")
            else:
                Log.info(f"No avatar files to delete for user {user_id}")

            if clear_profile:
                try:
                    self._profile_repo.update_avatar_url(user_id, None)
                except Exception as exc:
                    Log.error(
                        f"Avatar files removed but profile update failed for user "
                        f"{user_id}: {exc}",
                        user_id=user_id,
                        reconcile=True,
                    )
            return RemovalResult(success=True, removed=names)

    def get_avatar_url(self, user_id: str) -> str | None:
        """Return the avatar URL stored on the user's profile."""
        return self._profile_repo.get_avatar_url(user_id)

    def has_avatar(self, user_id: str) -> bool:
        try:
            return self.get_avatar_url(user_id) is not None
        except Exception as exc:
            Log.error(f"Error checking avatar for user {user_id}: {exc}")
            return False

    def reconcile_profile(self, user_id: str) -> bool:
        """Point the profile at the stored primary avatar if it drifted.

        Returns True if the profile was updated.
        """
        with self._locks.hold(user_id):
            names = {obj.name for obj in self._object_store.list_objects(user_id)}
            if AVATAR_OBJECT_NAME not in names:
                Log.info(f"No stored avatar for user {user_id}, nothing to reconcile")
                return False
            expected = self._object_store.public_url(user_id, AVATAR_OBJECT_NAME)
            current = self._profile_repo.get_avatar_url(user_id)
            if current == expected:
                return False
            self._profile_repo.update_avatar_url(user_id, expected)
            Log.info(f"Reconciled profile {user_id}: {current} -> {expected}")
            return True

    def _run_pipeline(
        self,
        image: LocalImageHandle,
        options: UploadOptions,
        on_progress: ProgressListener | None,
    ) -> UploadResult:
        Log.info(
            f"Starting avatar upload for user {options.user_id}",
            user_id=options.user_id,
            compress=options.compress,
            generate_multiple_sizes=options.generate_multiple_sizes,
        )
        context = UploadContext(
            image=image,
            options=options,
            reporter=ProgressReporter(on_progress),
        )
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            Log.error(f"Avatar upload failed for user {options.user_id}: {exc}")
            remove_temp_files(context.temp_files)
            return UploadResult.failure(str(exc) or "Unknown upload error")

        context.reporter.emit(
            UploadStage.COMPLETED, 100, "Profile picture updated successfully!"
        )
        Log.info(
            f"Avatar upload completed for user {options.user_id}",
            avatar_url=context.avatar_url,
            thumbnail_url=context.thumbnail_url,
        )
        return UploadResult(
            success=True,
            avatar_url=context.avatar_url,
            thumbnail_url=context.thumbnail_url,
            uploaded_files=context.uploaded_files,
            profile_updated=context.profile_updated,
        )


def build_uploader(settings: Settings) -> AvatarUploader:
    """Build an AvatarUploader with all required adapters."""
    return AvatarUploader(
        transformer=ImageTransformerFactory.create(settings),
        object_store=ObjectStoreFactory.create(settings),
        profile_repo=ProfileRepository(),
        max_file_size_bytes=settings.avatar_max_file_size_bytes,
        thumbnail_dimension=settings.avatar_thumbnail_dimension,
        thumbnail_quality=settings.avatar_thumbnail_quality,
        progress_delivery=settings.progress_delivery.lower(),
    )
