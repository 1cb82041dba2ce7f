from pathlib import Path

from avatar_pipeline.config.settings import Settings
from avatar_pipeline.storage.base import BaseObjectStore
from avatar_pipeline.storage.local_adapter import LocalObjectStore
from avatar_pipeline.storage.supabase_adapter import SupabaseStorageAdapter


class ObjectStoreFactory:
    """Creates the configured object store adapter."""

    BACKENDS = ("supabase", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStore:
        backend = settings.storage_backend.lower()
        if backend == "supabase":
            return SupabaseStorageAdapter(
                base_url=settings.supabase_url.strip(),
                service_key=settings.supabase_service_key,
                bucket=settings.storage_bucket,
                timeout_seconds=settings.storage_timeout_seconds,
            )
        if backend == "local":
            return LocalObjectStore(
                root=Path(settings.local_storage_root),
                base_url=settings.local_storage_base_url,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
