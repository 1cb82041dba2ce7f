import os
import tempfile
from pathlib import Path

from avatar_pipeline.storage.base import BaseObjectStore
from avatar_pipeline.storage.exceptions import StorageError
from avatar_pipeline.storage.models import ObjectInfo, StoredObject


class LocalObjectStore(BaseObjectStore):
    """Stores objects on the local filesystem: {root}/{namespace}/{name}.

    Public URLs are built from a configurable base URL, e.g. a static route
    served by the web tier.
    """

    def __init__(self, root: Path, base_url: str) -> None:
        self._root = root
        self._base_url = base_url.rstrip("/")

    def put(
        self,
        namespace: str,
        name: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = True,
    ) -> StoredObject:
        target = self._resolve(namespace, name)
        if target.exists() and not overwrite:
            raise StorageError(f"Object already exists: {namespace}/{name}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".upload_")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except OSError as exc:
            raise StorageError(f"Failed to store {namespace}/{name}: {exc}") from exc
        return StoredObject(
            path=self.object_path(namespace, name),
            public_url=self.public_url(namespace, name),
        )

    def list_objects(self, namespace: str) -> list[ObjectInfo]:
        directory = self._resolve_namespace(namespace)
        if not directory.is_dir():
            return []
        try:
            return [
                ObjectInfo(name=entry.name)
                for entry in sorted(directory.iterdir())
                if entry.is_file() and not entry.name.startswith(".upload_")
            ]
        except OSError as exc:
            raise StorageError(f"Failed to list {namespace}: {exc}") from exc

    def remove(self, namespace: str, names: list[str]) -> None:
        for name in names:
            try:
                self._resolve(namespace, name).unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(f"Failed to delete {namespace}/{name}: {exc}") from exc

    def public_url(self, namespace: str, name: str) -> str:
        return f"{self._base_url}/{self.object_path(namespace, name)}"

    def _resolve_namespace(self, namespace: str) -> Path:
        if not namespace or "/" in namespace or namespace in (".", ".."):
            raise StorageError(f"Invalid namespace '{namespace}'")
        return self._root / namespace

    def _resolve(self, namespace: str, name: str) -> Path:
        if not name or "/" in name or name in (".", ".."):
            raise StorageError(f"Invalid object name '{name}'")
        return self._resolve_namespace(namespace) / name
