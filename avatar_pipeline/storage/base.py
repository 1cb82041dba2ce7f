from abc import ABC, abstractmethod

from avatar_pipeline.storage.models import ObjectInfo, StoredObject


class BaseObjectStore(ABC):
    """Contract for durable object storage, one namespace per user."""

    @abstractmethod
    def put(
        self,
        namespace: str,
        name: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = True,
    ) -> StoredObject:
        """Store bytes at {namespace}/{name}.

        Raises:
            StorageError: if the write fails, or the object exists and
                          overwrite is False.
        """

    @abstractmethod
    def list_objects(self, namespace: str) -> list[ObjectInfo]:
        """List objects directly under a namespace. Empty list if none.

        Raises:
            StorageError: if the listing fails.
        """

    @abstractmethod
    def remove(self, namespace: str, names: list[str]) -> None:
        """Delete the named objects. Names that do not exist are ignored.

        Raises:
            StorageError: if the delete fails.
        """

    @abstractmethod
    def public_url(self, namespace: str, name: str) -> str:
        """Return the stable public reference for {namespace}/{name}."""

    @staticmethod
    def object_path(namespace: str, name: str) -> str:
        return f"{namespace}/{name}"
