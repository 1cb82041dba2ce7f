from typing import Any
from urllib.parse import quote

import httpx

from avatar_pipeline.storage.base import BaseObjectStore
from avatar_pipeline.storage.exceptions import StorageError
from avatar_pipeline.storage.models import ObjectInfo, StoredObject


class SupabaseStorageAdapter(BaseObjectStore):
    """Object store adapter built on the Supabase Storage REST API."""

    LIST_PAGE_SIZE = 100

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: int,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("supabase_url is required for storage_backend=supabase")
        self._base_url = base_url.rstrip("/")
        self._bucket = bucket
        self._client = httpx.Client(
            base_url=f"{self._base_url}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    def put(
        self,
        namespace: str,
        name: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = True,
    ) -> StoredObject:
        path = self.object_path(namespace, name)
        self._request(
            "POST",
            f"/object/{self._url_path(namespace, name)}",
            content=data,
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if overwrite else "false",
                "cache-control": "max-age=3600",
            },
        )
        return StoredObject(path=path, public_url=self.public_url(namespace, name))

    def list_objects(self, namespace: str) -> list[ObjectInfo]:
        self._check_segments(namespace)
        objects: list[ObjectInfo] = []
        offset = 0
        while True:
            response = self._request(
                "POST",
                f"/object/list/{quote(self._bucket, safe='')}",
                json={
                    "prefix": namespace,
                    "limit": self.LIST_PAGE_SIZE,
                    "offset": offset,
                    "sortBy": {"column": "name", "order": "asc"},
                },
            )
            page = response.json()
            if not isinstance(page, list):
                raise StorageError(f"Unexpected list response for '{namespace}'")
            objects.extend(ObjectInfo(name=str(item["name"])) for item in page)
            if len(page) < self.LIST_PAGE_SIZE:
                return objects
            offset += self.LIST_PAGE_SIZE

    def remove(self, namespace: str, names: list[str]) -> None:
        if not names:
            return
        self._check_segments(namespace, *names)
        self._request(
            "DELETE",
            f"/object/{quote(self._bucket, safe='')}",
            json={"prefixes": [self.object_path(namespace, n) for n in names]},
        )

    def public_url(self, namespace: str, name: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._url_path(namespace, name)}"

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageError(f"Storage network error: {exc}") from exc
        if response.is_error:
            raise StorageError(
                f"Storage {method} {url} failed with {response.status_code}: "
                f"{self._error_message(response)}"
            )
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    def _url_path(self, namespace: str, name: str) -> str:
        """Percent-encoded {bucket}/{namespace}/{name} for use in a request URL."""
        segments = (self._bucket, namespace, name)
        self._check_segments(*segments)
        return "/".join(quote(segment, safe="") for segment in segments)

    @staticmethod
    def _check_segments(*segments: str) -> None:
        for segment in segments:
            if segment in ("", ".", "..") or "/" in segment:
                raise StorageError(f"Invalid object path segment '{segment}'")
