import io

import httpx
from PIL import Image

from avatar_pipeline.logging.logger import Log


class HttpImageChecker:
    """Checks that a URI yields a decodable image.

    http(s) URIs are fetched with httpx; anything else is treated as a local
    path (a file:// prefix is stripped).
    """

    def __init__(
        self,
        timeout_seconds: float = 10,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    def __call__(self, uri: str) -> bool:
        if uri.startswith(("http://", "https://")):
            data = self._fetch(uri)
            if data is None:
                return False
            return self._decodes(io.BytesIO(data), uri)
        return self._decodes(uri.removeprefix("file://"), uri)

    def close(self) -> None:
        self._client.close()

    def _fetch(self, uri: str) -> bytes | None:
        try:
            response = self._client.get(uri)
        except httpx.HTTPError as exc:
            Log.debug(f"Avatar fetch failed for {uri}: {exc}")
            return None
        if response.is_error:
            Log.debug(f"Avatar fetch for {uri} returned {response.status_code}")
            return None
        return response.content

    @staticmethod
    def _decodes(source: str | io.BytesIO, uri: str) -> bool:
        try:
            with Image.open(source) as img:
                img.verify()
        except Exception as exc:
            Log.debug(f"Avatar at {uri} is not a decodable image: {exc}")
            return False
        return True
