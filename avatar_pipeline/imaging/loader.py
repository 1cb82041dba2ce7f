from pathlib import Path

from PIL import Image, UnidentifiedImageError

from avatar_pipeline.imaging.exceptions import ImageSourceError
from avatar_pipeline.imaging.models import LocalImageHandle


class LocalImageLoader:
    """Builds a LocalImageHandle from an image file on disk."""

    def load(self, file_path: str | Path) -> LocalImageHandle:
        """Read dimensions and format of a local image without decoding pixels.

        Raises:
            FileNotFoundError: if the path does not exist or is not a file.
            ImageSourceError: if the file is not a recognised image, cannot be
                              read or exceeds Pillow's pixel limit.
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            with Image.open(path) as img:
                width, height = img.size
                mime_type = Image.MIME.get(img.format or "", "application/octet-stream")
        except UnidentifiedImageError as exc:
            raise ImageSourceError(f"File is not an image: {path}") from exc
        except (OSError, Image.DecompressionBombError) as exc:
            raise ImageSourceError(f"File is not a readable image: {path}: {exc}") from exc

        return LocalImageHandle(
            uri=str(path),
            width=width,
            height=height,
            byte_size=path.stat().st_size,
            mime_type=mime_type,
        )
