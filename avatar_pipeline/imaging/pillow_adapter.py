import os
import tempfile
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from avatar_pipeline.imaging.base import BaseImageTransformer
from avatar_pipeline.imaging.exceptions import TransformError
from avatar_pipeline.imaging.models import ProcessedImage, TransformConstraints


class PillowImageTransformer(BaseImageTransformer):
    """Resizes images to fit a bounding box and encodes them as JPEG with Pillow."""

    def __init__(self, temp_dir: Path | None = None) -> None:
        self._temp_dir = temp_dir

    def compress(self, source_uri: str, constraints: TransformConstraints) -> ProcessedImage:
        if constraints.max_width <= 0 or constraints.max_height <= 0:
            raise TransformError(
                f"Invalid target size {constraints.max_width}x{constraints.max_height}"
            )
        try:
            with Image.open(source_uri) as img:
                # Apply camera orientation before resizing, then drop alpha for JPEG.
                img = ImageOps.exif_transpose(img)
                if img.mode != "RGB":
                    img = img.convert("RGB")
                img.thumbnail(
                    (constraints.max_width, constraints.max_height),
                    Image.Resampling.LANCZOS,
                )
                width, height = img.size
                output = self._new_output_path()
                try:
                    img.save(
                        output,
                        format="JPEG",
                        quality=self._encoder_quality(constraints.quality),
                        optimize=True,
                    )
                except Exception:
                    output.unlink(missing_ok=True)
                    raise
        except TransformError:
            raise
        except FileNotFoundError as exc:
            raise TransformError(f"Image file does not exist: {source_uri}") from exc
        except UnidentifiedImageError as exc:
            raise TransformError(f"File is not a recognised image: {source_uri}") from exc
        except Exception as exc:
            raise TransformError(f"Pillow transform failed: {exc}") from exc

        return ProcessedImage(
            uri=str(output),
            width=width,
            height=height,
            byte_size=output.stat().st_size,
            mime_type="image/jpeg",
        )

    def _new_output_path(self) -> Path:
        fd, name = tempfile.mkstemp(prefix="avatar_", suffix=".jpg", dir=self._temp_dir)
        os.close(fd)
        return Path(name)

    @staticmethod
    def _encoder_quality(quality: float) -> int:
        """Map 0-1 quality onto Pillow's JPEG scale (1-95)."""
        return max(1, min(95, round(quality * 100)))
