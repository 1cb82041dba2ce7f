from abc import ABC, abstractmethod

from avatar_pipeline.imaging.models import ProcessedImage, TransformConstraints


class BaseImageTransformer(ABC):
    """Contract for all image compression/resize adapters."""

    @abstractmethod
    def compress(self, source_uri: str, constraints: TransformConstraints) -> ProcessedImage:
        """Downscale and re-encode a local image into a new local file.

        Args:
            source_uri: Path of the local image to read.
            constraints: Bounding box and encoder quality (0-1).

        Returns:
            ProcessedImage describing the newly written file. The caller owns
            the file and is responsible for deleting it.

        Raises:
            TransformError: if the image cannot be decoded or written.
        """
