from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from avatar_pipeline.imaging.models import LocalImageHandle, ProcessedImage
from avatar_pipeline.upload.models import UploadOptions
from avatar_pipeline.upload.progress import ProgressReporter


@dataclass(slots=True)
class UploadContext:
    image: LocalImageHandle
    options: UploadOptions
    reporter: ProgressReporter
    processed: ProcessedImage | None = None
    thumbnail: ProcessedImage | None = None
    avatar_url: str | None = None
    thumbnail_url: str | None = None
    profile_updated: bool = False
    temp_files: list[Path] = field(default_factory=list)

    @property
    def user_id(self) -> str:
        return self.options.user_id

    @property
    def uploaded_files(self) -> dict[str, str]:
        files: dict[str, str] = {}
        if self.avatar_url:
            files["main"] = self.avatar_url
        if self.thumbnail_url:
            files["thumbnail"] = self.thumbnail_url
        return files


class UploadStep(ABC):
    @abstractmethod
    def run(self, context: UploadContext) -> UploadContext:
        raise NotImplementedError
