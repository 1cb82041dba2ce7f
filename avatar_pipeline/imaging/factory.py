from pathlib import Path

from avatar_pipeline.config.settings import Settings
from avatar_pipeline.imaging.base import BaseImageTransformer
from avatar_pipeline.imaging.pillow_adapter import PillowImageTransformer


class ImageTransformerFactory:
    """Creates the correct image transformer based on settings."""

    ADAPTERS: dict[str, type[BaseImageTransformer]] = {
        "pillow": PillowImageTransformer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseImageTransformer:
        engine = settings.image_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown image engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        temp_dir = Path(settings.avatar_temp_dir) if settings.avatar_temp_dir else None
        return adapter_cls(temp_dir=temp_dir)  # type: ignore[call-arg]
