from dataclasses import dataclass
from enum import Enum

from avatar_pipeline.display.placeholder import Placeholder


class LoadState(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ImageSource(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class LoadRequest:
    """An image load the display wants performed.

    The generation ties the request to one primary URI; results for an
    older generation are discarded.
    """

    uri: str
    source: ImageSource
    generation: int


@dataclass(frozen=True)
class ImageRender:
    uri: str
    source: ImageSource
    loading: bool


@dataclass(frozen=True)
class PlaceholderRender:
    placeholder: Placeholder


Render = ImageRender | PlaceholderRender
