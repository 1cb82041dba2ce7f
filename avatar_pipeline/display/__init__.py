from avatar_pipeline.display.avatar_display import AVATAR_SIZES, AvatarDisplay, resolve_size
from avatar_pipeline.display.placeholder import (
    GradientPlaceholder,
    IconPlaceholder,
    InitialsPlaceholder,
    PlaceholderStyle,
    build_placeholder,
    generate_initials,
    gradient_colors,
)
from avatar_pipeline.display.checker import HttpImageChecker
from avatar_pipeline.display.state import (
    ImageRender,
    ImageSource,
    LoadRequest,
    LoadState,
    PlaceholderRender,
)

__all__ = [
    "AVATAR_SIZES",
    "AvatarDisplay",
    "GradientPlaceholder",
    "HttpImageChecker",
    "IconPlaceholder",
    "ImageRender",
    "ImageSource",
    "InitialsPlaceholder",
    "LoadRequest",
    "LoadState",
    "PlaceholderRender",
    "PlaceholderStyle",
    "build_placeholder",
    "generate_initials",
    "gradient_colors",
    "resolve_size",
]
