"""Procedurally generated avatar placeholders.

Placeholders are pure functions of the user's name and email, so the same
identity always renders the same initials and colours.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

FALLBACK_GLYPH = "?"
ICON_GLYPH = "\N{BUST IN SILHOUETTE}"
DEFAULT_SEED = "default"

GRADIENT_PALETTE: tuple[tuple[str, str], ...] = (
    ("#667eea", "#764ba2"),
    ("#f093fb", "#f5576c"),
    ("#4facfe", "#00f2fe"),
    ("#43e97b", "#38f9d7"),
    ("#fa709a", "#fee140"),
    ("#a8edea", "#fed6e3"),
    ("#ff9a9e", "#fecfef"),
    ("#ffecd2", "#fcb69f"),
    ("#ff8a80", "#ea6100"),
)


class PlaceholderStyle(str, Enum):
    INITIALS = "initials"
    ICON = "icon"
    GRADIENT = "gradient"


@dataclass(frozen=True)
class InitialsPlaceholder:
    style: ClassVar[PlaceholderStyle] = PlaceholderStyle.INITIALS

    initials: str
    font_size: float


@dataclass(frozen=True)
class IconPlaceholder:
    style: ClassVar[PlaceholderStyle] = PlaceholderStyle.ICON

    font_size: float
    glyph: str = ICON_GLYPH


@dataclass(frozen=True)
class GradientPlaceholder:
    style: ClassVar[PlaceholderStyle] = PlaceholderStyle.GRADIENT

    initials: str
    colors: tuple[str, str]
    font_size: float


Placeholder = InitialsPlaceholder | IconPlaceholder | GradientPlaceholder


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


def generate_initials(name: str | None = None, email: str | None = None) -> str:
    """Initials for a user.

    First letters of the first two name tokens, or the first letter of a
    single-token name, or the first letter of the email local part, or "?".
    """
    tokens = _clean(name).split()
    if len(tokens) >= 2:
        return f"{tokens[0][0]}{tokens[1][0]}".upper()
    if tokens:
        return tokens[0][0].upper()

    local_part = _clean(email).split("@", 1)[0]
    if local_part:
        return local_part[0].upper()
    return FALLBACK_GLYPH


def placeholder_seed(name: str | None = None, email: str | None = None) -> str:
    """Gradient seed; the raw value is hashed, so surrounding whitespace counts."""
    return name or email or DEFAULT_SEED


def seeded_hash(seed: str) -> int:
    """32-bit string hash (h * 31 + c over UTF-16 code units), signed."""
    data = seed.encode("utf-16-le")
    value = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def gradient_colors(seed: str) -> tuple[str, str]:
    return GRADIENT_PALETTE[abs(seeded_hash(seed)) % len(GRADIENT_PALETTE)]


def build_placeholder(
    style: PlaceholderStyle | str,
    *,
    name: str | None = None,
    email: str | None = None,
    size: int = 48,
    colors: tuple[str, str] | None = None,
) -> Placeholder:
    style = PlaceholderStyle(style)
    if style is PlaceholderStyle.ICON:
        return IconPlaceholder(font_size=size * 0.5)
    initials = generate_initials(name, email)
    if style is PlaceholderStyle.GRADIENT:
        return GradientPlaceholder(
            initials=initials,
            colors=colors or gradient_colors(placeholder_seed(name, email)),
            font_size=size * 0.4,
        )
    return InitialsPlaceholder(initials=initials, font_size=size * 0.4)
