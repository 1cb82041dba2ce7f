from collections.abc import Callable

from avatar_pipeline.display.placeholder import Placeholder, PlaceholderStyle, build_placeholder
from avatar_pipeline.display.state import (
    ImageRender,
    ImageSource,
    LoadRequest,
    LoadState,
    PlaceholderRender,
    Render,
)
from avatar_pipeline.logging.logger import Log

AVATAR_SIZES: dict[str, int] = {
    "xs": 24,
    "sm": 32,
    "md": 48,
    "lg": 64,
    "xl": 96,
}

ImageCheck = Callable[[str], bool]


def resolve_size(size: str | int) -> int:
    if isinstance(size, int):
        if size <= 0:
            raise ValueError(f"Avatar size must be positive, got {size}")
        return size
    try:
        return AVATAR_SIZES[size]
    except KeyError:
        raise ValueError(
            f"Unknown avatar size '{size}'. Choose from: {list(AVATAR_SIZES)}"
        ) from None


class AvatarDisplay:
    """Resolves what an avatar should show: primary image, fallback image or placeholder.

    Each candidate URI moves loading -> loaded | error and never leaves a
    terminal state. The fallback is only requested after the primary failed.
    Changing the primary URI starts a new generation; load results that
    belong to an earlier generation are ignored.

    The display performs no I/O itself: callers ask for pending_load(),
    load the image however they like, and report back through on_load()
    or on_error(). resolve() does this synchronously with a check callable.
    """

    def __init__(
        self,
        uri: str | None = None,
        fallback_uri: str | None = None,
        *,
        name: str | None = None,
        email: str | None = None,
        size: str | int = "md",
        placeholder_style: PlaceholderStyle | str = PlaceholderStyle.INITIALS,
        gradient_colors: tuple[str, str] | None = None,
    ) -> None:
        self._uri = uri or None
        self._fallback_uri = fallback_uri or None
        self._name = name
        self._email = email
        self._size = resolve_size(size)
        self._placeholder_style = PlaceholderStyle(placeholder_style)
        self._gradient_colors = gradient_colors
        self._generation = 0
        self._primary_state: LoadState | None = None
        self._fallback_state: LoadState | None = None
        self._reset()

    @property
    def uri(self) -> str | None:
        return self._uri

    @property
    def fallback_uri(self) -> str | None:
        return self._fallback_uri

    @property
    def primary_state(self) -> LoadState | None:
        """None when there is no primary URI."""
        return self._primary_state

    @property
    def fallback_state(self) -> LoadState | None:
        """None when there is no fallback URI."""
        return self._fallback_state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def size(self) -> int:
        return self._size

    @property
    def accessibility_label(self) -> str:
        return f"Avatar for {self._name or self._email or 'user'}"

    def set_uri(self, uri: str | None) -> None:
        """Switch to a new primary URI, abandoning any in-flight load."""
        uri = uri or None
        if uri == self._uri:
            return
        self._uri = uri
        self._reset()

    def pending_load(self) -> LoadRequest | None:
        """The single image load the display is currently waiting on, if any."""
        if self._uri is None:
            return None
        if self._primary_state is LoadState.LOADING:
            return LoadRequest(self._uri, ImageSource.PRIMARY, self._generation)
        if (
            self._primary_state is LoadState.ERROR
            and self._fallback_uri is not None
            and self._fallback_state is LoadState.LOADING
        ):
            return LoadRequest(self._fallback_uri, ImageSource.FALLBACK, self._generation)
        return None

    def on_load(self, request: LoadRequest) -> bool:
        """Record a successful decode. Returns False if the result was stale."""
        if not self._is_current(request):
            return False
        if request.source is ImageSource.PRIMARY:
            self._primary_state = LoadState.LOADED
        else:
            self._fallback_state = LoadState.LOADED
        Log.debug(f"Avatar {request.source.value} image loaded: {request.uri}")
        return True

    def on_error(self, request: LoadRequest) -> bool:
        """Record a load failure. Returns False if the result was stale."""
        if not self._is_current(request):
            return False
        if request.source is ImageSource.PRIMARY:
            self._primary_state = LoadState.ERROR
            if self._fallback_uri is not None and self._fallback_uri == self._uri:
                self._fallback_state = LoadState.ERROR
        else:
            self._fallback_state = LoadState.ERROR
        Log.debug(f"Avatar {request.source.value} image failed to load: {request.uri}")
        return True

    def render(self) -> Render:
        if self._uri is not None and self._primary_state is not LoadState.ERROR:
            return ImageRender(
                uri=self._uri,
                source=ImageSource.PRIMARY,
                loading=self._primary_state is LoadState.LOADING,
            )
        if (
            self._uri is not None
            and self._fallback_uri is not None
            and self._fallback_state is not LoadState.ERROR
        ):
            return ImageRender(
                uri=self._fallback_uri,
                source=ImageSource.FALLBACK,
                loading=self._fallback_state is LoadState.LOADING,
            )
        return PlaceholderRender(self.placeholder())

    def placeholder(self) -> Placeholder:
        return build_placeholder(
            self._placeholder_style,
            name=self._name,
            email=self._email,
            size=self._size,
            colors=self._gradient_colors,
        )

    def resolve(self, check: ImageCheck) -> Render:
        """Run pending loads through check until a terminal render is reached.

        A check that raises counts as a failed load.
        """
        request = self.pending_load()
        while request is not None:
            try:
                loaded = check(request.uri)
            except Exception as exc:
                Log.debug(f"Avatar check raised for {request.uri}: {exc}")
                loaded = False
            if loaded:
                self.on_load(request)
            else:
                self.on_error(request)
            request = self.pending_load()
        return self.render()

    def _is_current(self, request: LoadRequest) -> bool:
        current = self.pending_load()
        if request != current:
            Log.debug(f"Ignoring stale avatar load result for {request.uri}")
            return False
        return True

    def _reset(self) -> None:
        self._generation += 1
        self._primary_state = LoadState.LOADING if self._uri is not None else None
        self._fallback_state = LoadState.LOADING if self._fallback_uri is not None else None
