"""
Parameter snapshots for the negative pipeline.

Every pipeline run takes one immutable ``Parameters`` snapshot. The
``ParameterStore`` owns the current snapshot and swaps it wholesale on
every update, so a run in flight never sees a half-applied change.
"""

import logging
import math
import numbers
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, NamedTuple

from .errors import InvalidParameter

logger = logging.getLogger(__name__)


class BaseColor(NamedTuple):
    """Film-base (orange mask) color, integer RGB 0..255."""
    r: int
    g: int
    b: int


class ChannelTriple(NamedTuple):
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0


CHANNELS = ("r", "g", "b")

DEFAULT_BASE_COLOR = BaseColor(240, 170, 140)
DEFAULT_EXPOSURE = 1.1
DEFAULT_BRIGHTNESS = 1.0
DEFAULT_CONTRAST = 1.1

TONE_LIMIT = 100.0

TONE_FIELDS = ("shadows", "midtones", "highlights")
GLOBAL_FIELDS = ("brightness", "contrast")
TOP_FIELDS = ("base_color", "exposure")


@dataclass(frozen=True)
class ToneParameters:
    """Split-tone offsets: additive shadows, midtone strength, highlight gain in %."""
    shadows: ChannelTriple = ChannelTriple()
    midtones: ChannelTriple = ChannelTriple()
    highlights: ChannelTriple = ChannelTriple()


@dataclass(frozen=True)
class GlobalTone:
    brightness: float = DEFAULT_BRIGHTNESS
    contrast: float = DEFAULT_CONTRAST


@dataclass(frozen=True)
class Parameters:
    base_color: BaseColor = DEFAULT_BASE_COLOR
    exposure: float = DEFAULT_EXPOSURE
    tone: ToneParameters = field(default_factory=ToneParameters)
    global_tone: GlobalTone = field(default_factory=GlobalTone)

    @property
    def brightness(self) -> float:
        return self.global_tone.brightness

    @property
    def contrast(self) -> float:
        return self.global_tone.contrast

    def channel(self, index: int) -> tuple[int, float, float, float]:
        """(base, shadow, midtone, highlight) for channel 0=R, 1=G, 2=B."""
        return (
            self.base_color[index],
            self.tone.shadows[index],
            self.tone.midtones[index],
            self.tone.highlights[index],
        )

    def validate(self) -> "Parameters":
        """
        Check ranges and return self, raising InvalidParameter on the first problem.
        """
        if len(self.base_color) != 3:
            raise InvalidParameter(f"base_color needs 3 channels, got {self.base_color!r}")
        for name, value in zip(CHANNELS, self.base_color):
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidParameter(f"base_color.{name} must be an integer, got {value!r}")
            if not 0 <= value <= 255:
                raise InvalidParameter(f"base_color.{name} must be in 0..255, got {value}")

        _check_positive("exposure", self.exposure)
        _check_positive("brightness", self.global_tone.brightness)
        _check_positive("contrast", self.global_tone.contrast)

        for tone_name in TONE_FIELDS:
            triple = getattr(self.tone, tone_name)
            for name, value in zip(CHANNELS, triple):
                label = f"{tone_name}.{name}"
                _check_finite(label, value)
                if not -TONE_LIMIT <= value <= TONE_LIMIT:
                    raise InvalidParameter(f"{label} must be in -100..100, got {value}")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON-friendly representation, used for presets."""
        return {
            "base_color": list(self.base_color),
            "exposure": self.exposure,
            "brightness": self.global_tone.brightness,
            "contrast": self.global_tone.contrast,
            "shadows": list(self.tone.shadows),
            "midtones": list(self.tone.midtones),
            "highlights": list(self.tone.highlights),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Parameters":
        """Inverse of to_dict. Missing keys keep their defaults."""
        return apply_changes(cls(), **data)


def _check_finite(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidParameter(f"{name} must be finite, got {value}")


def _check_positive(name: str, value: float) -> None:
    _check_finite(name, value)
    if value <= 0:
        raise InvalidParameter(f"{name} must be > 0, got {value}")


def _as_triple(name: str, value) -> ChannelTriple:
    try:
        r, g, b = value
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} needs three values (R, G, B), got {value!r}") from None
    return ChannelTriple(r, g, b)


def _as_base_color(value) -> BaseColor:
    try:
        r, g, b = value
    except (TypeError, ValueError):
        raise InvalidParameter(f"base_color needs three values (R, G, B), got {value!r}") from None
    return BaseColor(r, g, b)


def apply_changes(params: Parameters, **changes) -> Parameters:
    """
    Return a new validated snapshot with the named fields replaced.

    Accepted keys: base_color, exposure, brightness, contrast, shadows,
    midtones, highlights. Triples may be any 3-item sequence.
    """
    unknown = set(changes) - set(TOP_FIELDS + GLOBAL_FIELDS + TONE_FIELDS)
    if unknown:
        raise InvalidParameter(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

    top = {}
    if "base_color" in changes:
        top["base_color"] = _as_base_color(changes["base_color"])
    if "exposure" in changes:
        top["exposure"] = changes["exposure"]

    global_changes = {k: changes[k] for k in GLOBAL_FIELDS if k in changes}
    if global_changes:
        top["global_tone"] = replace(params.global_tone, **global_changes)

    tone_changes = {k: _as_triple(k, changes[k]) for k in TONE_FIELDS if k in changes}
    if tone_changes:
        top["tone"] = replace(params.tone, **tone_changes)

    return replace(params, **top).validate()


Listener = Callable[[Parameters], None]


class ParameterStore:
    """
    Current parameter snapshot plus the reset / nudge operations of the UI.

    Listeners are called with each new snapshot after it replaced the old one;
    this is where a preview re-render gets triggered.
    """

    def __init__(self, params: Parameters | None = None):
        self._lock = threading.Lock()
        self._params = (params or Parameters()).validate()
        self._listeners: list[Listener] = []

    def snapshot(self) -> Parameters:
        return self._params

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener, returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace(self, params: Parameters) -> Parameters:
        params.validate()
        return self._swap(lambda old: params)

    def update(self, **changes) -> Parameters:
        return self._swap(lambda old: apply_changes(old, **changes))

    def nudge(self, tone_field: str, channel: int | str, delta: float = 1) -> Parameters:
        """Step one channel of shadows / midtones / highlights, like the +/- buttons."""
        if tone_field not in TONE_FIELDS:
            raise InvalidParameter(f"Cannot nudge {tone_field!r}, expected one of {TONE_FIELDS}")
        index = CHANNELS.index(channel) if isinstance(channel, str) else int(channel)
        if not 0 <= index < 3:
            raise InvalidParameter(f"Channel index must be 0..2, got {channel!r}")

        def _step(old: Parameters) -> Parameters:
            values = list(getattr(old.tone, tone_field))
            values[index] = values[index] + delta
            return apply_changes(old, **{tone_field: values})

        return self._swap(_step)

    def reset(self) -> Parameters:
        """Restore every default, as on a fresh image load."""
        return self._swap(lambda old: Parameters())

    def reset_base(self) -> Parameters:
        """Restore base color and exposure only."""
        return self._swap(
            lambda old: replace(old, base_color=DEFAULT_BASE_COLOR, exposure=DEFAULT_EXPOSURE)
        )

    def reset_tone(self) -> Parameters:
        """Restore brightness, contrast and the split-tone triples, keeping the base."""
        return self._swap(lambda old: replace(old, tone=ToneParameters(), global_tone=GlobalTone()))

    def _swap(self, make: Callable[[Parameters], Parameters]) -> Parameters:
        """
        Build the next snapshot from the current one and install it atomically.
        Listeners run outside the lock.
        """
        with self._lock:
            old = self._params
            new = make(old)
            self._params = new
        if new == old:
            return new

        logger.debug("Parameters updated: %s", new.to_dict())
        for listener in list(self._listeners):
            listener(new)
        return new
