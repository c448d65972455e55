"""
Smart marker configuration.

Four independent rule blocks plus a master visibility flag. Rules are
immutable; configuration commands produce a new AnnotationConfig.
"""

from dataclasses import dataclass, field, replace

from track_insight.shared.constants import (
    MarkerKind,
    TimeUnit,
    DistanceUnit,
    DurationUnit,
    SpeedUnit,
)


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class TimeRule:
    """Marker every N minutes/hours of elapsed time."""
    enabled: bool = False
    every_value: float = 10
    unit: TimeUnit = TimeUnit.MINUTE

    def __post_init__(self):
        _require_positive("Time interval", self.every_value)
        object.__setattr__(self, "unit", TimeUnit(self.unit))


@dataclass(frozen=True)
class DistanceRule:
    """Marker every N km/miles/meters of travelled distance."""
    enabled: bool = False
    every_value: float = 1
    unit: DistanceUnit = DistanceUnit.KM

    def __post_init__(self):
        _require_positive("Distance interval", self.every_value)
        object.__setattr__(self, "unit", DistanceUnit(self.unit))


@dataclass(frozen=True)
class StopRule:
    """Marker for stops lasting at least the minimum duration."""
    enabled: bool = False
    min_duration: float = 5
    unit: DurationUnit = DurationUnit.MINUTE

    def __post_init__(self):
        _require_positive("Minimum stop duration", self.min_duration)
        object.__setattr__(self, "unit", DurationUnit(self.unit))


@dataclass(frozen=True)
class SpeedRule:
    """Marker where segment speed rises above the limit."""
    enabled: bool = False
    limit: float = 100
    unit: SpeedUnit = SpeedUnit.KMH

    def __post_init__(self):
        _require_positive("Speed limit", self.limit)
        object.__setattr__(self, "unit", SpeedUnit(self.unit))


@dataclass(frozen=True)
class AnnotationConfig:
    """All marker rules plus the master visibility toggle."""
    time: TimeRule = field(default_factory=TimeRule)
    distance: DistanceRule = field(default_factory=DistanceRule)
    stop: StopRule = field(default_factory=StopRule)
    speed: SpeedRule = field(default_factory=SpeedRule)
    visible: bool = True

    @property
    def any_enabled(self) -> bool:
        return any(rule.enabled for rule in (self.time, self.distance, self.stop, self.speed))

    def with_rule(self, kind: MarkerKind, **changes) -> "AnnotationConfig":
        """
        Return a copy with one rule block updated.

        Args:
            kind: Which rule to change
            **changes: Fields of that rule (enabled, unit, ...)

        Raises:
            ValueError: On unknown fields or non-positive values
        """
        attr = MarkerKind(kind).value.lower()
        rule = getattr(self, attr)
        try:
            updated = replace(rule, **changes)
        except TypeError as e:
            raise ValueError(f"Invalid {attr} rule update: {e}")
        return replace(self, **{attr: updated})

    def with_visibility(self, visible: bool) -> "AnnotationConfig":
        return replace(self, visible=visible)
