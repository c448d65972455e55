"""
Smart marker schemas.

Pydantic models for marker configuration and marker responses.
"""

from pydantic import BaseModel, Field
from typing import Optional

from track_insight.shared.constants import (
    MarkerKind,
    TimeUnit,
    DistanceUnit,
    DurationUnit,
    SpeedUnit,
)

from .config import AnnotationConfig, TimeRule, DistanceRule, StopRule, SpeedRule


class TimeRuleSchema(BaseModel):
    enabled: bool = False
    every_value: float = Field(default=10, gt=0)
    unit: TimeUnit = TimeUnit.MINUTE


class DistanceRuleSchema(BaseModel):
    enabled: bool = False
    every_value: float = Field(default=1, gt=0)
    unit: DistanceUnit = DistanceUnit.KM


class StopRuleSchema(BaseModel):
    enabled: bool = False
    min_duration: float = Field(default=5, gt=0)
    unit: DurationUnit = DurationUnit.MINUTE


class SpeedRuleSchema(BaseModel):
    enabled: bool = False
    limit: float = Field(default=100, gt=0)
    unit: SpeedUnit = SpeedUnit.KMH


class AnnotationConfigSchema(BaseModel):
    """Marker configuration as sent by clients."""

    time: TimeRuleSchema = Field(default_factory=TimeRuleSchema)
    distance: DistanceRuleSchema = Field(default_factory=DistanceRuleSchema)
    stop: StopRuleSchema = Field(default_factory=StopRuleSchema)
    speed: SpeedRuleSchema = Field(default_factory=SpeedRuleSchema)
    visible: bool = True

    def to_config(self) -> AnnotationConfig:
        return AnnotationConfig(
            time=TimeRule(**self.time.model_dump()),
            distance=DistanceRule(**self.distance.model_dump()),
            stop=StopRule(**self.stop.model_dump()),
            speed=SpeedRule(**self.speed.model_dump()),
            visible=self.visible,
        )


class MarkerSchema(BaseModel):
    """One smart marker."""

    lat: float
    lon: float
    kind: MarkerKind
    label: str
    detail: Optional[str] = None
