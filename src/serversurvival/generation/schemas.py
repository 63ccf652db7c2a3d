"""Pydantic models for generated Server Survival configurations.

This module defines the typed form of a configuration after validation.
Numeric ranges are declared on the fields, so a model instance can only exist
in its repaired form: the validator clamps and rescales raw LLM output first,
then builds these models.

Field names are snake_case in Python and camelCase on the wire
(rpsMultiplier, randomEvents, trafficPatterns), matching the settings the game
reads.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from serversurvival.generation.normalizer import sums_to_one
from serversurvival.parameters import (
    CAPACITY_DROP_MULTIPLIER_RANGE,
    COST_SPIKE_MULTIPLIER_RANGE,
    EVENT_DURATION_RANGE,
    MIN_RANDOM_EVENTS,
    MIN_TRAFFIC_PATTERNS,
    TRAFFIC_BURST_RPS_MULTIPLIER_RANGE,
)


class EventType(str, Enum):
    """Closed set of random event types the game knows how to run."""

    COST_SPIKE = "COST_SPIKE"
    CAPACITY_DROP = "CAPACITY_DROP"
    TRAFFIC_BURST = "TRAFFIC_BURST"
    SERVICE_OUTAGE = "SERVICE_OUTAGE"


class TrafficType(str, Enum):
    """Request categories a traffic pattern distributes load over."""

    STATIC = "STATIC"
    READ = "READ"
    WRITE = "WRITE"
    UPLOAD = "UPLOAD"
    SEARCH = "SEARCH"
    MALICIOUS = "MALICIOUS"


class _RandomEventBase(BaseModel):
    """Fields shared by every random event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    name: str = Field(description="Display label")
    description: str = Field(description="Short explanation shown to the player")
    duration: float = Field(
        ge=EVENT_DURATION_RANGE[0],
        le=EVENT_DURATION_RANGE[1],
        description="Event length in seconds",
    )


class CostSpikeEvent(_RandomEventBase):
    """Upkeep costs are multiplied for the duration."""

    type: Literal["COST_SPIKE"] = "COST_SPIKE"
    multiplier: float = Field(
        ge=COST_SPIKE_MULTIPLIER_RANGE[0],
        le=COST_SPIKE_MULTIPLIER_RANGE[1],
    )


class CapacityDropEvent(_RandomEventBase):
    """Node capacity falls to a fraction of normal for the duration."""

    type: Literal["CAPACITY_DROP"] = "CAPACITY_DROP"
    multiplier: float = Field(
        ge=CAPACITY_DROP_MULTIPLIER_RANGE[0],
        le=CAPACITY_DROP_MULTIPLIER_RANGE[1],
    )


class TrafficBurstEvent(_RandomEventBase):
    """Incoming requests per second are multiplied for the duration."""

    type: Literal["TRAFFIC_BURST"] = "TRAFFIC_BURST"
    rps_multiplier: float = Field(
        alias="rpsMultiplier",
        ge=TRAFFIC_BURST_RPS_MULTIPLIER_RANGE[0],
        le=TRAFFIC_BURST_RPS_MULTIPLIER_RANGE[1],
    )


class ServiceOutageEvent(_RandomEventBase):
    """A service goes down for the duration. Carries no severity field."""

    type: Literal["SERVICE_OUTAGE"] = "SERVICE_OUTAGE"


RandomEvent = Annotated[
    Union[CostSpikeEvent, CapacityDropEvent, TrafficBurstEvent, ServiceOutageEvent],
    Field(discriminator="type"),
]

EVENT_MODELS: dict[EventType, type[_RandomEventBase]] = {
    EventType.COST_SPIKE: CostSpikeEvent,
    EventType.CAPACITY_DROP: CapacityDropEvent,
    EventType.TRAFFIC_BURST: TrafficBurstEvent,
    EventType.SERVICE_OUTAGE: ServiceOutageEvent,
}


class TrafficPattern(BaseModel):
    """A named request mix that temporarily replaces the normal distribution.

    The distribution covers every TrafficType and sums to 1.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    name: str = Field(description="Display label")
    distribution: dict[TrafficType, float] = Field(
        description="Share of requests per traffic type"
    )

    @model_validator(mode="after")
    def validate_distribution(self) -> "TrafficPattern":
        """Require all traffic types and a distribution summing to one."""
        missing = [t.value for t in TrafficType if t not in self.distribution]
        if missing:
            raise ValueError(f"distribution is missing traffic types: {missing}")
        if not sums_to_one(self.distribution):
            raise ValueError("distribution does not sum to 1")
        return self


class Configuration(BaseModel):
    """A complete generated configuration: random events plus traffic shifts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    random_events: list[RandomEvent] = Field(
        alias="randomEvents",
        min_length=MIN_RANDOM_EVENTS,
    )
    traffic_patterns: list[TrafficPattern] = Field(
        alias="trafficPatterns",
        min_length=MIN_TRAFFIC_PATTERNS,
    )

    def to_settings(self) -> dict[str, list[dict[str, Any]]]:
        """Serialize to the camelCase shape the game settings expect."""
        return self.model_dump(mode="json", by_alias=True)
