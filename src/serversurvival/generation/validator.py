"""Configuration validator for Server Survival.

This module turns the untyped value parsed from an LLM reply into typed
models, or explains why it cannot. All checks are deterministic Python.

What is REJECTED (no sensible default exists):
1. Non-object records, non-text name/type/description
2. Event types outside EventType
3. Missing or non-numeric duration, multiplier, rpsMultiplier or traffic share
4. Fewer than MIN_RANDOM_EVENTS events or MIN_TRAFFIC_PATTERNS patterns

What is REPAIRED (the model was close enough):
1. Durations and severity multipliers outside their range are clamped,
   including infinities and ints too large for a float
2. Traffic distributions not summing to 1 are rescaled proportionally

Validators never mutate their input. They return Valid(repaired_model) or
Invalid(reasons).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from serversurvival.generation.normalizer import (
    clamp,
    is_number,
    rescale_to_sum_one,
    sums_to_one,
)
from serversurvival.generation.schemas import (
    EVENT_MODELS,
    Configuration,
    EventType,
    RandomEvent,
    TrafficPattern,
    TrafficType,
)
from serversurvival.parameters import (
    CAPACITY_DROP_MULTIPLIER_RANGE,
    COST_SPIKE_MULTIPLIER_RANGE,
    EVENT_DURATION_RANGE,
    MIN_RANDOM_EVENTS,
    MIN_TRAFFIC_PATTERNS,
    TRAFFIC_BURST_RPS_MULTIPLIER_RANGE,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Wire name and allowed range of the severity field for each event type.
# SERVICE_OUTAGE carries none.
SEVERITY_FIELDS: dict[EventType, tuple[str, tuple[float, float]]] = {
    EventType.COST_SPIKE: ("multiplier", COST_SPIKE_MULTIPLIER_RANGE),
    EventType.CAPACITY_DROP: ("multiplier", CAPACITY_DROP_MULTIPLIER_RANGE),
    EventType.TRAFFIC_BURST: ("rpsMultiplier", TRAFFIC_BURST_RPS_MULTIPLIER_RANGE),
}


# =============================================================================
# Validation Result Types
# =============================================================================


@dataclass(frozen=True)
class Valid(Generic[T]):
    """A value that passed validation, possibly after repair."""

    value: T

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """A rejected value with the reasons it was rejected."""

    reasons: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


ValidationOutcome = Union[Valid[T], Invalid]


class ConfigurationValidationError(ValueError):
    """Raised when a parsed reply cannot be turned into a Configuration."""

    def __init__(self, reasons: list[str]):
        self.reasons = reasons
        super().__init__(f"Invalid configuration: {'; '.join(reasons)}")


# =============================================================================
# Per-record Validators
# =============================================================================


def validate_random_event(raw: Any) -> ValidationOutcome[RandomEvent]:
    """Validate one random event record and clamp its numeric fields.

    Args:
        raw: A value decoded from JSON, expected to be an event object.

    Returns:
        Valid with the typed, clamped event, or Invalid with the reason.
    """
    if not isinstance(raw, Mapping):
        return Invalid([f"event must be an object, got {type(raw).__name__}"])

    for key in ("type", "name", "description"):
        if not isinstance(raw.get(key), str):
            return Invalid([f"event {key!r} must be a string"])

    name = raw["name"]
    if not is_number(raw.get("duration"), finite=False):
        return Invalid([f"event {name!r}: duration must be a number"])

    try:
        event_type = EventType(raw["type"])
    except ValueError:
        return Invalid([f"event {name!r}: unknown type {raw['type']!r}"])

    duration = _clamp_logged(name, "duration", raw["duration"], EVENT_DURATION_RANGE)
    fields: dict[str, Any] = {
        "name": name,
        "description": raw["description"],
        "duration": duration,
    }

    if event_type in SEVERITY_FIELDS:
        wire_name, bounds = SEVERITY_FIELDS[event_type]
        if not is_number(raw.get(wire_name), finite=False):
            return Invalid([f"event {name!r}: {event_type.value} requires numeric {wire_name!r}"])
        fields[wire_name] = _clamp_logged(name, wire_name, raw[wire_name], bounds)

    return Valid(EVENT_MODELS[event_type](**fields))


def validate_traffic_pattern(raw: Any) -> ValidationOutcome[TrafficPattern]:
    """Validate one traffic pattern and rescale its distribution if needed.

    Keys outside TrafficType are dropped before the sum is taken.

    Args:
        raw: A value decoded from JSON, expected to be a pattern object.

    Returns:
        Valid with the typed pattern, or Invalid with the reason.
    """
    if not isinstance(raw, Mapping):
        return Invalid([f"traffic pattern must be an object, got {type(raw).__name__}"])
    if not isinstance(raw.get("name"), str):
        return Invalid(["traffic pattern 'name' must be a string"])

    name = raw["name"]
    distribution = raw.get("distribution")
    if not isinstance(distribution, Mapping):
        return Invalid([f"traffic pattern {name!r}: distribution must be an object"])

    missing = [t.value for t in TrafficType if t.value not in distribution]
    if missing:
        return Invalid([f"traffic pattern {name!r}: distribution is missing {missing}"])
    non_numeric = [t.value for t in TrafficType if not is_number(distribution[t.value])]
    if non_numeric:
        return Invalid([f"traffic pattern {name!r}: non-numeric shares for {non_numeric}"])

    shares = {t.value: distribution[t.value] for t in TrafficType}
    if not sums_to_one(shares):
        try:
            repaired = rescale_to_sum_one(shares)
        except ValueError as e:
            return Invalid([f"traffic pattern {name!r}: {e}"])
        if not sums_to_one(repaired):
            return Invalid([f"traffic pattern {name!r}: distribution cannot be normalized"])
        logger.debug(f"Rescaled distribution of {name!r} (sum was {sum(shares.values())})")
        shares = repaired

    return Valid(TrafficPattern(name=name, distribution=shares))


# =============================================================================
# Configuration Validator
# =============================================================================


def validate_configuration(raw: Any) -> ValidationOutcome[Configuration]:
    """Validate a whole configuration.

    Every element is validated, even after an earlier one failed, so the
    result lists every problem with the reply at once.

    Args:
        raw: The value parsed from the LLM reply.

    Returns:
        Valid with the typed Configuration, or Invalid with all reasons.
    """
    if not isinstance(raw, Mapping):
        return Invalid([f"configuration must be an object, got {type(raw).__name__}"])

    reasons: list[str] = []
    events = _validate_sequence(
        raw, "randomEvents", MIN_RANDOM_EVENTS, validate_random_event, reasons
    )
    patterns = _validate_sequence(
        raw, "trafficPatterns", MIN_TRAFFIC_PATTERNS, validate_traffic_pattern, reasons
    )

    if reasons:
        return Invalid(reasons)
    return Valid(Configuration(random_events=events, traffic_patterns=patterns))


def decode_configuration(raw: Any) -> Configuration:
    """Validate a parsed reply and return the Configuration.

    Raises:
        ConfigurationValidationError: If the value is not a valid configuration.
    """
    outcome = validate_configuration(raw)
    if isinstance(outcome, Invalid):
        raise ConfigurationValidationError(outcome.reasons)
    return outcome.value


def _validate_sequence(
    raw: Mapping[str, Any],
    key: str,
    min_length: int,
    validate_item,
    reasons: list[str],
) -> list:
    """Validate every item of raw[key], appending failures to reasons."""
    items = raw.get(key)
    if not isinstance(items, list):
        reasons.append(f"{key!r} must be a list")
        return []

    valid_items = []
    for index, item in enumerate(items):
        outcome = validate_item(item)
        if isinstance(outcome, Invalid):
            reasons.extend(f"{key}[{index}]: {reason}" for reason in outcome.reasons)
        else:
            valid_items.append(outcome.value)

    if len(items) < min_length:
        reasons.append(f"{key!r} needs at least {min_length} entries, got {len(items)}")
    return valid_items


def _clamp_logged(name: str, field_name: str, value: float, bounds: tuple[float, float]) -> float:
    """Clamp a field and log when the value had to change."""
    clamped = clamp(value, *bounds)
    if clamped != value:
        logger.debug(f"Clamped {field_name} of {name!r} from {value} to {clamped}")
    return clamped
