"""Configuration generation and validation for Server Survival.

This module provides tools for generating random events and traffic shifts
with an LLM, validating and repairing the reply, and retrying on failure.
"""

from .config_generator import (
    ConfigGenerator,
    GenerationExhaustedError,
    generate_config,
)
from .normalizer import (
    clamp,
    is_number,
    rescale_to_sum_one,
    sums_to_one,
)
from .schemas import (
    CapacityDropEvent,
    Configuration,
    CostSpikeEvent,
    EventType,
    RandomEvent,
    ServiceOutageEvent,
    TrafficBurstEvent,
    TrafficPattern,
    TrafficType,
)
from .validator import (
    ConfigurationValidationError,
    Invalid,
    Valid,
    ValidationOutcome,
    decode_configuration,
    validate_configuration,
    validate_random_event,
    validate_traffic_pattern,
)

__all__ = [
    # From config_generator.py
    "ConfigGenerator",
    "GenerationExhaustedError",
    "generate_config",
    # From normalizer.py
    "clamp",
    "is_number",
    "rescale_to_sum_one",
    "sums_to_one",
    # From schemas.py
    "CapacityDropEvent",
    "Configuration",
    "CostSpikeEvent",
    "EventType",
    "RandomEvent",
    "ServiceOutageEvent",
    "TrafficBurstEvent",
    "TrafficPattern",
    "TrafficType",
    # From validator.py
    "ConfigurationValidationError",
    "Invalid",
    "Valid",
    "ValidationOutcome",
    "decode_configuration",
    "validate_configuration",
    "validate_random_event",
    "validate_traffic_pattern",
]
