"""Tuning constants for generated Server Survival configurations.

This module is the single source of truth for the numeric bounds that the
validator enforces on LLM output. The prompt text in prompts.py quotes the
same ranges, so change both together.

Parameter Categories:
- Event ranges: Duration and per-type severity bounds
- Traffic: Request categories and normalization tolerance
- Cardinality: Minimum number of events and patterns per configuration
- Generation: Default model, endpoint and attempt bound

Usage:
    from serversurvival.parameters import EVENT_DURATION_RANGE, MIN_RANDOM_EVENTS
"""

# =============================================================================
# EVENT RANGES
# =============================================================================

EVENT_DURATION_RANGE = (10.0, 30.0)
"""Allowed event duration in seconds, inclusive.

Out-of-range durations are clamped, never rejected. Anything shorter than
10s is over before the player can react; anything longer than 30s turns an
event into a permanent state change.
"""

COST_SPIKE_MULTIPLIER_RANGE = (2.0, 10.0)
"""Upkeep cost multiplier applied during a COST_SPIKE event.

Below 2x the spike is not noticeable against normal cost drift.
"""

CAPACITY_DROP_MULTIPLIER_RANGE = (0.0, 1.0)
"""Fraction of node capacity left during a CAPACITY_DROP event.

0.0 takes nodes fully offline, 1.0 is no drop at all.
"""

TRAFFIC_BURST_RPS_MULTIPLIER_RANGE = (2.0, 10.0)
"""Requests-per-second multiplier applied during a TRAFFIC_BURST event."""


# =============================================================================
# TRAFFIC
# =============================================================================

BASELINE_TRAFFIC_DISTRIBUTION = {
    "STATIC": 0.3,
    "READ": 0.2,
    "WRITE": 0.15,
    "UPLOAD": 0.05,
    "SEARCH": 0.1,
    "MALICIOUS": 0.2,
}
"""Normal request mix of the game, quoted to the model as the reference point.

Generated traffic shifts are meant to deviate from this mix.
"""

DISTRIBUTION_EPSILON = 1e-10
"""Tolerance for a traffic distribution to count as summing to one.

Distributions outside the tolerance are rescaled proportionally.
"""


# =============================================================================
# CARDINALITY
# =============================================================================

MIN_RANDOM_EVENTS = 4
"""Minimum random events per configuration (one per event type)."""

MIN_TRAFFIC_PATTERNS = 4
"""Minimum traffic patterns per configuration."""


# =============================================================================
# GENERATION
# =============================================================================

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
"""Chat-completion endpoint used when none is configured."""

DEFAULT_MODEL = "gpt-5-nano"
"""Model requested when none is configured."""

DEFAULT_MAX_ATTEMPTS = 3
"""Generation + validation cycles before giving up."""

DEFAULT_REQUEST_TIMEOUT = 120.0
"""Seconds to wait for a single chat-completion reply.

Reasoning models routinely take over a minute for the full configuration.
"""
