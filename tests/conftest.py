"""Shared pytest fixtures for all tests."""

import copy

import pytest

VALID_EVENTS = [
    {
        "type": "COST_SPIKE",
        "name": "Cloud Bill Shock",
        "duration": 20,
        "multiplier": 4,
        "description": "Compute costs quadruple for 20s.",
    },
    {
        "type": "CAPACITY_DROP",
        "name": "Thermal Throttling",
        "duration": 15,
        "multiplier": 0.5,
        "description": "Servers run at half capacity.",
    },
    {
        "type": "TRAFFIC_BURST",
        "name": "Viral Post",
        "duration": 25,
        "rpsMultiplier": 6,
        "description": "Requests per second jump 6x.",
    },
    {
        "type": "SERVICE_OUTAGE",
        "name": "DNS Hiccup",
        "duration": 12,
        "description": "A random service goes dark.",
    },
]

VALID_PATTERNS = [
    {
        "name": "Upload Frenzy",
        "distribution": {
            "STATIC": 0.1, "READ": 0.1, "WRITE": 0.2,
            "UPLOAD": 0.4, "SEARCH": 0.1, "MALICIOUS": 0.1,
        },
    },
    {
        "name": "Bot Swarm",
        "distribution": {
            "STATIC": 0.1, "READ": 0.1, "WRITE": 0.05,
            "UPLOAD": 0.05, "SEARCH": 0.1, "MALICIOUS": 0.6,
        },
    },
    {
        "name": "Search Storm",
        "distribution": {
            "STATIC": 0.2, "READ": 0.2, "WRITE": 0.1,
            "UPLOAD": 0.0, "SEARCH": 0.4, "MALICIOUS": 0.1,
        },
    },
    {
        "name": "Write Heavy",
        "distribution": {
            "STATIC": 0.1, "READ": 0.2, "WRITE": 0.5,
            "UPLOAD": 0.1, "SEARCH": 0.05, "MALICIOUS": 0.05,
        },
    },
]


@pytest.fixture
def valid_events():
    """Provide four valid raw events, one per event type."""
    return copy.deepcopy(VALID_EVENTS)


@pytest.fixture
def valid_patterns():
    """Provide four valid raw traffic patterns."""
    return copy.deepcopy(VALID_PATTERNS)


@pytest.fixture
def valid_config_data(valid_events, valid_patterns):
    """Provide a raw configuration as the model would return it."""
    return {"randomEvents": valid_events, "trafficPatterns": valid_patterns}


@pytest.fixture
def game_settings():
    """Provide a game settings dict with pre-existing default events."""
    return {
        "survival": {
            "startBudget": 500,
            "randomEvents": {"enabled": True, "interval": 45, "events": ["default-event"]},
            "trafficShifts": {"enabled": True, "patterns": ["default-pattern"]},
        }
    }
