"""Game settings integration for generated configurations.

This module defines where a generated configuration is written. The game
owns the settings object; the pipeline only receives a store wrapping it and
writes two named slots: the random events list and the traffic shift
patterns list.

Both slots are written only after the whole configuration has validated, so
a failed generation leaves the settings untouched.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from serversurvival.config import create_client, get_max_attempts, get_retry_delay
from serversurvival.generation.config_generator import ConfigGenerator
from serversurvival.generation.schemas import Configuration

logger = logging.getLogger(__name__)


class SettingsStore(ABC):
    """Abstract base class for the game settings a configuration is written to."""

    @abstractmethod
    def write_random_events(self, events: list[dict[str, Any]]) -> None:
        """Replace the random events list.

        Args:
            events: Events in wire form (camelCase keys).
        """
        pass

    @abstractmethod
    def write_traffic_patterns(self, patterns: list[dict[str, Any]]) -> None:
        """Replace the traffic shift patterns list.

        Args:
            patterns: Patterns in wire form.
        """
        pass

    def apply(self, config: Configuration) -> None:
        """Write both slots from a validated configuration."""
        data = config.to_settings()
        self.write_random_events(data["randomEvents"])
        self.write_traffic_patterns(data["trafficPatterns"])


class NestedSettingsStore(SettingsStore):
    """Settings store over the game's nested settings dict.

    Writes to settings["survival"]["randomEvents"]["events"] and
    settings["survival"]["trafficShifts"]["patterns"]. Missing intermediate
    dicts are created; sibling keys are left alone.
    """

    def __init__(self, settings: dict[str, Any]):
        self.settings = settings

    def _section(self, name: str) -> dict[str, Any]:
        survival = self.settings.setdefault("survival", {})
        return survival.setdefault(name, {})

    def write_random_events(self, events: list[dict[str, Any]]) -> None:
        self._section("randomEvents")["events"] = events

    def write_traffic_patterns(self, patterns: list[dict[str, Any]]) -> None:
        self._section("trafficShifts")["patterns"] = patterns


async def apply_generated_config(
    store: SettingsStore,
    generator: ConfigGenerator,
    theme: str,
    difficulty: str,
    max_attempts: int | None = None,
) -> Configuration:
    """Generate a configuration and write it into the settings store.

    GenerationExhaustedError propagates unchanged and nothing is written.

    Returns:
        The configuration that was applied.
    """
    if max_attempts is None:
        max_attempts = get_max_attempts()

    config = await generator.generate_with_retry(theme, difficulty, max_attempts)
    store.apply(config)
    logger.info(f"Applied generated config for theme={theme!r}, difficulty={difficulty!r}")
    return config


async def setup_config(
    settings: dict[str, Any],
    theme: str,
    difficulty: str,
    api_key: str | None = None,
) -> None:
    """Generate a configuration for the game and splice it into its settings.

    This is the entry point the game calls. Falling back to a default
    configuration on GenerationExhaustedError is the game's responsibility.

    Args:
        settings: The game's settings dict, updated in place on success.
        theme: Free-text theme chosen by the player.
        difficulty: Difficulty label chosen by the player.
        api_key: Bearer credential. If None, uses environment config.

    Raises:
        GenerationExhaustedError: If every attempt failed.
        MissingCredentialError: If no API key is available.
    """
    async with create_client(api_key) as client:
        generator = ConfigGenerator(client, retry_delay=get_retry_delay())
        await apply_generated_config(NestedSettingsStore(settings), generator, theme, difficulty)
