"""LLM-based configuration generation for Server Survival.

This module implements the ConfigGenerator class that asks a chat-completion
model for random events and traffic shifts, then validates the reply.

Every attempt sends the same full instruction. A network error, an
unparseable reply and a reply that fails validation are all handled the same
way: the whole attempt is discarded and a new one starts, up to a fixed
bound. Valid pieces of a failed attempt are never merged into the next one.
"""

import asyncio
import logging
from typing import Any

from serversurvival.generation.schemas import Configuration
from serversurvival.generation.validator import (
    ConfigurationValidationError,
    decode_configuration,
)
from serversurvival.llm import ChatCompletionClient, LLMError
from serversurvival.parameters import DEFAULT_MAX_ATTEMPTS
from serversurvival.prompts import (
    format_config_system_prompt,
    format_config_user_prompt,
)

logger = logging.getLogger(__name__)


class GenerationExhaustedError(Exception):
    """Every generation attempt failed.

    Attributes:
        attempts: Number of attempts made.
        failures: One message per failed attempt, in order.
    """

    def __init__(self, attempts: int, failures: list[str] | None = None):
        self.attempts = attempts
        self.failures = failures or []
        super().__init__(f"Failed to generate config after {attempts} attempts")


class ConfigGenerator:
    """Generates validated configurations from a theme and a difficulty.

    Example:
        >>> async with ChatCompletionClient(api_key=key) as client:
        ...     generator = ConfigGenerator(client)
        ...     config = await generator.generate_with_retry("zombie outbreak", "hard")
    """

    def __init__(self, client: ChatCompletionClient, retry_delay: float = 0.0):
        """Initialize the generator.

        Args:
            client: Chat-completion client used for every attempt.
            retry_delay: Fixed pause in seconds between failed attempts.
        """
        self.client = client
        self.retry_delay = retry_delay

    async def generate(self, theme: str, difficulty: str) -> Any:
        """Request one configuration and return the parsed, unvalidated reply.

        Args:
            theme: Free-text theme, passed to the model verbatim.
            difficulty: Difficulty label, passed to the model verbatim.

        Raises:
            TransportError: On network failure or a non-success status.
            MalformedReplyError: If the reply is not valid JSON.
        """
        return await self.client.generate_json(
            system_prompt=format_config_system_prompt(),
            user_prompt=format_config_user_prompt(theme, difficulty),
        )

    async def generate_with_retry(
        self,
        theme: str,
        difficulty: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> Configuration:
        """Generate and validate, retrying whole attempts on any failure.

        Args:
            theme: Free-text theme.
            difficulty: Difficulty label.
            max_attempts: Attempts before giving up (at least 1).

        Returns:
            The first Configuration that passes validation.

        Raises:
            GenerationExhaustedError: If all attempts failed.
            ValueError: If max_attempts is less than 1.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        failures: list[str] = []
        for attempt in range(1, max_attempts + 1):
            try:
                raw = await self.generate(theme, difficulty)
                config = decode_configuration(raw)
            except (LLMError, ConfigurationValidationError) as e:
                failures.append(str(e))
                logger.warning(f"Attempt {attempt} failed: {e}")
                if attempt < max_attempts and self.retry_delay > 0:
                    await asyncio.sleep(self.retry_delay)
                continue

            logger.info(
                f"Generated config on attempt {attempt}: "
                f"{len(config.random_events)} events, {len(config.traffic_patterns)} patterns"
            )
            return config

        logger.error(f"Giving up after {max_attempts} attempts (theme={theme!r}, difficulty={difficulty!r})")
        raise GenerationExhaustedError(max_attempts, failures)


# Convenience function for one-off generation
async def generate_config(
    client: ChatCompletionClient,
    theme: str,
    difficulty: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Configuration:
    """Generate a validated configuration with the given client.

    This is a convenience wrapper around ConfigGenerator.generate_with_retry.
    """
    generator = ConfigGenerator(client)
    return await generator.generate_with_retry(theme, difficulty, max_attempts)
