"""Runtime configuration for Server Survival config generation.

This module reads generation settings from environment variables and
provides a factory for the chat-completion client. It is the only place
that looks up the API key; the client itself receives it as an argument.
"""

import logging
import os

from serversurvival.llm import ChatCompletionClient
from serversurvival.parameters import (
    DEFAULT_API_URL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)

# Default configuration (can be overridden via environment variables)
DEFAULT_RETRY_DELAY = 0.0


class MissingCredentialError(ValueError):
    """No API key was given and none is set in the environment."""


def get_api_key() -> str | None:
    """Get the API key from SERVER_SURVIVAL_API_KEY, falling back to OPENAI_API_KEY."""
    return os.environ.get("SERVER_SURVIVAL_API_KEY") or os.environ.get("OPENAI_API_KEY")


def get_api_url() -> str:
    """Get configured chat-completions URL from environment."""
    return os.environ.get("SERVER_SURVIVAL_API_URL", DEFAULT_API_URL)


def get_model() -> str:
    """Get configured model name from environment."""
    return os.environ.get("SERVER_SURVIVAL_MODEL", DEFAULT_MODEL)


def get_max_attempts() -> int:
    """Get configured attempt bound from environment."""
    value = _get_number("SERVER_SURVIVAL_MAX_ATTEMPTS", int, DEFAULT_MAX_ATTEMPTS)
    if value < 1:
        logger.warning(f"SERVER_SURVIVAL_MAX_ATTEMPTS={value} is below 1, using {DEFAULT_MAX_ATTEMPTS}")
        return DEFAULT_MAX_ATTEMPTS
    return value


def get_request_timeout() -> float:
    """Get configured request timeout in seconds from environment."""
    return _get_number("SERVER_SURVIVAL_REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT)


def get_retry_delay() -> float:
    """Get configured pause between attempts in seconds from environment."""
    return _get_number("SERVER_SURVIVAL_RETRY_DELAY", float, DEFAULT_RETRY_DELAY)


def create_client(api_key: str | None = None) -> ChatCompletionClient:
    """Factory function to create a chat-completion client.

    Args:
        api_key: Bearer credential. If None, uses environment config.

    Returns:
        ChatCompletionClient configured from the environment.

    Raises:
        MissingCredentialError: If no API key is available.
    """
    if api_key is None:
        api_key = get_api_key()
    if not api_key:
        raise MissingCredentialError(
            "No API key: pass one explicitly or set SERVER_SURVIVAL_API_KEY"
        )

    return ChatCompletionClient(
        api_key=api_key,
        model=get_model(),
        api_url=get_api_url(),
        timeout=get_request_timeout(),
    )


def _get_number(name: str, cast: type, default):
    """Read a numeric environment variable, falling back to default if unset or malformed."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}, using {default}")
        return default
