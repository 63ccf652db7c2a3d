"""LLM utilities for chat-completion endpoints.

This module provides the client used to talk to an OpenAI-compatible
chat-completion API. All LLM calls in this project should go through it.

The client makes exactly one HTTP request per call and never retries;
retrying is the caller's decision (see generation.config_generator).
The bearer credential is passed in by the caller, the client never looks it
up itself.
"""

import json
import logging
import re
from typing import Any

import httpx

from serversurvival.parameters import (
    DEFAULT_API_URL,
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)

# Models sometimes wrap JSON in a Markdown fence despite being told not to
_CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n(.*?)\n\s*```$", re.DOTALL)


class LLMError(Exception):
    """Base class for failures talking to the text-generation service."""


class TransportError(LLMError):
    """The service could not be reached or answered with a non-success status.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        body: Response body text, or the network error message.
    """

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Chat completion request failed: {body}"
        else:
            message = f"Chat completion request failed: {status_code} {body}"
        super().__init__(message)


class MalformedReplyError(LLMError):
    """The service replied, but not with the expected JSON content.

    Attributes:
        raw_text: The reply text that could not be parsed.
    """

    def __init__(self, message: str, raw_text: str | None = None):
        self.raw_text = raw_text
        if raw_text is not None:
            message = f"{message}\nResponse was: {raw_text}"
        super().__init__(message)


def extract_json_text(text: str) -> str:
    """Strip surrounding whitespace and a Markdown code fence, if present."""
    text = text.strip()
    match = _CODE_FENCE_PATTERN.match(text)
    if match:
        return match.group(1).strip()
    return text


def parse_json_reply(text: str) -> Any:
    """Parse reply text into a generic JSON value.

    json.loads also raises plain ValueError for integer literals past the
    int conversion limit and RecursionError for very deep nesting.

    Raises:
        MalformedReplyError: If the text is not valid JSON.
    """
    try:
        return json.loads(extract_json_text(text))
    except (ValueError, RecursionError) as e:
        logger.error(f"Failed to parse JSON: {e}\nRaw response: {text[:500]}")
        raise MalformedReplyError(f"Failed to parse JSON from model response: {e}", text) from e


class ChatCompletionClient:
    """Client for a chat-completion endpoint with consistent configuration.

    Example:
        >>> async with ChatCompletionClient(api_key="sk-...") as client:
        ...     data = await client.generate_json(
        ...         system_prompt="Reply with a JSON object.",
        ...         user_prompt="Theme: space Difficulty: hard",
        ...     )
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Bearer credential for the endpoint.
            model: Model name sent with every request.
            api_url: Full URL of the chat-completions endpoint.
            timeout: Seconds to wait for a reply.
            http_client: Optional shared httpx client. The caller keeps
                ownership and must close it.
        """
        self.model = model
        self.api_url = api_url
        self._api_key = api_key
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "ChatCompletionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    def build_request_body(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        """Build the chat-completion request body."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat-completion request and return the first reply text.

        Args:
            system_prompt: Instruction sent with the system role.
            user_prompt: Instruction sent with the user role.

        Returns:
            The content of the first choice's message.

        Raises:
            TransportError: On network failure or a non-success status.
            MalformedReplyError: If the body lacks choices[0].message.content.
        """
        body = self.build_request_body(system_prompt, user_prompt)
        logger.debug(
            f"complete: model={self.model}, system={len(system_prompt)} chars, "
            f"user={len(user_prompt)} chars"
        )

        try:
            response = await self._http_client.post(
                self.api_url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self._api_key}",
                },
            )
        except httpx.RequestError as e:
            raise TransportError(None, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise TransportError(response.status_code, response.text)

        try:
            data = response.json()
        except (ValueError, RecursionError) as e:
            raise MalformedReplyError(f"Response is not valid JSON: {e}", response.text) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedReplyError(
                f"Response has no choices[0].message.content ({type(e).__name__}: {e})",
                response.text,
            ) from e

        if not isinstance(content, str):
            raise MalformedReplyError("Reply content is not text", response.text)
        return content

    async def generate_json(self, system_prompt: str, user_prompt: str) -> Any:
        """Send one request and parse the reply text as JSON.

        The parsed value is not checked against any schema.

        Raises:
            TransportError: On network failure or a non-success status.
            MalformedReplyError: If the reply is missing or not valid JSON.
        """
        text = await self.complete(system_prompt, user_prompt)
        return parse_json_reply(text)
