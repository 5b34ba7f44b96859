"""Anthropic Claude API client wrapper."""

import json
import logging
import time
from typing import Any, Optional

from anthropic import Anthropic, APIError, APIConnectionError, RateLimitError

from ..config import config
from ..errors import GenerationError

logger = logging.getLogger(__name__)


def extract_json(response: str) -> str:
    """Extract the JSON document from a response that may contain prose or fences."""
    if "```json" in response:
        start = response.find("```json") + 7
        end = response.find("```", start)
        if end > start:
            return response[start:end].strip()

    if "```" in response:
        start = response.find("```") + 3
        end = response.find("```", start)
        if end > start:
            return response[start:end].strip()

    # Raw object or array: the first span that decodes as JSON
    decoder = json.JSONDecoder()
    for start, char in enumerate(response):
        if char not in "{[":
            continue
        try:
            _, end = decoder.raw_decode(response, start)
        except json.JSONDecodeError:
            continue
        return response[start:end]

    return response.strip()


class AnthropicClient:
    """Client wrapper for Anthropic Claude API with retry logic."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
            max_retries: Maximum number of attempts for transient failures.
            retry_delay: Base delay between retries in seconds (exponential backoff).
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ValueError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var."
            )

        self._client = Anthropic(api_key=self._api_key)
        self._model = model or config.default_model
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Send one prompt and return the text of the reply.

        Rate limits and connection errors are retried with exponential
        backoff; other API errors are raised immediately.

        Raises:
            GenerationError: If the request fails after all retries.
        """
        messages = [{"role": "user", "content": prompt}]
        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": messages,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        last_error: Optional[Exception] = None
        for attempt in range(self._max_retries):
            try:
                logger.debug(
                    f"Sending request to Claude (attempt {attempt + 1}/{self._max_retries})"
                )
                response = self._client.messages.create(**kwargs)

                content = response.content[0]
                if hasattr(content, "text"):
                    return content.text
                return str(content)

            except (RateLimitError, APIConnectionError) as e:
                last_error = e
                if attempt == self._max_retries - 1:
                    break
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"{type(e).__name__}: {e}. Retrying in {delay:.1f}s...")
                time.sleep(delay)

            except APIError as e:
                logger.error(f"API error: {e}")
                raise GenerationError(f"Claude request failed: {e}") from e

        raise GenerationError(f"Claude request failed after {self._max_retries} attempts: {last_error}")

    def create_json(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> Any:
        """Send a prompt whose reply must be a JSON document and decode it.

        Raises:
            GenerationError: If the request fails or the reply is not JSON.
        """
        response = self.create_message(
            prompt=prompt,
            max_tokens=max_tokens,
            system=system,
            temperature=temperature,
        )
        try:
            return json.loads(extract_json(response))
        except json.JSONDecodeError as e:
            logger.debug(f"Raw response: {response}")
            raise GenerationError(f"Invalid JSON in response: {e}") from e
