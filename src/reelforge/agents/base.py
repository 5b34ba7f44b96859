"""Base agent abstraction."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..services.anthropic import AnthropicClient
from ..config import config

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Abstract base class for agents backed by Claude.

    Provides the shared client, model selection and JSON round trip.
    Subclasses define the system prompt and their own operations.
    """

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: AnthropicClient instance. Created if not provided.
            model: Model to use. Defaults to config.default_model.
        """
        self._model = model or config.default_model
        self._client = client or AnthropicClient(model=self._model)
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        ...

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def _ask_json(
        self,
        prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> Any:
        """Send ``prompt`` with the agent's system prompt and decode the JSON reply.

        Raises:
            GenerationError: If the call fails or the reply is not JSON.
        """
        self._logger.debug(f"Creating message with prompt length: {len(prompt)}")

        try:
            data = self._client.create_json(
                prompt=prompt,
                max_tokens=max_tokens,
                system=self.system_prompt,
                temperature=temperature,
            )
        except Exception as e:
            self._logger.error(f"Error creating message: {e}")
            raise

        self._logger.debug(f"Received {type(data).__name__} response")
        return data
