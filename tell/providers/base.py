"""Abstract base class for LLM providers and the shared response models.

Providers are deliberately thin: they send a system prompt plus a message
sequence and hand back the raw reply text with usage. Turning that text into
a command is the job of ``tell.core.parser``.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field


class UsageInfo(BaseModel):
    """Token usage information from an LLM call.

    Attributes:
        model: The model that was used.
        input_tokens: Number of tokens in the prompt/input.
        output_tokens: Number of tokens in the completion/output.
    """

    model: str = Field(default="", description="Model used")
    input_tokens: int = Field(default=0, ge=0, description="Input/prompt tokens")
    output_tokens: int = Field(default=0, ge=0, description="Output/completion tokens")

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.input_tokens + self.output_tokens


class CommandResponse(BaseModel):
    """Structured command answer extracted from model output.

    Attributes:
        command: The shell command to run
        details: Explanation of what the command does
        show_details: Whether the model thinks the details are worth showing
    """

    command: str = Field(
        ...,
        description="The full executable command",
        min_length=1
    )

    details: str = Field(
        default="",
        description="Explanation of the command"
    )

    show_details: bool = Field(
        default=False,
        description="Whether details should be surfaced to the user"
    )

    def __str__(self) -> str:
        """String representation of the command response."""
        return f"CommandResponse(command='{self.command}')"


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    All provider implementations must inherit from this class and implement
    the send() method.
    """

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        """Initialize the LLM provider.

        Args:
            api_key: API key for the provider (if required)
            **kwargs: Additional provider-specific configuration
        """
        self.api_key = api_key
        self.config = kwargs

    @abstractmethod
    async def send(
        self,
        system_prompt: str,
        messages: list[dict],
    ) -> tuple[str, UsageInfo]:
        """Send one request to the model.

        Args:
            system_prompt: Instructions for the model
            messages: Conversation turns as {"role", "content"} dicts,
                ending with the new user prompt

        Returns:
            Tuple of (concatenated reply text, usage information)

        Raises:
            UpstreamError: If the API call fails or returns no content
        """
        pass
