"""Anthropic (Claude) LLM provider implementation using LiteLLM."""

import logging
from typing import Optional

from litellm import acompletion

from tell.exceptions import UpstreamError
from tell.providers.base import LLMProvider, UsageInfo


logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """Anthropic (Claude) LLM provider using LiteLLM.

    Supports Claude 3 and newer models through LiteLLM's unified interface.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-3-haiku-20240307",
        max_tokens: int = 1000,
        temperature: float = 0.1,
        **kwargs
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model name (e.g., claude-3-haiku-20240307)
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature (0.0 to 1.0)
            **kwargs: Additional LiteLLM parameters
        """
        super().__init__(api_key=api_key, **kwargs)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def send(
        self,
        system_prompt: str,
        messages: list[dict],
    ) -> tuple[str, UsageInfo]:
        """Send a request to Anthropic Claude.

        Args:
            system_prompt: Instructions for the model
            messages: Conversation turns ending with the new user prompt

        Returns:
            Tuple of (reply text, usage information)

        Raises:
            UpstreamError: If the API call fails or the reply is empty
        """
        request_params = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "api_key": self.api_key,
            **self.config,
        }

        logger.debug(
            f"Sending request to LLM: model={self.model}, "
            f"messages={len(messages)}"
        )

        try:
            response = await acompletion(**request_params)
        except Exception as e:
            logger.error(f"LLM API request failed: {e}")
            raise UpstreamError(f"Anthropic API call failed: {e}", cause=e) from e

        usage = self._extract_usage(response)
        logger.debug(
            f"Received response from LLM: input_tokens={usage.input_tokens}, "
            f"output_tokens={usage.output_tokens}"
        )

        if not response.choices:
            raise UpstreamError("Empty response from API", usage=usage)

        content = response.choices[0].message.content
        if not content:
            raise UpstreamError("Empty response from API", usage=usage)

        return content, usage

    def _extract_usage(self, response) -> UsageInfo:
        """Build UsageInfo from a LiteLLM response.

        Args:
            response: LiteLLM ModelResponse

        Returns:
            UsageInfo, with zero counts when the response carries no usage
        """
        model = getattr(response, "model", None) or self.model
        usage = getattr(response, "usage", None)
        if not usage:
            return UsageInfo(model=model)

        return UsageInfo(
            model=model,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )
