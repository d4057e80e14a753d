"""Command generation orchestration logic.

One call to ``CommandGenerator.generate`` runs a single attempt:

    START -> [LOOKUP_PARENT] -> CALL_LLM -> PARSE_RESPONSE -> PERSIST -> DONE

A missing continuation parent aborts before the LLM is called. Upstream and
parse failures are still written to history before they are re-raised, and
a failure to write history is logged but never surfaced.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from tell.config import TellConfig
from tell.core.conversation import build_messages
from tell.core.parser import parse_command_response
from tell.core.prompt import build_system_prompt
from tell.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    ParseError,
    StorageError,
    UpstreamError,
)
from tell.providers.base import CommandResponse, LLMProvider, UsageInfo
from tell.storage.history import HistoryEntry, HistoryStore


logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of a successful generation.

    Attributes:
        response: Parsed command response
        usage: Token usage of the LLM call
        entry_id: History id of the logged entry, None if logging failed
        parent_id: Id of the entry this generation continued from
    """

    response: CommandResponse
    usage: UsageInfo
    entry_id: Optional[int] = None
    parent_id: Optional[int] = None


class CommandGenerator:
    """Orchestrates command generation and history logging.

    This class builds the request (optionally continuing from the most
    recent successful command), calls the LLM provider, parses the reply
    and records the attempt in history.
    """

    def __init__(
        self,
        config: Optional[TellConfig] = None,
        store: Optional[HistoryStore] = None,
        provider: Optional[LLMProvider] = None,
    ):
        """Initialize command generator.

        Args:
            config: TellConfig instance. If None, loads default config.
            store: HistoryStore to log to. If None, nothing is logged and
                continuation is unavailable.
            provider: LLM provider. If None, an AnthropicProvider is built
                from the configuration on first use.
        """
        self.config = config or TellConfig()
        self.store = store
        self._provider = provider

    def _get_provider(self) -> LLMProvider:
        """Get or create the LLM provider instance.

        Returns:
            Configured LLMProvider instance

        Raises:
            InvalidArgumentError: If the API key is missing
        """
        if self._provider is not None:
            return self._provider

        api_key = self.config.anthropic_api_key
        if not api_key:
            raise InvalidArgumentError(
                "Anthropic API key not set. "
                "Set ANTHROPIC_API_KEY or run 'tell config edit' to set it."
            )

        # Import here to avoid loading LiteLLM for history-only commands
        from tell.providers.anthropic import AnthropicProvider

        self._provider = AnthropicProvider(
            api_key=api_key,
            model=self.config.llm_model,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        return self._provider

    def _lookup_parent(self) -> HistoryEntry:
        """Resolve the entry a continuation builds on.

        Raises:
            NotFoundError: If history is unavailable or holds no
                successful command
            StorageError: If the history query fails
        """
        if self.store is None:
            raise NotFoundError("No previous command available: history is unavailable")

        parent = self.store.most_recent_successful()
        logger.debug(f"Continuing from previous command: id={parent.id}")
        return parent

    async def _call_llm(
        self,
        provider: LLMProvider,
        system_prompt: str,
        messages: list[dict],
    ) -> tuple[str, UsageInfo]:
        """Send the request, reporting any provider failure as UpstreamError."""
        try:
            return await provider.send(system_prompt, messages)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"LLM call failed: {e}", cause=e) from e

    def _record(
        self,
        prompt: str,
        response: Optional[CommandResponse],
        usage: Optional[UsageInfo],
        error_message: str,
        parent_id: Optional[int],
    ) -> Optional[int]:
        """Write the attempt to history, swallowing storage failures.

        Returns:
            The new entry id, or None when history is unavailable or the
            write failed
        """
        if self.store is None:
            return None

        try:
            return self.store.add(
                prompt,
                response=response,
                usage=usage,
                error_message=error_message,
                parent_id=parent_id,
            )
        except StorageError as e:
            logger.error(f"Failed to save to history: {e}")
            return None

    async def generate(
        self,
        prompt: str,
        continue_conversation: bool = False,
        include_context: bool = False,
        on_parent: Optional[Callable[[HistoryEntry], None]] = None,
    ) -> GenerationResult:
        """Generate a shell command from natural language.

        Args:
            prompt: User's natural language request
            continue_conversation: Build on the most recent successful command
            include_context: Describe the working directory to the model
            on_parent: Called with the continuation parent before the LLM
                is contacted

        Returns:
            GenerationResult with the parsed command and usage

        Raises:
            InvalidArgumentError: If the prompt is empty or no API key is set
            NotFoundError: If continuation was requested without a parent
            StorageError: If looking up the continuation parent fails
            UpstreamError: If the LLM call fails (after logging to history)
            ParseError: If the reply is malformed (after logging to history)
        """
        if not prompt or not prompt.strip():
            raise InvalidArgumentError("Prompt cannot be empty")

        provider = self._get_provider()

        parent = self._lookup_parent() if continue_conversation else None
        parent_id = parent.id if parent is not None else None
        if parent is not None and on_parent is not None:
            on_parent(parent)

        system_prompt = build_system_prompt(self.config, include_context=include_context)
        messages = build_messages(prompt, parent)

        logger.debug(
            f"Generating command: prompt_length={len(prompt)}, "
            f"continuation={parent is not None}, include_context={include_context}"
        )

        usage: Optional[UsageInfo] = None
        try:
            text, usage = await self._call_llm(provider, system_prompt, messages)
            response = parse_command_response(text)
        except (UpstreamError, ParseError) as e:
            logger.error(f"Failed to generate command: {e}")
            if usage is None:
                usage = getattr(e, "usage", None)
            self._record(prompt, None, usage, str(e), parent_id)
            raise

        entry_id = self._record(prompt, response, usage, "", parent_id)

        return GenerationResult(
            response=response,
            usage=usage,
            entry_id=entry_id,
            parent_id=parent_id,
        )
