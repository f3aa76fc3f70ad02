"""Concrete implementations of text generation using LangChain."""

import os

from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from commit_scribe.config import load_env_file
from commit_scribe.logging_config import get_logger
from commit_scribe.summarization.domain.exceptions import MissingApiKeyError
from commit_scribe.summarization.domain.value_objects import GenerationRequest
from commit_scribe.summarization.repositories.base_langchain_generator import (
    BaseLangChainGenerator,
    clamp,
)
from commit_scribe.summarization.repositories.interfaces import PromptRepository

logger = get_logger(__name__)


class LangChainOpenAIGenerator(BaseLangChainGenerator):
    """LangChain implementation using OpenAI chat models."""

    def __init__(self, prompt_repository: PromptRepository | None = None) -> None:
        """
        Initialize the OpenAI generator with API key from environment.

        Args:
            prompt_repository: Source of system prompts

        Raises:
            MissingApiKeyError: If OPENAI_API_KEY is not set
        """
        load_env_file()

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise MissingApiKeyError(
                "OPENAI_API_KEY environment variable is required. "
                "Please set it in a .env file or as an environment variable. "
                "See .env.example for reference."
            )
        self._api_key = api_key

        super().__init__(prompt_repository)

    def _create_chat_model(self, request: GenerationRequest) -> ChatOpenAI:
        return ChatOpenAI(  # type: ignore[call-arg]
            model=request.model,
            api_key=self._api_key,
            temperature=clamp(request.temperature, 0.0, 2.0),
            top_p=clamp(request.top_p, 0.0, 1.0),
            presence_penalty=clamp(request.presence_penalty, -2.0, 2.0),
            frequency_penalty=clamp(request.frequency_penalty, -2.0, 2.0),
        )


class LangChainClaudeGenerator(BaseLangChainGenerator):
    """LangChain implementation using Claude chat models."""

    def __init__(self, prompt_repository: PromptRepository | None = None) -> None:
        """
        Initialize the Claude generator with API key from environment.

        Args:
            prompt_repository: Source of system prompts

        Raises:
            MissingApiKeyError: If ANTHROPIC_API_KEY is not set
        """
        load_env_file()

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise MissingApiKeyError(
                "ANTHROPIC_API_KEY environment variable is required. "
                "Please set it in a .env file or as an environment variable. "
                "See .env.example for reference."
            )
        self._api_key = api_key

        super().__init__(prompt_repository)

    def _create_chat_model(self, request: GenerationRequest) -> ChatAnthropic:
        if request.presence_penalty or request.frequency_penalty:
            logger.debug("penalties_ignored", provider="anthropic", model=request.model)

        options: dict[str, float] = {"temperature": clamp(request.temperature, 0.0, 1.0)}
        # top_p is only sent when narrowed below its default
        if request.top_p < 1.0:
            options["top_p"] = clamp(request.top_p, 0.0, 1.0)

        return ChatAnthropic(  # type: ignore[call-arg]
            model_name=request.model,
            api_key=self._api_key,
            **options,
        )
