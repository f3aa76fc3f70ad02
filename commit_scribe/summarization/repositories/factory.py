"""Factory for creating text generator instances."""

import os

from commit_scribe.config import load_env_file
from commit_scribe.summarization.repositories.fabric_generator import FabricCliGenerator
from commit_scribe.summarization.repositories.implementations import (
    LangChainClaudeGenerator,
    LangChainOpenAIGenerator,
)
from commit_scribe.summarization.repositories.interfaces import (
    GeneratorRepository,
    PromptRepository,
)


def create_generator(
    provider: str | None = None,
    prompt_repository: PromptRepository | None = None,
    fabric_timeout: float | None = None,
) -> GeneratorRepository:
    """
    Create a text generator based on configuration.

    Args:
        provider: Optional provider override. If not provided, uses the
                  LLM_PROVIDER environment variable (default: openai).
        prompt_repository: Source of system prompts for LangChain generators
        fabric_timeout: Per-call timeout in seconds for the fabric generator

    Returns:
        Generator instance (OpenAI, Claude or fabric)

    Raises:
        ValueError: If the provider is invalid or required API keys are missing
    """
    load_env_file()

    provider = (provider or os.getenv("LLM_PROVIDER", "openai")).lower()

    if provider == "openai" or provider == "gpt":
        return LangChainOpenAIGenerator(prompt_repository)
    elif provider == "anthropic" or provider == "claude":
        return LangChainClaudeGenerator(prompt_repository)
    elif provider == "fabric":
        return FabricCliGenerator(timeout=fabric_timeout)
    else:
        raise ValueError(
            f"Invalid LLM_PROVIDER: {provider}. "
            "Supported values: 'openai', 'gpt', 'anthropic', 'claude', 'fabric'"
        )
