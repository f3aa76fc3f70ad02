"""Base class for LangChain-based text generators."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from langchain_core.messages import HumanMessage, SystemMessage

from commit_scribe.logging_config import get_logger
from commit_scribe.summarization.domain.value_objects import GenerationRequest
from commit_scribe.summarization.repositories.interfaces import (
    GeneratorRepository,
    PromptRepository,
)
from commit_scribe.summarization.repositories.prompt_repository import FilePromptRepository

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

logger = get_logger(__name__)

ModelKey = tuple[str, float, float, float, float]


def clamp(value: float, lower: float, upper: float) -> float:
    """Restrict a value to the inclusive range [lower, upper]."""
    return max(lower, min(upper, value))


class BaseLangChainGenerator(GeneratorRepository, ABC):
    """Base class for generators backed by a LangChain chat model."""

    def __init__(self, prompt_repository: PromptRepository | None = None) -> None:
        """Initialize the base generator with common configuration.

        Args:
            prompt_repository: Source of system prompts.
                               Defaults to the bundled templates.
        """
        self._prompt_repository = prompt_repository or FilePromptRepository()
        self._models: dict[ModelKey, BaseChatModel] = {}

    @abstractmethod
    def _create_chat_model(self, request: GenerationRequest) -> "BaseChatModel":
        """Create a chat model configured with the request's sampling parameters."""
        ...

    def _get_chat_model(self, request: GenerationRequest) -> "BaseChatModel":
        key = (
            request.model,
            request.temperature,
            request.top_p,
            request.presence_penalty,
            request.frequency_penalty,
        )
        if key not in self._models:
            self._models[key] = self._create_chat_model(request)
        return self._models[key]

    async def generate(self, request: GenerationRequest) -> str:
        """
        Generate text using the request's prompt template as system message.

        Args:
            request: Prompt identifier, content and sampling parameters

        Returns:
            Generated text

        Raises:
            RuntimeError: If the template cannot be loaded or the LLM API call fails
        """
        try:
            messages = [
                SystemMessage(content=self._prompt_repository.get_template(request.prompt_id)),
                HumanMessage(content=request.content),
            ]
            logger.debug("llm_request", prompt_id=request.prompt_id, model=request.model)

            response = await self._get_chat_model(request).ainvoke(messages)
            return self._extract_text(response.content)
        except Exception as e:
            raise RuntimeError(
                f"Failed to generate text with prompt '{request.prompt_id}': {str(e)}"
            ) from e

    @staticmethod
    def _extract_text(content: Any) -> str:
        """Flatten a chat message content into plain text."""
        if isinstance(content, str):
            return content
        elif isinstance(content, list):
            # If content is a list, extract text from it
            return " ".join(
                str(item) if isinstance(item, str) else str(item.get("text", ""))
                for item in content
            )
        else:
            # Fallback: convert any other type to string
            return str(content)
