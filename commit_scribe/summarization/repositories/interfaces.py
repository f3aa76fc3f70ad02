"""Repository interfaces for text generation and prompt templates."""

from abc import ABC, abstractmethod

from commit_scribe.summarization.domain.value_objects import GenerationRequest


class GeneratorRepository(ABC):
    """Interface for the external text generation capability."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """
        Generate text for a prompt and content.

        Args:
            request: Prompt identifier, content and sampling parameters

        Returns:
            Generated text, possibly surrounded by whitespace

        Raises:
            RuntimeError: If the call fails for any reason (transport,
                authentication, rate limit, timeout)
        """
        ...


class PromptRepository(ABC):
    """Interface for resolving prompt identifiers to template bodies."""

    @abstractmethod
    def get_template(self, prompt_id: str) -> str:
        """
        Get the body of a prompt template.

        Args:
            prompt_id: Identifier of the template

        Returns:
            Template text used as system prompt

        Raises:
            FileNotFoundError: If no template exists for the identifier
        """
        ...
