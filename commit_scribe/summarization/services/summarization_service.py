"""Summarization service turning a raw diff into a commit message."""

from commit_scribe.git.domain.value_objects import DiffSegment, SegmentBudget
from commit_scribe.git.services.diff_segmenter import DiffSegmenter
from commit_scribe.git.services.token_estimator import HeuristicTokenEstimator, TokenEstimator
from commit_scribe.logging_config import get_logger
from commit_scribe.summarization.domain.value_objects import GenerationParameters, PromptNames
from commit_scribe.summarization.repositories.interfaces import (
    GeneratorRepository,
    PromptRepository,
)
from commit_scribe.summarization.repositories.prompt_repository import FilePromptRepository
from commit_scribe.summarization.services.generation_orchestrator import (
    DEFAULT_COMBINE_BUDGET,
    GenerationOrchestrator,
)

logger = get_logger(__name__)


class SummarizationService:
    """Service for generating a commit message from diff text."""

    def __init__(
        self,
        generator: GeneratorRepository,
        prompt_repository: PromptRepository | None = None,
        token_estimator: TokenEstimator | None = None,
        segment_budget: SegmentBudget | None = None,
        combine_budget: int = DEFAULT_COMBINE_BUDGET,
        max_concurrency: int | None = None,
        commit_prompt_id: str = PromptNames.COMMIT,
    ) -> None:
        """
        Initialize SummarizationService.

        Args:
            generator: Capability producing text for a prompt and content
            prompt_repository: Source of prompt templates. Defaults to the bundled ones
            token_estimator: Estimator shared by segmentation and combination
            segment_budget: Per-segment token limits. Defaults to SegmentBudget()
            combine_budget: Token budget of a single combine call
            max_concurrency: Maximum number of concurrent segment calls
            commit_prompt_id: Prompt writing the final commit message
        """
        prompt_repository = prompt_repository or FilePromptRepository()
        token_estimator = token_estimator or HeuristicTokenEstimator()

        self._commit_prompt_id = commit_prompt_id
        self._segmenter = DiffSegmenter(segment_budget, token_estimator)
        self._orchestrator = GenerationOrchestrator(
            generator,
            prompt_repository,
            token_estimator,
            combine_budget=combine_budget,
            max_concurrency=max_concurrency,
        )

    def segment_diff(self, diff_text: str) -> tuple[DiffSegment, ...]:
        """
        Split a diff into the segments that would be summarized.

        Args:
            diff_text: Raw unified diff text

        Returns:
            Ordered segments

        Raises:
            ValueError: If the diff is empty
        """
        if not diff_text.strip():
            raise ValueError("Cannot summarize an empty diff")
        return self._segmenter.segment(diff_text)

    async def summarize_diff(self, diff_text: str, parameters: GenerationParameters) -> str:
        """
        Generate a commit message for a diff.

        Args:
            diff_text: Raw unified diff text
            parameters: Model and sampling parameters

        Returns:
            Commit message text

        Raises:
            ValueError: If the diff is empty
            SummarizationError: If generation fails beyond the fallback rules
        """
        segments = self.segment_diff(diff_text)
        if len(segments) > 1:
            logger.info("large_diff_split", segments=len(segments))

        return await self._orchestrator.generate(
            segments,
            parameters,
            per_segment_prompt_id=PromptNames.CHUNK,
            combine_prompt_id=self._commit_prompt_id,
            single_segment_prompt_id=self._commit_prompt_id,
            group_prompt_id=PromptNames.BREVITY,
        )
