"""Orchestration of per-segment generation and budget-aware combination."""

import asyncio
from collections.abc import Sequence

from commit_scribe.git.domain.value_objects import DiffSegment
from commit_scribe.git.services.token_estimator import HeuristicTokenEstimator, TokenEstimator
from commit_scribe.logging_config import get_logger
from commit_scribe.summarization.domain.exceptions import (
    BudgetNotSatisfiable,
    CombineFailure,
    EmptyResult,
    GenerationFailure,
)
from commit_scribe.summarization.domain.value_objects import (
    GenerationParameters,
    PartialResult,
    PromptNames,
)
from commit_scribe.summarization.repositories.interfaces import (
    GeneratorRepository,
    PromptRepository,
)
from commit_scribe.summarization.repositories.prompt_repository import FilePromptRepository

DEFAULT_COMBINE_BUDGET = 128000
DEFAULT_MAX_COMBINE_DEPTH = 8

logger = get_logger(__name__)


class GenerationOrchestrator:
    """Turns an ordered list of diff segments into a single generated text.

    Segments are summarized concurrently, reassembled in their original
    order and combined with one more call. When the combined summaries do
    not fit the combine budget they are grouped and re-summarized until
    they do.
    """

    def __init__(
        self,
        generator: GeneratorRepository,
        prompt_repository: PromptRepository | None = None,
        token_estimator: TokenEstimator | None = None,
        combine_budget: int = DEFAULT_COMBINE_BUDGET,
        max_combine_depth: int = DEFAULT_MAX_COMBINE_DEPTH,
        group_budget_ratio: float = 0.5,
        max_concurrency: int | None = None,
    ) -> None:
        """
        Initialize GenerationOrchestrator.

        Args:
            generator: Capability producing text for a prompt and content
            prompt_repository: Source of template bodies, used for budgeting
            token_estimator: Estimator used for budget decisions
            combine_budget: Token budget of a single combine call
            max_combine_depth: Maximum nesting of regrouping passes
            group_budget_ratio: Fraction of the combine budget a group of
                                summaries may use when regrouping
            max_concurrency: Maximum number of concurrent segment calls.
                             None runs every segment at once.
        """
        if combine_budget <= 0:
            raise ValueError("combine_budget must be positive")
        if not 0 < group_budget_ratio <= 1:
            raise ValueError("group_budget_ratio must be in (0, 1]")
        if max_concurrency is not None and max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")

        self._generator = generator
        self._prompt_repository = prompt_repository or FilePromptRepository()
        self._estimator = token_estimator or HeuristicTokenEstimator()
        self._combine_budget = combine_budget
        self._max_combine_depth = max_combine_depth
        self._group_budget_ratio = group_budget_ratio
        self._max_concurrency = max_concurrency

    async def generate(
        self,
        segments: Sequence[DiffSegment],
        parameters: GenerationParameters,
        per_segment_prompt_id: str = PromptNames.CHUNK,
        combine_prompt_id: str = PromptNames.COMMIT,
        single_segment_prompt_id: str | None = None,
        group_prompt_id: str | None = None,
    ) -> str:
        """
        Generate the final text for a list of segments.

        Args:
            segments: Segments in diff order
            parameters: Model and sampling parameters for every call
            per_segment_prompt_id: Prompt summarizing one segment
            combine_prompt_id: Prompt merging tagged summaries into the result
            single_segment_prompt_id: Prompt used when there is only one
                                      segment. Defaults to per_segment_prompt_id
            group_prompt_id: Prompt condensing a group of summaries when the
                             combined text overflows. Defaults to combine_prompt_id

        Returns:
            Generated text, stripped of surrounding whitespace

        Raises:
            ValueError: If no segment is given
            GenerationFailure: If a segment or group summary call fails
            EmptyResult: If no segment produced any text
            BudgetNotSatisfiable: If summaries cannot be reduced under budget
        """
        if not segments:
            raise ValueError("At least one segment is required")

        if len(segments) == 1:
            return await self._generate_single(
                segments[0], parameters, single_segment_prompt_id or per_segment_prompt_id
            )

        partial_results = await self._generate_partial_results(
            segments, parameters, per_segment_prompt_id
        )
        return await self._combine_partial_results(
            partial_results,
            parameters,
            combine_prompt_id,
            group_prompt_id or combine_prompt_id,
        )

    async def _generate_single(
        self, segment: DiffSegment, parameters: GenerationParameters, prompt_id: str
    ) -> str:
        logger.info("generating_single_segment", label=segment.label, prompt_id=prompt_id)
        try:
            text = await self._generator.generate(parameters.to_request(prompt_id, segment.content))
        except Exception as e:
            raise GenerationFailure(
                f"Failed to generate text for segment '{segment.label}': {str(e)}", (0,)
            ) from e

        text = text.strip()
        if not text:
            raise EmptyResult(f"Generation returned no text for segment '{segment.label}'")
        return text

    async def _generate_partial_results(
        self,
        segments: Sequence[DiffSegment],
        parameters: GenerationParameters,
        prompt_id: str,
    ) -> list[PartialResult]:
        """Summarize all segments concurrently and reassemble them by index."""
        total = len(segments)
        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
        logger.info("generating_segments", segments=total, max_concurrency=self._max_concurrency)

        async def summarize(index: int, segment: DiffSegment) -> str:
            request = parameters.to_request(prompt_id, segment.content)
            if semaphore is None:
                text = await self._generator.generate(request)
            else:
                async with semaphore:
                    text = await self._generator.generate(request)
            logger.debug("segment_generated", segment=index + 1, total=total, label=segment.label)
            return text

        # Every task runs to completion; outcomes keep the segment order
        outcomes = await asyncio.gather(
            *(summarize(index, segment) for index, segment in enumerate(segments)),
            return_exceptions=True,
        )

        failed = tuple(
            index for index, outcome in enumerate(outcomes) if isinstance(outcome, BaseException)
        )
        if failed:
            first_error = outcomes[failed[0]]
            failed_labels = ", ".join(f"{index + 1} ({segments[index].label})" for index in failed)
            raise GenerationFailure(
                f"Generation failed for {len(failed)} of {total} segments "
                f"[{failed_labels}]: {str(first_error)}",
                failed,
            ) from first_error  # type: ignore[misc]

        partial_results = [
            PartialResult(index=index, label=segments[index].label, text=str(outcome).strip())
            for index, outcome in enumerate(outcomes)
        ]
        partial_results = [result for result in partial_results if result.text]
        if not partial_results:
            raise EmptyResult(f"Failed to generate text: no segment succeeded out of {total}")

        return partial_results

    async def _combine_partial_results(
        self,
        partial_results: list[PartialResult],
        parameters: GenerationParameters,
        combine_prompt_id: str,
        group_prompt_id: str,
    ) -> str:
        """Combine tagged summaries, falling back to the first one if the final call fails."""
        tagged_lines = [result.tagged_line for result in partial_results]
        try:
            return await self._reduce(
                tagged_lines,
                parameters,
                combine_prompt_id,
                group_prompt_id,
                depth=0,
                is_final=True,
            )
        except CombineFailure as e:
            logger.warning(
                "combine_failed_using_first_summary",
                error=str(e),
                label=partial_results[0].label,
            )
            return partial_results[0].text

    async def _reduce(
        self,
        lines: list[str],
        parameters: GenerationParameters,
        prompt_id: str,
        group_prompt_id: str,
        depth: int,
        is_final: bool,
    ) -> str:
        """
        Reduce summary lines to one text that was generated within budget.

        Args:
            lines: Summaries to combine, in order
            parameters: Model and sampling parameters
            prompt_id: Prompt combining the lines
            group_prompt_id: Prompt condensing groups when the lines overflow
            depth: Current regrouping depth
            is_final: Whether the resulting call produces the final text

        Returns:
            Combined text

        Raises:
            CombineFailure: If the final combine call fails or is empty
            GenerationFailure: If a group summary call fails or is empty
            BudgetNotSatisfiable: If the lines cannot be brought under budget
        """
        combined = "\n\n".join(lines)
        template_tokens = self._template_tokens(prompt_id)
        combined_tokens = template_tokens + self._estimator.estimate(combined)

        if combined_tokens <= self._combine_budget:
            return await self._generate_combined(combined, parameters, prompt_id, is_final)

        if len(lines) == 1:
            raise BudgetNotSatisfiable(
                f"A single summary of {combined_tokens} tokens exceeds the combine "
                f"budget of {self._combine_budget} tokens"
            )
        if depth >= self._max_combine_depth:
            raise BudgetNotSatisfiable(
                f"Summaries still use {combined_tokens} tokens after {depth} regrouping "
                f"passes (budget {self._combine_budget})"
            )

        groups = self._group_lines(lines, group_prompt_id)
        if len(groups) == 1:
            raise BudgetNotSatisfiable(
                f"Regrouping {len(lines)} summaries made no progress towards the combine "
                f"budget of {self._combine_budget} tokens"
            )

        logger.info(
            "combine_budget_exceeded_regrouping",
            tokens=combined_tokens,
            budget=self._combine_budget,
            summaries=len(lines),
            groups=len(groups),
            depth=depth,
        )

        # Groups are condensed one after another to keep the narrative order
        group_summaries: list[str] = []
        for group in groups:
            group_summaries.append(
                await self._reduce(
                    group,
                    parameters,
                    group_prompt_id,
                    group_prompt_id,
                    depth=depth + 1,
                    is_final=False,
                )
            )

        return await self._reduce(
            group_summaries,
            parameters,
            prompt_id,
            group_prompt_id,
            depth=depth + 1,
            is_final=is_final,
        )

    def _group_lines(self, lines: list[str], prompt_id: str) -> list[list[str]]:
        """Split lines into consecutive groups under the group budget."""
        threshold = self._combine_budget * self._group_budget_ratio
        template_tokens = self._template_tokens(prompt_id)

        groups: list[list[str]] = []
        current_group: list[str] = []
        current_tokens = template_tokens

        for line in lines:
            line_tokens = self._estimator.estimate(line)
            if current_group and current_tokens + line_tokens > threshold:
                groups.append(current_group)
                current_group = []
                current_tokens = template_tokens
            current_group.append(line)
            current_tokens += line_tokens

        if current_group:
            groups.append(current_group)

        return groups

    def _template_tokens(self, prompt_id: str) -> int:
        """Estimate the size of a prompt template, 0 when it is not available locally."""
        try:
            template = self._prompt_repository.get_template(prompt_id)
        except FileNotFoundError as e:
            logger.warning("prompt_template_not_found", prompt_id=prompt_id, error=str(e))
            return 0
        return self._estimator.estimate(template)

    async def _generate_combined(
        self,
        combined: str,
        parameters: GenerationParameters,
        prompt_id: str,
        is_final: bool,
    ) -> str:
        error_type = CombineFailure if is_final else GenerationFailure
        try:
            text = await self._generator.generate(parameters.to_request(prompt_id, combined))
        except Exception as e:
            raise error_type(f"Failed to combine summaries with '{prompt_id}': {str(e)}") from e

        text = text.strip()
        if not text:
            raise error_type(f"Combining summaries with '{prompt_id}' returned no text")
        return text
