import pytest
from conftest import FakeGenerator

from commit_scribe.git.domain.value_objects import DiffSegment, FileChangeType
from commit_scribe.git.services.token_estimator import HeuristicTokenEstimator
from commit_scribe.summarization.domain.exceptions import (
    BudgetNotSatisfiable,
    EmptyResult,
    GenerationFailure,
)
from commit_scribe.summarization.domain.value_objects import PromptNames
from commit_scribe.summarization.services.generation_orchestrator import GenerationOrchestrator


def _segments(count: int) -> list[DiffSegment]:
    return [
        DiffSegment(
            label=f"file{index}.py",
            content=f"diff-{index}",
            line_count=1,
            change_type=FileChangeType.MODIFIED,
        )
        for index in range(count)
    ]


def _index_of(content: str) -> int:
    return int(content.rsplit("-", 1)[1])


def _orchestrator(generator, prompt_repository, **kwargs) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        generator,
        prompt_repository,
        HeuristicTokenEstimator(),
        **kwargs,
    )


class TestSingleSegment:
    @pytest.mark.asyncio
    async def test_single_segment_uses_one_call(self, prompt_repository, parameters):
        generator = FakeGenerator(lambda request: "  Add feature\n")
        orchestrator = _orchestrator(generator, prompt_repository)

        result = await orchestrator.generate(_segments(1), parameters)

        assert result == "Add feature"
        assert len(generator.requests) == 1
        request = generator.requests[0]
        assert request.prompt_id == PromptNames.CHUNK
        assert request.content == "diff-0"
        assert request.model == "test-model"
        assert request.temperature == 0.5
        assert request.top_p == 0.9

    @pytest.mark.asyncio
    async def test_single_segment_prompt_can_be_overridden(self, prompt_repository, parameters):
        generator = FakeGenerator()
        orchestrator = _orchestrator(generator, prompt_repository)

        await orchestrator.generate(
            _segments(1), parameters, single_segment_prompt_id=PromptNames.COMMIT
        )

        assert [request.prompt_id for request in generator.requests] == [PromptNames.COMMIT]

    @pytest.mark.asyncio
    async def test_single_segment_failure(self, prompt_repository, parameters):
        generator = FakeGenerator(lambda request: RuntimeError("backend down"))
        orchestrator = _orchestrator(generator, prompt_repository)

        with pytest.raises(GenerationFailure) as excinfo:
            await orchestrator.generate(_segments(1), parameters)

        assert excinfo.value.failed_indices == (0,)
        assert "backend down" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_single_segment_blank_result(self, prompt_repository, parameters):
        generator = FakeGenerator(lambda request: "   ")
        orchestrator = _orchestrator(generator, prompt_repository)

        with pytest.raises(EmptyResult):
            await orchestrator.generate(_segments(1), parameters)

    @pytest.mark.asyncio
    async def test_no_segments_is_rejected(self, prompt_repository, parameters):
        orchestrator = _orchestrator(FakeGenerator(), prompt_repository)

        with pytest.raises(ValueError):
            await orchestrator.generate([], parameters)


class TestParallelGeneration:
    @pytest.mark.asyncio
    async def test_results_are_combined_in_segment_order(self, prompt_repository, parameters):
        def responder(request):
            if request.prompt_id == PromptNames.CHUNK:
                return f"summary of {request.content}"
            return "final message"

        generator = FakeGenerator(
            responder,
            delay=lambda request: (
                (4 - _index_of(request.content)) * 0.01
                if request.prompt_id == PromptNames.CHUNK
                else 0.0
            ),
        )
        orchestrator = _orchestrator(generator, prompt_repository)

        result = await orchestrator.generate(_segments(4), parameters)

        assert result == "final message"
        completed_chunks = [
            request.content
            for request in generator.completed
            if request.prompt_id == PromptNames.CHUNK
        ]
        assert completed_chunks == ["diff-3", "diff-2", "diff-1", "diff-0"]

        combine_calls = generator.calls_for(PromptNames.COMMIT)
        assert len(combine_calls) == 1
        assert combine_calls[0].content == "\n\n".join(
            f"Segment {index + 1} (file{index}.py): summary of diff-{index}"
            for index in range(4)
        )

    @pytest.mark.asyncio
    async def test_segments_run_concurrently(self, prompt_repository, parameters):
        generator = FakeGenerator(delay=lambda request: 0.01)
        orchestrator = _orchestrator(generator, prompt_repository)

        await orchestrator.generate(_segments(5), parameters)

        assert generator.max_in_flight == 5

    @pytest.mark.asyncio
    async def test_concurrency_limit_is_respected(self, prompt_repository, parameters):
        generator = FakeGenerator(delay=lambda request: 0.01)
        orchestrator = _orchestrator(generator, prompt_repository, max_concurrency=2)

        await orchestrator.generate(_segments(5), parameters)

        assert generator.max_in_flight == 2
        assert len(generator.calls_for(PromptNames.CHUNK)) == 5

    @pytest.mark.asyncio
    async def test_failed_segment_fails_the_run_after_all_complete(
        self, prompt_repository, parameters
    ):
        def responder(request):
            if request.content == "diff-2":
                return RuntimeError("rate limited")
            return "ok"

        generator = FakeGenerator(responder, delay=lambda request: 0.01)
        orchestrator = _orchestrator(generator, prompt_repository)

        with pytest.raises(GenerationFailure) as excinfo:
            await orchestrator.generate(_segments(5), parameters)

        assert excinfo.value.failed_indices == (2,)
        assert "3 (file2.py)" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert len(generator.completed) == 5
        assert generator.calls_for(PromptNames.COMMIT) == []

    @pytest.mark.asyncio
    async def test_blank_results_are_dropped(self, prompt_repository, parameters):
        def responder(request):
            if request.prompt_id == PromptNames.COMMIT:
                return "final"
            return "  " if request.content == "diff-0" else "second"

        generator = FakeGenerator(responder)
        orchestrator = _orchestrator(generator, prompt_repository)

        await orchestrator.generate(_segments(2), parameters)

        combine_call = generator.calls_for(PromptNames.COMMIT)[0]
        assert combine_call.content == "Segment 2 (file1.py): second"

    @pytest.mark.asyncio
    async def test_all_blank_results_is_empty(self, prompt_repository, parameters):
        generator = FakeGenerator(lambda request: "\n")
        orchestrator = _orchestrator(generator, prompt_repository)

        with pytest.raises(EmptyResult):
            await orchestrator.generate(_segments(3), parameters)

        assert generator.calls_for(PromptNames.COMMIT) == []


class TestCombine:
    @pytest.mark.asyncio
    async def test_combine_failure_falls_back_to_first_summary(
        self, prompt_repository, parameters
    ):
        def responder(request):
            if request.prompt_id == PromptNames.COMMIT:
                return RuntimeError("context too long")
            return f"summary of {request.content}"

        orchestrator = _orchestrator(FakeGenerator(responder), prompt_repository)

        result = await orchestrator.generate(_segments(3), parameters)

        assert result == "summary of diff-0"

    @pytest.mark.asyncio
    async def test_blank_combine_falls_back_to_first_summary(
        self, prompt_repository, parameters
    ):
        def responder(request):
            if request.prompt_id == PromptNames.COMMIT:
                return ""
            return "" if request.content == "diff-0" else f"summary of {request.content}"

        orchestrator = _orchestrator(FakeGenerator(responder), prompt_repository)

        result = await orchestrator.generate(_segments(3), parameters)

        assert result == "summary of diff-1"


    @pytest.mark.asyncio
    async def test_combine_prompt_without_local_template(self, prompt_repository, parameters):
        def responder(request):
            if request.prompt_id == "my_fabric_pattern":
                return "feat: combined"
            return f"summary of {request.content}"

        generator = FakeGenerator(responder)
        orchestrator = _orchestrator(generator, prompt_repository)

        result = await orchestrator.generate(
            _segments(2), parameters, combine_prompt_id="my_fabric_pattern"
        )

        assert result == "feat: combined"
        combine_calls = generator.calls_for("my_fabric_pattern")
        assert len(combine_calls) == 1
        assert combine_calls[0].content == (
            "Segment 1 (file0.py): summary of diff-0\n\n"
            "Segment 2 (file1.py): summary of diff-1"
        )

    @pytest.mark.asyncio
    async def test_regrouping_with_prompt_without_local_template(
        self, prompt_repository, parameters
    ):
        def responder(request):
            if request.prompt_id == PromptNames.CHUNK:
                return "x" * 10400
            return "merged"

        generator = FakeGenerator(responder)
        orchestrator = _orchestrator(generator, prompt_repository, combine_budget=10000)

        result = await orchestrator.generate(
            _segments(5), parameters, combine_prompt_id="my_fabric_pattern"
        )

        assert result == "merged"
        assert len(generator.calls_for("my_fabric_pattern")) == 6


class TestBudgetedCombine:
    @staticmethod
    def _responder(request):
        if request.prompt_id == PromptNames.CHUNK:
            return "x" * 10400
        if request.prompt_id == PromptNames.BREVITY:
            return f"condensed {len(request.content)}"
        return "final message"

    @pytest.mark.asyncio
    async def test_overflow_is_regrouped_at_half_budget(self, prompt_repository, parameters):
        generator = FakeGenerator(self._responder)
        orchestrator = _orchestrator(generator, prompt_repository, combine_budget=10000)

        result = await orchestrator.generate(
            _segments(5), parameters, group_prompt_id=PromptNames.BREVITY
        )

        assert result == "final message"
        assert len(generator.calls_for(PromptNames.BREVITY)) == 5
        assert len(generator.calls_for(PromptNames.COMMIT)) == 1

    @pytest.mark.asyncio
    async def test_overflow_is_regrouped_at_full_budget(self, prompt_repository, parameters):
        generator = FakeGenerator(self._responder)
        orchestrator = _orchestrator(
            generator, prompt_repository, combine_budget=10000, group_budget_ratio=1.0
        )

        result = await orchestrator.generate(
            _segments(5), parameters, group_prompt_id=PromptNames.BREVITY
        )

        assert result == "final message"
        group_calls = generator.calls_for(PromptNames.BREVITY)
        assert len(group_calls) == 2
        assert group_calls[0].content.startswith("Segment 1 (file0.py): ")
        assert "Segment 3 (file2.py): " in group_calls[0].content
        assert group_calls[1].content.startswith("Segment 4 (file3.py): ")

        combine_calls = generator.calls_for(PromptNames.COMMIT)
        assert len(combine_calls) == 1
        assert combine_calls[0].content == "\n\n".join(
            f"condensed {len(call.content)}" for call in group_calls
        )

    @pytest.mark.asyncio
    async def test_group_failure_is_fatal(self, prompt_repository, parameters):
        def responder(request):
            if request.prompt_id == PromptNames.BREVITY:
                return RuntimeError("group failed")
            return self._responder(request)

        generator = FakeGenerator(responder)
        orchestrator = _orchestrator(generator, prompt_repository, combine_budget=10000)

        with pytest.raises(GenerationFailure):
            await orchestrator.generate(
                _segments(5), parameters, group_prompt_id=PromptNames.BREVITY
            )

        assert generator.calls_for(PromptNames.COMMIT) == []

    @pytest.mark.asyncio
    async def test_single_oversized_summary_cannot_be_reduced(
        self, prompt_repository, parameters
    ):
        def responder(request):
            if request.content == "diff-0":
                return "y" * 50000
            return "short"

        generator = FakeGenerator(responder)
        orchestrator = _orchestrator(generator, prompt_repository, combine_budget=10000)

        with pytest.raises(BudgetNotSatisfiable):
            await orchestrator.generate(
                _segments(2), parameters, group_prompt_id=PromptNames.BREVITY
            )

        assert generator.calls_for(PromptNames.COMMIT) == []

    @pytest.mark.asyncio
    async def test_summaries_that_never_shrink_stop_at_max_depth(
        self, prompt_repository, parameters
    ):
        generator = FakeGenerator(lambda request: "z" * 30000)
        orchestrator = _orchestrator(
            generator, prompt_repository, combine_budget=10000, max_combine_depth=2
        )

        with pytest.raises(BudgetNotSatisfiable):
            await orchestrator.generate(
                _segments(3), parameters, group_prompt_id=PromptNames.BREVITY
            )

        assert len(generator.calls_for(PromptNames.BREVITY)) == 6
        assert generator.calls_for(PromptNames.COMMIT) == []

    @pytest.mark.asyncio
    async def test_group_prompt_defaults_to_combine_prompt(self, prompt_repository, parameters):
        def responder(request):
            if request.prompt_id == PromptNames.CHUNK:
                return "x" * 10400
            return "merged"

        generator = FakeGenerator(responder)
        orchestrator = _orchestrator(generator, prompt_repository, combine_budget=10000)

        result = await orchestrator.generate(_segments(5), parameters)

        assert result == "merged"
        assert generator.calls_for(PromptNames.BREVITY) == []
        assert len(generator.calls_for(PromptNames.COMMIT)) == 6


class TestConfiguration:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"combine_budget": 0},
            {"group_budget_ratio": 0},
            {"group_budget_ratio": 1.5},
            {"max_concurrency": 0},
        ],
    )
    def test_invalid_settings_are_rejected(self, prompt_repository, kwargs):
        with pytest.raises(ValueError):
            _orchestrator(FakeGenerator(), prompt_repository, **kwargs)
