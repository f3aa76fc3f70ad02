"""Errors raised while generating a commit message."""


class SummarizationError(RuntimeError):
    """Base class for generation pipeline errors."""


class GenerationFailure(SummarizationError):
    """A generation call required for the result failed."""

    def __init__(self, message: str, failed_indices: tuple[int, ...] = ()) -> None:
        super().__init__(message)
        self.failed_indices = failed_indices


class EmptyResult(SummarizationError):
    """Generation succeeded but produced no usable text."""


class CombineFailure(SummarizationError):
    """The final combine call failed; callers fall back to the first summary."""


class BudgetNotSatisfiable(SummarizationError):
    """Partial results cannot be reduced under the combine budget."""


class MissingApiKeyError(ValueError):
    """The selected provider has no API key configured."""
