"""Value objects for Summarization domain."""

from dataclasses import dataclass


class PromptNames:
    """Identifiers of the prompt templates used by the pipeline."""

    # Summarizes a single diff segment
    CHUNK = "chunk_git_diff"
    # Writes the final commit message
    COMMIT = "write_commit_message"
    # Condenses groups of summaries when the combined text overflows
    BREVITY = "brief_chunk_summary"


@dataclass(frozen=True)
class GenerationRequest:
    """Single call to the text generation capability."""

    prompt_id: str
    content: str
    model: str
    temperature: float = 1.0
    top_p: float = 1.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0


@dataclass(frozen=True)
class GenerationParameters:
    """Sampling parameters shared by every call of a pipeline run."""

    model: str
    temperature: float = 1.0
    top_p: float = 1.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0

    def to_request(self, prompt_id: str, content: str) -> GenerationRequest:
        """Build a request for the given prompt and content."""
        return GenerationRequest(
            prompt_id=prompt_id,
            content=content,
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
        )


@dataclass(frozen=True)
class PartialResult:
    """Generated summary of one segment, tied to its position in the diff."""

    index: int
    label: str
    text: str

    @property
    def tagged_line(self) -> str:
        """Summary prefixed with the segment position and label."""
        return f"Segment {self.index + 1} ({self.label}): {self.text}"
