"""Value objects for Git domain."""

from dataclasses import dataclass
from enum import Enum


class FileChangeType(str, Enum):
    """Type of change carried by a piece of diff content."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    MIXED = "mixed"  # Whole diff sent as a single segment


@dataclass(frozen=True)
class DiffSegment:
    """A slice of diff text that can be summarized on its own."""

    label: str
    content: str
    line_count: int
    change_type: FileChangeType

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError(f"Segment '{self.label}' has no content")


@dataclass(frozen=True)
class FileDiff:
    """Diff content accumulated for a single destination path."""

    file_path: str
    content: str


@dataclass(frozen=True)
class SegmentBudget:
    """Token limits applied while segmenting a diff.

    Attributes:
        max_tokens_per_segment: Largest diff that is sent in one piece
        target_tokens_per_segment: Limit used when grouping or splitting files
    """

    max_tokens_per_segment: int = 3000
    target_tokens_per_segment: int = 2500

    def __post_init__(self) -> None:
        if self.target_tokens_per_segment <= 0:
            raise ValueError("target_tokens_per_segment must be positive")
        if self.target_tokens_per_segment > self.max_tokens_per_segment:
            raise ValueError(
                "target_tokens_per_segment "
                f"({self.target_tokens_per_segment}) must not exceed "
                f"max_tokens_per_segment ({self.max_tokens_per_segment})"
            )


@dataclass(frozen=True)
class DiffContextConfig:
    """Thresholds for fetching extra context around very small diffs."""

    small_diff_file_threshold: int = 2
    small_diff_line_threshold: int = 20
    extra_context_lines: int = 10
