"""Service for splitting raw diffs into budget-sized, coherent segments."""

import re

from commit_scribe.git.domain.value_objects import (
    DiffSegment,
    FileChangeType,
    FileDiff,
    SegmentBudget,
)
from commit_scribe.git.services.file_similarity_service import FileSimilarityService
from commit_scribe.git.services.token_estimator import HeuristicTokenEstimator, TokenEstimator
from commit_scribe.logging_config import get_logger

ALL_CHANGES_LABEL = "all_changes"

_FILE_HEADER_RE = re.compile(r'^diff --git "?a/(.*?)"? "?b/(.*?)"?$')

# Unified diff file headers, not added or removed content
_HEADER_PREFIXES = ("+++ a/", "+++ b/", "+++ /dev/null", "--- a/", "--- b/", "--- /dev/null")

logger = get_logger(__name__)


class DiffSegmenter:
    """Service for segmenting diff text into independently summarizable units."""

    def __init__(
        self,
        budget: SegmentBudget | None = None,
        token_estimator: TokenEstimator | None = None,
        similarity_service: FileSimilarityService | None = None,
    ) -> None:
        """
        Initialize DiffSegmenter.

        Args:
            budget: Per-segment token limits. Defaults to SegmentBudget()
            token_estimator: Estimator used for all size decisions.
                             Defaults to HeuristicTokenEstimator()
            similarity_service: Rule deciding which files may share a segment
        """
        self._budget = budget or SegmentBudget()
        self._estimator = token_estimator or HeuristicTokenEstimator()
        self._similarity_service = similarity_service or FileSimilarityService()

    def segment(self, diff_text: str) -> tuple[DiffSegment, ...]:
        """
        Split a diff into ordered segments.

        A diff that fits the per-segment budget is returned whole. Otherwise
        files are grouped with related files up to the target budget, and
        files larger than the target are split line by line.

        Args:
            diff_text: Raw unified diff text, must not be empty

        Returns:
            Tuple of segments in the order their files appear in the diff
        """
        total_tokens = self._estimator.estimate(diff_text)
        if total_tokens <= self._budget.max_tokens_per_segment:
            logger.info("diff_fits_single_segment", tokens=total_tokens)
            return (
                DiffSegment(
                    label=ALL_CHANGES_LABEL,
                    content=diff_text,
                    line_count=len(diff_text.splitlines()),
                    change_type=FileChangeType.MIXED,
                ),
            )

        logger.info("segmenting_large_diff", tokens=total_tokens)
        file_diffs = self.parse_file_diffs(diff_text)
        segments = self._group_files(file_diffs)

        logger.info("diff_segmented", files=len(file_diffs), segments=len(segments))
        return tuple(segments)

    @staticmethod
    def parse_file_diffs(diff_text: str) -> tuple[FileDiff, ...]:
        """
        Collect diff lines per destination file in first-appearance order.

        Lines before the first file header stay with the first file. A diff
        with no recognizable header is returned as a single block.

        Args:
            diff_text: Raw unified diff text

        Returns:
            Tuple of per-file diffs ordered by first appearance
        """
        file_lines: dict[str, list[str]] = {}
        preamble: list[str] = []
        current_file: str | None = None

        for line in diff_text.splitlines():
            match = _FILE_HEADER_RE.match(line)
            if match:
                current_file = match.group(2)
                if current_file not in file_lines:
                    file_lines[current_file] = preamble
                    preamble = []

            if current_file is None:
                preamble.append(line)
            else:
                file_lines[current_file].append(line)

        if not file_lines:
            return (FileDiff(file_path=ALL_CHANGES_LABEL, content=diff_text),)

        return tuple(
            FileDiff(file_path=path, content="\n".join(lines) + "\n")
            for path, lines in file_lines.items()
        )

    def _group_files(self, file_diffs: tuple[FileDiff, ...]) -> list[DiffSegment]:
        """Group related files under the target budget, splitting oversized ones."""
        target = self._budget.target_tokens_per_segment
        file_tokens = [self._estimator.estimate(file_diff.content) for file_diff in file_diffs]
        processed: set[int] = set()
        segments: list[DiffSegment] = []

        for anchor_index, anchor in enumerate(file_diffs):
            if anchor_index in processed:
                continue
            processed.add(anchor_index)

            if file_tokens[anchor_index] > target:
                segments.extend(self._split_large_file(anchor))
                continue

            members = [anchor]
            total_tokens = file_tokens[anchor_index]

            for candidate_index in range(anchor_index + 1, len(file_diffs)):
                if candidate_index in processed:
                    continue
                candidate = file_diffs[candidate_index]
                candidate_tokens = file_tokens[candidate_index]
                if total_tokens + candidate_tokens > target:
                    continue
                if not self._similarity_service.are_similar(anchor.file_path, candidate.file_path):
                    continue

                members.append(candidate)
                total_tokens += candidate_tokens
                processed.add(candidate_index)
                logger.debug(
                    "file_grouped", file=candidate.file_path, anchor=anchor.file_path
                )

            segments.append(self._build_group_segment(members))

        return segments

    def _build_group_segment(self, members: list[FileDiff]) -> DiffSegment:
        if len(members) == 1:
            label = members[0].file_path
        else:
            names = ", ".join(member.file_path for member in members[:3])
            ellipsis = "..." if len(members) > 3 else ""
            label = f"{len(members)}_files_({names}{ellipsis})"

        content = "".join(member.content for member in members)
        return self._make_segment(label, content)

    def _split_large_file(self, file_diff: FileDiff) -> list[DiffSegment]:
        """Split one file's diff into line-aligned pieces under the target budget."""
        target = self._budget.target_tokens_per_segment
        pieces: list[str] = []
        current_lines: list[str] = []
        current_tokens = 0

        for line in file_diff.content.splitlines(keepends=True):
            line_tokens = self._estimator.estimate(line)
            if current_lines and current_tokens + line_tokens > target:
                pieces.append("".join(current_lines))
                current_lines = []
                current_tokens = 0
            # A single line above the target is kept whole
            current_lines.append(line)
            current_tokens += line_tokens

        if current_lines:
            pieces.append("".join(current_lines))

        logger.info("large_file_split", file=file_diff.file_path, chunks=len(pieces))

        if len(pieces) == 1:
            return [self._make_segment(file_diff.file_path, pieces[0])]
        return [
            self._make_segment(f"{file_diff.file_path}_chunk_{number}", piece)
            for number, piece in enumerate(pieces, start=1)
        ]

    @classmethod
    def _make_segment(cls, label: str, content: str) -> DiffSegment:
        return DiffSegment(
            label=label,
            content=content,
            line_count=len(content.splitlines()),
            change_type=cls.detect_change_type(content),
        )

    @staticmethod
    def detect_change_type(content: str) -> FileChangeType:
        """
        Infer the kind of change from diff markers.

        Args:
            content: Diff text of a segment

        Returns:
            RENAMED when rename markers exist, MODIFIED when lines are both
            added and removed, ADDED or DELETED when only one side exists,
            MODIFIED otherwise
        """
        has_additions = "new file mode" in content
        has_deletions = "deleted file mode" in content
        has_renames = "rename from" in content or "rename to" in content

        for line in content.splitlines():
            if line.startswith(_HEADER_PREFIXES):
                continue
            if line.startswith("+"):
                has_additions = True
            elif line.startswith("-"):
                has_deletions = True

        if has_renames:
            return FileChangeType.RENAMED
        if has_additions and has_deletions:
            return FileChangeType.MODIFIED
        if has_additions:
            return FileChangeType.ADDED
        if has_deletions:
            return FileChangeType.DELETED
        return FileChangeType.MODIFIED
