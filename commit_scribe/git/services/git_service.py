"""Git service for coordinating Git operations."""

from pathlib import Path

from commit_scribe.git.domain.value_objects import DiffContextConfig
from commit_scribe.git.repositories.interfaces import GitRepository
from commit_scribe.git.services.diff_segmenter import DiffSegmenter
from commit_scribe.logging_config import get_logger

logger = get_logger(__name__)


class GitService:
    """Service for Git operations."""

    def __init__(
        self,
        git_repository: GitRepository,
        context_config: DiffContextConfig | None = None,
    ) -> None:
        """
        Initialize GitService.

        Args:
            git_repository: Repository implementation for Git operations
            context_config: Thresholds for fetching extra context on small diffs
        """
        self._git_repository = git_repository
        self._context_config = context_config or DiffContextConfig()

    def is_git_repository(self, repo_path: Path) -> bool:
        """Check if the given path is inside a git working tree."""
        if (repo_path / ".git").exists():
            return True
        return self._git_repository.is_inside_work_tree(repo_path)

    def get_staged_diff(self, repo_path: Path) -> str:
        """
        Get the staged changes, with extra context when the diff is very small.

        Args:
            repo_path: Path to the git repository

        Returns:
            Unified diff text, empty if nothing is staged
        """
        diff_text = self._git_repository.get_staged_diff(repo_path)
        if not diff_text.strip() or not self.is_small_diff(diff_text):
            return diff_text

        logger.info(
            "small_diff_fetching_context", context_lines=self._context_config.extra_context_lines
        )
        return self._git_repository.get_staged_diff(
            repo_path, context_lines=self._context_config.extra_context_lines
        )

    def is_small_diff(self, diff_text: str) -> bool:
        """
        Check whether a diff touches few files and few lines.

        Args:
            diff_text: Unified diff text

        Returns:
            True if both the file count and the line count are within thresholds
        """
        file_count = len(DiffSegmenter.parse_file_diffs(diff_text))
        line_count = len(diff_text.splitlines())
        return (
            file_count <= self._context_config.small_diff_file_threshold
            and line_count <= self._context_config.small_diff_line_threshold
        )

    def commit_changes(self, repo_path: Path, message: str) -> None:
        """
        Commit the staged changes with the given message.

        Args:
            repo_path: Path to the git repository
            message: Full commit message
        """
        self._git_repository.commit(repo_path, message)
