"""Repository interfaces for Git operations."""

from abc import ABC, abstractmethod
from pathlib import Path


class GitRepository(ABC):
    """Interface for Git repository operations."""

    @abstractmethod
    def is_inside_work_tree(self, repo_path: Path) -> bool:
        """
        Check whether a path belongs to a git working tree.

        Args:
            repo_path: Path to check

        Returns:
            True if git recognizes the path as part of a working tree
        """
        ...

    @abstractmethod
    def get_staged_diff(self, repo_path: Path, context_lines: int | None = None) -> str:
        """
        Get the diff of the changes staged for commit.

        Args:
            repo_path: Path to the git repository
            context_lines: Number of context lines around changes.
                           None uses git's default.

        Returns:
            Unified diff text, empty if nothing is staged
        """
        ...

    @abstractmethod
    def commit(self, repo_path: Path, message: str) -> None:
        """
        Commit the staged changes.

        Args:
            repo_path: Path to the git repository
            message: Full commit message
        """
        ...
