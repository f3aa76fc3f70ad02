"""Concrete implementation of Git repository operations."""

import subprocess
from pathlib import Path

from commit_scribe.git.repositories.interfaces import GitRepository


def _stderr_of(error: subprocess.CalledProcessError) -> str:
    stderr = error.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr.strip() if stderr else str(error)


class GitRepositoryImpl(GitRepository):
    """Concrete implementation of Git repository operations using git commands."""

    def is_inside_work_tree(self, repo_path: Path) -> bool:
        """
        Check whether a path belongs to a git working tree.

        Args:
            repo_path: Path to check

        Returns:
            True if git recognizes the path as part of a working tree
        """
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--is-inside-work-tree"],
                cwd=repo_path,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def get_staged_diff(self, repo_path: Path, context_lines: int | None = None) -> str:
        """
        Get the diff of the changes staged for commit.

        Args:
            repo_path: Path to the git repository
            context_lines: Number of context lines around changes

        Returns:
            Unified diff text, empty if nothing is staged

        Raises:
            RuntimeError: If git fails
        """
        command = ["git", "--no-pager", "diff", "--staged"]
        if context_lines is not None:
            command.append(f"--unified={context_lines}")

        try:
            result = subprocess.run(
                command,
                cwd=repo_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise RuntimeError(f"Failed to get staged changes: {_stderr_of(e)}") from e

    def commit(self, repo_path: Path, message: str) -> None:
        """
        Commit the staged changes, reading the message from stdin.

        Args:
            repo_path: Path to the git repository
            message: Full commit message

        Raises:
            RuntimeError: If git refuses the commit
        """
        try:
            subprocess.run(
                ["git", "commit", "-F", "-"],
                cwd=repo_path,
                input=message,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise RuntimeError(f"Git commit failed: {_stderr_of(e)}") from e
