"""File-based prompt template repository."""

from pathlib import Path

from commit_scribe.summarization.repositories.interfaces import PromptRepository
from commit_scribe.summarization.templates import DEFAULT_TEMPLATES_DIR, TEMPLATE_FILENAME


class FilePromptRepository(PromptRepository):
    """Loads prompt templates from `<templates_dir>/<prompt_id>/system.md`."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        """
        Initialize the repository.

        Args:
            templates_dir: Directory with custom templates. Templates missing
                           there are read from the bundled templates.
        """
        self._search_dirs: tuple[Path, ...] = (
            (templates_dir, DEFAULT_TEMPLATES_DIR) if templates_dir else (DEFAULT_TEMPLATES_DIR,)
        )
        self._cache: dict[str, str] = {}

    def get_template(self, prompt_id: str) -> str:
        """
        Get the body of a prompt template.

        Args:
            prompt_id: Identifier of the template (its directory name)

        Returns:
            Template text

        Raises:
            FileNotFoundError: If no directory provides the template
            RuntimeError: If the template file cannot be read
        """
        if prompt_id in self._cache:
            return self._cache[prompt_id]

        for templates_dir in self._search_dirs:
            template_path = templates_dir / prompt_id / TEMPLATE_FILENAME
            if not template_path.is_file():
                continue
            try:
                template = template_path.read_text(encoding="utf-8")
            except OSError as e:
                raise RuntimeError(
                    f"Failed to read prompt template file: {template_path}: {e}"
                ) from e
            self._cache[prompt_id] = template
            return template

        searched = ", ".join(str(path) for path in self._search_dirs)
        raise FileNotFoundError(f"Prompt template '{prompt_id}' not found in: {searched}")
