"""Service for deciding whether two changed files belong together."""

from pathlib import PurePosixPath


class FileSimilarityService:
    """Service for detecting semantically related files from their paths."""

    # Coarse extension classes; files in the same class are summarized together
    WEB_EXTENSIONS: frozenset[str] = frozenset(
        {".html", ".css", ".js", ".jsx", ".ts", ".tsx", ".vue", ".svelte"}
    )

    CODE_EXTENSIONS: frozenset[str] = frozenset(
        {
            ".cs",
            ".vb",
            ".fs",
            ".cpp",
            ".h",
            ".c",
            ".java",
            ".py",
            ".rb",
            ".go",
            ".rs",
        }
    )

    CONFIG_EXTENSIONS: frozenset[str] = frozenset(
        {".json", ".xml", ".yaml", ".yml", ".toml", ".ini", ".config"}
    )

    DOC_EXTENSIONS: frozenset[str] = frozenset({".md", ".txt", ".rst", ".adoc"})

    EXTENSION_CLASSES: tuple[frozenset[str], ...] = (
        WEB_EXTENSIONS,
        CODE_EXTENSIONS,
        CONFIG_EXTENSIONS,
        DOC_EXTENSIONS,
    )

    def are_similar(self, file_a: str, file_b: str) -> bool:
        """
        Check if two files are related closely enough to share a segment.

        Files are related when they have the same extension, when both
        extensions fall into the same coarse class (web, code, config, docs),
        or when they live in the same directory.

        Args:
            file_a: Path of the first file, relative to the repository root
            file_b: Path of the second file, relative to the repository root

        Returns:
            True if the files are related, False otherwise
        """
        path_a = PurePosixPath(file_a)
        path_b = PurePosixPath(file_b)
        ext_a = path_a.suffix.lower()
        ext_b = path_b.suffix.lower()

        if ext_a == ext_b:
            return True

        for extensions in self.EXTENSION_CLASSES:
            if ext_a in extensions and ext_b in extensions:
                return True

        return path_a.parent == path_b.parent
