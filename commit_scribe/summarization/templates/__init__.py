"""Bundled prompt templates, one directory per prompt id."""

from pathlib import Path

DEFAULT_TEMPLATES_DIR = Path(__file__).parent
TEMPLATE_FILENAME = "system.md"
