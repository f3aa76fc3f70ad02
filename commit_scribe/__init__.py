"""Generate commit messages from arbitrarily large diffs with budget-limited LLMs."""

__version__ = "0.1.0"
