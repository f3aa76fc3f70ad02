"""Environment-based configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_PROVIDER = "openai"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_COMBINE_BUDGET = 128000


def load_env_file() -> None:
    """Load environment variables from .env file."""
    # Try to find .env file in project root (parent of commit_scribe package)
    project_root = Path(__file__).parent.parent
    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)
    else:
        # Fallback: try current directory
        load_dotenv()


def _int_from_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from None


def _float_from_env(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None


def _bool_from_env(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def default_model_for(provider: str) -> str:
    """
    Resolve the model name for a provider from the environment.

    Args:
        provider: LLM provider name

    Returns:
        COMMIT_SCRIBE_MODEL if set, otherwise the provider specific model
    """
    override = os.getenv("COMMIT_SCRIBE_MODEL")
    if override:
        return override
    if provider in ("anthropic", "claude"):
        return os.getenv("ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL)
    return os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the commit message pipeline."""

    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_OPENAI_MODEL
    max_segment_tokens: int = 3000
    target_segment_tokens: int = 2500
    combine_budget: int = DEFAULT_COMBINE_BUDGET
    max_concurrency: int | None = None
    prompts_dir: Path | None = None
    precise_tokens: bool = False
    fabric_timeout: float | None = None

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables and the .env file.

        Returns:
            Settings instance

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        load_env_file()

        provider = os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER).lower()
        prompts_dir = os.getenv("COMMIT_SCRIBE_PROMPTS_DIR")

        return cls(
            provider=provider,
            model=default_model_for(provider),
            max_segment_tokens=_int_from_env("COMMIT_SCRIBE_MAX_SEGMENT_TOKENS", 3000) or 3000,
            target_segment_tokens=(
                _int_from_env("COMMIT_SCRIBE_TARGET_SEGMENT_TOKENS", 2500) or 2500
            ),
            combine_budget=(
                _int_from_env("COMMIT_SCRIBE_COMBINE_BUDGET", DEFAULT_COMBINE_BUDGET)
                or DEFAULT_COMBINE_BUDGET
            ),
            max_concurrency=_int_from_env("COMMIT_SCRIBE_MAX_CONCURRENCY", None),
            prompts_dir=Path(prompts_dir) if prompts_dir else None,
            precise_tokens=_bool_from_env("COMMIT_SCRIBE_PRECISE_TOKENS"),
            fabric_timeout=_float_from_env("FABRIC_TIMEOUT", None),
        )
