"""Token estimation strategies used for budgeting LLM calls."""

import math
from abc import ABC, abstractmethod
from typing import Any

import tiktoken

DEFAULT_ENCODING = "cl100k_base"


class TokenEstimator(ABC):
    """Interface for approximating the token size of a text."""

    @abstractmethod
    def estimate(self, text: str) -> int:
        """
        Estimate how many tokens a text will use.

        Args:
            text: Text to measure

        Returns:
            Estimated token count, never lower than 1
        """
        ...


class HeuristicTokenEstimator(TokenEstimator):
    """Character-length heuristic (about four characters per token for code)."""

    def __init__(self, chars_per_token: int = 4) -> None:
        if chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        self._chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        return max(1, math.ceil(len(text) / self._chars_per_token))


class TiktokenTokenEstimator(TokenEstimator):
    """Exact token counts using the tokenizer of the configured model."""

    def __init__(self, model: str | None = None) -> None:
        """
        Initialize the estimator.

        Args:
            model: Model name used to pick the encoding. Unknown models and
                   None fall back to the cl100k_base encoding.
        """
        self._encoding = self._load_encoding(model)

    @staticmethod
    def _load_encoding(model: str | None) -> Any:
        if model:
            try:
                return tiktoken.encoding_for_model(model)
            except KeyError:
                pass
        return tiktoken.get_encoding(DEFAULT_ENCODING)

    def estimate(self, text: str) -> int:
        return max(1, len(self._encoding.encode(text, disallowed_special=())))


def create_token_estimator(precise: bool = False, model: str | None = None) -> TokenEstimator:
    """
    Create a token estimator.

    Args:
        precise: Use the tiktoken tokenizer instead of the length heuristic
        model: Model name used to select the tokenizer encoding

    Returns:
        Token estimator instance
    """
    if precise:
        return TiktokenTokenEstimator(model)
    return HeuristicTokenEstimator()
