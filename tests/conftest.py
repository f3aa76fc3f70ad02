import asyncio
from collections.abc import Callable

import pytest
import structlog

from commit_scribe import logging_config

from commit_scribe.git.services.token_estimator import TokenEstimator
from commit_scribe.summarization.domain.value_objects import (
    GenerationParameters,
    GenerationRequest,
    PromptNames,
)
from commit_scribe.summarization.repositories.interfaces import (
    GeneratorRepository,
    PromptRepository,
)


class FakeGenerator(GeneratorRepository):
    """Scripted generator recording every request it receives."""

    def __init__(
        self,
        responder: Callable[[GenerationRequest], str | Exception] | None = None,
        delay: Callable[[GenerationRequest], float] | None = None,
    ) -> None:
        self.requests: list[GenerationRequest] = []
        self.completed: list[GenerationRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._responder = responder or (lambda request: f"summary ({request.prompt_id})")
        self._delay = delay or (lambda request: 0.0)

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delay(request))
            result = self._responder(request)
        finally:
            self.in_flight -= 1
        self.completed.append(request)
        if isinstance(result, Exception):
            raise result
        return result

    def calls_for(self, prompt_id: str) -> list[GenerationRequest]:
        return [request for request in self.requests if request.prompt_id == prompt_id]


class StaticPromptRepository(PromptRepository):
    def __init__(self, templates: dict[str, str] | None = None) -> None:
        self._templates = templates or {
            PromptNames.CHUNK: "chunk",
            PromptNames.COMMIT: "commit",
            PromptNames.BREVITY: "brief",
        }

    def get_template(self, prompt_id: str) -> str:
        if prompt_id not in self._templates:
            raise FileNotFoundError(prompt_id)
        return self._templates[prompt_id]


class LineTokenEstimator(TokenEstimator):
    """Counts one token per line, which keeps size arithmetic readable in tests."""

    def estimate(self, text: str) -> int:
        return max(1, len(text.splitlines()))


def make_file_diff(path: str, added: int = 1, removed: int = 0, width: int = 20) -> str:
    """Build a git diff block for one file: 5 header lines plus the body."""
    lines = [
        f"diff --git a/{path} b/{path}",
        "index 1111111..2222222 100644",
        f"--- a/{path}",
        f"+++ b/{path}",
        f"@@ -1,{removed} +1,{added} @@",
    ]
    lines.extend("-" + "r" * (width - 1) for _ in range(removed))
    lines.extend("+" + "a" * (width - 1) for _ in range(added))
    return "\n".join(lines) + "\n"


@pytest.fixture
def prompt_repository():
    return StaticPromptRepository()


@pytest.fixture
def line_estimator():
    return LineTokenEstimator()


@pytest.fixture
def parameters():
    return GenerationParameters(model="test-model", temperature=0.5, top_p=0.9)


@pytest.fixture(autouse=True)
def reset_logging_configuration():
    """Undo global structlog setup so loggers never hold a closed capture stream."""
    yield
    structlog.reset_defaults()
    logging_config._CONFIGURED = False
