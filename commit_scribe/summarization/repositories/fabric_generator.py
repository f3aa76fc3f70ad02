"""Text generation through the fabric command line tool."""

import asyncio

from commit_scribe.logging_config import get_logger
from commit_scribe.summarization.domain.value_objects import GenerationRequest
from commit_scribe.summarization.repositories.interfaces import GeneratorRepository

logger = get_logger(__name__)


class FabricCliGenerator(GeneratorRepository):
    """Generator that runs `fabric` with the prompt id as pattern name."""

    def __init__(self, executable: str = "fabric", timeout: float | None = None) -> None:
        """
        Initialize the fabric generator.

        Args:
            executable: Name or path of the fabric binary
            timeout: Seconds to wait for a single call; None waits forever
        """
        self._executable = executable
        self._timeout = timeout

    def build_command(self, request: GenerationRequest) -> list[str]:
        """Build the fabric argument list for a request."""
        return [
            self._executable,
            "-t",
            str(request.temperature),
            "-T",
            str(request.top_p),
            "-P",
            str(request.presence_penalty),
            "-F",
            str(request.frequency_penalty),
            "-m",
            request.model,
            "-p",
            request.prompt_id,
        ]

    async def generate(self, request: GenerationRequest) -> str:
        """
        Run fabric with the request content on stdin.

        Args:
            request: Prompt identifier (fabric pattern), content and parameters

        Returns:
            Text printed by fabric on stdout

        Raises:
            RuntimeError: If fabric cannot be started, exits with a non-zero
                status or exceeds the timeout
        """
        command = self.build_command(request)
        logger.debug("fabric_request", pattern=request.prompt_id, model=request.model)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RuntimeError(f"Failed to start {self._executable}: {str(e)}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(request.content.encode("utf-8")),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise RuntimeError(
                f"Fabric command timed out after {self._timeout}s "
                f"(pattern '{request.prompt_id}')"
            ) from e

        if process.returncode != 0:
            raise RuntimeError(
                f"Fabric command failed with exit code {process.returncode}: "
                f"{stderr.decode('utf-8', errors='replace').strip()}"
            )

        return stdout.decode("utf-8", errors="replace")
