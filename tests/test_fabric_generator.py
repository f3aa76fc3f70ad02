import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from commit_scribe.summarization.domain.value_objects import GenerationRequest, PromptNames
from commit_scribe.summarization.repositories.fabric_generator import FabricCliGenerator


def _request() -> GenerationRequest:
    return GenerationRequest(
        prompt_id=PromptNames.CHUNK,
        content="diff text",
        model="gpt-4o",
        temperature=0.7,
        top_p=0.9,
        presence_penalty=0.1,
        frequency_penalty=0.2,
    )


def _process(stdout=b"", stderr=b"", returncode=0):
    process = MagicMock()
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    process.wait = AsyncMock(return_value=returncode)
    process.returncode = returncode
    return process


def test_build_command():
    command = FabricCliGenerator().build_command(_request())

    assert command == [
        "fabric",
        "-t",
        "0.7",
        "-T",
        "0.9",
        "-P",
        "0.1",
        "-F",
        "0.2",
        "-m",
        "gpt-4o",
        "-p",
        "chunk_git_diff",
    ]


@pytest.mark.asyncio
async def test_content_is_piped_to_stdin():
    process = _process(stdout=b"Summary of changes\n")

    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)) as mock_exec:
        result = await FabricCliGenerator().generate(_request())

    assert result == "Summary of changes\n"
    assert mock_exec.call_args.args[0] == "fabric"
    assert mock_exec.call_args.args[-1] == "chunk_git_diff"
    process.communicate.assert_awaited_once_with(b"diff text")


@pytest.mark.asyncio
async def test_non_zero_exit_raises_with_stderr():
    process = _process(stderr=b"pattern not found", returncode=1)

    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(RuntimeError, match="pattern not found"):
            await FabricCliGenerator().generate(_request())


@pytest.mark.asyncio
async def test_missing_executable_raises():
    with patch(
        "asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("fabric"))
    ):
        with pytest.raises(RuntimeError, match="Failed to start fabric"):
            await FabricCliGenerator().generate(_request())


@pytest.mark.asyncio
async def test_timeout_kills_the_process():
    async def never_finishes(content):
        await asyncio.sleep(10)

    process = _process()
    process.communicate = never_finishes

    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
        with pytest.raises(RuntimeError, match="timed out"):
            await FabricCliGenerator(timeout=0.01).generate(_request())

    process.kill.assert_called_once()
    process.wait.assert_awaited_once()
