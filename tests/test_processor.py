"""Tests for batch processing of link lists."""

import asyncio
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest

from postwatcher.config import Config, ensure_directories
from postwatcher.hooks import VerificationFailed, Verified
from postwatcher.processor import BatchResult, process_input_file


LIST_WITH_THREE_LINKS = """My list
1. [AI News](https://example.com/a)
2. [Broken Story](https://example.com/broken)
3. [Third Story](https://example.com/c)
"""


@pytest.fixture
def config():
    """Create a mock-mode config rooted in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = Config(root=Path(tmpdir), mock_mode=True, verify_command="verify-cmd")
        ensure_directories(config.input_dir, config.output_dir, config.archive_dir)
        yield config


@pytest.fixture
def client() -> Mock:
    client = Mock()
    client.complete = AsyncMock()
    return client


def _write_list(config: Config, name: str, content: str) -> Path:
    path = config.input_dir / name
    path.write_text(content, encoding="utf-8")
    return path


def _fake_fetch(url: str) -> str:
    if "broken" in url:
        return f"[Failed to fetch content from {url}]"
    return f"Readable text of {url}"


class TestProcessInputFile:
    """Tests for the process_input_file function."""

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_single_link_end_to_end(self, mock_fetch, mock_verify, config, client):
        """Test one link producing one post and an archived input."""
        mock_verify.return_value = Verified()
        path = _write_list(config, "links.md", "1. [AI News](https://example.com/a)")

        result = await process_input_file(config, client, path)

        outputs = list(config.output_dir.iterdir())
        assert len(outputs) == 1
        assert outputs[0].name.startswith("list_")
        assert outputs[0].name.endswith("_AI_News.md")
        text = outputs[0].read_text(encoding="utf-8")
        assert "Original Title: AI News" in text
        assert "Input List File: links.md" in text
        assert "# Mock Content for AI News" in text

        archived = list(config.archive_dir.iterdir())
        assert len(archived) == 1
        assert archived[0].name.endswith("_links.md")
        assert archived[0].name.split("_")[0].isdigit()
        assert not path.exists()

        assert result.succeeded == 1
        assert result.archived_to == archived[0]
        mock_verify.assert_awaited_once_with("verify-cmd", config.root)
        client.complete.assert_not_called()

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_fetch_failures_are_skipped(self, mock_fetch, mock_verify, config, client):
        """Test that N links with M fetch failures give N-M posts and one archive."""
        mock_verify.return_value = Verified()
        path = _write_list(config, "links.md", LIST_WITH_THREE_LINKS)

        result = await process_input_file(config, client, path)

        assert result.found == 3
        assert result.succeeded == 2
        assert result.skipped == 1
        assert result.failed == 0
        assert len(list(config.output_dir.iterdir())) == 2
        assert len(list(config.archive_dir.iterdir())) == 1
        assert mock_fetch.call_count == 3

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_no_links_leaves_file_in_place(self, mock_fetch, mock_verify, config, client):
        """Test that a file without links is neither processed nor archived."""
        path = _write_list(config, "notes.txt", "nothing to see here")

        result = await process_input_file(config, client, path)

        assert result == BatchResult(filename="notes.txt")
        assert path.exists()
        assert list(config.output_dir.iterdir()) == []
        assert list(config.archive_dir.iterdir()) == []
        mock_fetch.assert_not_called()
        mock_verify.assert_not_called()

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    async def test_missing_file_is_ignored(self, mock_verify, config, client):
        """Test that a file removed before processing is skipped."""
        result = await process_input_file(config, client, config.input_dir / "gone.md")

        assert result.found == 0
        assert result.archived_to is None
        mock_verify.assert_not_called()

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_all_failures_still_archive_without_hook(
        self, mock_fetch, mock_verify, config, client
    ):
        """Test that the input is archived but the hook is not run when nothing succeeded."""
        path = _write_list(config, "links.md", "[Broken](https://example.com/broken)")

        result = await process_input_file(config, client, path)

        assert result.skipped == 1
        assert result.archived_to is not None
        assert not path.exists()
        mock_verify.assert_not_called()

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.generate_post", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_generation_error_isolated(
        self, mock_fetch, mock_generate, mock_verify, config, client
    ):
        """Test that a generation error fails only its own article."""
        mock_verify.return_value = Verified()

        async def generate(config, client, title, content, link):
            if title == "AI News":
                raise RuntimeError("model unavailable")
            return f"Post about {title}"

        mock_generate.side_effect = generate
        path = _write_list(config, "links.md", LIST_WITH_THREE_LINKS)

        result = await process_input_file(config, client, path)

        assert result.failed == 1
        assert result.skipped == 1
        assert result.succeeded == 1
        assert not path.exists()
        mock_verify.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_verification_failure_does_not_raise(
        self, mock_fetch, mock_verify, config, client
    ):
        """Test that a failing hook is recorded but the batch completes."""
        mock_verify.return_value = VerificationFailed(code=1, reason="exited with code 1")
        path = _write_list(config, "links.md", "[AI News](https://example.com/a)")

        result = await process_input_file(config, client, path)

        assert result.succeeded == 1
        assert result.verification == VerificationFailed(code=1, reason="exited with code 1")

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_verification_can_be_disabled(self, mock_fetch, mock_verify, config, client):
        path = _write_list(config, "links.md", "[AI News](https://example.com/a)")

        await process_input_file(config, client, path, run_verify=False)

        mock_verify.assert_not_called()

    @pytest.mark.asyncio
    @patch("postwatcher.processor.run_verify_hook", new_callable=AsyncMock)
    @patch("postwatcher.processor.generate_post", new_callable=AsyncMock)
    @patch("postwatcher.processor.fetch_article_content", side_effect=_fake_fetch)
    async def test_concurrency_is_capped(
        self, mock_fetch, mock_generate, mock_verify, config, client
    ):
        """Test that no more than two articles are in flight at once."""
        mock_verify.return_value = Verified()
        in_flight = 0
        peak = 0

        async def generate(config, client, title, content, link):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return f"Post about {title}"

        mock_generate.side_effect = generate
        links = "\n".join(f"[Story {i}](https://example.com/{i})" for i in range(6))
        path = _write_list(config, "links.md", links)

        result = await process_input_file(config, client, path)

        assert result.succeeded == 6
        assert peak == 2
