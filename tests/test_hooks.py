"""Tests for the verification hook."""

import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from postwatcher.hooks import VerificationFailed, Verified, run_verify_hook


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestRunVerifyHook:
    """Tests for the run_verify_hook function."""

    @pytest.mark.asyncio
    async def test_success(self, tmp_dir: Path):
        """Test that exit code 0 reports Verified."""
        result = await run_verify_hook("exit 0", tmp_dir)

        assert result == Verified()

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, tmp_dir: Path):
        """Test that a failing command is reported with its exit code."""
        result = await run_verify_hook("exit 3", tmp_dir)

        assert isinstance(result, VerificationFailed)
        assert result.code == 3

    @pytest.mark.asyncio
    async def test_runs_in_project_root(self, tmp_dir: Path):
        """Test that the command runs in the given directory."""
        await run_verify_hook(f'"{sys.executable}" -c "open(\'marker\', \'w\').close()"', tmp_dir)

        assert (tmp_dir / "marker").exists()

    @pytest.mark.asyncio
    async def test_spawn_error_is_reported(self, tmp_dir: Path):
        """Test that a command that cannot start is reported, not raised."""
        with patch(
            "postwatcher.hooks.asyncio.create_subprocess_shell",
            side_effect=OSError("no shell"),
        ):
            result = await run_verify_hook("anything", tmp_dir)

        assert result == VerificationFailed(code=None, reason="no shell")
