"""Configuration loading for PostWatcher."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "anthropic/claude-sonnet-4"
DEFAULT_VERIFY_COMMAND = "npm run skill:verify"
POSTS_SUBDIR = "defou-stanley-posts"


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Settings resolved once at start-up and handed to each component."""

    root: Path
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    mock_mode: bool = False
    model: str = DEFAULT_MODEL
    verify_command: str = DEFAULT_VERIFY_COMMAND

    @property
    def input_dir(self) -> Path:
        return self.root / "local_inputs"

    @property
    def output_dir(self) -> Path:
        return self.root / "outputs" / POSTS_SUBDIR

    @property
    def archive_dir(self) -> Path:
        return self.root / "archive"

    @property
    def trends_dir(self) -> Path:
        return self.root / "outputs" / "trends"


def load_config(root: Path) -> Config:
    """Load configuration from ``root/.env`` and the process environment.

    Values in the .env file override variables already set in the
    environment.

    Args:
        root: Project root holding the .env file and working directories

    Returns:
        Config populated from the environment
    """
    root = root.resolve()
    env_path = root / ".env"

    logger.info("Loading .env from: %s", env_path)
    if env_path.exists():
        logger.info(".env file found")
        load_dotenv(env_path, override=True)
    else:
        logger.warning(".env file NOT found")

    return Config(
        root=root,
        api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        base_url=os.getenv("ANTHROPIC_BASE_URL") or None,
        mock_mode=_parse_bool(os.getenv("MOCK_MODE")),
        model=os.getenv("POSTWATCHER_MODEL") or DEFAULT_MODEL,
        verify_command=os.getenv("POSTWATCHER_VERIFY_COMMAND", DEFAULT_VERIFY_COMMAND),
    )


def ensure_directories(*dirs: Path) -> None:
    """Create any missing working directories."""
    for directory in dirs:
        directory.mkdir(parents=True, exist_ok=True)
