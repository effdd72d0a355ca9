"""Output writing and input archival for PostWatcher."""

import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .models import GeneratedPost

logger = logging.getLogger(__name__)

MAX_TITLE_FRAGMENT = 20
UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\u4e00-\u9fa5]")


def sanitize_title(title: str) -> str:
    """Reduce a title to a filename fragment.

    Every character other than ASCII letters, digits and CJK ideographs is
    replaced with an underscore, then the result is cut to 20 characters.
    """
    return UNSAFE_CHARS.sub("_", title)[:MAX_TITLE_FRAGMENT]


def file_timestamp(now: datetime, with_millis: bool = False) -> str:
    """Format a UTC timestamp for use in filenames.

    ``2024-01-02T03-04-05`` or, with milliseconds, ``2024-01-02T03-04-05-678Z``.
    """
    now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    if with_millis:
        stamp += f"-{now.microsecond // 1000:03d}Z"
    return stamp


def post_filename(title: str, now: datetime) -> str:
    return f"list_{file_timestamp(now)}_{sanitize_title(title)}.md"


def render_post(post: GeneratedPost) -> str:
    """Prefix the generated body with its provenance comment."""
    return (
        "<!--\n"
        f"Original Title: {post.title}\n"
        f"Source Link: {post.link}\n"
        f"Input List File: {post.source_file}\n"
        f"Generated: {post.generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        "-->\n"
        "\n"
        f"{post.body}\n"
    )


def save_post(output_dir: Path, post: GeneratedPost) -> Path:
    """Write a generated post to a new file.

    Two posts generated in the same second whose titles sanitize to the same
    fragment share a filename; the later one wins.

    Args:
        output_dir: Directory receiving generated posts
        post: The post to write

    Returns:
        Path of the written file
    """
    output_path = output_dir / post_filename(post.title, post.generated_at)
    output_path.write_text(render_post(post), encoding="utf-8")
    logger.info("Saved post to: %s", output_path)
    return output_path


def archive_input_file(
    path: Path, archive_dir: Path, now_ms: Optional[int] = None
) -> Path:
    """Move a processed input file into the archive directory.

    The file keeps its name behind an ``<epoch-ms>_`` prefix.

    Args:
        path: Input list file
        archive_dir: Archive directory
        now_ms: Epoch milliseconds to use as prefix (defaults to now)

    Returns:
        New path of the archived file
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000

    archive_path = archive_dir / f"{now_ms}_{path.name}"
    path.rename(archive_path)
    logger.info("Archived input list to: %s", archive_path)
    return archive_path
