"""Batch processing of watched link lists for PostWatcher."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import Config
from .fetcher import fetch_article_content, is_fetch_failure
from .generator import generate_post
from .hooks import VerificationFailed, VerificationResult, run_verify_hook
from .links import parse_markdown_links
from .llm import ModelClient
from .models import ArticleItem, GeneratedPost
from .writer import archive_input_file, save_post

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 2

# Per-article outcomes
SAVED = "saved"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class BatchResult:
    """Result of processing a single input list file."""

    filename: str
    found: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    archived_to: Optional[Path] = None
    outputs: list[Path] = field(default_factory=list)
    verification: Optional[VerificationResult] = None


async def process_article(
    config: Config,
    client: ModelClient,
    article: ArticleItem,
    source_file: str,
) -> tuple[str, Optional[Path]]:
    """Fetch, generate and save one article.

    Any error is logged with the article title and reported as a failure so
    sibling tasks keep running.

    Returns:
        Tuple of (outcome, output path or None)
    """
    try:
        content = await asyncio.to_thread(fetch_article_content, article.link)
        if is_fetch_failure(content):
            logger.info("Skipping generation due to fetch failure: %s", article.title)
            return SKIPPED, None

        body = await generate_post(config, client, article.title, content, article.link)

        post = GeneratedPost(
            title=article.title,
            link=article.link,
            source_file=source_file,
            generated_at=datetime.now().astimezone(),
            body=body,
        )
        return SAVED, save_post(config.output_dir, post)
    except Exception:
        logger.exception('Failed to process article "%s" (%s)', article.title, article.link)
        return FAILED, None


async def process_input_file(
    config: Config,
    client: ModelClient,
    path: Path,
    concurrency: int = DEFAULT_CONCURRENCY,
    run_verify: bool = True,
) -> BatchResult:
    """Process one input list file end to end.

    Every link becomes one task; at most ``concurrency`` tasks run at once.
    Once all tasks have finished the file is archived, whatever their
    outcome. A file without links is left in place and not archived. The
    verification hook runs only if at least one post was saved, and its
    failure is logged, never raised.

    Args:
        config: Application configuration
        client: Model client
        path: Input list file
        concurrency: Maximum number of articles in flight
        run_verify: Whether to run the verification hook

    Returns:
        BatchResult summarizing the batch

    Raises:
        OSError: If the input file cannot be read or archived
    """
    result = BatchResult(filename=path.name)
    logger.info("Processing input list: %s", path.name)

    if not path.exists():
        logger.warning("Input list disappeared before processing: %s", path.name)
        return result

    articles = parse_markdown_links(path.read_text(encoding="utf-8"))
    result.found = len(articles)

    if not articles:
        logger.warning("No valid links found in %s", path.name)
        return result

    logger.info("Found %d articles to process.", len(articles))

    semaphore = asyncio.Semaphore(concurrency)

    async def run(index: int, article: ArticleItem):
        async with semaphore:
            logger.info("[%d/%d] Processing: %s", index, len(articles), article.title)
            return await process_article(config, client, article, path.name)

    outcomes = await asyncio.gather(
        *(run(i, article) for i, article in enumerate(articles, start=1))
    )

    for outcome, output_path in outcomes:
        if outcome == SAVED:
            result.succeeded += 1
            result.outputs.append(output_path)
        elif outcome == SKIPPED:
            result.skipped += 1
        else:
            result.failed += 1

    result.archived_to = archive_input_file(path, config.archive_dir)

    if result.succeeded and run_verify and config.verify_command:
        result.verification = await run_verify_hook(config.verify_command, config.root)
        if isinstance(result.verification, VerificationFailed):
            # Reported only; the batch still counts as done.
            logger.error("Verification failed: %s", result.verification.reason)
        else:
            logger.info("Verification completed.")

    return result
