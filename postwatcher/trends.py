"""Trend analysis and report writing for PostWatcher."""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import Config
from .llm import ModelClient, require_text
from .models import HotItem, TrendReport
from .tophub import TOPHUB_URL, fetch_hot_list
from .writer import file_timestamp

logger = logging.getLogger(__name__)

TOP_ITEMS = 30
SYSTEM_ROLE = "You are an expert content strategist and trend analyst."
MOCK_ANALYSIS = "# Mock Analysis\n\n- Mock Suggestion 1\n- Mock Suggestion 2"

TREND_PROMPT_TEMPLATE = """
You are a content strategy expert. Here is a list of current trending topics from TopHub (Hot List):

{items}

Please perform the following tasks:
1. **Analyze Traffic Potential**: Identify which of these topics have the highest potential for viral traffic *right now*. Look for topics that arouse strong curiosity, controversy, or urgency.
2. **Topic Suggestions**: Based on the high-potential topics, suggest 5 specific content angles/titles that a creator could use.
3. **Format**: Output your response in Markdown.

For the suggestions, use this format:
- **Topic**: [Original Topic Title]
- **Angle**: [Proposed Content Angle]
- **Why it works**: [Brief explanation of traffic potential]
"""


def format_hot_item(item: HotItem) -> str:
    return f"{item.rank}. [{item.source}] {item.title} (Hot: {item.hot}) - Link: {item.link}"


def build_trend_prompt(items: list[HotItem], limit: int = TOP_ITEMS) -> str:
    """Render the first ``limit`` items, in scrape order, into the prompt."""
    lines = "\n".join(format_hot_item(item) for item in items[:limit])
    return TREND_PROMPT_TEMPLATE.format(items=lines)


async def analyze_hot_list(
    config: Config, client: ModelClient, items: list[HotItem]
) -> str:
    """Ask the model which topics have traffic potential.

    Raises:
        UnexpectedResponseError: If the model response has no leading text block
    """
    prompt = build_trend_prompt(items)
    logger.info("Analyzing hot list (%d items)...", min(len(items), TOP_ITEMS))

    if config.mock_mode:
        return MOCK_ANALYSIS

    result = await client.complete(prompt, system=SYSTEM_ROLE)
    return require_text(result, label="hot list analysis")


def save_raw_items(trends_dir: Path, items: list[HotItem], stamp: str) -> Path:
    raw_path = trends_dir / f"tophub_hot_{stamp}.json"
    raw_path.write_text(
        json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    logger.info("Saved raw data to %s", raw_path)
    return raw_path


def render_trend_report(report: TrendReport) -> str:
    return (
        "# TopHub Hot List Analysis\n"
        f"> Generated at: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"> Source Data: [{report.raw_filename}](./{report.raw_filename})\n"
        "\n"
        f"{report.analysis}"
    )


def save_trend_report(trends_dir: Path, report: TrendReport, stamp: str) -> Path:
    report_path = trends_dir / f"tophub_analysis_{stamp}.md"
    report_path.write_text(render_trend_report(report), encoding="utf-8")
    logger.info("Saved analysis report to %s", report_path)
    return report_path


async def run_trends(
    config: Config,
    client: ModelClient,
    url: str = TOPHUB_URL,
    now: Optional[datetime] = None,
) -> Path:
    """Fetch, store, analyze and report on the hot list.

    There is no partial success: any error propagates to the caller.

    Args:
        config: Application configuration
        client: Model client
        url: Hot-list page URL
        now: Run timestamp (defaults to now)

    Returns:
        Path of the written analysis report
    """
    now = now or datetime.now().astimezone()
    stamp = file_timestamp(now, with_millis=True)

    items = await asyncio.to_thread(fetch_hot_list, url)
    logger.info("Fetched %d items.", len(items))

    raw_path = save_raw_items(config.trends_dir, items, stamp)

    analysis = await analyze_hot_list(config, client, items)

    report = TrendReport(generated_at=now, raw_filename=raw_path.name, analysis=analysis)
    return save_trend_report(config.trends_dir, report, stamp)
