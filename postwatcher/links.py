"""Markdown link extraction for PostWatcher."""

import re

from .models import ArticleItem

# Titles cannot contain "]"; nested brackets are not supported.
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def parse_markdown_links(content: str) -> list[ArticleItem]:
    """Extract ``[Title](URL)`` occurrences from text.

    Any occurrence counts, not only list items. Matches whose title or link
    is empty after trimming, or whose link does not start with ``http``,
    are dropped.

    Args:
        content: Raw text of an input list file

    Returns:
        List of ArticleItem objects in order of appearance
    """
    items = []

    for match in LINK_PATTERN.finditer(content):
        title = match.group(1).strip()
        link = match.group(2).strip()
        if title and link and link.startswith("http"):
            items.append(ArticleItem(title=title, link=link))

    return items
