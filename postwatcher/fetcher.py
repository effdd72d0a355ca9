"""Article fetching and readable-text extraction for PostWatcher."""

import logging
from typing import Optional

import requests
from lxml import html as lxml_html
from readability import Document

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MAX_CONTENT_CHARS = 15000
FETCH_FAILED_PREFIX = "[Failed"


def fetch_article_content(url: str, timeout: int = 10) -> str:
    """Fetch a URL and reduce it to a plain-text excerpt.

    Never raises: any failure (HTTP error status, transport error, page
    without readable content) is logged and turned into the string
    ``[Failed to fetch content from <url>]``. Use is_fetch_failure() to
    tell the two apart.

    Args:
        url: Article URL
        timeout: Request timeout in seconds

    Returns:
        Up to 15,000 characters of readable text, or the failure string
    """
    logger.info("Fetching: %s", url)
    try:
        response = requests.get(
            url, headers={"User-Agent": USER_AGENT}, timeout=timeout
        )
        response.raise_for_status()

        text = extract_readable_text(response.text, url)
        if not text:
            raise ValueError("Failed to parse article content")

        return text[:MAX_CONTENT_CHARS]
    except Exception as e:
        logger.warning("Error fetching %s: %s", url, e)
        return f"[Failed to fetch content from {url}]"


def extract_readable_text(page_html: str, url: Optional[str] = None) -> str:
    """Extract the main article text from an HTML document.

    Args:
        page_html: Full HTML document
        url: Page URL, used to resolve relative links

    Returns:
        Trimmed article text with blank lines removed (may be empty)
    """
    summary_html = Document(page_html, url=url).summary()
    tree = lxml_html.fromstring(summary_html)
    text = tree.text_content()

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(lines).strip()


def is_fetch_failure(content: str) -> bool:
    """Check whether fetch_article_content() returned its failure string."""
    return content.startswith(FETCH_FAILED_PREFIX)
