"""Hot-list scraping for PostWatcher."""

import logging
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .fetcher import USER_AGENT
from .models import HotItem

logger = logging.getLogger(__name__)

TOPHUB_URL = "https://tophub.today/hot"
LABEL_SEPARATOR = "‧"


def fetch_hot_list(url: str = TOPHUB_URL, timeout: int = 30) -> list[HotItem]:
    """Fetch the hot-list page and parse its ranked items.

    Args:
        url: URL of the hot-list page
        timeout: Request timeout in seconds

    Returns:
        List of HotItem objects in page order

    Raises:
        HotListError: If the page cannot be fetched
    """
    logger.info("Fetching %s...", url)
    try:
        response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise HotListError(f"Failed to fetch hot list: {e}") from e

    return parse_hot_list(response.content, url)


def parse_hot_list(page_html, base_url: str = TOPHUB_URL) -> list[HotItem]:
    """Parse ``.child-item`` entries from hot-list markup.

    Each entry yields its rank, title, absolute link and the
    ``source ‧ popularity`` label split into its two parts. Entries without
    a title are skipped; any other missing part becomes an empty string.

    Args:
        page_html: HTML document (str or bytes)
        base_url: URL the page was fetched from, for relative links

    Returns:
        List of HotItem objects in document order
    """
    soup = BeautifulSoup(page_html, "html.parser")
    items = []

    for element in soup.select(".child-item"):
        title_link = element.select_one(".medium-txt a")
        if title_link is None:
            continue

        title = title_link.get_text(strip=True)
        if not title:
            continue

        href = title_link.get("href", "").strip()
        link = href if href.startswith("http") else urljoin(base_url, href)

        source, hot = _split_label(_text_of(element, ".small-txt"))

        items.append(
            HotItem(
                rank=_text_of(element, ".left-item span"),
                title=title,
                link=link,
                hot=hot,
                source=source,
            )
        )

    return items


def _text_of(element, selector: str) -> str:
    found = element.select_one(selector)
    return found.get_text(strip=True) if found else ""


def _split_label(label: str) -> tuple[str, str]:
    """Split ``"知乎 ‧ 958万热度"`` into ``("知乎", "958万热度")``."""
    parts = [part.strip() for part in label.split(LABEL_SEPARATOR)]
    source = parts[0] if parts else ""
    hot = parts[1] if len(parts) > 1 else ""
    return source, hot


class HotListError(Exception):
    """Raised when the hot-list page cannot be fetched."""

    pass
