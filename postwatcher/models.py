"""Data models for PostWatcher."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ArticleItem:
    """Represents one link discovered in an input list."""

    title: str
    link: str


@dataclass
class HotItem:
    """Represents one trending entry scraped from the hot list."""

    rank: str
    title: str
    link: str
    hot: str = ""
    source: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "rank": self.rank,
            "title": self.title,
            "link": self.link,
            "hot": self.hot,
            "source": self.source,
        }


@dataclass
class GeneratedPost:
    """Represents model output for one article, with its provenance."""

    title: str
    link: str
    source_file: str
    generated_at: datetime
    body: str


@dataclass
class TrendReport:
    """Represents the model analysis of one scraped hot list."""

    generated_at: datetime
    raw_filename: str
    analysis: str
