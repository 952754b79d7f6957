"""Data models and types used across the backend.

Database table definitions are in database.py.
Types for scraper output and assembled reports live here.
"""

from typing import Literal, TypedDict

AnalysisStatus = Literal["pending", "success", "error"]

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")


class Headings(TypedDict):
    """Heading text per level, in document order."""

    h1: list[str]
    h2: list[str]
    h3: list[str]
    h4: list[str]
    h5: list[str]
    h6: list[str]


class ScrapedMetadata(TypedDict):
    """Structured output from the metadata extractor."""

    title: str | None
    description: str | None
    keywords: str | None
    headings: Headings
    meta_tags: dict[str, str]
    url: str


class ReportRecord(TypedDict):
    """A report ready to be inserted; flags are frozen at assembly time."""

    url: str
    title: str | None
    description: str | None
    keywords: str | None
    headings: str
    meta_tags: str
    ai_analysis: str
    title_length: int
    description_length: int
    has_title: bool
    has_description: bool
    has_keywords: bool
    has_h1: bool
