"""Report assembly and the display-time SEO score.

Flags are computed once here, when the report is built, and stored as-is.
The score shown to users is derived on read: a number quoted in the AI text
when there is one, otherwise a weighted sum of the stored flags.
"""

import json
import re
from collections.abc import Mapping

from models import ReportRecord, ScrapedMetadata

SCORE_PATTERN = re.compile(r"score[:\s]*(\d+)", re.IGNORECASE)

TITLE_IDEAL_LENGTH = (30, 60)
DESCRIPTION_IDEAL_LENGTH = (120, 160)


def build_report_record(metadata: ScrapedMetadata, ai_analysis: str) -> ReportRecord:
    """Combine scraped metadata and AI text into a record ready for the store."""
    title = metadata.get("title")
    description = metadata.get("description")
    keywords = metadata.get("keywords")
    headings = metadata["headings"]

    return {
        "url": metadata["url"],
        "title": title,
        "description": description,
        "keywords": keywords,
        "headings": json.dumps(headings),
        "meta_tags": json.dumps(metadata["meta_tags"]),
        "ai_analysis": ai_analysis,
        "title_length": len(title) if title else 0,
        "description_length": len(description) if description else 0,
        "has_title": bool(title),
        "has_description": bool(description),
        "has_keywords": bool(keywords),
        "has_h1": len(headings.get("h1", [])) > 0,
    }


def extract_seo_score(ai_analysis: str) -> int | None:
    """First number following the word "score" in the AI text, if any."""
    match = SCORE_PATTERN.search(ai_analysis or "")
    if match is None:
        return None
    return int(match.group(1))


def heuristic_score(report: Mapping) -> int:
    score = 0
    if report.get("has_title"):
        score += 25
    if report.get("has_description"):
        score += 25
    if report.get("has_h1"):
        score += 20
    if report.get("has_keywords"):
        score += 10

    title_length = report.get("title_length") or 0
    if TITLE_IDEAL_LENGTH[0] <= title_length <= TITLE_IDEAL_LENGTH[1]:
        score += 10
    description_length = report.get("description_length") or 0
    if DESCRIPTION_IDEAL_LENGTH[0] <= description_length <= DESCRIPTION_IDEAL_LENGTH[1]:
        score += 10

    return score


def seo_score(report: Mapping) -> int:
    """Score to display for a stored report."""
    quoted = extract_seo_score(report.get("ai_analysis") or "")
    return quoted if quoted is not None else heuristic_score(report)


def score_band(score: int) -> str:
    if score >= 80:
        return "good"
    if score >= 60:
        return "fair"
    return "poor"


def essentials_present(report: Mapping) -> int:
    """How many of title, description and H1 the page had (0-3)."""
    return sum(1 for flag in ("has_title", "has_description", "has_h1") if report.get(flag))
