"""One analysis attempt: scrape -> AI critique -> assemble -> store.

Each attempt is logged in analysis_history, pending before any network call,
then success (after the report row is committed) or error (with the message).
The original failure is always re-raised to the caller.
"""

import logging

from ai_service import generate_seo_analysis
from database import create_analysis_history, insert_report, update_analysis_history
from report import build_report_record
from scraper import extract_metadata, fetch_html, normalize_url

logger = logging.getLogger(__name__)


def run_analysis(raw_url: str) -> dict:
    """Analyze `raw_url` and return the stored report row."""
    # Invalid input is rejected before an attempt is recorded.
    url = normalize_url(raw_url)

    history_id = create_analysis_history(url)
    logger.info("Analysis %s started for %s", history_id, url)

    try:
        html = fetch_html(url)
        metadata = extract_metadata(html, url)
        ai_analysis = generate_seo_analysis(metadata)
        report = insert_report(build_report_record(metadata, ai_analysis))
    except Exception as e:
        update_analysis_history(history_id, "error", str(e) or e.__class__.__name__)
        logger.error("Analysis %s failed for %s: %s", history_id, url, e)
        raise

    update_analysis_history(history_id, "success")
    logger.info("Analysis %s stored as report %s", history_id, report["id"])
    return report
