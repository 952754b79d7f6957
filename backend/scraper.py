"""Single-page scraper: normalize a URL, fetch it and extract SEO metadata.

Extracts title, description and keywords (with Open Graph / Twitter
fallbacks), heading text for every level, and all name/content meta pairs.
Does NOT crawl subpages.
"""

import logging
from urllib.parse import urlparse, urlunparse

import requests
from bs4 import BeautifulSoup

import config
from errors import FetchFailed, InvalidUrl
from models import HEADING_LEVELS, Headings, ScrapedMetadata

logger = logging.getLogger(__name__)

_REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# Ordered fallbacks: (attribute, value) of the <meta> carrying the field.
_TITLE_META_FALLBACKS = [("property", "og:title"), ("name", "twitter:title")]
_DESCRIPTION_SOURCES = [
    ("name", "description"),
    ("property", "og:description"),
    ("name", "twitter:description"),
]


def normalize_url(url: str) -> str:
    """
    Prefix scheme-less input with https:// and validate the result.
    Raises InvalidUrl when it is not a well-formed absolute http(s) URL.
    """
    candidate = str(url or "").strip()
    if not candidate.startswith(("http://", "https://")):
        candidate = "https://" + candidate

    try:
        parsed = urlparse(candidate)
        # Accessing .port validates the port component.
        parsed.port
    except ValueError as e:
        raise InvalidUrl() from e

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidUrl()
    if any(ch.isspace() for ch in parsed.netloc):
        raise InvalidUrl()

    return urlunparse(parsed._replace(path=parsed.path or "/"))


def fetch_html(url: str, timeout: float | None = None) -> str:
    """
    GET `url` once and return the body text.
    Raises FetchFailed on a non-2xx status or any transport error.
    """
    effective_timeout = config.FETCH_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        response = requests.get(url, timeout=effective_timeout, headers=_REQUEST_HEADERS)
    except requests.Timeout as e:
        logger.warning("Fetch timed out after %ss: %s", effective_timeout, url)
        raise FetchFailed(f"Failed to fetch URL: request timed out after {effective_timeout:g}s") from e
    except requests.RequestException as e:
        logger.warning("Fetch failed for %s: %s", url, e)
        raise FetchFailed(f"Failed to fetch URL: {e}") from e

    if not 200 <= response.status_code < 300:
        logger.warning("Fetch returned HTTP %s for %s", response.status_code, url)
        raise FetchFailed(f"Failed to fetch URL: HTTP {response.status_code}: {response.reason or ''}".rstrip())

    if not response.encoding or response.encoding.lower() == "iso-8859-1":
        response.encoding = response.apparent_encoding or "utf-8"
    return response.text


def _meta_content(soup: BeautifulSoup, attr: str, value: str) -> str | None:
    tag = soup.find("meta", attrs={attr: value})
    if tag is None:
        return None
    content = tag.get("content")
    return content or None


def _extract_headings(soup: BeautifulSoup, level: str) -> list[str]:
    texts: list[str] = []
    for tag in soup.find_all(level):
        text = tag.get_text().strip()
        if text:
            texts.append(text)
    return texts


def extract_metadata(html: str, url: str) -> ScrapedMetadata:
    """Parse `html` and return its SEO metadata. Never raises; missing fields are None."""
    soup = BeautifulSoup(html or "", "html.parser")

    # --- Title ---
    title = None
    if soup.title is not None:
        title = soup.title.get_text().strip() or None
    for attr, value in _TITLE_META_FALLBACKS:
        if title:
            break
        title = _meta_content(soup, attr, value)

    # --- Description ---
    description = None
    for attr, value in _DESCRIPTION_SOURCES:
        description = _meta_content(soup, attr, value)
        if description:
            break

    # --- Keywords ---
    keywords = _meta_content(soup, "name", "keywords")

    # --- Headings ---
    headings: Headings = {level: _extract_headings(soup, level) for level in HEADING_LEVELS}

    # --- Meta tags ---
    meta_tags: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        key = tag.get("name") or tag.get("property") or tag.get("http-equiv")
        content = tag.get("content")
        if key and content:
            meta_tags[key] = content

    return {
        "title": title,
        "description": description,
        "keywords": keywords,
        "headings": headings,
        "meta_tags": meta_tags,
        "url": url,
    }


def scrape_url(url: str) -> ScrapedMetadata:
    """Normalize, fetch and extract in one go."""
    normalized = normalize_url(url)
    html = fetch_html(normalized)
    return extract_metadata(html, normalized)
