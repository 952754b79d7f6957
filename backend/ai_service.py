"""
Claude-backed SEO critique. The API key must be defined in the environment or
in a .env file in the backend root (see config.py):

ANTHROPIC_API_KEY=your_real_key_here
"""

import logging

from anthropic import Anthropic

import config
from errors import AnalysisFailed
from models import ScrapedMetadata

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = (
    "You are an expert SEO consultant with deep knowledge of search engine optimization "
    "best practices, technical SEO, content optimization, and user experience. "
    "Provide detailed, actionable SEO recommendations."
)

USER_TEMPLATE = """Please analyze the following webpage for SEO optimization and provide detailed recommendations:

**URL:** {url}

**Current SEO Elements:**
- **Title:** {title}
  - Length: {title_length} characters
- **Meta Description:** {description}
  - Length: {description_length} characters
- **Meta Keywords:** {keywords}
- **H1 Headings:** {h1}
  - Count: {h1_count}
- **H2 Headings:** {h2}
- **H3 Headings:** {h3}

**Additional Meta Tags:**
{meta_tags}

**Please provide a comprehensive SEO analysis including:**

1. **Critical Issues** (High Priority)
   - List any major SEO problems that need immediate attention

2. **Title Tag Analysis**
   - Evaluate the current title tag effectiveness
   - Suggest improvements for better click-through rates and rankings

3. **Meta Description Analysis**
   - Assess the meta description quality and length
   - Provide recommendations for improvement

4. **Content Structure Analysis**
   - Evaluate heading hierarchy and structure
   - Suggest improvements for better content organization

5. **Technical SEO Recommendations**
   - Identify missing or problematic meta tags
   - Suggest additional technical improvements

6. **Content Optimization Suggestions**
   - Recommend keyword optimization strategies
   - Suggest content improvements for better user engagement

7. **Overall SEO Score**
   - Provide a score out of 100 based on current optimization level
   - Explain the scoring rationale

Please format your response in clear sections with actionable recommendations. Focus on practical, implementable suggestions that will have the most impact on search engine rankings and user experience."""


def _heading_preview(values: list[str], limit: int) -> str:
    if not values:
        return "None"
    preview = ", ".join(values[:limit])
    return preview + ("..." if len(values) > limit else "")


def build_user_message(metadata: ScrapedMetadata, meta_tag_limit: int | None = None) -> str:
    """Render the analysis prompt for `metadata`. Same input, same text."""
    limit = config.META_TAG_LIMIT if meta_tag_limit is None else max(0, meta_tag_limit)
    title = metadata.get("title") or ""
    description = metadata.get("description") or ""
    headings = metadata["headings"]
    h1 = headings.get("h1", [])

    meta_lines = [f"- {key}: {value}" for key, value in list(metadata["meta_tags"].items())[:limit]]

    return USER_TEMPLATE.format(
        url=metadata["url"],
        title=title or "MISSING",
        title_length=len(title),
        description=description or "MISSING",
        description_length=len(description),
        keywords=metadata.get("keywords") or "MISSING",
        h1=", ".join(h1) if h1 else "MISSING",
        h1_count=len(h1),
        h2=_heading_preview(headings.get("h2", []), 5),
        h3=_heading_preview(headings.get("h3", []), 3),
        meta_tags="\n".join(meta_lines),
    )


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


def get_client() -> Anthropic:
    """Client with SDK retries disabled; a failed call is reported, not repeated."""
    if not config.ANTHROPIC_API_KEY:
        raise AnalysisFailed("Failed to generate SEO analysis: ANTHROPIC_API_KEY is not set")
    return Anthropic(
        api_key=config.ANTHROPIC_API_KEY,
        timeout=config.CLAUDE_TIMEOUT_SECONDS,
        max_retries=0,
    )


def _call_claude(client: Anthropic, user_message: str) -> str:
    response = client.messages.create(
        model=config.CLAUDE_MODEL,
        max_tokens=config.CLAUDE_MAX_TOKENS,
        system=SYSTEM_MESSAGE,
        messages=[{"role": "user", "content": user_message}],
        temperature=config.CLAUDE_TEMPERATURE,
    )
    if getattr(response, "stop_reason", None) == "max_tokens":
        logger.warning("Claude output hit max_tokens for model=%s", config.CLAUDE_MODEL)
    return _extract_response_text(response)


def generate_seo_analysis(metadata: ScrapedMetadata, client: Anthropic | None = None) -> str:
    """
    Ask Claude for a prose SEO critique of `metadata` and return it verbatim.
    Raises AnalysisFailed on API errors or an empty answer. No retries.
    """
    user_message = build_user_message(metadata)
    try:
        content = _call_claude(client or get_client(), user_message)
    except AnalysisFailed:
        raise
    except Exception as e:
        logger.error("Claude call failed for %s: %s", metadata["url"], e)
        raise AnalysisFailed(f"Failed to generate SEO analysis: {e}") from e

    if not content:
        logger.error("Claude returned an empty response for %s", metadata["url"])
        raise AnalysisFailed("Failed to generate SEO analysis: No response from Claude")

    logger.info("Claude analysis received for %s (%d chars)", metadata["url"], len(content))
    return content
