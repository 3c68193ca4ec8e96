"""Analysis workflows built on the deliberation core.

Each workflow composes its prompt, runs the agents, validates the
structured judgment and stamps workflow metadata onto it.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from .deliberation import deliberate, invoke_persona, stamp_metadata
from .extractor import extract_json, validate_judgment
from .personas import NICHE_PERSONAS, TREND_PERSONAS, PersonaSet
from ..models.analysis import (
    NicheArbitration,
    PainArbitration,
    PersonaAnalysis,
    ProductSpecification,
)
from ..models.deliberation import DeliberationInput, DeliberationResult
from ..models.errors import AgentError, ErrorKind, make_error
from ..models.requests import (
    DeepAnalysisRequest,
    NicheAnalysisRequest,
    NicheSources,
    ProductSpecRequest,
)
from ..providers.base import AIProvider
from ..utils.sanitize import preview

logger = logging.getLogger(__name__)

NO_SOURCES_TEXT = "No real-world data was provided."


def _personas(base: PersonaSet, override_dir: Optional[Path]) -> PersonaSet:
    if override_dir is None:
        return base
    return base.model_copy(update={"override_dir": override_dir})


# ---------------------------------------------------------------------------
# Trend deep analysis
# ---------------------------------------------------------------------------


def build_trend_prompt(deliberation_input: DeliberationInput) -> str:
    ctx = deliberation_input.context
    existing = ctx.get("existing_analysis") or {}

    lines = [
        "Analyze the niche/trend:",
        "",
        f"**Title:** {deliberation_input.topic}",
        f"**Category:** {ctx.get('trend_category') or 'Not specified'}",
        f"**Why it is trending:** {ctx.get('why_trending') or 'Not specified'}",
        "",
    ]
    if existing.get("main_pain"):
        lines.append(f"**Preliminary pain analysis:** {existing['main_pain']}")
    if existing.get("key_pain_points"):
        lines.append(f"**Identified pains:** {', '.join(existing['key_pain_points'])}")

    lines.append("")
    lines.append("Perform a deep analysis of the pains in this niche.")
    return "\n".join(lines)


async def run_deep_analysis(
    provider: AIProvider,
    request: DeepAnalysisRequest,
    persona_dir: Optional[Path] = None,
) -> DeliberationResult:
    """Deliberate over a trend and return the arbitrated pain analysis."""
    deliberation_input = DeliberationInput(
        topic=request.trend_title,
        context=request.model_dump(exclude={"trend_title"}),
    )

    result = await deliberate(
        provider,
        deliberation_input,
        personas=_personas(TREND_PERSONAS, persona_dir),
        prompt_builder=build_trend_prompt,
        persona_schema=PersonaAnalysis,
        judgment_schema=PainArbitration,
    )
    if result.success:
        result.judgment = stamp_metadata(result.judgment, analysis_depth="deep")
    return result


# ---------------------------------------------------------------------------
# Niche deep analysis
# ---------------------------------------------------------------------------


def format_sources_for_prompt(sources: Optional[NicheSources]) -> str:
    """Render collected source data as prompt sections."""
    if sources is None:
        return NO_SOURCES_TEXT

    parts: list[str] = []

    if sources.reddit and sources.reddit.posts:
        posts = sources.reddit.posts
        lines = [f"\n## Reddit data ({len(posts)} posts):"]
        for p in posts[:5]:
            line = f'- "{p.title}" ({p.score} upvotes, r/{p.subreddit})'
            if p.selftext:
                line += f"\n  Context: {p.selftext[:200]}..."
            lines.append(line)
        lines.append(f"Communities: {', '.join(sources.reddit.communities)}")
        parts.append("\n".join(lines))

    if sources.google_trends and sources.google_trends.growth_rate is not None:
        queries = ", ".join(q.query for q in sources.google_trends.related_queries[:5])
        parts.append(
            "\n## Google Trends data:\n"
            f"- Growth over the year: {sources.google_trends.growth_rate}%\n"
            f"- Related queries: {queries or 'no data'}"
        )

    if sources.youtube and sources.youtube.videos:
        videos = sources.youtube.videos
        lines = [f"\n## YouTube videos ({len(videos)}):"]
        lines.extend(f'- "{v.title}" ({v.channel})' for v in videos[:3])
        parts.append("\n".join(lines))

    if sources.synthesis and sources.synthesis.key_insights:
        s = sources.synthesis
        parts.append(
            "\n## Preliminary AI synthesis of the data:\n"
            f"Insights: {'; '.join(s.key_insights)}\n"
            f"Audience sentiment: {s.sentiment_summary}\n"
            f"Content gaps: {'; '.join(s.content_gaps) or 'none identified'}"
        )

    return "\n".join(parts) if parts else NO_SOURCES_TEXT


def detect_data_sources(sources: Optional[NicheSources]) -> list[str]:
    """Names of the data sources that actually carried data."""
    used: list[str] = []
    if sources is None:
        return used
    if sources.reddit and sources.reddit.posts:
        used.append("Reddit")
    if sources.google_trends and sources.google_trends.growth_rate is not None:
        used.append("Google Trends")
    if sources.youtube and sources.youtube.videos:
        used.append("YouTube")
    return used


def build_niche_prompt(deliberation_input: DeliberationInput) -> str:
    ctx = deliberation_input.context
    lines = [
        "Analyze the niche:",
        "",
        f"**Niche:** {deliberation_input.topic}",
        f"**Description:** {ctx.get('description') or 'Not specified'}",
    ]
    if ctx.get("target_audience"):
        lines.append(f"**Target audience:** {ctx['target_audience']}")
    if ctx.get("existing_problems"):
        lines.append(f"**Known problems:** {ctx['existing_problems']}")

    lines.extend(["", ctx.get("sources_text") or NO_SOURCES_TEXT, ""])
    lines.append("Perform a deep analysis of the pains in this niche.")
    return "\n".join(lines)


async def run_niche_deep_analysis(
    provider: AIProvider,
    request: NicheAnalysisRequest,
    persona_dir: Optional[Path] = None,
) -> DeliberationResult:
    """Deliberate over a niche, grounding both personas in collected sources."""
    sources_text = format_sources_for_prompt(request.sources)
    context = request.model_dump(exclude={"niche", "sources"})
    context["sources_text"] = sources_text

    result = await deliberate(
        provider,
        DeliberationInput(topic=request.niche, context=context),
        personas=_personas(NICHE_PERSONAS, persona_dir),
        prompt_builder=build_niche_prompt,
        persona_schema=PersonaAnalysis,
        judgment_schema=NicheArbitration,
        arbiter_sections={"Source data": sources_text},
    )
    if result.success:
        result.judgment = stamp_metadata(
            result.judgment,
            analysis_depth="deep",
            data_sources_used=detect_data_sources(request.sources),
        )
    return result


# ---------------------------------------------------------------------------
# Product specification
# ---------------------------------------------------------------------------


class ProductSpecResult(BaseModel):
    trend_title: str
    main_pain: str
    spec: Any = None
    error: Optional[AgentError] = None
    total_ms: int = 0

    @property
    def success(self) -> bool:
        return self.error is None and self.spec is not None


def build_product_spec_prompt(request: ProductSpecRequest) -> str:
    trend = request.trend
    analysis = request.analysis
    audience = analysis.target_audience
    competition = request.competition

    segments = "Not defined"
    if audience and audience.segments:
        segments = "; ".join(
            f"{s.name} ({s.size}, willingness to pay: {s.willingness_to_pay or 'not assessed'})"
            for s in audience.segments
        )

    competitors = "Competitors were not analyzed"
    if competition and competition.competitors:
        competitors = "\n".join(
            f"- {c.name}: {c.description or 'no description'} ({c.website or 'no website'})"
            for c in competition.competitors
        )
    positioning = (competition.strategic_positioning if competition else None) or "Not defined"

    return "\n".join(
        [
            "Create a Product Specification that solves the following pain:",
            "",
            "## TREND",
            f"- **Title:** {trend.title}",
            f"- **Category:** {trend.category or 'Technology'}",
            f"- **Why it is trending:** {trend.why_trending or 'Growing demand'}",
            "",
            "## PAIN ANALYSIS",
            f"- **Main pain:** {analysis.main_pain}",
            f"- **Additional pains:** {', '.join(analysis.key_pain_points) or 'Not defined'}",
            "",
            "## TARGET AUDIENCE",
            f"- **Primary:** {(audience.primary if audience else '') or 'Not defined'}",
            f"- **Segments:** {segments}",
            "",
            "## OPPORTUNITIES AND RISKS",
            f"- **Opportunities:** {', '.join(analysis.opportunities) or 'Not defined'}",
            f"- **Risks:** {', '.join(analysis.risks) or 'Not defined'}",
            "",
            "## COMPETITORS",
            competitors,
            "",
            f"**Positioning:** {positioning}",
            "",
            "---",
            "",
            "Using this data, write the COMPLETE product specification.",
            "Remember: this must be a WORKING MVP that can be built in 1-2 weeks "
            "on a $0-100/month budget.",
        ]
    )


async def run_product_spec(
    provider: AIProvider,
    request: ProductSpecRequest,
    persona_dir: Optional[Path] = None,
) -> ProductSpecResult:
    """Generate a product specification with a single product-manager agent."""
    logger.info("Starting product spec for trend: %s", request.trend.title)
    start = time.monotonic()
    result = ProductSpecResult(
        trend_title=request.trend.title, main_pain=request.analysis.main_pain
    )

    personas = _personas(PersonaSet(), persona_dir)
    outcome = await invoke_persona(
        provider, personas, "product_manager", build_product_spec_prompt(request)
    )
    result.total_ms = int((time.monotonic() - start) * 1000)

    if not outcome.success:
        result.error = outcome.error
        return result

    spec = extract_json(outcome.content)
    if spec is None:
        logger.error("Failed to parse product spec: %s", preview(outcome.content))
        result.error = make_error(
            ErrorKind.UNPARSEABLE_RESPONSE,
            "PRODUCT MANAGER response did not contain parseable JSON",
        )
        return result

    error = validate_judgment(spec, ProductSpecification)
    if error is not None:
        result.error = error
        return result

    result.spec = spec
    logger.info("Product spec completed in %dms", result.total_ms)
    return result
