"""Parallel deliberation: two opposing personas, then an arbiter.

State machine per deliberation:
started -> parallel_running -> {parallel_failed | parallel_succeeded}
        -> arbiter_running -> {arbiter_failed | complete}

Retries happen only inside the provider's invoke(); no stage is retried here.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel

from .extractor import extract_json, validate_judgment
from .personas import PERSONA_DEFS, TREND_PERSONAS, PersonaSet
from ..models.deliberation import (
    ArbitrationOutcome,
    DeliberationInput,
    DeliberationResult,
    DeliberationStage,
    PhaseTimings,
)
from ..models.errors import AgentError, ErrorKind, make_error
from ..models.provider import AgentOutcome
from ..providers.base import AIProvider

logger = logging.getLogger(__name__)

PromptBuilder = Callable[[DeliberationInput], str]


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def _label(key: str) -> str:
    return key.replace("_", " ").capitalize()


def build_deliberation_prompt(deliberation_input: DeliberationInput) -> str:
    """Compose the shared user prompt from a topic and its context.

    Context entries appear in insertion order; empty values are skipped.
    """
    lines = ["Analyze the niche/trend:", "", f"**Topic:** {deliberation_input.topic}"]

    for key, value in deliberation_input.context.items():
        if value in (None, "", [], {}):
            continue
        if isinstance(value, str):
            lines.append(f"**{_label(key)}:** {value}")
        elif isinstance(value, list) and all(isinstance(v, str) for v in value):
            lines.append(f"**{_label(key)}:** {', '.join(value)}")
        else:
            lines.append(f"**{_label(key)}:**\n{_dump(value)}")

    lines.append("")
    lines.append("Perform a deep analysis of the pains in this niche.")
    return "\n".join(lines)


def build_arbiter_prompt(
    topic: str,
    optimist_analysis: Any,
    skeptic_analysis: Any,
    extra_sections: Optional[dict[str, str]] = None,
) -> str:
    """Embed both persona outputs, pretty-printed, under labelled sections."""
    parts = [
        f'Here are two analyses of the niche "{topic}":',
        "",
        "## OPTIMIST ANALYSIS:",
        _dump(optimist_analysis),
        "",
        "## SKEPTIC ANALYSIS:",
        _dump(skeptic_analysis),
    ]
    for title, body in (extra_sections or {}).items():
        parts.extend(["", f"## {title.upper()}:", body])

    parts.append("")
    parts.append("Synthesize these two opinions into an objective final analysis.")
    return "\n".join(parts)


async def invoke_persona(
    provider: AIProvider,
    personas: PersonaSet,
    persona_key: str,
    user_prompt: str,
) -> AgentOutcome:
    """Send one persona's system prompt with the given user prompt."""
    request = provider.build_request(
        system_prompt=personas.prompt(persona_key),
        user_prompt=user_prompt,
        persona=persona_key,
    )
    return await provider.invoke(request)


def _parse_persona_output(
    persona_key: str,
    outcome: AgentOutcome,
    schema: Optional[type[BaseModel]],
) -> tuple[Any, Optional[AgentError]]:
    value = extract_json(outcome.content)
    name = PERSONA_DEFS.get(persona_key, {}).get("name", persona_key.upper())
    if value is None:
        return None, make_error(
            ErrorKind.UNPARSEABLE_RESPONSE,
            f"{name} response did not contain parseable JSON",
        )
    if schema is not None:
        error = validate_judgment(value, schema)
        if error is not None:
            return None, error
    return value, None


async def run_deliberation(
    provider: AIProvider,
    deliberation_input: DeliberationInput,
    personas: PersonaSet = TREND_PERSONAS,
    prompt_builder: PromptBuilder = build_deliberation_prompt,
    schema: Optional[type[BaseModel]] = None,
) -> DeliberationResult:
    """Run the optimist and skeptic concurrently and join both.

    The first failure found (optimist checked before skeptic) becomes the
    result's error; the other outcome is kept for inspection but not used.
    Parsed outputs are opaque unless ``schema`` is given.
    """
    result = DeliberationResult(topic=deliberation_input.topic)
    user_prompt = prompt_builder(deliberation_input)

    logger.info(
        "Starting parallel analysis: %s + %s", personas.optimist, personas.skeptic
    )
    start = time.monotonic()
    result.stage = DeliberationStage.PARALLEL_RUNNING

    optimist, skeptic = await asyncio.gather(
        invoke_persona(provider, personas, personas.optimist, user_prompt),
        invoke_persona(provider, personas, personas.skeptic, user_prompt),
    )

    parallel_ms = _elapsed_ms(start)
    logger.info("Parallel analysis completed in %dms", parallel_ms)

    result.optimist = optimist
    result.skeptic = skeptic
    result.timings = PhaseTimings(parallel_ms=parallel_ms, total_ms=parallel_ms)

    for outcome in (optimist, skeptic):
        if not outcome.success:
            result.stage = DeliberationStage.PARALLEL_FAILED
            result.error = outcome.error
            return result

    analyses = []
    for key, outcome in ((personas.optimist, optimist), (personas.skeptic, skeptic)):
        value, error = _parse_persona_output(key, outcome, schema)
        if error is not None:
            logger.error("%s: %s", error.code.value, error.message)
            result.stage = DeliberationStage.PARALLEL_FAILED
            result.error = error
            return result
        analyses.append(value)

    result.optimist_analysis, result.skeptic_analysis = analyses
    result.stage = DeliberationStage.PARALLEL_SUCCEEDED
    return result


async def arbitrate(
    provider: AIProvider,
    topic: str,
    optimist_analysis: Any,
    skeptic_analysis: Any,
    personas: PersonaSet = TREND_PERSONAS,
    extra_sections: Optional[dict[str, str]] = None,
    schema: Optional[type[BaseModel]] = None,
) -> ArbitrationOutcome:
    """Synthesize both persona outputs into one structured judgment."""
    logger.info("Starting arbitration")
    start = time.monotonic()

    user_prompt = build_arbiter_prompt(
        topic, optimist_analysis, skeptic_analysis, extra_sections
    )
    outcome = await invoke_persona(provider, personas, personas.arbiter, user_prompt)
    arbitration_ms = _elapsed_ms(start)
    logger.info("Arbitration completed in %dms", arbitration_ms)

    if not outcome.success:
        return ArbitrationOutcome(
            outcome=outcome, error=outcome.error, arbitration_ms=arbitration_ms
        )

    judgment, error = _parse_persona_output(personas.arbiter, outcome, schema)
    if error is not None:
        logger.error("%s: %s", error.code.value, error.message)
        return ArbitrationOutcome(outcome=outcome, error=error, arbitration_ms=arbitration_ms)

    return ArbitrationOutcome(
        outcome=outcome, judgment=judgment, arbitration_ms=arbitration_ms
    )


async def deliberate(
    provider: AIProvider,
    deliberation_input: DeliberationInput,
    personas: PersonaSet = TREND_PERSONAS,
    prompt_builder: PromptBuilder = build_deliberation_prompt,
    persona_schema: Optional[type[BaseModel]] = None,
    judgment_schema: Optional[type[BaseModel]] = None,
    arbiter_sections: Optional[dict[str, str]] = None,
) -> DeliberationResult:
    """Run the full deliberation: parallel personas, then the arbiter."""
    start = time.monotonic()

    result = await run_deliberation(
        provider,
        deliberation_input,
        personas=personas,
        prompt_builder=prompt_builder,
        schema=persona_schema,
    )
    if result.stage != DeliberationStage.PARALLEL_SUCCEEDED:
        return result

    result.stage = DeliberationStage.ARBITER_RUNNING
    arbitration = await arbitrate(
        provider,
        deliberation_input.topic,
        result.optimist_analysis,
        result.skeptic_analysis,
        personas=personas,
        extra_sections=arbiter_sections,
        schema=judgment_schema,
    )

    total_ms = _elapsed_ms(start)
    result.arbiter = arbitration.outcome
    result.timings = PhaseTimings(
        parallel_ms=result.timings.parallel_ms,
        arbitration_ms=arbitration.arbitration_ms,
        total_ms=total_ms,
    )

    if not arbitration.success:
        result.stage = DeliberationStage.ARBITER_FAILED
        result.error = arbitration.error
        return result

    result.judgment = arbitration.judgment
    result.stage = DeliberationStage.COMPLETE
    logger.info("Total deliberation time: %dms", total_ms)
    return result


def stamp_metadata(judgment: Any, **metadata: Any) -> Any:
    """Return a copy of ``judgment`` with ``metadata`` merged into analysis_metadata.

    Core fields are left untouched; non-object judgments are returned as-is.
    """
    if not isinstance(judgment, dict):
        return judgment
    stamped = dict(judgment)
    existing = stamped.get("analysis_metadata")
    stamped["analysis_metadata"] = {
        **(existing if isinstance(existing, dict) else {}),
        **metadata,
    }
    return stamped
