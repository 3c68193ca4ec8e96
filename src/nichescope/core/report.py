"""Response envelopes and markdown reports for finished workflows."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .workflows import ProductSpecResult
from ..models.deliberation import DeliberationResult
from ..models.errors import AgentError


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_response(error: Optional[AgentError]) -> dict:
    """Failure envelope: short user message plus the stable machine code."""
    if error is None:
        return {"success": False, "error": "Something went wrong. Try again.", "errorCode": "unknown"}
    return {
        "success": False,
        "error": error.user_message,
        "errorCode": error.code.value,
    }


def build_response(
    result: DeliberationResult,
    analysis_type: str = "deep_parallel_arbitration",
    extra: Optional[dict] = None,
) -> dict:
    """Envelope returned to callers of the deliberation workflows."""
    if not result.success:
        return error_response(result.error)

    response = {
        "success": True,
        "analysis": result.judgment,
        "raw_analyses": {
            "optimist": result.optimist_analysis,
            "skeptic": result.skeptic_analysis,
        },
        "metadata": {
            "parallel_time_ms": result.timings.parallel_ms,
            "arbitration_time_ms": result.timings.arbitration_ms,
            "total_time_ms": result.timings.total_ms,
            "analysis_type": analysis_type,
        },
    }
    if extra:
        response.update(extra)
    response["timestamp"] = _timestamp()
    return response


def build_product_spec_response(result: ProductSpecResult) -> dict:
    if not result.success:
        return error_response(result.error)

    spec = result.spec if isinstance(result.spec, dict) else {}
    return {
        "success": True,
        "product_spec": result.spec,
        "metadata": {
            "total_time_ms": result.total_ms,
            "trend_title": result.trend_title,
            "main_pain": result.main_pain,
            "generation_approach": spec.get("generation_approach"),
            "mvp_complexity": spec.get("mvp_complexity"),
            "confidence": spec.get("confidence_score"),
        },
        "timestamp": _timestamp(),
    }


def export_response_json(response: dict, output_path: Path) -> None:
    """Write a response envelope to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(response, ensure_ascii=False, indent=2), encoding="utf-8"
    )


def _bullets(items: Any) -> list[str]:
    lines = []
    for item in items or []:
        if isinstance(item, dict):
            text = item.get("opportunity") or item.get("pain") or json.dumps(item, ensure_ascii=False)
        else:
            text = str(item)
        lines.append(f"- {text}")
    return lines


def render_deliberation_markdown(result: DeliberationResult, title: str = "Deep Analysis") -> str:
    """Render a finished deliberation as a markdown report."""
    lines: list[str] = []
    lines.append(f"# {title}: {result.topic}")
    lines.append("")

    if not result.success:
        error = result.error
        lines.append(f"**Status:** FAILED ({result.stage.value})")
        if error:
            lines.append(f"**Error:** {error.user_message} (`{error.code.value}`)")
        return "\n".join(lines)

    judgment = result.judgment if isinstance(result.judgment, dict) else {}
    lines.append(f"**Main pain:** {judgment.get('main_pain', '?')}")
    if judgment.get("confidence") is not None:
        lines.append(f"**Confidence:** {judgment['confidence']}/10")
    t = result.timings
    lines.append(
        f"**Timing:** parallel {t.parallel_ms}ms, arbitration {t.arbitration_ms}ms, "
        f"total {t.total_ms}ms"
    )
    lines.append("")

    pains = judgment.get("key_pain_points") or []
    if pains:
        lines.append("## Key Pain Points")
        lines.append("")
        lines.append("| Pain | Confidence | Verdict |")
        lines.append("|------|------------|---------|")
        for p in pains:
            if not isinstance(p, dict):
                continue
            lines.append(
                f"| {p.get('pain', '?')} | {p.get('confidence', '-')} | {p.get('verdict', '')} |"
            )
        lines.append("")

    segments = (judgment.get("target_audience") or {}).get("segments") or []
    if segments:
        lines.append("## Target Audience")
        lines.append("")
        for s in segments:
            if isinstance(s, dict):
                lines.append(
                    f"- **{s.get('name', '?')}** ({s.get('size', '?')}, "
                    f"pays: {s.get('willingness_to_pay', '?')})"
                )
        lines.append("")

    for heading, key in (("Risks", "risks"), ("Opportunities", "opportunities")):
        if judgment.get(key):
            lines.append(f"## {heading}")
            lines.append("")
            lines.extend(_bullets(judgment[key]))
            lines.append("")

    solutions = judgment.get("recommended_solutions") or []
    if solutions:
        lines.append("## Recommended Solutions")
        lines.append("")
        for s in solutions:
            if isinstance(s, dict):
                lines.append(f"### {s.get('type', '?')}")
                lines.append(s.get("description", ""))
                features = s.get("mvp_features") or []
                if features:
                    lines.append(f"**MVP:** {', '.join(features)}")
                lines.append("")

    if judgment.get("final_recommendation"):
        lines.append("## Recommendation")
        lines.append("")
        lines.append(judgment["final_recommendation"])
        lines.append("")

    metadata = judgment.get("analysis_metadata") or {}
    if metadata.get("data_sources_used"):
        lines.append(f"*Data sources: {', '.join(metadata['data_sources_used'])}*")

    return "\n".join(lines).rstrip() + "\n"


def render_product_spec_markdown(result: ProductSpecResult) -> str:
    lines = [f"# Product Specification: {result.trend_title}", ""]

    if not result.success:
        error = result.error
        lines.append("**Status:** FAILED")
        if error:
            lines.append(f"**Error:** {error.user_message} (`{error.code.value}`)")
        return "\n".join(lines)

    spec = result.spec
    output = spec.get("user_output", {})
    user_input = spec.get("user_input", {})
    lines.append(f"**Main pain:** {result.main_pain}")
    lines.append(
        f"**Approach:** {spec.get('generation_approach', '?')} "
        f"({spec.get('mvp_complexity', '?')})"
    )
    lines.append("")
    lines.append("## Output")
    lines.append(output.get("primary_output", ""))
    if output.get("value_proposition"):
        lines.append(f"*{output['value_proposition']}*")
    lines.append("")
    lines.append("## Input")
    lines.append(user_input.get("primary_input", ""))
    lines.append("")

    steps = (spec.get("user_flow") or {}).get("steps") or []
    if steps:
        lines.append("## User Flow")
        for step in steps:
            lines.append(f"{step.get('step_number', '-')}. {step.get('action', '')}")
        lines.append("")

    monetization = spec.get("monetization") or {}
    if monetization.get("model"):
        lines.append(f"**Monetization:** {monetization['model']}")

    return "\n".join(lines).rstrip() + "\n"
