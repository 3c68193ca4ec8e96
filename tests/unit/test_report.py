"""Tests for core/report.py."""

from __future__ import annotations

import json
from pathlib import Path

from nichescope.core.report import (
    build_product_spec_response,
    build_response,
    error_response,
    export_response_json,
    render_deliberation_markdown,
    render_product_spec_markdown,
)
from nichescope.core.workflows import ProductSpecResult
from nichescope.models.deliberation import DeliberationResult, DeliberationStage, PhaseTimings
from nichescope.models.errors import ErrorKind, make_error


def _complete(judgment: dict) -> DeliberationResult:
    return DeliberationResult(
        topic="Meal kits",
        stage=DeliberationStage.COMPLETE,
        optimist_analysis={"pains": ["a"]},
        skeptic_analysis={"pains": ["b"]},
        judgment=judgment,
        timings=PhaseTimings(parallel_ms=1200, arbitration_ms=800, total_ms=2000),
    )


class TestErrorResponse:
    def test_shape(self):
        response = error_response(make_error(ErrorKind.RATE_LIMIT_EXCEEDED, "raw upstream text"))
        assert response["success"] is False
        assert response["errorCode"] == "rate_limit_exceeded"
        assert "raw upstream text" not in response["error"]

    def test_missing_error(self):
        assert error_response(None)["errorCode"] == "unknown"


class TestBuildResponse:
    def test_success(self, arbiter_json):
        response = build_response(_complete(arbiter_json))

        assert response["success"] is True
        assert response["analysis"] == arbiter_json
        assert response["raw_analyses"] == {"optimist": {"pains": ["a"]}, "skeptic": {"pains": ["b"]}}
        assert response["metadata"] == {
            "parallel_time_ms": 1200,
            "arbitration_time_ms": 800,
            "total_time_ms": 2000,
            "analysis_type": "deep_parallel_arbitration",
        }
        assert response["timestamp"]

    def test_extra_fields(self, arbiter_json):
        response = build_response(
            _complete(arbiter_json), analysis_type="niche_deep_parallel_arbitration", extra={"niche": "x"}
        )
        assert response["niche"] == "x"
        assert response["metadata"]["analysis_type"] == "niche_deep_parallel_arbitration"

    def test_failure(self):
        result = DeliberationResult(
            topic="x",
            stage=DeliberationStage.PARALLEL_FAILED,
            error=make_error(ErrorKind.TIMEOUT, "t"),
        )
        response = build_response(result)
        assert response == {
            "success": False,
            "error": make_error(ErrorKind.TIMEOUT, "t").user_message,
            "errorCode": "timeout",
        }


class TestProductSpecResponse:
    def test_success(self):
        result = ProductSpecResult(
            trend_title="Meal kits",
            main_pain="slow",
            spec={"generation_approach": "ai-tool", "mvp_complexity": "simple", "confidence_score": 8},
            total_ms=10,
        )
        response = build_product_spec_response(result)
        assert response["metadata"]["generation_approach"] == "ai-tool"
        assert response["metadata"]["confidence"] == 8
        assert response["product_spec"]["mvp_complexity"] == "simple"

    def test_failure(self):
        result = ProductSpecResult(
            trend_title="x", main_pain="y", error=make_error(ErrorKind.SCHEMA_INVALID, "bad")
        )
        assert build_product_spec_response(result)["errorCode"] == "schema_invalid"


class TestExport:
    def test_writes_json(self, tmp_path: Path):
        path = tmp_path / "out" / "result.json"
        export_response_json({"analysis": {"main_pain": "Планирование"}}, path)
        text = path.read_text(encoding="utf-8")
        assert "Планирование" in text
        assert json.loads(text)["analysis"]["main_pain"] == "Планирование"


class TestMarkdown:
    def test_deliberation(self, arbiter_json):
        md = render_deliberation_markdown(_complete(arbiter_json))
        assert md.startswith("# Deep Analysis: Meal kits")
        assert "**Main pain:** Planning takes hours" in md
        assert "| Planning takes hours | 7 | Real pain |" in md
        assert "- **Busy parents** (Large, pays: medium)" in md
        assert "## Risks" in md
        assert "- Allergy-aware planning" in md

    def test_niche_solutions_and_sources(self, arbiter_json):
        judgment = {
            **arbiter_json,
            "opportunities": [{"opportunity": "Allergy-aware planning"}],
            "recommended_solutions": [
                {"type": "SaaS", "description": "Planner", "mvp_features": ["Plans", "Lists"]}
            ],
            "analysis_metadata": {"data_sources_used": ["Reddit"]},
        }
        md = render_deliberation_markdown(_complete(judgment), title="Niche Analysis")
        assert "### SaaS" in md
        assert "**MVP:** Plans, Lists" in md
        assert "- Allergy-aware planning" in md
        assert "*Data sources: Reddit*" in md

    def test_failed_deliberation(self):
        result = DeliberationResult(
            topic="x",
            stage=DeliberationStage.ARBITER_FAILED,
            error=make_error(ErrorKind.UNPARSEABLE_RESPONSE, "bad"),
        )
        md = render_deliberation_markdown(result)
        assert "FAILED (arbiter_failed)" in md
        assert "`unparseable_response`" in md

    def test_product_spec(self):
        result = ProductSpecResult(
            trend_title="Meal kits",
            main_pain="slow",
            spec={
                "user_output": {"primary_output": "A plan", "value_proposition": "Saves time"},
                "user_input": {"primary_input": "Household size"},
                "user_flow": {"steps": [{"step_number": 1, "action": "Fill in the form"}]},
                "monetization": {"model": "freemium"},
            },
        )
        md = render_product_spec_markdown(result)
        assert "# Product Specification: Meal kits" in md
        assert "*Saves time*" in md
        assert "1. Fill in the form" in md
        assert "**Monetization:** freemium" in md
