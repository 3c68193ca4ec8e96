"""Shared fixtures for nichescope tests."""

from __future__ import annotations

import json
from typing import Callable, Optional, Union

import pytest

from nichescope.models.errors import AgentError, ErrorKind, make_error
from nichescope.models.provider import AgentOutcome, AgentRequest, RetryPolicy


class FakeProvider:
    """Provider double answering per persona key, recording every request.

    ``responses`` maps a persona key to either response text or an
    AgentError (returned as a failed outcome).
    """

    name = "fake"
    model = "fake-model"

    def __init__(self, responses: dict[str, Union[str, AgentError]]):
        self.responses = responses
        self.requests: list[AgentRequest] = []

    def build_request(
        self,
        system_prompt: str,
        user_prompt: str,
        persona: str = "",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AgentRequest:
        return AgentRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=model or self.model,
            retry=RetryPolicy(max_attempts=1, base_delay_ms=0),
            persona=persona,
        )

    async def invoke(self, request: AgentRequest) -> AgentOutcome:
        self.requests.append(request)
        response = self.responses[request.persona]
        if isinstance(response, AgentError):
            return AgentOutcome.fail(response).model_copy(update={"attempts": 1})
        return AgentOutcome.ok(response).model_copy(update={"attempts": 1})

    def prompts_for(self, persona: str) -> list[str]:
        return [r.user_prompt for r in self.requests if r.persona == persona]


def _pains(*names: str) -> dict:
    return {
        "pains": [
            {
                "pain": name,
                "evidence": [f"evidence for {name}"],
                "target_audience": "Busy parents",
                "willingness_to_pay": "medium",
                "reasoning": "seen in forums",
            }
            for name in names
        ],
        "overall_assessment": "ok",
    }


@pytest.fixture
def optimist_json() -> dict:
    return _pains("Planning takes hours", "Recipes ignore allergies", "Food waste")


@pytest.fixture
def skeptic_json() -> dict:
    return _pains("Planning takes hours", "Free apps exist", "High churn")


@pytest.fixture
def arbiter_json() -> dict:
    return {
        "main_pain": "Planning takes hours",
        "confidence": 7,
        "key_pain_points": [
            {
                "pain": "Planning takes hours",
                "confidence": 7,
                "arguments_for": ["Large communities"],
                "arguments_against": ["Free alternatives"],
                "verdict": "Real pain",
            }
        ],
        "target_audience": {
            "segments": [
                {"name": "Busy parents", "size": "Large", "willingness_to_pay": "medium"}
            ]
        },
        "risks": ["Churn"],
        "opportunities": ["Allergy-aware planning"],
        "final_recommendation": "Go",
    }


@pytest.fixture
def make_fake_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture
def trend_provider(optimist_json, skeptic_json, arbiter_json) -> FakeProvider:
    """Fake provider answering the trend personas with valid JSON."""
    return FakeProvider(
        {
            "optimist": "Here is my take:\n```json\n" + json.dumps(optimist_json) + "\n```",
            "skeptic": json.dumps(skeptic_json),
            "arbiter": json.dumps(arbiter_json),
        }
    )


@pytest.fixture
def server_error() -> AgentError:
    return make_error(ErrorKind.SERVER_ERROR, "HTTP 500", status_code=500)


@pytest.fixture
def sample_sources() -> dict:
    return {
        "reddit": {
            "posts": [
                {
                    "title": f"Post {i}",
                    "subreddit": "MealPrepSunday",
                    "score": 100 + i,
                    "selftext": "x" * 300 if i == 0 else None,
                }
                for i in range(7)
            ],
            "communities": ["MealPrepSunday", "EatCheapAndHealthy"],
        },
        "google_trends": {
            "growth_rate": 42.5,
            "related_queries": [{"query": f"query {i}"} for i in range(8)],
        },
        "youtube": {
            "videos": [{"title": f"Video {i}", "channel": "Chef"} for i in range(5)],
        },
    }


@pytest.fixture
def product_spec_input() -> dict:
    return {
        "trend": {"title": "AI meal planning", "category": "Food", "why_trending": "Costs"},
        "analysis": {
            "main_pain": "Planning takes hours",
            "key_pain_points": ["Allergies", "Waste"],
            "target_audience": {
                "primary": "Busy parents",
                "segments": [{"name": "Parents", "size": "Large", "willingness_to_pay": "medium"}],
            },
            "opportunities": ["Allergy-aware plans"],
            "risks": ["Churn"],
        },
        "competition": {
            "competitors": [{"name": "Mealime", "description": "Meal planner"}],
            "strategic_positioning": "Allergy first",
        },
    }


@pytest.fixture
def tmp_config(tmp_path):
    config = tmp_path / "nichescope.yaml"
    config.write_text(
        "ai:\n  provider: dry-run\n  retry_attempts: 2\n  openai:\n    model: gpt-4o\n",
        encoding="utf-8",
    )
    return config
