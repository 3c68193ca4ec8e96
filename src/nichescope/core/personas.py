"""Persona definitions, prompt loading, and dry-run responses.

A persona is a fixed system prompt embodying one argumentative stance.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

PERSONA_DEFS: dict[str, dict] = {
    "optimist": {"name": "OPTIMIST", "stance": "Believes in the niche", "color": "green"},
    "skeptic": {"name": "SKEPTIC", "stance": "Looks for what goes wrong", "color": "red"},
    "arbiter": {"name": "ARBITER", "stance": "Weighs both sides", "color": "cyan"},
    "niche_optimist": {"name": "OPTIMIST", "stance": "Believes in the niche, cites data", "color": "green"},
    "niche_skeptic": {"name": "SKEPTIC", "stance": "Attacks the data's weak spots", "color": "red"},
    "niche_arbiter": {"name": "ARBITER", "stance": "Weighs both sides, proposes solutions", "color": "cyan"},
    "product_manager": {"name": "PRODUCT MANAGER", "stance": "Specifies the MVP", "color": "magenta"},
}


class PersonaSet(BaseModel):
    """The three stances taking part in one deliberation."""

    optimist: str = "optimist"
    skeptic: str = "skeptic"
    arbiter: str = "arbiter"
    override_dir: Optional[Path] = None

    def prompt(self, key: str) -> str:
        return load_persona_prompt(key, self.override_dir)


TREND_PERSONAS = PersonaSet()
NICHE_PERSONAS = PersonaSet(
    optimist="niche_optimist",
    skeptic="niche_skeptic",
    arbiter="niche_arbiter",
)


def load_persona_prompt(persona_key: str, override_dir: Optional[Path] = None) -> str:
    """Load a persona's system prompt.

    Checks the override directory first, then falls back to bundled data.
    """
    if persona_key not in PERSONA_DEFS:
        raise KeyError(f"Unknown persona: {persona_key}")

    if override_dir:
        override = Path(override_dir) / f"{persona_key}.md"
        if override.exists():
            return override.read_text(encoding="utf-8")

    data_pkg = resources.files("nichescope.data.personas")
    return (data_pkg / f"{persona_key}.md").read_text(encoding="utf-8")


def mock_response_for(persona_key: str) -> str:
    """Canned model output for a persona, used by the dry-run provider."""
    if persona_key in MOCK_RESPONSES:
        return MOCK_RESPONSES[persona_key]
    return MOCK_RESPONSES.get(persona_key.replace("niche_", ""), "{}")


# ---------------------------------------------------------------------------
# Mock responses for dry-run mode
# ---------------------------------------------------------------------------

MOCK_RESPONSES: dict[str, str] = {
    "optimist": """Here is my analysis.

```json
{
  "pains": [
    {
      "pain": "Planning weekly meals takes hours",
      "evidence": ["r/MealPrepSunday threads with 2k+ upvotes", "Paid planners keep growing"],
      "target_audience": "Busy parents",
      "willingness_to_pay": "medium: already pay for meal kits",
      "reasoning": "Time savings are easy to demonstrate"
    },
    {
      "pain": "Dietary restrictions make recipes hard to adapt",
      "evidence": ["Allergy forums ask for substitutions daily"],
      "target_audience": "Families with allergies",
      "willingness_to_pay": "high: safety matters",
      "reasoning": "Existing apps ignore combined restrictions"
    }
  ],
  "overall_assessment": "Strong recurring demand with clear willingness to pay."
}
```
""",
    "skeptic": """```json
{
  "pains": [
    {
      "pain": "Planning weekly meals takes hours",
      "evidence": ["Real pain", "But free recipe sites are good enough for most"],
      "target_audience": "Busy parents who churn after the first month",
      "willingness_to_pay": "low: many free alternatives",
      "reasoning": "Meal planners historically suffer high churn"
    },
    {
      "pain": "Grocery costs keep rising",
      "evidence": ["Inflation headlines", "Budget apps already cover it"],
      "target_audience": "Students",
      "willingness_to_pay": "low: price sensitive audience",
      "reasoning": "Hard to monetize people who are saving money"
    }
  ],
  "overall_assessment": "Crowded space, retention is the main risk."
}
```
""",
    "arbiter": """{
  "main_pain": "Planning weekly meals takes hours",
  "confidence": 7.5,
  "key_pain_points": [
    {
      "pain": "Planning weekly meals takes hours",
      "confidence": 7.5,
      "arguments_for": ["Large active communities", "Paid planners keep growing"],
      "arguments_against": ["High churn", "Free alternatives"],
      "verdict": "Real pain, differentiate on retention"
    }
  ],
  "target_audience": {
    "segments": [
      {
        "name": "Busy parents",
        "size": "Large",
        "willingness_to_pay": "medium",
        "where_to_find": "Parenting forums, Instagram",
        "confidence": 7.0
      }
    ]
  },
  "risks": ["Churn after the first month", "Free recipe sites"],
  "opportunities": ["Allergy-aware planning", "Grocery list automation"],
  "final_recommendation": "Enter with an allergy-aware niche product and measure retention early.",
  "analysis_metadata": {
    "optimist_summary": "Recurring demand with willingness to pay",
    "skeptic_summary": "Crowded space with churn risk",
    "consensus_reached": true
  }
}
""",
    "niche_arbiter": """{
  "main_pain": "Planning weekly meals takes hours",
  "confidence": 7.5,
  "key_pain_points": [
    {
      "pain": "Planning weekly meals takes hours",
      "confidence": 7.5,
      "severity": 7,
      "arguments_for": ["Large active communities"],
      "arguments_against": ["High churn"],
      "verdict": "Real pain, differentiate on retention"
    }
  ],
  "target_audience": {
    "primary": "Busy parents",
    "segments": [
      {
        "name": "Busy parents",
        "size": "Large",
        "willingness_to_pay": "medium",
        "where_to_find": "Parenting forums",
        "communication_channels": ["Instagram", "Reddit"],
        "confidence": 7.0
      }
    ]
  },
  "risks": ["Churn after the first month"],
  "opportunities": [
    {
      "opportunity": "Allergy-aware planning",
      "potential_revenue": "$5-10k MRR",
      "implementation_difficulty": "medium",
      "time_to_market": "6 weeks"
    }
  ],
  "recommended_solutions": [
    {
      "type": "SaaS",
      "description": "Weekly plan generator with allergy filters",
      "mvp_features": ["Plan generator", "Shopping list", "Allergy filters"],
      "estimated_cost": "$2-5k",
      "monetization": "Freemium"
    }
  ],
  "final_recommendation": "Start with the allergy-aware segment.",
  "analysis_metadata": {
    "optimist_summary": "Recurring demand",
    "skeptic_summary": "Churn risk",
    "consensus_reached": true
  }
}
""",
    "product_manager": """{
  "user_output": {
    "primary_output": "A 7-day meal plan with a grouped shopping list",
    "output_format": "report",
    "example": "Mon: oat porridge, chicken salad, lentil soup...",
    "value_proposition": "Saves two hours of planning every week"
  },
  "user_input": {
    "primary_input": "Household size and dietary restrictions",
    "input_type": "form",
    "required_fields": [
      {"name": "household_size", "type": "number", "description": "People to feed", "example": "4"}
    ],
    "optional_fields": []
  },
  "user_flow": {
    "steps": [
      {"step_number": 1, "action": "Fill in the form", "user_sees": "Short form", "time_to_complete": "~30 sec"},
      {"step_number": 2, "action": "Generate the plan", "user_sees": "Weekly plan", "time_to_complete": "~20 sec"}
    ],
    "total_time_to_value": "< 1 minute",
    "aha_moment": "The shopping list is already grouped by aisle"
  },
  "magic_location": {
    "type": "ai_generation",
    "description": "Plan generation respecting every restriction",
    "technical_approach": "LLM with a constrained JSON output"
  },
  "technical_requirements": {
    "apis_needed": [
      {"name": "OpenAI API", "purpose": "Plan generation", "free_tier_available": false, "estimated_cost": "$5-20/month"}
    ],
    "database_required": false,
    "auth_required": false,
    "recommended_stack": {"frontend": "Next.js + Tailwind", "backend": "Next.js API Routes"}
  },
  "monetization": {
    "model": "freemium",
    "free_tier_limits": "1 plan per week",
    "reasoning": "Weekly habit converts well"
  },
  "current_user_solution": {
    "how_they_solve_now": "Recipe sites and paper lists",
    "pain_points_with_current": ["Takes hours", "Ignores restrictions"],
    "our_advantage": "One click, restriction aware",
    "switching_cost": "low"
  },
  "confidence_score": 7.5,
  "generation_approach": "ai-tool",
  "mvp_complexity": "simple"
}
""",
}
