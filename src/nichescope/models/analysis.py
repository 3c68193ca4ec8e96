"""Shapes of the structured judgments returned by each persona.

The schemas only pin down the fields the reports and metadata stamping rely
on. Everything else the model returns passes through untouched.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class _Open(BaseModel):
    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _null_fields_use_defaults(cls, data: Any) -> Any:
        # A declared field sent as null is treated as absent.
        if isinstance(data, dict):
            return {
                k: v for k, v in data.items() if v is not None or k not in cls.model_fields
            }
        return data


class PersonaPain(_Open):
    pain: str
    evidence: list[str] = []
    target_audience: str = ""
    willingness_to_pay: str = ""
    reasoning: str = ""


class PersonaAnalysis(_Open):
    """Output of the optimist and skeptic personas."""

    pains: list[PersonaPain]
    overall_assessment: str = ""


class WeighedPain(_Open):
    pain: str
    confidence: Optional[float] = None
    severity: Optional[float] = None
    arguments_for: list[str] = []
    arguments_against: list[str] = []
    verdict: str = ""


class AudienceSegment(_Open):
    name: str
    size: str = ""
    willingness_to_pay: str = ""
    where_to_find: str = ""
    confidence: Optional[float] = None


class TargetAudience(_Open):
    primary: str = ""
    segments: list[AudienceSegment] = []


class PainArbitration(_Open):
    """Arbiter output for a trend deep analysis."""

    main_pain: str
    confidence: Optional[float] = None
    key_pain_points: list[WeighedPain] = []
    target_audience: TargetAudience = TargetAudience()
    risks: list[str] = []
    opportunities: list = []
    final_recommendation: str = ""
    analysis_metadata: dict = {}


class Opportunity(_Open):
    opportunity: str
    potential_revenue: str = ""
    implementation_difficulty: str = ""
    time_to_market: str = ""


class RecommendedSolution(_Open):
    type: str
    description: str = ""
    mvp_features: list[str] = []
    estimated_cost: str = ""
    monetization: str = ""


class NicheArbitration(PainArbitration):
    """Arbiter output for a niche deep analysis."""

    opportunities: list[Opportunity] = []
    recommended_solutions: list[RecommendedSolution] = []


class UserOutput(_Open):
    primary_output: str
    output_format: str = ""
    example: str = ""
    value_proposition: str = ""


class UserInput(_Open):
    primary_input: str
    input_type: str = ""
    required_fields: list[dict] = []
    optional_fields: list[dict] = []


class FlowStep(_Open):
    step_number: int
    action: str
    user_sees: str = ""
    time_to_complete: str = ""


class UserFlow(_Open):
    steps: list[FlowStep] = []
    total_time_to_value: str = ""
    aha_moment: str = ""


class ProductSpecification(_Open):
    """Product specification generated from a trend and its pain analysis."""

    user_output: UserOutput
    user_input: UserInput
    user_flow: UserFlow = UserFlow()
    magic_location: dict = {}
    technical_requirements: dict = {}
    monetization: dict = {}
    current_user_solution: dict = {}
    confidence_score: Optional[float] = None
    generation_approach: str = ""
    mvp_complexity: str = ""
