"""Deliberation data models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .errors import AgentError
from .provider import AgentOutcome


class DeliberationStage(str, Enum):
    STARTED = "started"
    PARALLEL_RUNNING = "parallel_running"
    PARALLEL_FAILED = "parallel_failed"
    PARALLEL_SUCCEEDED = "parallel_succeeded"
    ARBITER_RUNNING = "arbiter_running"
    ARBITER_FAILED = "arbiter_failed"
    COMPLETE = "complete"


TERMINAL_STAGES = frozenset(
    {
        DeliberationStage.PARALLEL_FAILED,
        DeliberationStage.ARBITER_FAILED,
        DeliberationStage.COMPLETE,
    }
)


class DeliberationInput(BaseModel):
    topic: str = Field(min_length=1)
    context: dict = {}


class PhaseTimings(BaseModel):
    parallel_ms: int = 0
    arbitration_ms: int = 0
    total_ms: int = 0


class ArbitrationOutcome(BaseModel):
    outcome: Optional[AgentOutcome] = None
    judgment: Any = None
    error: Optional[AgentError] = None
    arbitration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.error is None and self.judgment is not None


class DeliberationResult(BaseModel):
    topic: str
    stage: DeliberationStage = DeliberationStage.STARTED
    optimist: Optional[AgentOutcome] = None
    skeptic: Optional[AgentOutcome] = None
    arbiter: Optional[AgentOutcome] = None
    optimist_analysis: Any = None
    skeptic_analysis: Any = None
    judgment: Any = None
    error: Optional[AgentError] = None
    timings: PhaseTimings = PhaseTimings()

    @property
    def success(self) -> bool:
        return self.stage == DeliberationStage.COMPLETE

    @property
    def finished(self) -> bool:
        return self.stage in TERMINAL_STAGES
