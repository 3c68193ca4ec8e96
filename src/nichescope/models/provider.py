"""AI provider data models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import AgentError


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=1000, ge=0)
    backoff_multiplier: int = 2

    def delay_seconds(self, attempt: int) -> float:
        """Delay to wait after failed attempt number ``attempt`` (1-indexed)."""
        return self.base_delay_ms * self.backoff_multiplier ** (attempt - 1) / 1000


class AgentRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_prompt: str = Field(min_length=1)
    user_prompt: str = Field(min_length=1)
    model: str
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=3000, gt=0)
    retry: RetryPolicy = RetryPolicy()
    persona: str = ""


class AgentOutcome(BaseModel):
    success: bool
    content: Optional[str] = None
    error: Optional[AgentError] = None
    attempts: int = 0
    tokens_used: Optional[dict] = None

    @model_validator(mode="after")
    def _one_side_only(self) -> "AgentOutcome":
        if self.success and (self.error is not None or self.content is None):
            raise ValueError("successful outcome must carry content and no error")
        if not self.success and (self.error is None or self.content is not None):
            raise ValueError("failed outcome must carry an error and no content")
        return self

    @classmethod
    def ok(cls, content: str, tokens_used: Optional[dict] = None) -> "AgentOutcome":
        return cls(success=True, content=content, tokens_used=tokens_used)

    @classmethod
    def fail(cls, error: AgentError) -> "AgentOutcome":
        return cls(success=False, error=error)
