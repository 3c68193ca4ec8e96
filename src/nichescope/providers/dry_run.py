"""Dry-run provider: canned persona responses, no network calls."""

from __future__ import annotations

from ..core.personas import mock_response_for
from ..models.provider import AgentOutcome, AgentRequest
from .base import BaseProvider


class DryRunProvider(BaseProvider):
    name = "dry-run"

    @property
    def model(self) -> str:
        return "dry-run"

    async def complete(self, request: AgentRequest) -> AgentOutcome:
        return AgentOutcome.ok(mock_response_for(request.persona))
