"""Azure OpenAI provider.

Same request and error envelope as OpenAI, routed through a deployment URL.
"""

from __future__ import annotations

import os
from typing import Optional

from ..models.errors import ErrorKind, make_error
from ..models.provider import AgentOutcome, AgentRequest
from .base import BaseProvider


class AzureOpenAIProvider(BaseProvider):
    name = "azure-openai"

    @property
    def model(self) -> str:
        return self.config.get("deployment", "gpt-4o-mini")

    def _get_api_key(self) -> Optional[str]:
        env_var = self.config.get("api_key_env", "AZURE_OPENAI_KEY")
        return os.environ.get(env_var) or self.config.get("api_key")

    async def complete(self, request: AgentRequest) -> AgentOutcome:
        api_key = self._get_api_key()
        if not api_key:
            return self._missing_key(self.config.get("api_key_env", "AZURE_OPENAI_KEY"))

        endpoint = self.config.get("endpoint", "")
        if not endpoint:
            return AgentOutcome.fail(
                make_error(ErrorKind.INVALID_API_KEY, "Azure OpenAI endpoint not configured")
            )

        api_version = self.config.get("api_version", "2024-10-01-preview")
        url = (
            f"{endpoint.rstrip('/')}/openai/deployments/{request.model}"
            f"/chat/completions?api-version={api_version}"
        )

        body = {
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
        }

        headers = {
            "api-key": api_key,
            "Content-Type": "application/json",
        }

        return await self._post(url, body, headers)
