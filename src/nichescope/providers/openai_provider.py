"""OpenAI chat completions provider."""

from __future__ import annotations

import os
from typing import Optional

from ..models.provider import AgentOutcome, AgentRequest
from .base import BaseProvider


class OpenAIProvider(BaseProvider):
    name = "openai"
    API_URL = "https://api.openai.com/v1/chat/completions"

    def _get_api_key(self) -> Optional[str]:
        env_var = self.config.get("api_key_env", "OPENAI_API_KEY")
        return os.environ.get(env_var) or self.config.get("api_key")

    async def complete(self, request: AgentRequest) -> AgentOutcome:
        api_key = self._get_api_key()
        if not api_key:
            return self._missing_key(self.config.get("api_key_env", "OPENAI_API_KEY"))

        body = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
        }

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        url = self.config.get("endpoint") or self.API_URL
        return await self._post(url, body, headers)
