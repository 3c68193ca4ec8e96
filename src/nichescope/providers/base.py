"""Agent caller: provider abstraction with error classification and retry logic."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..models.errors import AgentError, ErrorKind, make_error
from ..models.provider import AgentOutcome, AgentRequest, RetryPolicy
from ..utils.sanitize import sanitize_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60


@runtime_checkable
class AIProvider(Protocol):
    """Protocol that all AI providers must implement."""

    name: str

    def build_request(
        self,
        system_prompt: str,
        user_prompt: str,
        persona: str = "",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AgentRequest: ...

    async def invoke(self, request: AgentRequest) -> AgentOutcome: ...


def classify_error(status_code: int, body: Any = None) -> AgentError:
    """Map an HTTP error response to an AgentError.

    ``body`` is the decoded provider error envelope, ``{"error": {...}}``.
    """
    details = body.get("error") if isinstance(body, dict) else None
    if not isinstance(details, dict):
        details = {}
    error_code = details.get("code") or details.get("type") or ""
    message = sanitize_error(str(details.get("message") or f"HTTP {status_code}"))

    if status_code == 429:
        kind = ErrorKind.RATE_LIMIT_EXCEEDED
    elif status_code == 401:
        kind = ErrorKind.INVALID_API_KEY
    elif status_code == 402 or error_code == "insufficient_quota":
        kind = ErrorKind.INSUFFICIENT_QUOTA
    elif status_code == 404:
        kind = ErrorKind.MODEL_NOT_FOUND
    elif error_code == "context_length_exceeded" or "maximum context length" in message:
        kind = ErrorKind.CONTEXT_LENGTH_EXCEEDED
    elif status_code >= 500:
        kind = ErrorKind.SERVER_ERROR
    else:
        kind = ErrorKind.UNKNOWN

    return make_error(kind, message, status_code=status_code)


class BaseProvider:
    """Base class with shared transport, classification and retry logic."""

    name: str = "base"

    def __init__(
        self,
        provider_config: dict,
        common_config: dict,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = provider_config
        self.common = common_config
        self.client = client
        self.timeout = common_config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        self.retry_policy = RetryPolicy(
            max_attempts=common_config.get("retry_attempts", 3),
            base_delay_ms=common_config.get("retry_delay_ms", 1000),
        )

    @property
    def model(self) -> str:
        return self.config.get("model", "gpt-4o-mini")

    def build_request(
        self,
        system_prompt: str,
        user_prompt: str,
        persona: str = "",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AgentRequest:
        """Build a request carrying this provider's configured defaults."""
        return AgentRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=model or self.model,
            temperature=self.common.get("temperature", 0.7) if temperature is None else temperature,
            max_tokens=max_tokens or self.config.get("max_tokens", 3000),
            retry=self.retry_policy,
            persona=persona,
        )

    async def complete(self, request: AgentRequest) -> AgentOutcome:
        """Make exactly one attempt. Subclasses implement the wire format."""
        raise NotImplementedError

    async def invoke(self, request: AgentRequest) -> AgentOutcome:
        """Wrap complete() with retry and exponential backoff."""
        policy = request.retry
        label = request.persona or self.name
        outcome: Optional[AgentOutcome] = None

        for attempt in range(1, policy.max_attempts + 1):
            outcome = await self.complete(request)

            if outcome.success:
                return outcome.model_copy(update={"attempts": attempt})

            error = outcome.error
            if not error.retryable or attempt >= policy.max_attempts:
                logger.error(
                    "%s failed (attempt %d/%d): %s %s",
                    label,
                    attempt,
                    policy.max_attempts,
                    error.code.value,
                    error.message,
                )
                return outcome.model_copy(update={"attempts": attempt})

            delay = policy.delay_seconds(attempt)
            logger.warning(
                "%s: %s, retrying in %.1fs (attempt %d/%d)",
                label,
                error.code.value,
                delay,
                attempt,
                policy.max_attempts,
            )
            await asyncio.sleep(delay)

        return outcome

    async def _send(self, url: str, body: dict, headers: dict) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(
                url, json=body, headers=headers, timeout=self.timeout
            )
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, json=body, headers=headers)

    async def _post(self, url: str, body: dict, headers: dict) -> AgentOutcome:
        """POST a completion request and turn the response into an outcome.

        The whole attempt, body included, is bounded by ``self.timeout``.
        """
        try:
            response = await asyncio.wait_for(
                self._send(url, body, headers), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return AgentOutcome.fail(
                make_error(ErrorKind.TIMEOUT, f"Request timed out after {self.timeout}s")
            )
        except httpx.TransportError as e:
            return AgentOutcome.fail(
                make_error(ErrorKind.NETWORK_ERROR, sanitize_error(str(e) or type(e).__name__))
            )
        except httpx.HTTPError as e:
            return AgentOutcome.fail(make_error(ErrorKind.UNKNOWN, sanitize_error(str(e))))

        if response.is_error:
            try:
                error_body = response.json()
            except ValueError:
                error_body = {}
            return AgentOutcome.fail(classify_error(response.status_code, error_body))

        try:
            data = response.json()
        except ValueError:
            data = {}

        content = self._extract_content(data)
        if not content:
            return AgentOutcome.fail(
                make_error(ErrorKind.EMPTY_RESPONSE, f"Empty response from {self.name}")
            )

        return AgentOutcome.ok(content, tokens_used=self._extract_usage(data))

    def _extract_content(self, data: Any) -> Optional[str]:
        """Pull the completion text out of a chat-completions response."""
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    def _extract_usage(self, data: dict) -> Optional[dict]:
        usage = data.get("usage")
        if not isinstance(usage, dict):
            return None
        return {
            "input": usage.get("prompt_tokens", 0),
            "output": usage.get("completion_tokens", 0),
        }

    def _missing_key(self, env_var: str) -> AgentOutcome:
        return AgentOutcome.fail(
            make_error(
                ErrorKind.INVALID_API_KEY,
                f"API key not found in environment variable: {env_var}",
            )
        )


def get_ai_provider(
    config: dict,
    provider_override: Optional[str] = None,
    model_override: Optional[str] = None,
    endpoint_override: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> BaseProvider:
    """Factory function to create the configured AI provider."""
    ai_config = config.get("ai", {})
    provider_name = provider_override or ai_config.get("provider", "openai")

    provider_config = dict(ai_config.get(provider_name, {}))

    if model_override:
        if provider_name == "azure-openai":
            provider_config["deployment"] = model_override
        else:
            provider_config["model"] = model_override
    if endpoint_override:
        provider_config["endpoint"] = endpoint_override

    common_config = {
        k: v
        for k, v in ai_config.items()
        if k not in ("openai", "azure-openai", "dry-run")
    }

    if provider_name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(provider_config, common_config, client=client)
    elif provider_name == "azure-openai":
        from .azure_openai import AzureOpenAIProvider
        return AzureOpenAIProvider(provider_config, common_config, client=client)
    elif provider_name == "dry-run":
        from .dry_run import DryRunProvider
        return DryRunProvider(provider_config, common_config)
    else:
        raise ValueError(f"Unknown AI provider: {provider_name}")
