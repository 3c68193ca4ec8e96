"""Error taxonomy for agent calls and deliberation stages."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INVALID_API_KEY = "invalid_api_key"
    INSUFFICIENT_QUOTA = "insufficient_quota"
    MODEL_NOT_FOUND = "model_not_found"
    CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    EMPTY_RESPONSE = "empty_response"
    UNPARSEABLE_RESPONSE = "unparseable_response"
    SCHEMA_INVALID = "schema_invalid"
    UNKNOWN = "unknown"


# kind -> (user message, retryable)
ERROR_DEFS: dict[ErrorKind, tuple[str, bool]] = {
    ErrorKind.RATE_LIMIT_EXCEEDED: (
        "Too many requests. Wait a minute and try again.",
        True,
    ),
    ErrorKind.INVALID_API_KEY: (
        "Server configuration error. Contact the administrator.",
        False,
    ),
    ErrorKind.INSUFFICIENT_QUOTA: (
        "The AI usage quota is exhausted. Contact the administrator.",
        False,
    ),
    ErrorKind.MODEL_NOT_FOUND: (
        "The AI model is temporarily unavailable. Try again later.",
        False,
    ),
    ErrorKind.CONTEXT_LENGTH_EXCEEDED: (
        "The request is too long. Try shortening the input.",
        False,
    ),
    ErrorKind.SERVER_ERROR: (
        "The AI provider is temporarily unavailable. Try again in a minute.",
        True,
    ),
    ErrorKind.TIMEOUT: (
        "The request timed out. Try again.",
        True,
    ),
    ErrorKind.NETWORK_ERROR: (
        "Network error. Check the connection and try again.",
        True,
    ),
    ErrorKind.EMPTY_RESPONSE: (
        "The AI returned an empty response. Try again.",
        True,
    ),
    ErrorKind.UNPARSEABLE_RESPONSE: (
        "Could not read the AI response. Try again.",
        False,
    ),
    ErrorKind.SCHEMA_INVALID: (
        "The AI response was incomplete. Try again.",
        False,
    ),
    ErrorKind.UNKNOWN: (
        "Something went wrong. Try again.",
        True,
    ),
}


class AgentError(BaseModel):
    code: ErrorKind
    message: str
    user_message: str
    retryable: bool
    status_code: Optional[int] = None


def make_error(
    kind: ErrorKind,
    message: str,
    status_code: Optional[int] = None,
) -> AgentError:
    """Build an AgentError with the canonical user message and retry flag."""
    user_message, retryable = ERROR_DEFS[kind]
    return AgentError(
        code=kind,
        message=message,
        user_message=user_message,
        retryable=retryable,
        status_code=status_code,
    )
