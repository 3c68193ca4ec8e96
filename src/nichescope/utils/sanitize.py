"""Scrubbing of provider diagnostics before they are stored or logged."""

from __future__ import annotations

import os
import re

MAX_DIAGNOSTIC_CHARS = 500


def sanitize_error(message: str) -> str:
    """Redact credentials and local paths from a raw diagnostic message."""
    if not message:
        return message

    sanitized = message
    sanitized = re.sub(r"sk-(?:proj-)?[a-zA-Z0-9_-]{20,}", "[REDACTED_KEY]", sanitized)
    sanitized = re.sub(r"Bearer\s+\S+", "Bearer [REDACTED]", sanitized)
    sanitized = re.sub(r"api-key:\s*\S+", "api-key: [REDACTED]", sanitized, flags=re.IGNORECASE)

    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
    if home and home != "/":
        sanitized = sanitized.replace(home, "[USER_HOME]")

    return sanitized


def preview(text: str, limit: int = MAX_DIAGNOSTIC_CHARS) -> str:
    """Shorten model output for a log line."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
