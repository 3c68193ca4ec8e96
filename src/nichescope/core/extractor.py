"""Recover a JSON value embedded in free-form model output.

Models wrap their JSON in prose or markdown fences often enough that the
raw text cannot be handed to ``json.loads`` directly. Extraction is a
best-effort boundary: callers validate the result against a schema
separately (see ``validate_judgment``).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..models.errors import AgentError, ErrorKind, make_error
from ..utils.sanitize import preview

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


_decoder = json.JSONDecoder(parse_constant=_reject_constant)


def _parse_span(text: str, opener: str, closer: str) -> Any:
    """Parse the value that starts at the first ``opener``.

    Tries a raw decode first so trailing prose is ignored, then the widest
    span ending at the last ``closer``. Raises ValueError when neither parses.
    """
    start = text.find(opener)
    end = text.rfind(closer)
    try:
        value, _ = _decoder.raw_decode(text, start)
        return value
    except ValueError:
        if end <= start:
            raise
        return json.loads(text[start : end + 1], parse_constant=_reject_constant)


def extract_json(text: Optional[str]) -> Any:
    """Return the first JSON object (or, failing that, array) in ``text``.

    Returns None when nothing parses. Never raises.
    """
    if not text or not isinstance(text, str):
        return None

    last_error: Optional[Exception] = None
    for opener, closer in (("{", "}"), ("[", "]")):
        if opener not in text:
            continue
        try:
            return _parse_span(text, opener, closer)
        except (ValueError, RecursionError) as e:
            last_error = e

    if last_error is not None:
        logger.warning("Failed to parse JSON response: %s | %s", last_error, preview(text, 200))
    return None


def validate_judgment(value: Any, schema: type[BaseModel]) -> Optional[AgentError]:
    """Check an extracted value against ``schema``.

    Returns a schema_invalid error on mismatch, None when the value fits.
    """
    try:
        schema.model_validate(value)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors()[:5]
        )
        return make_error(
            ErrorKind.SCHEMA_INVALID,
            f"{schema.__name__} validation failed: {fields}",
        )
    return None
