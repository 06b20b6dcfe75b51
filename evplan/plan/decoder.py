# Turns raw model output into a parsed JSON object.
# Types are not re-checked here; the only job is to refuse anything that
# is not a single well-formed JSON object.

from __future__ import annotations
import json
import math
import re
from typing import Any, Dict, Optional

from evplan.errors import MalformedResponse
from evplan.log import get_logger

logger = get_logger("evplan.decoder")

# ```json ... ``` wrapper some models add despite a JSON mime type
_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def _reject_constant(name: str):
    # json.loads accepts NaN and Infinity, which are not JSON
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {literal}")
    return value


def _strip_fence(text: str) -> str:
    m = _FENCE.match(text)
    return m.group(1).strip() if m else text


def decode_response(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse `text` as one JSON object.

    Raises MalformedResponse when the text is empty, is not valid JSON,
    or decodes to something other than an object. Never returns a partial
    or default-filled result.
    """
    if text is None or not text.strip():
        raise MalformedResponse("Model response was empty.")

    cleaned = _strip_fence(text.strip())
    try:
        body = json.loads(cleaned, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as e:
        logger.warning("Could not parse model response as JSON: %s", e)
        logger.debug("Raw model response: %r", text)
        raise MalformedResponse(f"Model response is not valid JSON: {e}", cause=e) from e

    if not isinstance(body, dict):
        logger.debug("Raw model response: %r", text)
        raise MalformedResponse(
            f"Model response is a JSON {type(body).__name__}, expected an object."
        )
    return body
