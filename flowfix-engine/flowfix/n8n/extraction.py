"""Extract a JSON workflow object from free-form LLM reply text."""
import json
import re
from typing import Any

import structlog

from flowfix.errors import CandidateParseError

logger = structlog.get_logger()

_FENCE_OPEN = re.compile(r"```json\s*", re.IGNORECASE)
_FENCE_ANY = re.compile(r"```\s*")
_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json(text: Any) -> Any:
    """Parse the workflow object out of an LLM reply.

    Tries, in order: the text as-is, the text with markdown fences
    stripped, each balanced top-level ``{...}`` block, and finally the
    widest ``{...}`` span. Non-string input is returned unchanged.

    Raises:
        CandidateParseError: If no strategy yields valid JSON.
    """
    if not isinstance(text, str):
        return text

    parsed = _try_parse(text)
    if parsed is not None:
        return parsed

    cleaned = _FENCE_ANY.sub("", _FENCE_OPEN.sub("", text)).strip()
    parsed = _try_parse(cleaned)
    if parsed is not None:
        logger.debug("json_extracted", strategy="fences")
        return parsed

    for block in _balanced_objects(cleaned):
        parsed = _try_parse(block)
        if parsed is not None:
            logger.debug("json_extracted", strategy="balanced")
            return parsed

    match = _GREEDY_OBJECT.search(cleaned)
    if match:
        parsed = _try_parse(match.group(0))
        if parsed is not None:
            logger.debug("json_extracted", strategy="greedy")
            return parsed

    logger.warning("json_extraction_failed", text_length=len(text))
    raise CandidateParseError("Could not extract valid JSON from AI response")


def _try_parse(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _balanced_objects(text: str):
    """Yield each outermost ``{...}`` span, matching braces naively."""
    depth = 0
    start = -1
    for index, char in enumerate(text):
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                yield text[start:index + 1]
                start = -1
