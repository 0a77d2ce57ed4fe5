"""
infrastructure.vision.response_parser - Extract ingredient labels from LLM text.

Vision LLMs are asked for a bare JSON array but frequently wrap it in prose
("Here are the items: [...]") or ignore the format entirely. Parsing is
therefore two explicit stages:

  1. Strict:    greedy match from the first "[" to the last "]", json.loads.
                With no brackets at all, the whole reply is tried as JSON.
  2. Heuristic: only when JSON decoding fails — take the first alphabetic
                run of 3-25 characters from each line.

A reply that decodes to something other than a list is FAILED, not
heuristic: the model answered in JSON, just not the JSON we asked for.
"""

from __future__ import annotations

import json
import logging
import re

from domain.models import ParseResult

logger = logging.getLogger(__name__)

_JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
# Whole words with inner spaces, 3..25 chars. A run longer than the cap
# backtracks to the last complete word.
_ALPHA_RUN_RE = re.compile(r"\b[A-Za-z][A-Za-z ]{1,23}[A-Za-z]\b")

HEURISTIC_MIN_LENGTH = 3
HEURISTIC_MAX_LENGTH = 29
HEURISTIC_MAX_ITEMS = 15


def parse_ingredient_response(content: str) -> ParseResult:
    """Turn a vision-LLM reply into a ParseResult."""
    text = (content or "").strip()
    if not text:
        return ParseResult.failed("empty response")

    match = _JSON_ARRAY_RE.search(text)
    candidate = match.group(0) if match else text

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.info("Vision reply is not valid JSON (%s) — using text extraction", e)
        items = extract_from_text(text)
        if not items:
            return ParseResult.failed(f"no JSON array and no text candidates: {e}")
        return ParseResult.heuristic(items, detail=str(e))

    if not isinstance(parsed, list):
        return ParseResult.failed(
            f"expected a JSON array, got {type(parsed).__name__}"
        )
    return ParseResult.strict(parsed)


def extract_from_text(text: str) -> list[str]:
    """Scrape likely ingredient names line by line from free-form text."""
    items: list[str] = []
    for line in text.splitlines():
        match = _ALPHA_RUN_RE.search(line)
        if not match:
            continue
        item = match.group(0).strip().lower()
        if HEURISTIC_MIN_LENGTH <= len(item) <= HEURISTIC_MAX_LENGTH:
            items.append(item)
        if len(items) >= HEURISTIC_MAX_ITEMS:
            break
    return items
