"""
application.normalizer - Clean raw ingredient candidates into an IngredientList.

Applied to every raw list before it is returned: vision-LLM output,
detector labels, and typed user input alike.

normalize() is total (never raises) and idempotent. It may return an
empty list — substituting a fallback is the orchestrator's job.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

DEFAULT_MAX_ITEMS = 20
DEFAULT_MAX_LENGTH = 29

_FREE_TEXT_SEPARATORS = re.compile(r"[,;\n]+")


def normalize(
    raw: Iterable[Any],
    *,
    max_items: int = DEFAULT_MAX_ITEMS,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> list[str]:
    """Trim, lowercase, length-filter, dedupe (first seen wins), truncate.

    Entries are kept when 1 < len <= max_length. Non-string entries are
    dropped.
    """
    seen: set[str] = set()
    result: list[str] = []
    for item in raw or ():
        if not isinstance(item, str):
            continue
        clean = item.strip().lower()
        if not 1 < len(clean) <= max_length:
            continue
        if clean in seen:
            continue
        seen.add(clean)
        result.append(clean)
        if len(result) >= max_items:
            break
    return result


def split_free_text(text: str) -> list[str]:
    """Split typed input like "tomatoes, onions; rice" into raw candidates."""
    if not text:
        return []
    return [part for part in _FREE_TEXT_SEPARATORS.split(text) if part.strip()]
