"""
Recover JSON blobs embedded in server-rendered HTML.

The pages carry their data as JSON inside a JSON string inside a <script>,
so the same key shows up either plainly quoted (``"miniScore":{``) or
backslash-escaped (``\\"miniScore\\":{``). We locate the key token, walk the
brackets to the matching close, un-escape quotes and hand the slice to
``json.loads``. Any occurrence that fails to balance or parse is skipped.
"""

import json
import logging
from typing import Any, Iterator, Optional

from cricfeed.models import BalancedChunk

logger = logging.getLogger(__name__)

_CLOSERS = {"{": "}", "[": "]"}


def extract_balanced(source: str, start_index: int) -> Optional[BalancedChunk]:
    """
    Return the balanced slice starting at ``source[start_index]``.

    Only the opening token's own kind is counted, so ``{`` inside an array
    slice (or ``[`` inside an object slice) never affects depth. Returns None
    if the string ends before depth gets back to zero.
    """
    if start_index < 0 or start_index >= len(source):
        return None

    open_token = source[start_index]
    close_token = _CLOSERS.get(open_token)
    if close_token is None:
        return None

    depth = 0
    for index in range(start_index, len(source)):
        char = source[index]
        if char == open_token:
            depth += 1
        elif char == close_token:
            depth -= 1
            if depth == 0:
                return BalancedChunk(text=source[start_index : index + 1], end_index=index + 1)

    return None


def parse_escaped_json(text: str) -> Any:
    """``\\"`` -> ``"`` then ``json.loads``. None on any parse failure."""
    normalized = text.replace('\\"', '"')
    try:
        return json.loads(normalized)
    except ValueError:
        return None


def _iter_values(html: str, key: str, open_token: str) -> Iterator[Any]:
    """Yield every successfully parsed value stored under ``key``, escaped style first."""
    if not html:
        return

    tokens = (f'\\"{key}\\":{open_token}', f'"{key}":{open_token}')

    for token in tokens:
        search_from = 0
        while search_from < len(html):
            token_index = html.find(token, search_from)
            if token_index < 0:
                break

            value_start = token_index + len(token) - 1
            chunk = extract_balanced(html, value_start)
            if chunk is None:
                logger.debug(f"Unbalanced '{key}' blob at offset {token_index}, skipping")
                search_from = token_index + len(token)
                continue

            parsed = parse_escaped_json(chunk.text)
            if parsed is None:
                logger.debug(f"Unparsable '{key}' blob at offset {token_index}, skipping")
            else:
                yield parsed

            search_from = chunk.end_index


def pick_object_by_key(html: str, key: str) -> Optional[dict]:
    for value in _iter_values(html, key, "{"):
        if isinstance(value, dict):
            return value
    return None


def pick_array_by_key(html: str, key: str) -> Optional[list]:
    for value in _iter_values(html, key, "["):
        if isinstance(value, list):
            return value
    return None


def pick_all_objects_by_key(html: str, key: str) -> list[dict]:
    return [value for value in _iter_values(html, key, "{") if isinstance(value, dict)]


def pick_all_arrays_by_key(html: str, key: str) -> list[list]:
    return [value for value in _iter_values(html, key, "[") if isinstance(value, list)]
