"""Context merging for prompt augmentation."""

import json
import logging
from typing import IO, Any, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


def _as_items(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)):
        return [value]
    if isinstance(value, (list, tuple)) and not all(
        isinstance(item, (str, bytes)) for item in value
    ):
        # A list of structured objects is one JSON document
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def render_item(item: Any) -> str:
    """Render a single context object as text."""
    if item is None:
        return ""
    if isinstance(item, bytes):
        return item.decode("utf-8", errors="replace")
    if isinstance(item, str):
        return item
    if isinstance(item, (Mapping, list, tuple)):
        return json.dumps(item, indent=2, default=str)
    return str(item)


def merge_context(explicit: Any = None, piped: Any = None) -> str:
    """Combine explicit and piped input into a single text blob.

    Explicit items come first. None and whitespace-only items are skipped.
    """
    parts = []
    for item in _as_items(explicit) + _as_items(piped):
        text = render_item(item)
        if text.strip():
            parts.append(text.rstrip())

    merged = "\n".join(parts).strip()
    if merged:
        logger.debug("Merged %d context item(s), %d chars", len(parts), len(merged))
    return merged


def augment_prompt(prompt: str, context: Optional[str]) -> str:
    """Append merged context to the outgoing prompt."""
    prompt = prompt.strip()
    if not context:
        return prompt
    return f"{prompt}\n\nContext:\n{context}"


def read_piped_input(stream: Optional[IO[str]]) -> Optional[str]:
    """Return text piped on stdin, or None for an interactive terminal."""
    if stream is None:
        return None
    try:
        if stream.isatty():
            return None
    except (AttributeError, ValueError):
        return None
    data = stream.read()
    return data if data and data.strip() else None
