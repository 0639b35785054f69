"""
Assembly of a streamed JSON response into segments.

The stream is one JSON document split arbitrarily across chunks, not
line-delimited JSON, so nothing is parsed until the stream is exhausted.
"""

import json
import logging
from collections.abc import AsyncIterable, Callable
from typing import Any

from .errors import EmptyResponseError, MalformedResponseError
from .models import Segment
from .request import SEGMENT_FIELDS

logger = logging.getLogger("dubby")

DEFAULT_REASONING = "Optimized for timing."


class ProgressMessage:
    """Growing progress text; true progress is not observable mid-stream."""

    PREFIX = "Receiving synchronization data..."

    def __init__(self) -> None:
        self.text = ""

    def advance(self) -> str:
        self.text = self.text + "." if self.text.startswith("Receiving") else self.PREFIX
        return self.text


def _chunk_text(chunk: Any) -> str | None:
    if isinstance(chunk, str):
        return chunk
    if isinstance(chunk, dict):
        return chunk.get("text")
    return getattr(chunk, "text", None)


def parse_segments(text: str) -> list[Segment]:
    """Parse a complete JSON array into segments with sequential ids."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error at char {e.pos} of {len(text)}: {e.msg}")
        raise MalformedResponseError() from e

    if not isinstance(data, list):
        raise MalformedResponseError(f"Expected a JSON array, got {type(data).__name__}.")

    segments: list[Segment] = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict) or any(item.get(k) is None for k in SEGMENT_FIELDS):
            raise MalformedResponseError(f"Segment {idx} is missing required fields.")
        segment = Segment.from_dict(item, id=str(idx), reasoning=DEFAULT_REASONING)
        if segment.start > segment.end:
            raise MalformedResponseError(
                f"Segment {idx} ends before it starts: {segment.start_time} -> {segment.end_time}.", hint=""
            )
        if segments and segment.start < segments[-1].start:
            raise MalformedResponseError(
                f"Segment {idx} starts before segment {idx - 1}: {segment.start_time} < {segments[-1].start_time}.",
                hint="",
            )
        segments.append(segment)
    return segments


async def assemble_from_stream(
    stream: AsyncIterable[Any],
    on_progress: Callable[[str], None] | None = None,
) -> list[Segment]:
    """Accumulate chunk text and parse it once the stream ends.

    Raises:
        EmptyResponseError: the stream produced no text at all.
        MalformedResponseError: the text is not a valid segment array.
    """
    progress = ProgressMessage()
    parts: list[str] = []
    async for chunk in stream:
        text = _chunk_text(chunk)
        if not text:
            continue
        parts.append(text)
        if on_progress:
            on_progress(progress.advance())

    full_text = "".join(parts)
    logger.debug(f"Stream finished: {len(parts)} chunks, {len(full_text)} characters")
    if not full_text:
        raise EmptyResponseError("No response text from the model.")

    segments = parse_segments(full_text)
    logger.info(f"Assembled {len(segments)} segments")
    return segments
