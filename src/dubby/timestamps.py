"""
Timestamp parsing and formatting helpers.
"""


def parse_timestamp(text: str | None) -> float:
    """Parse ``HH:MM:SS[.mmm]``, ``MM:SS[.mmm]`` or bare seconds into seconds.

    The colon count selects the interpretation. Empty or unparseable input
    yields ``0.0``, so callers must treat zero as "unknown" when precision
    matters.
    """
    if not text:
        return 0.0

    parts = str(text).strip().split(":")
    if len(parts) > 3:
        return 0.0

    try:
        values = [float(p) for p in parts]
    except ValueError:
        return 0.0

    seconds = 0.0
    for value in values:
        seconds = seconds * 60 + value

    # float() accepts "nan" and "inf"
    if seconds != seconds or seconds in (float("inf"), float("-inf")):
        return 0.0
    return seconds


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``MM:SS.mmm`` (minutes are not wrapped into hours)."""
    total_ms = max(0, int(round(seconds * 1000)))
    m, rest = divmod(total_ms, 60_000)
    s, ms = divmod(rest, 1000)
    return f"{m:02}:{s:02}.{ms:03}"
