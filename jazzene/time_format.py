"""Time display formatting.

Renders ``"M:SS / M:SS"``. Every input is sanitised first: non-finite or
negative values become zero, the current position never exceeds the total,
and both are capped at :data:`MAX_DISPLAY_SECONDS` so a runaway value can
never print as an absurd minute count.
"""

import math


# 99:59, the longest time that fits two minute digits.
MAX_DISPLAY_SECONDS = 99 * 60 + 59


def _whole_seconds (seconds: float) -> int:

	if not math.isfinite(seconds) or seconds <= 0:
		return 0

	return int(math.floor(min(seconds, MAX_DISPLAY_SECONDS)))


def format_clock (seconds: float) -> str:

	"""Format one position as ``M:SS`` (minutes unpadded, seconds zero-padded)."""

	minutes, secs = divmod(_whole_seconds(seconds), 60)

	return f"{minutes}:{secs:02d}"


def format_time (current: float, total: float) -> str:

	"""Format a ``current / total`` pair.

	Example:
		```python
		format_time(3.7, 16.0)      # → "0:03 / 0:16"
		format_time(75.0, 130.0)    # → "1:15 / 2:10"
		format_time(1e12, 16.0)     # → "0:16 / 0:16"
		```
	"""

	total_seconds = _whole_seconds(total)
	current_seconds = min(_whole_seconds(current), total_seconds)

	return f"{format_clock(current_seconds)} / {format_clock(total_seconds)}"
