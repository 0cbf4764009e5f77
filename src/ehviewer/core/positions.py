"""Start-position resolution.

Pure functions that turn the user's start flags into a single
:class:`~ehviewer.core.models.StartPosition`.  When several flags are
present the first match in this order wins:

1. from start
2. from time
3. from offset
4. from sequence number
5. end of the stream (default)
"""

from __future__ import annotations

from datetime import datetime

from ehviewer.core.models import PositionKind, StartPosition
from ehviewer.exceptions import InvalidStartTimeError

_TIME_FORMAT_HINT = "2022-03-10T14:59:59+00:00"


def parse_enqueued_time(text: str) -> datetime:
    """Parse an ISO 8601 timestamp into a timezone-aware ``datetime``.

    A trailing ``Z`` is accepted.  Timestamps without an offset are
    taken as local time.

    Raises
    ------
    InvalidStartTimeError
        If *text* is not a valid ISO 8601 timestamp.
    """
    stripped = text.strip()
    if stripped.endswith(("Z", "z")):
        stripped = stripped[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(stripped)
    except ValueError as exc:
        raise InvalidStartTimeError(
            "Invalid --from-time timestamp. Needs to be in ISO 8601 "
            f"(i.e. {_TIME_FORMAT_HINT}).",
            hint=f"Got {text!r}.",
        ) from exc
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def resolve_start_position(
    *,
    from_start: bool = False,
    from_time: str | None = None,
    from_offset: int | None = None,
    from_sequence: int | None = None,
) -> StartPosition:
    """Pick the start position from the user's flags.

    Negative offsets and sequence numbers are treated as unset, matching
    the ``-1`` sentinel accepted on the command line.
    """
    if from_start:
        return StartPosition.earliest()
    if from_time is not None:
        return StartPosition(PositionKind.ENQUEUED_TIME, parse_enqueued_time(from_time))
    if from_offset is not None and from_offset > -1:
        return StartPosition(PositionKind.OFFSET, from_offset)
    if from_sequence is not None and from_sequence > -1:
        return StartPosition(PositionKind.SEQUENCE_NUMBER, from_sequence)
    return StartPosition.latest()
