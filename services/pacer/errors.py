"""Copyright (C) 2025 Pierre Marrec
SPDX-License-Identifier: GPL-3.0-or-later

Error types raised by the pacing engine.

Error codes:
- INVALID_DISTANCE: total distance is missing, non-positive or not finite
- INVALID_DURATION: a duration is negative or not finite
- CHECKPOINT_OUT_OF_RANGE: checkpoint distance outside [0, total distance]
- CHECKPOINTS_NOT_SORTED: checkpoints not strictly ascending by distance
- DUPLICATE_CHECKPOINT_ID: two checkpoints share the same id
- INVALID_PROFILE: elevation and distance series are inconsistent
- INVALID_RANGE: range query with start after end
- DURATION_EXCEEDED: stops consume the whole duration budget
"""

from __future__ import annotations

from typing import Any, Optional


class PacerError(Exception):
    """Base class for pacing engine errors.

    Attributes:
        code: Error code (e.g., "CHECKPOINTS_NOT_SORTED")
        details: List of error detail strings
    """

    def __init__(self, code: str, details: list[str]):
        self.code = code
        self.details = details
        super().__init__(f"{code}: {'; '.join(details)}")


class ValidationError(PacerError, ValueError):
    """Raised on malformed input, before any time arithmetic runs."""


class DurationExceededError(PacerError):
    """Raised when planned stops leave no moving time.

    Recoverable: the caller should ask the user to change the duration or stops.
    """

    def __init__(self, total_duration_seconds: float, total_stop_seconds: float):
        self.total_duration_seconds = total_duration_seconds
        self.total_stop_seconds = total_stop_seconds
        super().__init__(
            "DURATION_EXCEEDED",
            [
                f"stops ({total_stop_seconds:g}s) consume the total duration "
                f"({total_duration_seconds:g}s)"
            ],
        )


class ParseFallbackWarning(UserWarning):
    """A pinned time could not be parsed; the calculated value was used instead."""

    def __init__(self, checkpoint_id: Any, field: str, raw_value: Optional[object]):
        self.checkpoint_id = checkpoint_id
        self.field = field
        self.raw_value = raw_value
        super().__init__(
            f"checkpoint {checkpoint_id!r}: cannot parse pinned {field} {raw_value!r}, "
            "using calculated value"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseFallbackWarning):
            return NotImplemented
        return (self.checkpoint_id, self.field, self.raw_value) == (
            other.checkpoint_id,
            other.field,
            other.raw_value,
        )

    def __hash__(self) -> int:
        return hash((self.checkpoint_id, self.field, str(self.raw_value)))
