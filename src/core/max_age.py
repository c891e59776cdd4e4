"""Max-age stamps for cache records.

A stamp is a creation time plus a duration. It classifies a record as fresh
or stale without deleting it. Wall-clock time is used because stamps are
persisted and read back by later processes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from core.errors import ValidationError


@dataclass(frozen=True, slots=True)
class MaxAge:
    created_at: float  # time.time()
    max_age_seconds: float

    @classmethod
    def create(cls, max_age_seconds: float) -> "MaxAge":
        return cls(created_at=time.time(), max_age_seconds=float(max_age_seconds))

    @classmethod
    def zero(cls) -> "MaxAge":
        return cls.create(0)

    def expires_at(self) -> float:
        return self.created_at + self.max_age_seconds

    def is_expired(self, now: Optional[float] = None) -> bool:
        current = time.time() if now is None else now
        return current > self.expires_at()

    def to_json(self) -> dict[str, float]:
        return {
            "timestampInMs": int(self.created_at * 1000),
            "value": self.max_age_seconds,
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "MaxAge":
        try:
            created_ms = float(data["timestampInMs"])
            value = float(data["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid max-age stamp: {data!r}") from e
        return cls(created_at=created_ms / 1000.0, max_age_seconds=value)
