"""
Cache entry metadata consulted by the freshness policy.

The cache itself belongs to the presentation layer; the core only reads the
key and last-updated timestamp to decide fresh vs. stale.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CacheEntry(BaseModel):
    """Key, last update time and max-age policy of one cached aggregate."""

    model_config = ConfigDict(frozen=True)

    key: str
    updated_at: Optional[datetime] = None
    max_age_days: int = 7

    @field_validator("max_age_days")
    @classmethod
    def validate_max_age(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_age_days must be >= 1, got {v}.")
        return v
