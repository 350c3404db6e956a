"""Parameter options model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParamOptions(BaseModel):
    """Which optional pieces the parameter builder should include.

    ``limit`` and ``offset`` that are not valid non-negative numbers are
    normalized to ``None`` (omitted) rather than rejected.
    """

    model_config = ConfigDict(frozen=True)

    include_id: bool = Field(default=True, description="Add the record key as 'id' when it has one")
    include_source: bool = Field(default=False, description="Request the '_source' field")
    include_timestamp: bool = Field(default=False, description="Request the '_timestamp' field")
    limit: int | None = Field(default=None, description="Page size, sent as 'size'")
    offset: int | None = Field(default=None, description="Page start, sent as 'from'")

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def _valid_count(cls, v: Any) -> int | None:
        if isinstance(v, bool):
            return None
        if isinstance(v, str):
            v = v.strip()
            if not v.isdecimal():
                return None
            return int(v)
        if isinstance(v, int | float) and v >= 0 and float(v).is_integer():
            return int(v)
        return None
