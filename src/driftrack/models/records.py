"""Raw feed batch wrapper.

Rows flow from an adapter to the decoder inside this envelope, exactly
as split from the feed text and in original feed order. Order matters:
year reconstruction is a sequential scan over these rows.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class RecordBatch(BaseModel):
    """All rows of one feed, in feed order."""

    model_config = ConfigDict(frozen=True)

    source_id: str = Field(
        description="Which source produced these rows"
    )
    location: str = Field(
        default="",
        description="Feed location the rows were read from"
    )
    rows: list[list[str]] = Field(
        default_factory=list,
        description="Whitespace-split fields per record, never modified"
    )
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the feed was retrieved"
    )

    @property
    def size(self) -> int:
        return len(self.rows)
