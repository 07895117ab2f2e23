"""Run configuration data model.

Describes which feeds to read (sources) and which logical drifters to
build from the transmitters found in them. Loaded once per run from a
JSON file and never mutated afterwards.

Keys are accepted in lower case or in the capitalized form used by
existing drifters.json files (``Url``, ``Esns``, ``From`` ...).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


def _aliases(*names: str) -> AliasChoices:
    choices: list[str] = []
    for name in names:
        choices.extend([name, name.capitalize(), name.upper()])
    return AliasChoices(*choices)


def epoch_seconds(value: datetime) -> int:
    """Convert a datetime to integer epoch seconds, treating naive as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class SourceConfig(BaseModel):
    """One raw position feed and the transmitters of interest in it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        min_length=1,
        validation_alias=_aliases("url"),
        description="Feed location: http(s) URL, file:// URL or local path",
    )
    year: int = Field(
        ge=1,
        le=9998,
        validation_alias=_aliases("year", "base_year"),
        description="Calendar year of the first record of every transmitter",
    )
    esns: list[int] = Field(
        default_factory=list,
        validation_alias=_aliases("esns", "transmitter_ids"),
        description="Transmitter ids retained from this feed",
    )
    source_id: str = Field(
        default="",
        validation_alias=_aliases("id", "source_id"),
        description="Optional label used in logs; defaults to source_<n>",
    )

    @property
    def transmitter_set(self) -> frozenset[int]:
        return frozenset(self.esns)


class DrifterConfig(BaseModel):
    """A named drifter served by one or more transmitters."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(
        min_length=1,
        validation_alias=_aliases("name"),
    )
    esns: list[int] = Field(
        default_factory=list,
        validation_alias=_aliases("esns", "transmitter_ids"),
        description="Member transmitters, in concatenation order",
    )
    window_start: Optional[int] = Field(
        default=None,
        validation_alias=_aliases("from", "window_start"),
        description="Epoch seconds; earlier points are dropped",
    )
    window_end: Optional[int] = Field(
        default=None,
        validation_alias=_aliases("to", "window_end"),
        description="Epoch seconds; later points are dropped",
    )

    @field_validator("window_start", "window_end", mode="before")
    @classmethod
    def _coerce_instant(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return epoch_seconds(value)
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return int(text)
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError as e:
                raise ValueError(
                    f"expected epoch seconds or ISO-8601 datetime, got {value!r}"
                ) from e
            return epoch_seconds(parsed)
        return value

    @field_validator("window_start", "window_end")
    @classmethod
    def _zero_is_unset(cls, value: Optional[int]) -> Optional[int]:
        return value or None


class RunConfig(BaseModel):
    """Complete configuration for one pipeline run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sources: list[SourceConfig] = Field(
        default_factory=list,
        validation_alias=_aliases("sources"),
    )
    drifters: list[DrifterConfig] = Field(
        default_factory=list,
        validation_alias=_aliases("drifters"),
    )

    @model_validator(mode="after")
    def _unique_drifter_names(self) -> "RunConfig":
        seen: set[str] = set()
        for drifter in self.drifters:
            if drifter.name in seen:
                raise ValueError(f"duplicate drifter name: {drifter.name!r}")
            seen.add(drifter.name)
        return self

    def labelled_sources(self) -> list[tuple[str, SourceConfig]]:
        """Sources paired with their log label, in configuration order."""
        return [
            (source.source_id or f"source_{i}", source)
            for i, source in enumerate(self.sources, start=1)
        ]
