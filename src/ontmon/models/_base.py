"""Base model for ontmon domain objects.

Every model inherits from :class:`OntBaseModel` which provides:

* ``alias_generator=to_camel`` so snake_case fields are written with the
  camelCase keys used by the dashboard JSON and the state file.
* ``populate_by_name`` so both spellings are accepted on input.
* Frozen instances; a new cycle produces new values instead of mutating.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
"""Datetime that is always timezone-aware (naive input is taken as UTC)."""


def isoformat_z(value: datetime) -> str:
    """Render *value* as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OntBaseModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
