"""
Shared pieces for the Pagesmith data models.

Every persisted model uses snake_case attributes in Python and the camelCase
field names of the stored JSON records (``parentId``, ``createdAt``, ...).
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate an opaque identifier such as ``block_3f9a0c1d2e4b``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class CamelModel(BaseModel):
    """
    Base model for records stored as JSON.

    Accepts both attribute names and camelCase aliases on input and is
    dumped with aliases so stored records keep their original shape.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        """Render as a JSON-compatible dict with ISO-8601 dates."""
        return self.model_dump(mode="json", by_alias=True)
