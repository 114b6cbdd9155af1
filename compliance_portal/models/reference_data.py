"""
Reference data models.

Verticals and document types used to classify uploads, with the tier
they were served from.

Dependencies: pydantic
System role: Reference data API contracts
"""

from typing import Literal

from pydantic import BaseModel, Field

ReferenceSource = Literal["api", "static"]


class ReferenceItem(BaseModel):
    """One selectable value."""

    name: str = Field(description="Stable slug, e.g. 'sports-online'")
    display_name: str


class ReferenceDataResponse(BaseModel):
    """Reference list plus the tier that produced it."""

    items: list[ReferenceItem]
    source: ReferenceSource
