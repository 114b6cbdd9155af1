"""
Shared response schemas.

Dependencies: pydantic
System role: Cross-cutting API contracts
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    details: dict[str, object] | None = None
