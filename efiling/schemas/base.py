"""
Shared schema types
"""

from typing import Annotated
from uuid import UUID

from pydantic import BeforeValidator


def canonical_uuid(value) -> str:
    """Accept a UUID or its string form and return the canonical lowercase string"""
    if isinstance(value, UUID):
        return str(value)
    try:
        return str(UUID(str(value).strip()))
    except (TypeError, ValueError):
        raise ValueError("must be a valid UUID")


# Identifiers arriving from clients; malformed values are rejected before any query
EntityId = Annotated[str, BeforeValidator(canonical_uuid)]
