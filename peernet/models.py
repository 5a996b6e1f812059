"""pydantic validation models for kind payloads

The registry only checks the envelope shape and that the kind is known; each
kind validates its own ``data`` against one of these models. Validation
failures surface as ``pydantic.ValidationError`` and are translated by the
caller.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ElementData(BaseModel):
    """``data`` of a ``packet_element`` envelope."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    internal_id: str = Field(alias="internalId")


def describe_validation_error(err: ValidationError) -> str:
    """Flatten a ValidationError into a single ``field: reason`` line."""
    parts = []
    for item in err.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
