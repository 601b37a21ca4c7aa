"""Base models shared by pyhapanel.

* :class:`PanelBaseModel`: frozen value objects (snapshots, commands,
  results).  Unknown keys are rejected.
* :class:`PanelStateModel`: long-lived, mutable device state.  Every
  assignment is validated so a bad value can never land in the device
  table.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class PanelBaseModel(BaseModel):
    """Base for immutable pyhapanel models."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )


class PanelStateModel(BaseModel):
    """Base for mutable pyhapanel state models."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )


def normalize_entity_id(value: str) -> str:
    """Validate an ``<domain>.<object_id>`` entity id."""
    entity_id = value.strip()
    domain, sep, object_id = entity_id.partition(".")
    if not sep or not domain or not object_id:
        raise ValueError(f"entity_id must look like '<domain>.<name>', got {value!r}")
    return entity_id


class EntityModel(PanelBaseModel):
    """Frozen model keyed by an entity id."""

    entity_id: str

    @field_validator("entity_id")
    @classmethod
    def _check_entity_id(cls, value: str) -> str:
        return normalize_entity_id(value)

    @property
    def domain(self) -> str:
        return self.entity_id.split(".", 1)[0]
