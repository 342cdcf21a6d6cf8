"""Declarative wheel definitions and their loader."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..config.settings import pydantic_errors_to_validation
from ..exceptions import ValidationError

__all__ = [
    "DataSource",
    "DataSourceKind",
    "Ring",
    "RingType",
    "WheelDefinition",
    "default_wheel",
    "load_wheel_definition",
    "load_wheel_file",
]

LOG = logging.getLogger(__name__)

DEFAULT_WHEEL_RESOURCE = "default.json"


class RingType(str, Enum):
    SIGNS = "signs"
    HOUSES = "houses"
    PLANETS = "planets"
    ANGLES = "angles"


class DataSourceKind(str, Enum):
    STATIC_ZODIAC = "static_zodiac"
    LAYER_HOUSES = "layer_houses"
    LAYER_PLANETS = "layer_planets"


class DataSource(BaseModel):
    """Which data feeds a ring: the fixed zodiac or one layer's houses/planets."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: DataSourceKind
    layer_id: Optional[str] = Field(None, alias="layerId")

    @model_validator(mode="after")
    def _layer_required(self) -> "DataSource":
        if self.kind is not DataSourceKind.STATIC_ZODIAC and not self.layer_id:
            raise ValueError(f"dataSource of kind '{self.kind.value}' requires a layerId")
        return self


class Ring(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    slug: str
    type: RingType
    label: str = ""
    order_index: int = Field(alias="orderIndex")
    radius_inner: float = Field(alias="radiusInner")
    radius_outer: float = Field(alias="radiusOuter")
    data_source: DataSource = Field(alias="dataSource")
    min_separation_deg: float = Field(6.0, alias="minSeparationDeg", ge=0.0, le=30.0)
    stack_bands: int = Field(3, alias="stackBands", ge=1)

    @model_validator(mode="after")
    def _radii_ordered(self) -> "Ring":
        if not 0.0 <= self.radius_inner < self.radius_outer <= 1.0:
            raise ValueError(
                f"ring '{self.slug}': radii must satisfy 0 <= radiusInner < radiusOuter <= 1, "
                f"got {self.radius_inner}..{self.radius_outer}"
            )
        return self


class WheelDefinition(BaseModel):
    """Chart title plus the ordered ring template."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = "wheel"
    rings: list[Ring] = Field(min_length=1)
    primary_layer_id: Optional[str] = Field(None, alias="primaryLayerId")

    @field_validator("rings")
    @classmethod
    def _unique_slugs(cls, rings: list[Ring]) -> list[Ring]:
        seen: set[str] = set()
        for ring in rings:
            if ring.slug in seen:
                raise ValueError(f"duplicate ring slug '{ring.slug}'")
            seen.add(ring.slug)
        return rings

    def ordered_rings(self) -> list[Ring]:
        return sorted(self.rings, key=lambda ring: ring.order_index)

    def layer_ids(self) -> set[str]:
        return {ring.data_source.layer_id for ring in self.rings if ring.data_source.layer_id}


def load_wheel_definition(source: str | bytes | Mapping[str, Any]) -> WheelDefinition:
    """Parse a JSON or YAML wheel document.

    Raises :class:`~chartengine.exceptions.ValidationError` for malformed
    documents, including a missing or empty ring list.
    """

    if isinstance(source, Mapping):
        raw: Any = dict(source)
    else:
        try:
            raw = yaml.safe_load(source)
        except yaml.YAMLError as exc:
            raise ValidationError(f"wheel: failed to parse definition: {exc}", field="wheel") from exc
    if not isinstance(raw, Mapping):
        raise ValidationError("wheel: definition must be a mapping", field="wheel")
    if not raw.get("rings"):
        raise ValidationError("wheel: rings must be a non-empty list", field="wheel.rings")
    try:
        return WheelDefinition.model_validate(raw)
    except PydanticValidationError as exc:
        raise pydantic_errors_to_validation(exc, prefix="wheel") from exc


def load_wheel_file(path: str | Path) -> WheelDefinition:
    wheel_path = Path(path)
    try:
        text = wheel_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(
            f"wheel: cannot read definition file '{wheel_path}'", field="wheel", value=str(wheel_path)
        ) from exc
    LOG.debug("Loaded wheel definition from %s", wheel_path)
    return load_wheel_definition(text)


def default_wheel() -> WheelDefinition:
    """Return the packaged three-ring natal wheel."""

    resource = resources.files("chartengine") / "data" / "wheels" / DEFAULT_WHEEL_RESOURCE
    return load_wheel_definition(resource.read_text(encoding="utf-8"))
