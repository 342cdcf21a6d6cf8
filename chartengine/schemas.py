"""Request and response models shared by the pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .config.settings import ChartSettings, pydantic_errors_to_validation

__all__ = [
    "HousePositions",
    "LayerConfig",
    "LayerKind",
    "LayerPositions",
    "LayerResponse",
    "Location",
    "PlanetPosition",
    "PositionDataset",
    "RenderRequest",
    "Subject",
]

LayerKind = Literal["natal", "transit", "progressed"]


class Location(BaseModel):
    """Geographic location in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float
    name: Optional[str] = None


class Subject(BaseModel):
    """A person or event whose birth data feeds natal layers."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    label: str = Field("", validation_alias=AliasChoices("label", "name"))
    birth_date_time: Optional[str] = Field(None, alias="birthDateTime")
    birth_timezone: Optional[str] = Field(None, alias="birthTimezone")
    location: Optional[Location] = None


class LayerConfig(BaseModel):
    """Declared layer before resolution."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: str
    subject_id: Optional[str] = Field(None, alias="subjectId")
    explicit_date_time: Optional[str] = Field(None, alias="explicitDateTime")
    location: Optional[Location] = None


class PlanetPosition(BaseModel):
    """Ecliptic position of a single object."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    lon: float
    lat: float = 0.0
    speed_lon: float = Field(0.0, alias="speedLon")
    retrograde: bool = False

    @classmethod
    def from_speed(cls, lon: float, lat: float, speed_lon: float) -> "PlanetPosition":
        return cls(lon=lon % 360.0, lat=lat, speed_lon=speed_lon, retrograde=speed_lon < 0.0)


class HousePositions(BaseModel):
    """House cusps keyed ``"1"``..``"12"`` plus the four angles."""

    model_config = ConfigDict(frozen=True)

    system: str
    cusps: dict[str, float] = Field(default_factory=dict)
    angles: dict[str, float] = Field(default_factory=dict)

    def cusp_list(self) -> list[float]:
        return [self.cusps[str(idx)] for idx in range(1, 13)]

    @property
    def ascendant(self) -> float | None:
        return self.angles.get("asc")


class LayerPositions(BaseModel):
    """Positions computed for one layer."""

    model_config = ConfigDict(frozen=True)

    planets: dict[str, PlanetPosition] = Field(default_factory=dict)
    houses: Optional[HousePositions] = None


class LayerResponse(BaseModel):
    """Resolved layer together with its positions."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    kind: str
    date_time: datetime = Field(alias="dateTime")
    location: Optional[Location] = None
    positions: LayerPositions


class PositionDataset(BaseModel):
    """Normalized position dataset produced for a request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    layers: dict[str, LayerResponse] = Field(default_factory=dict)
    settings: ChartSettings
    vedic: Optional[dict[str, Any]] = None
    western: Optional[dict[str, Any]] = None

    def positions_by_layer(self) -> dict[str, LayerPositions]:
        return {layer_id: layer.positions for layer_id, layer in sorted(self.layers.items())}

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RenderRequest(BaseModel):
    """Render request payload."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    subjects: list[Subject]
    settings: ChartSettings = Field(default_factory=ChartSettings)
    layer_config: dict[str, LayerConfig]
    settings_override: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def parse(cls, payload: Mapping[str, Any]) -> "RenderRequest":
        """Validate a raw payload, raising :class:`~chartengine.exceptions.ValidationError`."""

        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise pydantic_errors_to_validation(exc, prefix="request") from exc
