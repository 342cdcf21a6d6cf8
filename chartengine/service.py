"""Chart pipeline: settings merge, validation, cache, gateway, layout."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .aspects import Aspect, AspectEngine, group_aspect_sets
from .cache import ResultCache, request_fingerprint
from .config import ChartSettings, ServiceConfig, SettingsOverride, merge_settings
from .config.settings import PeriodSystemCfg
from .ephemeris import EphemerisGateway, SwissEphemerisGateway
from .exceptions import CalculationError, ChartEngineError, InternalError, ValidationError
from .layers import LayerContext, resolve_layers
from .observability import PIPELINE_ERRORS, ensure_metrics_registered
from .schemas import LayerPositions, LayerResponse, PositionDataset, RenderRequest
from .timelords import compute_periods, get_period_system, nakshatra_for
from .timeutils import isoformat
from .validation import RequestValidator
from .vedic import build_varga_layers, identify_yogas
from .visual import (
    ChartSpec,
    ChartSpecGenerator,
    WheelAssembler,
    WheelDefinition,
    default_wheel,
    load_wheel_definition,
    load_wheel_file,
)
from .western import annotate_layer

__all__ = ["ChartRender", "ChartService", "build_service"]

LOG = logging.getLogger(__name__)

_NAKSHATRA_ANGLES = ("asc", "mc")


@dataclass(frozen=True)
class ChartRender:
    """Chart spec plus the dataset and aspects it was drawn from."""

    spec: ChartSpec
    positions: PositionDataset
    aspects: tuple[Aspect, ...]

    def aspect_sets(self) -> dict[str, list[Aspect]]:
        return group_aspect_sets(self.aspects)


class ChartService:
    """Orchestrates a render request end to end.

    The result cache is the only state shared between requests and is
    injected rather than created per call.
    """

    def __init__(
        self,
        gateway: EphemerisGateway,
        cache: ResultCache[PositionDataset] | None = None,
        config: ServiceConfig | None = None,
        *,
        aspect_engine: AspectEngine | None = None,
        assembler: WheelAssembler | None = None,
        generator: ChartSpecGenerator | None = None,
    ) -> None:
        self.config = config or ServiceConfig()
        self.gateway = gateway
        self.cache = cache if cache is not None else ResultCache(self.config.cache_size)
        self.aspect_engine = aspect_engine or AspectEngine()
        self.assembler = assembler or WheelAssembler()
        self.generator = generator or ChartSpecGenerator()
        ensure_metrics_registered()

    # ------------------------------------------------------------------
    # Public API

    async def get_positions(self, request: RenderRequest | Mapping[str, Any]) -> PositionDataset:
        try:
            req = self._coerce(request)
            settings = self.effective_settings(req)
            RequestValidator.validate_request(req, settings)
            fingerprint = request_fingerprint(req, settings)
            return await self.cache.aget_or_compute(
                fingerprint, lambda: self._compute_positions(req, settings)
            )
        except ChartEngineError as exc:
            PIPELINE_ERRORS.labels(code=exc.code).inc()
            raise

    async def get_chartspec(
        self,
        request: RenderRequest | Mapping[str, Any],
        wheel_json: str | Mapping[str, Any] | WheelDefinition | None = None,
        width: float | None = None,
        height: float | None = None,
    ) -> ChartRender:
        try:
            req = self._coerce(request)
            wheel = self._load_wheel(wheel_json)
            missing = sorted(wheel.layer_ids() - set(req.layer_config))
            if missing:
                raise ValidationError(
                    f"wheel: dataSource references unknown layer '{missing[0]}'",
                    field="dataSource.layerId",
                    value=missing[0],
                )
        except ChartEngineError as exc:
            PIPELINE_ERRORS.labels(code=exc.code).inc()
            raise

        dataset = await self.get_positions(req)
        try:
            positions = dataset.positions_by_layer()
            aspects = self.aspect_engine.compute(positions, dataset.settings)
            assembled = self.assembler.assemble(
                wheel,
                positions,
                aspects,
                dataset.settings.include_objects or None,
            )
            size = self.config.canvas_size
            spec = self.generator.generate(
                assembled,
                aspects,
                width if width is not None else size,
                height if height is not None else size,
            )
        except ChartEngineError as exc:
            PIPELINE_ERRORS.labels(code=exc.code).inc()
            raise
        return ChartRender(spec=spec, positions=dataset, aspects=tuple(aspects))

    @staticmethod
    def effective_settings(request: RenderRequest) -> ChartSettings:
        override = SettingsOverride.parse(request.settings_override)
        return merge_settings(request.settings, override)

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _coerce(request: RenderRequest | Mapping[str, Any]) -> RenderRequest:
        if isinstance(request, RenderRequest):
            return request
        return RenderRequest.parse(request)

    def _load_wheel(self, wheel_json: str | Mapping[str, Any] | WheelDefinition | None) -> WheelDefinition:
        if isinstance(wheel_json, WheelDefinition):
            return wheel_json
        if wheel_json is not None:
            return load_wheel_definition(wheel_json)
        if self.config.default_wheel_path is not None:
            return load_wheel_file(self.config.default_wheel_path)
        return default_wheel()

    async def _compute_positions(self, request: RenderRequest, settings: ChartSettings) -> PositionDataset:
        contexts = resolve_layers(request.subjects, request.layer_config, settings)
        computed = await asyncio.to_thread(self._query_layers, contexts)

        layers: dict[str, LayerResponse] = {}
        for ctx in contexts:
            layers[ctx.layer_id] = LayerResponse(
                id=ctx.layer_id,
                kind=ctx.kind,
                date_time=ctx.moment,
                location=ctx.location_model,
                positions=computed[ctx.layer_id],
            )
        vedic = None
        if settings.period_config is not None:
            vedic = self._period_payload(contexts, computed, settings.period_config)
        western = {layer_id: annotate_layer(computed[layer_id]) for layer_id in layers}
        LOG.debug("Computed positions for %d layers", len(layers))
        return PositionDataset(layers=layers, settings=settings, vedic=vedic, western=western)

    def _query_layers(self, contexts: Sequence[LayerContext]) -> dict[str, LayerPositions]:
        return {ctx.layer_id: self._query(ctx) for ctx in contexts}

    def _query(self, ctx: LayerContext) -> LayerPositions:
        try:
            return self.gateway.positions(ctx.moment, ctx.location, ctx.settings)
        except ChartEngineError:
            LOG.warning("Ephemeris calculation failed for layer %s", ctx.layer_id)
            raise
        except Exception as exc:
            raise InternalError(
                f"Ephemeris gateway failed for layer '{ctx.layer_id}': {exc}",
                layer_id=ctx.layer_id,
            ) from exc

    @staticmethod
    def _period_payload(
        contexts: Sequence[LayerContext],
        computed: Mapping[str, LayerPositions],
        cfg: PeriodSystemCfg,
    ) -> dict[str, Any]:
        wanted = {obj.lower() for obj in cfg.nakshatra_objects} if cfg.nakshatra_objects else None
        layers: dict[str, dict[str, Any]] = {}
        for ctx in contexts:
            positions = computed[ctx.layer_id]
            entry: dict[str, Any] = {}
            if cfg.include_nakshatras:
                placements = {
                    obj: nakshatra_for(pos.lon).to_dict()
                    for obj, pos in sorted(positions.planets.items())
                    if wanted is None or obj in wanted
                }
                if cfg.include_angles_in_nakshatra and positions.houses is not None:
                    for name in _NAKSHATRA_ANGLES:
                        if name in positions.houses.angles:
                            placements[name] = nakshatra_for(positions.houses.angles[name]).to_dict()
                entry["nakshatras"] = placements
            if cfg.vargas:
                entry["vargas"] = build_varga_layers(positions, cfg.vargas)
            if cfg.include_yogas:
                entry["yogas"] = [yoga.to_dict() for yoga in identify_yogas(positions)]
            if entry:
                layers[ctx.layer_id] = entry
        payload: dict[str, Any] = {"layers": layers}

        if cfg.include_dashas and cfg.dasha_systems:
            # Request validation guarantees a natal layer here.
            natal = next(ctx for ctx in contexts if ctx.kind == "natal")
            moon = computed[natal.layer_id].planets.get("moon")
            if moon is None:
                raise CalculationError(
                    "Moon position required for dasha calculation", layer_id=natal.layer_id
                )
            system = get_period_system(cfg.dasha_systems[0])
            root = compute_periods(
                natal.moment,
                moon.lon,
                system,
                cfg.depth,
                horizon_years=cfg.dashas_horizon_years,
            )
            payload["dashas"] = {
                "system": system.name,
                "depth": cfg.dashas_depth,
                "birthDateTime": isoformat(natal.moment),
                "periods": [period.to_dict() for period in root.children],
            }
        return payload


def build_service(config: ServiceConfig | None = None) -> ChartService:
    """Construct a service backed by the Swiss Ephemeris gateway."""

    resolved = config or ServiceConfig.from_env()
    gateway = SwissEphemerisGateway(resolved.ephemeris_path)
    return ChartService(gateway, ResultCache(resolved.cache_size), resolved)
