"""Typer application for the chartengine CLI."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

import orjson
import typer
import yaml

from .boot import configure_logging
from .config import DASHA_DEPTHS, ServiceConfig
from .exceptions import ChartEngineError, ValidationError
from .service import build_service
from .timelords import PERIOD_SYSTEMS, compute_periods
from .timeutils import parse_instant
from .visual import load_wheel_file

app = typer.Typer(help="chartengine command line interface.")

_EXIT_CODES = {"VALIDATION_ERROR": 2, "NOT_FOUND": 3, "CALCULATION_ERROR": 4}


def _load_document(path: str) -> Any:
    try:
        text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"cannot read request file '{path}'", field="request", value=path) from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValidationError(f"request: failed to parse '{path}': {exc}", field="request") from exc


def _emit(payload: Any, out: Optional[Path]) -> None:
    data = orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
    if out is None:
        typer.echo(data.decode("utf-8"))
    else:
        out.write_bytes(data)
        typer.echo(f"Wrote {out}")


def _fail(exc: ChartEngineError) -> typer.Exit:
    typer.echo(orjson.dumps({"error": exc.to_dict()}, default=str).decode("utf-8"), err=True)
    return typer.Exit(code=_EXIT_CODES.get(exc.code, 1))


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (defaults to LOG_LEVEL)."),
) -> None:
    configure_logging(level=log_level)


@app.command("positions")
def positions(
    request_file: str = typer.Argument(..., help="Render request (JSON or YAML); '-' reads stdin."),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the dataset to this file."),
) -> None:
    """Compute the normalized position dataset for a request."""

    try:
        payload = _load_document(request_file)
        service = build_service(ServiceConfig.from_env())
        dataset = asyncio.run(service.get_positions(payload or {}))
    except ChartEngineError as exc:
        raise _fail(exc) from exc
    _emit(dataset.to_json_dict(), out)


@app.command("chartspec")
def chartspec(
    request_file: str = typer.Argument(..., help="Render request (JSON or YAML); '-' reads stdin."),
    wheel: Optional[Path] = typer.Option(None, "--wheel", help="Wheel definition file."),
    width: Optional[float] = typer.Option(None, "--width", min=1, help="Canvas width."),
    height: Optional[float] = typer.Option(None, "--height", min=1, help="Canvas height."),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the chart spec to this file."),
) -> None:
    """Lay out a chart and print its shape list."""

    try:
        payload = _load_document(request_file)
        wheel_def = load_wheel_file(wheel) if wheel is not None else None
        service = build_service(ServiceConfig.from_env())
        render = asyncio.run(service.get_chartspec(payload or {}, wheel_def, width, height))
    except ChartEngineError as exc:
        raise _fail(exc) from exc
    _emit(render.spec.to_dict(), out)


@app.command("dasha")
def dasha(
    birth: str = typer.Option(..., "--birth", help="Reference instant (ISO-8601)."),
    moon_longitude: float = typer.Option(..., "--moon-lon", help="Reference Moon longitude in degrees."),
    system: str = typer.Option(
        "vimshottari", "--system", help=f"Period system ({', '.join(sorted(PERIOD_SYSTEMS))})."
    ),
    depth: str = typer.Option(
        "mahadasha", "--depth", help=f"Deepest level ({', '.join(DASHA_DEPTHS)})."
    ),
    horizon: Optional[float] = typer.Option(None, "--horizon-years", help="Years to cover."),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the period tree to this file."),
) -> None:
    """Compute a period-system tree from a reference longitude."""

    try:
        level = DASHA_DEPTHS.get(depth.strip().lower())
        if level is None:
            raise ValidationError(f"unknown depth '{depth}'", field="depth", value=depth)
        moment = parse_instant(birth, field="birth")
        root = compute_periods(moment, moon_longitude, system, level, horizon_years=horizon)
    except ChartEngineError as exc:
        raise _fail(exc) from exc
    _emit(root.to_dict(), out)


if __name__ == "__main__":  # pragma: no cover
    app()
