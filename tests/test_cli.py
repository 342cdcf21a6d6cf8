from __future__ import annotations

import logging
from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

import chartengine.cli as cli
from chartengine.cache import ResultCache
from chartengine.service import ChartService

from .conftest import NATAL_REQUEST, FakeGateway

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def gateway(monkeypatch: pytest.MonkeyPatch) -> FakeGateway:
    fake = FakeGateway(ascendant=100.0)
    monkeypatch.setattr(cli, "build_service", lambda config=None: ChartService(fake, ResultCache(4)))
    return fake


@pytest.fixture
def request_file(tmp_path: Path) -> Path:
    path = tmp_path / "request.json"
    path.write_bytes(orjson.dumps(NATAL_REQUEST))
    return path


def test_positions_command(gateway, request_file):
    result = runner.invoke(cli.app, ["--log-level", "WARNING", "positions", str(request_file)])

    assert result.exit_code == 0, result.output
    payload = orjson.loads(result.output)
    natal = payload["layers"]["natal"]
    assert natal["kind"] == "natal"
    assert natal["positions"]["houses"]["angles"]["asc"] == pytest.approx(100.0)
    assert gateway.call_count == 1


def test_chartspec_command_writes_file(gateway, request_file, tmp_path):
    out = tmp_path / "spec.json"
    result = runner.invoke(
        cli.app,
        ["--log-level", "WARNING", "chartspec", str(request_file), "--width", "500", "--height", "400", "--out", str(out)],
    )

    assert result.exit_code == 0, result.output
    spec = orjson.loads(out.read_bytes())
    assert (spec["width"], spec["height"]) == (500.0, 400.0)
    assert spec["center"] == {"x": 250.0, "y": 200.0}
    assert sum(1 for shape in spec["shapes"] if shape["kind"] == "planet_glyph") == 5


def test_chartspec_command_with_wheel_file(gateway, request_file, tmp_path):
    wheel = tmp_path / "wheel.yaml"
    wheel.write_text(
        "rings:\n"
        "  - slug: planets\n"
        "    type: planets\n"
        "    orderIndex: 0\n"
        "    radiusInner: 0.4\n"
        "    radiusOuter: 0.9\n"
        "    dataSource: {kind: layer_planets, layerId: natal}\n",
        encoding="utf-8",
    )
    result = runner.invoke(cli.app, ["--log-level", "WARNING", "chartspec", str(request_file), "--wheel", str(wheel)])

    assert result.exit_code == 0, result.output
    kinds = {shape["kind"] for shape in orjson.loads(result.output)["shapes"]}
    assert "sign_segment" not in kinds
    assert "planet_glyph" in kinds


def test_validation_errors_exit_with_code_two(gateway, tmp_path):
    bad = dict(NATAL_REQUEST, subjects=[])
    path = tmp_path / "bad.json"
    path.write_bytes(orjson.dumps(bad))

    result = runner.invoke(cli.app, ["--log-level", "WARNING", "positions", str(path)])

    assert result.exit_code == 2
    assert "VALIDATION_ERROR" in result.output
    assert gateway.call_count == 0


def test_missing_request_file(gateway, tmp_path):
    result = runner.invoke(cli.app, ["--log-level", "WARNING", "positions", str(tmp_path / "nope.json")])
    assert result.exit_code == 2


def test_dasha_command():
    result = runner.invoke(
        cli.app,
        ["--log-level", "WARNING", "dasha", "--birth", "1990-05-15T14:30:00Z", "--moon-lon", "95.5", "--depth", "antardasha"],
    )

    assert result.exit_code == 0, result.output
    root = orjson.loads(result.output)
    assert root["lord"] == "vimshottari"
    first = root["children"][0]
    assert first["lord"] == "saturn"
    assert first["start"] == "1990-05-15T14:30:00Z"
    assert len(first["children"]) == 9


def test_dasha_unknown_system_is_calculation_error():
    result = runner.invoke(
        cli.app,
        ["--log-level", "WARNING", "dasha", "--birth", "1990-05-15T14:30:00Z", "--moon-lon", "10", "--system", "nope"],
    )
    assert result.exit_code == 4
    assert "CALCULATION_ERROR" in result.output


def test_dasha_unknown_depth_is_validation_error():
    result = runner.invoke(
        cli.app,
        ["--log-level", "WARNING", "dasha", "--birth", "1990-05-15T14:30:00Z", "--moon-lon", "10", "--depth", "bogus"],
    )
    assert result.exit_code == 2


def test_unknown_subject_exits_with_not_found(gateway, tmp_path):
    bad = dict(NATAL_REQUEST, layer_config={"natal": {"kind": "natal", "subjectId": "bob"}})
    path = tmp_path / "bad.json"
    path.write_bytes(orjson.dumps(bad))

    result = runner.invoke(cli.app, ["--log-level", "WARNING", "positions", str(path)])

    assert result.exit_code == 3
    assert "NOT_FOUND" in result.output
    assert gateway.call_count == 0
