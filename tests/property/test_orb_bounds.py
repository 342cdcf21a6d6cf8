from __future__ import annotations

import pytest

from chartengine.aspects import AspectEngine, angular_sep_deg
from chartengine.config import ChartSettings
from chartengine.schemas import LayerPositions, PlanetPosition

hypothesis = pytest.importorskip("hypothesis")
given = hypothesis.given
settings = hypothesis.settings
st = hypothesis.strategies

LONGITUDE = st.floats(min_value=0.0, max_value=359.999, allow_nan=False, allow_infinity=False)
ORB = st.floats(min_value=0.0, max_value=10.0, allow_nan=False, allow_infinity=False)


@settings(deadline=None, max_examples=200)
@given(a=LONGITUDE, b=LONGITUDE)
def test_separation_is_symmetric_and_bounded(a: float, b: float) -> None:
    sep = angular_sep_deg(a, b)
    assert 0.0 <= sep <= 180.0
    assert sep == pytest.approx(angular_sep_deg(b, a))


@settings(deadline=None, max_examples=200)
@given(a=LONGITUDE, b=LONGITUDE, orb=ORB)
def test_matches_never_exceed_configured_orb(a: float, b: float, orb: float) -> None:
    chart = ChartSettings(
        orbSettings={name: orb for name in ("conjunction", "opposition", "trine", "square", "sextile")}
    )
    positions = {"n": LayerPositions(planets={"x": PlanetPosition(lon=a), "y": PlanetPosition(lon=b)})}
    aspects = AspectEngine().compute(positions, chart)

    assert len(aspects) <= 1
    for aspect in aspects:
        assert abs(aspect.orb) <= orb + 1e-9
        assert aspect.separation == pytest.approx(angular_sep_deg(a, b))
