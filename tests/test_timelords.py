from __future__ import annotations

from datetime import UTC, datetime, timedelta
from fractions import Fraction

import pytest

from chartengine.exceptions import CalculationError
from chartengine.timelords import (
    ASHTOTTARI,
    VIMSHOTTARI,
    YOGINI,
    active_periods,
    compute_periods,
    get_period_system,
    nakshatra_for,
)

BIRTH = datetime(1990, 5, 15, 14, 30, tzinfo=UTC)


def test_cycle_lengths():
    assert VIMSHOTTARI.cycle_years == 120
    assert YOGINI.cycle_years == 36
    assert ASHTOTTARI.cycle_years == 108


def test_vimshottari_moon_at_95_5_top_level_only():
    root = compute_periods(BIRTH, 95.5, "vimshottari", 1)

    span = Fraction(360, 27)
    index = int(Fraction(95.5) // span)
    fraction = Fraction(95.5) / span - index
    assert index == 7
    first = root.children[0]
    assert first.lord == "saturn"
    assert first.duration_years == (1 - fraction) * 19
    assert first.start == BIRTH
    assert first.children == ()
    assert root.lord == "vimshottari"
    assert root.depth == 0
    assert [p.lord for p in root.children[:3]] == ["saturn", "mercury", "ketu"]


def test_default_horizon_covers_one_cycle():
    root = compute_periods(BIRTH, 95.5, "vimshottari", 1)
    assert root.duration_years >= 120
    assert sum((p.duration_years for p in root.children[:-1]), Fraction(0)) < 120
    assert len(root.children) == 10


def test_custom_horizon():
    root = compute_periods(BIRTH, 0.0, "vimshottari", 1, horizon_years=30)
    assert [p.lord for p in root.children] == ["ketu", "venus", "sun"]


def test_children_rotate_from_parent_lord_and_sum_exactly():
    root = compute_periods(BIRTH, 200.0, "vimshottari", 3)
    for maha in root.children:
        assert [c.lord for c in maha.children] == VIMSHOTTARI.rotation(maha.lord)
        assert sum((c.duration_years for c in maha.children), Fraction(0)) == maha.duration_years
        for antar in maha.children:
            assert sum((c.duration_years for c in antar.children), Fraction(0)) == antar.duration_years
            assert antar.level == "antardasha"


def test_periods_are_contiguous():
    root = compute_periods(BIRTH, 123.4, "yogini", 2)
    previous = None
    for maha in root.children:
        if previous is not None:
            assert maha.start == previous.end
        assert maha.children[0].start == maha.start
        assert maha.children[-1].end == maha.end
        for a, b in zip(maha.children, maha.children[1:]):
            assert a.end == b.start
        previous = maha
    assert root.end == root.children[-1].end


def test_yogini_lord_assignment():
    # Ashwini (index 0) -> (0 + 3) % 8 -> Bhramari.
    root = compute_periods(BIRTH, 1.0, "yogini", 1)
    assert root.children[0].lord == "Bhramari"


def test_ashtottari_groups_start_from_ardra():
    ardra = 5 * 360.0 / 27.0 + 0.1
    assert compute_periods(BIRTH, ardra, "ashtottari", 1).children[0].lord == "sun"
    krittika = 2 * 360.0 / 27.0 + 0.1
    assert compute_periods(BIRTH, krittika, "ashtottari", 1).children[0].lord == "venus"
    ashwini = 0.1
    assert compute_periods(BIRTH, ashwini, "ashtottari", 1).children[0].lord == "rahu"


def test_unknown_system_and_bad_depth():
    with pytest.raises(CalculationError):
        get_period_system("kalachakra-x")
    with pytest.raises(CalculationError):
        compute_periods(BIRTH, 10.0, "vimshottari", 0)
    with pytest.raises(CalculationError):
        compute_periods(BIRTH, 10.0, "vimshottari", 6)


def test_active_periods_chain():
    root = compute_periods(BIRTH, 95.5, "vimshottari", 3)
    moment = BIRTH + timedelta(days=365 * 10)
    chain = active_periods(root, moment)
    assert [p.depth for p in chain] == [1, 2, 3]
    assert all(p.contains(moment) for p in chain)
    assert chain[0].lord == "saturn"


def test_to_dict_serializes_tree():
    root = compute_periods(BIRTH, 95.5, "vimshottari", 2)
    payload = root.children[0].to_dict()
    assert payload["level"] == "mahadasha"
    assert payload["start"] == "1990-05-15T14:30:00Z"
    assert len(payload["children"]) == 9


def test_nakshatra_annotation():
    placement = nakshatra_for(95.5)
    assert placement.name == "Pushya"
    assert placement.index == 7
    assert placement.lord == "saturn"
    assert placement.pada == 1
