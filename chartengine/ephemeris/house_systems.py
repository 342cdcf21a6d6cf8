"""House system canonicalization shared by the validator and the gateway."""

from __future__ import annotations

from collections.abc import Mapping

__all__ = [
    "HOUSE_ALIASES",
    "HOUSE_CODE_BY_NAME",
    "VALID_HOUSE_SYSTEMS",
    "resolve_house_code",
]


HOUSE_CODE_BY_NAME: Mapping[str, str] = {
    "placidus": "P",
    "whole_sign": "W",
    "koch": "K",
    "equal": "E",
    "regiomontanus": "R",
    "campanus": "C",
    "alcabitius": "B",
    "morinus": "M",
    "porphyry": "O",
}


HOUSE_ALIASES: Mapping[str, str] = {
    "ws": "whole_sign",
    "wholesign": "whole_sign",
    "whole": "whole_sign",
}

VALID_HOUSE_SYSTEMS: tuple[str, ...] = tuple(HOUSE_CODE_BY_NAME)


def resolve_house_code(name: str) -> tuple[str, str] | None:
    """Return ``(canonical_name, swiss_code)`` or ``None`` when unknown."""

    lowered = (name or "").strip().lower()
    canonical = HOUSE_ALIASES.get(lowered, lowered)
    code = HOUSE_CODE_BY_NAME.get(canonical)
    if code is None:
        return None
    return canonical, code
