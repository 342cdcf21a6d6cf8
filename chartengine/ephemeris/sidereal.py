"""Ayanamsa names accepted for sidereal calculations."""

from __future__ import annotations

from typing import Final

__all__ = [
    "AYANAMSA_SWISS_ATTRS",
    "VALID_AYANAMSAS",
    "normalize_ayanamsa_name",
]

# Canonical name -> attribute on the ``swisseph`` module.
AYANAMSA_SWISS_ATTRS: Final[dict[str, str]] = {
    "lahiri": "SIDM_LAHIRI",
    "chitrapaksha": "SIDM_LAHIRI",
    "fagan_bradley": "SIDM_FAGAN_BRADLEY",
    "de_luce": "SIDM_DELUCE",
    "raman": "SIDM_RAMAN",
    "krishnamurti": "SIDM_KRISHNAMURTI",
    "yukteshwar": "SIDM_YUKTESHWAR",
    "djwhal_khul": "SIDM_DJWHAL_KHUL",
    "true_citra": "SIDM_TRUE_CITRA",
    "true_revati": "SIDM_TRUE_REVATI",
    "aryabhata": "SIDM_ARYABHATA",
    "aryabhata_mean_sun": "SIDM_ARYABHATA_MSUN",
}

VALID_AYANAMSAS: Final[tuple[str, ...]] = tuple(AYANAMSA_SWISS_ATTRS)


def normalize_ayanamsa_name(value: str) -> str:
    """Return a canonical key for the provided ayanamsa name."""

    return value.strip().lower().replace("-", "_").replace("/", "_").replace(" ", "_")
