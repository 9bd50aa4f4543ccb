"""Measurement keys per clothing type and their display labels."""
from __future__ import annotations

import unicodedata

# 界面按服装类型给出的测量项（键 -> 显示名）
MEASURE_LABELS: dict[str, str] = {
    "chest": "Poitrine",
    "sleeve": "Manche",
    "length": "Longueur",
    "waist": "Taille",
    "hip": "Hanche",
    "shoulders": "Épaules",
}

MEASURES_BY_TYPE: dict[str, list[str]] = {
    "chemise": ["chest", "sleeve", "length"],
    "pantalon": ["waist", "hip", "length"],
    "robe": ["chest", "waist", "hip", "length"],
    "veste": ["chest", "waist", "length", "shoulders"],
}


def _fold(s: str) -> str:
    s = unicodedata.normalize("NFKD", s.strip().lower())
    return "".join(ch for ch in s if not unicodedata.combining(ch))


_KEY_BY_DISPLAY = {_fold(v): k for k, v in MEASURE_LABELS.items()}


def display_label(label: str | None) -> str:
    """Resolve a normalized key to its label; free text is returned as-is."""
    if label is None:
        return ""
    return MEASURE_LABELS.get(_fold(label), label)


def measure_key(label: str) -> str | None:
    """Reverse lookup: ``"Épaules"`` / ``"epaules"`` / ``"shoulders"`` -> ``"shoulders"``."""
    folded = _fold(label)
    if folded in MEASURE_LABELS:
        return folded
    return _KEY_BY_DISPLAY.get(folded)


def measures_for(cloth_type: str) -> list[dict[str, str]]:
    keys = MEASURES_BY_TYPE.get(_fold(cloth_type), [])
    return [{"key": k, "label": MEASURE_LABELS[k]} for k in keys]
