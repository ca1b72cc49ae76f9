"""Category colour palette and naming helpers."""

from __future__ import annotations

import random
from collections.abc import Iterable

CATEGORY_COLORS: dict[str, str] = {
    "red": "#e74c3c",
    "blue": "#3498db",
    "green": "#2ecc71",
    "orange": "#f39c12",
    "purple": "#9b59b6",
    "pink": "#e91e63",
    "teal": "#1abc9c",
    "yellow": "#f1c40f",
    "gray": "#95a5a6",
    "dark_blue": "#2c3e50",
}

FALLBACK_COLOR = CATEGORY_COLORS["gray"]

_COMMON_NAMES = (
    "Personal",
    "Work",
    "Shopping",
    "Health",
    "Fitness",
    "Learning",
    "Travel",
    "Finance",
    "Home",
    "Projects",
    "Goals",
    "Family",
)


def normalize_color(color: str | None) -> str:
    """Return the colour with a leading ``#``; empty input maps to gray."""

    if not color:
        return FALLBACK_COLOR
    return color if color.startswith("#") else f"#{color}"


def hex_to_rgb(color: str) -> tuple[int, int, int] | None:
    """Convert ``#rgb`` or ``#rrggbb`` to an RGB triple, ``None`` if malformed."""

    digits = color.removeprefix("#")
    if len(digits) == 3:
        digits = "".join(char * 2 for char in digits)
    if len(digits) != 6:
        return None
    try:
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        return None


def random_color(rng: random.Random | None = None) -> str:
    chooser = rng or random
    return chooser.choice(list(CATEGORY_COLORS.values()))


def next_available_color(used_colors: Iterable[str], rng: random.Random | None = None) -> str:
    """First palette colour not in use; a random one when all are taken."""

    used = {normalize_color(color).lower() for color in used_colors}
    for color in CATEGORY_COLORS.values():
        if color not in used:
            return color
    return random_color(rng)


def suggest_category_name(existing_names: Iterable[str]) -> str:
    """Suggest a common category name that is not taken yet.

    Falls back to ``Category N`` with the smallest free ``N``.
    """

    taken = {name.lower() for name in existing_names}
    for name in _COMMON_NAMES:
        if name.lower() not in taken:
            return name
    counter = 1
    while f"category {counter}" in taken:
        counter += 1
    return f"Category {counter}"
