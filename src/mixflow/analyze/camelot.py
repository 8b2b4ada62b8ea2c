"""
Camelot Wheel Geometry: 24-key wheel model, distances and neighbors.

The wheel has 12 positions (1-12, circular so 12 and 1 are adjacent) and
two rings: A (minor) and B (major). Each number has exactly one
relative-mode partner (8A <-> 8B).
"""

import re
from enum import Enum
from typing import List, NamedTuple, Tuple

WHEEL_SIZE = 12

# Valid Camelot key: 1-12 followed by A or B
_CAMELOT_PATTERN = re.compile(r"^(1[0-2]|[1-9])([AB])$", re.IGNORECASE)

ALL_CAMELOT_KEYS: Tuple[str, ...] = tuple(
    f"{number}{letter}" for letter in ("A", "B") for number in range(1, WHEEL_SIZE + 1)
)


class Strictness(str, Enum):
    """How harshly non-harmonic key relations are treated."""

    STRICT = "Strict"
    NORMAL = "Normal"
    CREATIVE = "Creative"


class CamelotDistance(NamedTuple):
    """Distance between two wheel positions."""

    numeric_distance: int
    same_letter: bool


def is_camelot_key(value: str) -> bool:
    """Return True if value is one of the 24 wheel positions (case-insensitive)."""
    if not value:
        return False
    return _CAMELOT_PATTERN.match(value.strip()) is not None


def get_camelot_number(camelot: str) -> int:
    """
    Get wheel number of a Camelot key.

    Args:
        camelot: Camelot key (e.g., "8A")

    Returns:
        Number in 1..12
    """
    return int(camelot[:-1])


def get_camelot_letter(camelot: str) -> str:
    """Get ring letter ("A" or "B") of a Camelot key."""
    return camelot[-1].upper()


def _wrap(number: int) -> int:
    """Wrap a position to the 1-12 range."""
    return ((number - 1) % WHEEL_SIZE) + 1


def camelot_distance(a: str, b: str) -> CamelotDistance:
    """
    Compute the wheel distance between two Camelot keys.

    Numeric distance is the shorter way around the circle, so 12A -> 1A is 1.

    Args:
        a: First Camelot key
        b: Second Camelot key

    Returns:
        CamelotDistance(numeric_distance, same_letter)
    """
    diff = abs(get_camelot_number(a) - get_camelot_number(b))
    return CamelotDistance(
        numeric_distance=min(diff, WHEEL_SIZE - diff),
        same_letter=get_camelot_letter(a) == get_camelot_letter(b),
    )


def get_neighbors(camelot: str, strictness: Strictness = Strictness.NORMAL) -> List[str]:
    """
    List the keys considered mixable with a Camelot key.

    Neighbors are: the key itself, the two adjacent numbers on the same
    ring, the relative key on the other ring and, only in Creative mode,
    the two keys two steps away on the same ring.

    Args:
        camelot: Camelot key (e.g., "8A")
        strictness: Key strictness setting

    Returns:
        Deduplicated list of Camelot keys, the key itself first
    """
    number = get_camelot_number(camelot)
    letter = get_camelot_letter(camelot)
    other = "B" if letter == "A" else "A"

    neighbors = [
        f"{number}{letter}",
        f"{_wrap(number - 1)}{letter}",
        f"{_wrap(number + 1)}{letter}",
        f"{number}{other}",
    ]
    if Strictness(strictness) is Strictness.CREATIVE:
        neighbors.extend([f"{_wrap(number - 2)}{letter}", f"{_wrap(number + 2)}{letter}"])

    # dict preserves first-seen order
    return list(dict.fromkeys(neighbors))
