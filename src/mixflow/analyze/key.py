"""
Key Normalization: map free-text key metadata to Camelot notation.

Accepts what DJ software writes into the key/tonality field:
- Camelot keys ("8A", "12b")
- Musical keys ("A minor", "Am", "C# Major", "Ebm", "B♭ min")
- Sentinels for "no key" ("", "NA", "None")

Output: canonical "TONIC MODE" string, Camelot key (1A..12B) and a short
human-readable rendering. Flats are folded into their sharp enharmonic.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional

from .camelot import is_camelot_key

logger = logging.getLogger(__name__)

MAJOR = "MAJOR"
MINOR = "MINOR"

EMPTY_KEY_VALUES = ("NA", "None")

# Flat tonic -> sharp enharmonic (uppercased, as produced by the tonic parser)
ENHARMONICS = {
    "DB": "C#",
    "EB": "D#",
    "GB": "F#",
    "AB": "G#",
    "BB": "A#",
}


@dataclass(frozen=True)
class KeyInfo:
    """Musical key at one wheel position."""

    tonic: str
    mode: str
    pretty: str


# Authoritative Camelot -> musical key mapping (sharps only)
CAMELOT_TO_KEY: Dict[str, KeyInfo] = {
    # Minor (A ring)
    "1A": KeyInfo("G#", MINOR, "G#m / Abm"),
    "2A": KeyInfo("D#", MINOR, "D#m / Ebm"),
    "3A": KeyInfo("A#", MINOR, "A#m / Bbm"),
    "4A": KeyInfo("F", MINOR, "Fm"),
    "5A": KeyInfo("C", MINOR, "Cm"),
    "6A": KeyInfo("G", MINOR, "Gm"),
    "7A": KeyInfo("D", MINOR, "Dm"),
    "8A": KeyInfo("A", MINOR, "Am"),
    "9A": KeyInfo("E", MINOR, "Em"),
    "10A": KeyInfo("B", MINOR, "Bm"),
    "11A": KeyInfo("F#", MINOR, "F#m / Gbm"),
    "12A": KeyInfo("C#", MINOR, "C#m / Dbm"),
    # Major (B ring)
    "1B": KeyInfo("B", MAJOR, "B"),
    "2B": KeyInfo("F#", MAJOR, "F# / Gb"),
    "3B": KeyInfo("C#", MAJOR, "C# / Db"),
    "4B": KeyInfo("G#", MAJOR, "G# / Ab"),
    "5B": KeyInfo("D#", MAJOR, "D# / Eb"),
    "6B": KeyInfo("A#", MAJOR, "A# / Bb"),
    "7B": KeyInfo("F", MAJOR, "F"),
    "8B": KeyInfo("C", MAJOR, "C"),
    "9B": KeyInfo("G", MAJOR, "G"),
    "10B": KeyInfo("D", MAJOR, "D"),
    "11B": KeyInfo("A", MAJOR, "A"),
    "12B": KeyInfo("E", MAJOR, "E"),
}

# "TONIC MODE" -> Camelot
KEY_TO_CAMELOT: Dict[str, str] = {
    f"{info.tonic} {info.mode}": camelot for camelot, info in CAMELOT_TO_KEY.items()
}

_MINOR_WORD = re.compile(r"MINOR|MIN\b")
_MAJOR_WORD = re.compile(r"MAJOR|MAJ\b")
_MODE_WORDS = re.compile(r"\s*(major|maj|minor|min)\s*", re.IGNORECASE)
_BARE_MINOR = re.compile(r"^[A-G][#b]?[Mm]$")
_TONIC = re.compile(r"^([A-Ga-g][#b]?)")


@dataclass(frozen=True)
class NormalizedKey:
    """Result of key normalization. Empty strings / None mean "unknown key"."""

    canonical_key: str
    camelot: Optional[str]
    pretty_key: str


UNKNOWN_KEY = NormalizedKey(canonical_key="", camelot=None, pretty_key="")


def pretty_key_of(camelot: str) -> str:
    """
    Human-readable rendering of a Camelot key (e.g., "8A" -> "Am").

    Returns an empty string for anything that is not a wheel position.
    """
    info = CAMELOT_TO_KEY.get(camelot.upper()) if camelot else None
    return info.pretty if info else ""


def _detect_mode(text: str) -> str:
    """Detect MAJOR/MINOR from mode keywords or a trailing bare "m"."""
    upper = text.upper()
    if _MINOR_WORD.search(upper):
        return MINOR
    if _MAJOR_WORD.search(upper):
        return MAJOR

    # "Am", "C#m": strip mode words, then look at the bare token
    stripped = _MODE_WORDS.sub("", text).strip()
    if _BARE_MINOR.match(stripped) and not stripped.upper().endswith("MA"):
        return MINOR
    return MAJOR


def normalize_key(raw: Optional[str]) -> NormalizedKey:
    """
    Normalize a raw key string to Camelot notation.

    Args:
        raw: Key text from library metadata (or None)

    Returns:
        NormalizedKey. Unknown keys yield UNKNOWN_KEY; a parsed tonic with no
        wheel position yields camelot=None but keeps canonical/pretty strings.
    """
    if raw is None or raw.strip() == "" or raw.strip() in EMPTY_KEY_VALUES:
        return UNKNOWN_KEY

    text = raw.strip()

    if is_camelot_key(text):
        camelot = text.upper()
        return NormalizedKey(canonical_key=camelot, camelot=camelot, pretty_key=camelot)

    text = text.replace("♭", "b").replace("♯", "#")
    mode = _detect_mode(text)

    tonic_match = _TONIC.match(text)
    if not tonic_match:
        logger.debug(f"No tonic in key text: {raw!r}")
        return UNKNOWN_KEY

    tonic = tonic_match.group(1).upper()
    tonic = ENHARMONICS.get(tonic, tonic)

    canonical_key = f"{tonic} {mode}"
    camelot = KEY_TO_CAMELOT.get(canonical_key)
    if camelot is None:
        logger.debug(f"Key {raw!r} ({canonical_key}) has no Camelot position")

    return NormalizedKey(
        canonical_key=canonical_key,
        camelot=camelot,
        pretty_key=f"{tonic}{'m' if mode == MINOR else ''}",
    )
