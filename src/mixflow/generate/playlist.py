"""
Set Export: render a SetVariant as CSV, M3U or a JSON transition plan.

Renderers return strings; write_* helpers put them on disk and return
False (after logging) when the file cannot be written.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

from .selector import SetVariant

logger = logging.getLogger(__name__)

CSV_HEADER = ("Title", "Artist", "BPM", "Camelot", "OriginalKey")


def export_filename(variant: SetVariant, extension: str) -> str:
    """File name for a variant export, e.g. "Balanced_Flow.m3u"."""
    return f"{variant.label.replace(' ', '_')}.{extension.lstrip('.')}"


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def variant_to_csv(variant: SetVariant) -> str:
    """
    Render a variant as CSV (one row per track, in set order).

    Title and artist are always quoted; BPM has one decimal.
    """
    rows = [",".join(CSV_HEADER)]
    for track in variant.tracks:
        rows.append(
            ",".join(
                [
                    _quote(track.title),
                    _quote(track.artist),
                    f"{track.bpm:.1f}" if track.bpm is not None else "",
                    track.camelot or "",
                    track.raw_key or "",
                ]
            )
        )
    return "\n".join(rows)


def variant_to_m3u(variant: SetVariant) -> str:
    """Render a variant as an extended M3U playlist."""
    lines = ["#EXTM3U"]
    for track in variant.tracks:
        lines.append(f"#EXTINF:{round((track.bpm or 0) * 60)},{track.artist} - {track.title}")
        lines.append(f"{track.title}.mp3")
    return "\n".join(lines)


def variant_to_dict(variant: SetVariant) -> Dict[str, Any]:
    """Convert a variant to a JSON-serializable transition plan."""
    return {
        "label": variant.label,
        "total_score": round(variant.total_score, 4),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "tracks": [
            {
                "position": index,
                "id": track.id,
                "title": track.title,
                "artist": track.artist,
                "bpm": track.bpm,
                "camelot": track.camelot,
                "key": track.pretty_key,
            }
            for index, track in enumerate(variant.tracks)
        ],
        "transitions": [
            {
                "from_id": t.from_id,
                "to_id": t.to_id,
                "key_relation": t.key_relation,
                "bpm_mode": t.bpm_mode,
                "bpm_delta": round(t.bpm_delta, 2),
                "key_score": t.key_score,
                "bpm_score": t.bpm_score,
                "total_score": round(t.total_score, 4),
                "explanation": t.explanation,
            }
            for t in variant.transitions
        ],
    }


def _write_text(text: str, output_path: Union[str, Path], kind: str) -> bool:
    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
        logger.info(f"Wrote {kind}: {output_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to write {kind}: {e}")
        return False


def write_m3u(variant: SetVariant, output_path: Union[str, Path]) -> bool:
    """
    Write a variant as an M3U playlist file.

    Args:
        variant: SetVariant to export
        output_path: Output M3U file path

    Returns:
        True if successful, False otherwise
    """
    return _write_text(variant_to_m3u(variant), output_path, "playlist")


def write_csv(variant: SetVariant, output_path: Union[str, Path]) -> bool:
    """Write a variant as CSV. Returns True if successful."""
    return _write_text(variant_to_csv(variant), output_path, "CSV")


def write_transitions(variant: SetVariant, output_path: Union[str, Path]) -> bool:
    """
    Write a variant's transition plan as JSON.

    Args:
        variant: SetVariant to export
        output_path: Output JSON file path

    Returns:
        True if successful, False otherwise
    """
    return _write_text(json.dumps(variant_to_dict(variant), indent=2), output_path, "transitions")
