#!/usr/bin/env python3
"""
mixflow command-line interface.

Commands:
    mixflow build <export.xml>      Order a collection or playlist into sets
    mixflow playlists <export.xml>  List the playlist tree
    mixflow matches <export.xml>    Best next tracks for one track
    mixflow groups <export.xml>     Mixable groups (BPM band + key neighborhood)

Pass --sample instead of a path to use the built-in demo collection.
"""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .collection import (
    SAMPLE_XML,
    CollectionError,
    ParsedCollection,
    collection_stats,
    find_playlist,
    iter_playlists,
    load_collection,
    parse_collection,
    resolve_playlist_tracks,
)
from .config import Config, ConfigError
from .analyze.camelot import Strictness
from .generate.cache import ScoreCache
from .generate.matches import best_matches, mixable_groups
from .generate.playlist import (
    export_filename,
    variant_to_csv,
    variant_to_dict,
    variant_to_m3u,
    write_csv,
    write_m3u,
    write_transitions,
)
from .generate.scoring import ScoringParams
from .generate.selector import SetSequencer, SetVariant

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mixflow", description="Harmonic set ordering for DJ library exports")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", help="Path to mixflow.toml")

    source = argparse.ArgumentParser(add_help=False)
    source.add_argument("xml", nargs="?", help="Library XML export")
    source.add_argument("--sample", action="store_true", help="Use the built-in sample collection")
    source.add_argument("--playlist", help="Playlist name or folder path (default: whole collection)")

    scoring = argparse.ArgumentParser(add_help=False)
    scoring.add_argument("--strictness", choices=[s.value for s in Strictness])
    scoring.add_argument("--key-weight", type=float)
    scoring.add_argument("--bpm-tolerance", type=float)
    scoring.add_argument("--no-half-double", action="store_true", help="Disable half/double-time matching")

    commands = parser.add_subparsers(dest="command", required=True)

    build = commands.add_parser("build", parents=[source, scoring], help="Generate set variants")
    build.add_argument("--variant", type=int, choices=[1, 2, 3], help="Variant to export (default: 2)")
    build.add_argument("--format", choices=["table", "csv", "m3u", "json"], default="table")
    build.add_argument("--output", help="Write export to this file instead of stdout")
    build.add_argument("--output-dir", help="Write export into this directory, named after the variant")

    commands.add_parser("playlists", parents=[source], help="List playlists")

    matches = commands.add_parser("matches", parents=[source, scoring], help="Best matches for a track")
    matches.add_argument("--track", required=True, help="Track title (case-insensitive substring)")

    commands.add_parser("groups", parents=[source, scoring], help="Mixable groups")

    return parser


def _scoring_params(config: Config, args: argparse.Namespace) -> ScoringParams:
    """Config params with CLI overrides; always a new object."""
    params = config.scoring_params()
    overrides = {}
    if getattr(args, "strictness", None):
        overrides["strictness"] = Strictness(args.strictness)
    for name in ("key_weight", "bpm_tolerance"):
        value = getattr(args, name, None)
        if value is not None:
            Config.check_param("scoring", name, value)
            overrides[name] = value
    if getattr(args, "no_half_double", False):
        overrides["half_double_enabled"] = False
    return dataclasses.replace(params, **overrides) if overrides else params


def _load_source(args: argparse.Namespace) -> ParsedCollection:
    if args.sample:
        return parse_collection(SAMPLE_XML)
    if not args.xml:
        raise CollectionError("No library XML given (pass a path or --sample)")
    return load_collection(args.xml)


def _select_tracks(collection: ParsedCollection, playlist_name: Optional[str]) -> Optional[List]:
    if not playlist_name:
        return collection.all_tracks

    playlist = find_playlist(collection.playlists, playlist_name)
    if playlist is None:
        logger.error(f"Playlist not found: {playlist_name}")
        return None
    return resolve_playlist_tracks(playlist, collection.track_by_source_id)


def _format_variant(variant: SetVariant) -> str:
    lines = [f"== {variant.label} (mean score {variant.total_score:.2f})"]
    for index, track in enumerate(variant.tracks):
        lines.append(f"{index + 1:>3}. [{track.camelot:>3} {track.bpm:6.1f}] {track.artist} - {track.title}")
        if index < len(variant.transitions):
            transition = variant.transitions[index]
            lines.append(f"       ↓ {transition.total_score:.2f}  {transition.explanation}")
    return "\n".join(lines)


def _cmd_build(args, config, params, tracks) -> int:
    sequencer = SetSequencer(
        params,
        ScoreCache(params),
        seed_sample_size=config.get("sequencing", "seed_sample_size"),
        lookahead_sample_size=config.get("sequencing", "lookahead_sample_size"),
    )
    variants = sequencer.generate_variants(tracks)
    if not variants:
        logger.error("Not enough tracks with both BPM and key to build a set (need at least 2)")
        return 1

    if args.format == "table":
        selected = [variants[args.variant - 1]] if args.variant else variants
        print("\n\n".join(_format_variant(v) for v in selected))
        return 0

    variant = variants[(args.variant or 2) - 1]
    output = args.output
    if output is None and args.output_dir:
        output = Path(args.output_dir) / export_filename(variant, args.format)
    if output:
        writers = {"csv": write_csv, "m3u": write_m3u, "json": write_transitions}
        return 0 if writers[args.format](variant, output) else 1

    renderers = {
        "csv": variant_to_csv,
        "m3u": variant_to_m3u,
        "json": lambda v: json.dumps(variant_to_dict(v), indent=2),
    }
    print(renderers[args.format](variant))
    return 0


def _cmd_playlists(collection: ParsedCollection) -> int:
    if not collection.has_playlists:
        print("No playlists in this collection")
        return 0
    for path, playlist in iter_playlists(collection.playlists):
        tracks = resolve_playlist_tracks(playlist, collection.track_by_source_id)
        complete = sum(1 for t in tracks if t.is_complete)
        print(f"{'/'.join(path + (playlist.name,))}  ({len(tracks)} tracks, {complete} complete)")
    return 0


def _cmd_matches(args, config, params, tracks) -> int:
    query = args.track.lower()
    track = next((t for t in tracks if query in t.title.lower()), None)
    if track is None:
        logger.error(f"No track matching {args.track!r}")
        return 1
    if not track.is_complete:
        logger.error(f"{track.title!r} has no BPM or key; cannot score matches")
        return 1

    by_id = {t.id: t for t in tracks}
    matches = best_matches(track, tracks, ScoreCache(params), limit=config.get("matches", "limit"))
    print(f"Best matches for {track.artist} - {track.title} [{track.camelot} {track.bpm:.1f}]")
    for insight in matches:
        other = by_id[insight.to_id]
        print(f"  {insight.total_score * 100:3.0f}  {other.artist} - {other.title}  ({insight.explanation})")
    return 0


def _cmd_groups(args, config, params, tracks) -> int:
    groups = mixable_groups(tracks, params.strictness, bpm_band=config.get("matches", "bpm_band"))
    if not groups:
        print("No mixable groups found")
        return 0
    for group in groups:
        print(f"{group.label}  ({len(group.tracks)} tracks)")
        for track in group.tracks:
            print(f"    [{track.camelot:>3} {track.bpm:6.1f}] {track.artist} - {track.title}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        config = Config.load(args.config)
        collection = _load_source(args)

        if args.command == "playlists":
            return _cmd_playlists(collection)

        tracks = _select_tracks(collection, args.playlist)
        if tracks is None:
            return 1

        stats = collection_stats(tracks)
        logger.info(
            f"🎵 {stats['total']} tracks ({stats['complete']} complete, "
            f"{stats['missing_bpm']} missing BPM, {stats['missing_key']} missing key)"
        )

        params = _scoring_params(config, args)
        handlers = {"build": _cmd_build, "matches": _cmd_matches, "groups": _cmd_groups}
        return handlers[args.command](args, config, params, tracks)

    except (ConfigError, CollectionError) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"mixflow failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
