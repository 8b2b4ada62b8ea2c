"""
DJ Library Ingestion: parse a library XML export into tracks + playlist tree.

Document shape (rekordbox-style):
- DJ_PLAYLISTS/COLLECTION/TRACK  : one attribute record per track
- DJ_PLAYLISTS/PLAYLISTS/NODE    : nested tree; Type="0" folder, Type="1" playlist
- Playlist NODE/TRACK Key="..."  : reference to a collection TrackID

Element and attribute names are matched case-insensitively. Missing, blank,
"NA" and "None" attribute values are treated as absent.
"""

import hashlib
import logging
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .analyze.key import EMPTY_KEY_VALUES, normalize_key

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_ARTIST = "Unknown Artist"

# Semantic field -> accepted attribute names (case-insensitive)
FIELD_ALIASES = {
    "source_id": ("TrackID",),
    "title": ("Name", "Title"),
    "artist": ("Artist",),
    "bpm": ("AverageBpm", "BPM"),
    "key": ("Tonality", "Key"),
}

FOLDER_TYPE = "0"
PLAYLIST_TYPE = "1"


class CollectionError(Exception):
    """Raised when a library export cannot be read or parsed."""
    pass


@dataclass(frozen=True)
class Track:
    """Immutable track record built once during ingestion."""

    id: str
    title: str
    artist: str
    bpm: Optional[float]
    raw_key: Optional[str]
    canonical_key: Optional[str]
    camelot: Optional[str]  # Camelot notation (1A-12B) or None
    pretty_key: str = ""

    @property
    def is_complete(self) -> bool:
        """True iff both tempo and Camelot key are known."""
        return self.bpm is not None and self.camelot is not None


@dataclass(frozen=True)
class Playlist:
    """Leaf playlist: ordered references to collection TrackIDs."""

    id: str
    name: str
    track_refs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlaylistFolder:
    """Folder node holding child folders and playlists."""

    id: str
    name: str
    children: Tuple["PlaylistNode", ...] = ()


PlaylistNode = Union[PlaylistFolder, Playlist]


@dataclass
class ParsedCollection:
    """Everything read from one library export."""

    all_tracks: List[Track] = field(default_factory=list)
    track_by_source_id: Dict[str, Track] = field(default_factory=dict)
    playlists: List[PlaylistNode] = field(default_factory=list)

    @property
    def has_playlists(self) -> bool:
        return count_playlists(self.playlists) > 0


def _hash_id(text: str) -> str:
    """Deterministic short ID for a string."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def _attrs_lower(element: ET.Element) -> Dict[str, str]:
    return {name.lower(): value for name, value in element.attrib.items()}


def get_field(attrs: Dict[str, str], field_name: str) -> str:
    """
    Resolve a semantic field from a lowercased attribute dict.

    Args:
        attrs: Attribute dict with lowercased names
        field_name: Key of FIELD_ALIASES

    Returns:
        First non-empty value among the field's aliases, or "" if absent
    """
    for alias in FIELD_ALIASES[field_name]:
        value = (attrs.get(alias.lower()) or "").strip()
        if value and value not in EMPTY_KEY_VALUES:
            return value
    return ""


def parse_bpm(raw: str) -> Optional[float]:
    """Parse a tempo string; None unless it is a positive finite number."""
    if not raw:
        return None
    try:
        bpm = float(raw)
    except ValueError:
        logger.warning(f"Unparsable BPM value: {raw!r}")
        return None
    if math.isnan(bpm) or math.isinf(bpm) or bpm <= 0:
        logger.warning(f"Invalid BPM value: {raw!r}")
        return None
    return bpm


def build_track(attrs: Dict[str, str]) -> Track:
    """
    Build a Track from a lowercased attribute dict.

    The track ID is derived from (title, artist, raw bpm, raw key) so the
    same metadata always yields the same ID.
    """
    title = get_field(attrs, "title") or UNKNOWN_TITLE
    artist = get_field(attrs, "artist") or UNKNOWN_ARTIST
    bpm_raw = get_field(attrs, "bpm")
    raw_key = get_field(attrs, "key") or None

    normalized = normalize_key(raw_key)

    return Track(
        id=_hash_id(f"{title}|{artist}|{bpm_raw}|{raw_key or ''}"),
        title=title,
        artist=artist,
        bpm=parse_bpm(bpm_raw),
        raw_key=raw_key,
        canonical_key=normalized.canonical_key or None,
        camelot=normalized.camelot,
        pretty_key=normalized.pretty_key,
    )


def _children(element: ET.Element, tag: str) -> List[ET.Element]:
    """Direct children with a given tag, case-insensitive."""
    return [child for child in element if child.tag.upper() == tag]


def _first_child(element: ET.Element, tag: str) -> Optional[ET.Element]:
    matches = _children(element, tag)
    return matches[0] if matches else None


def _parse_playlist_node(element: ET.Element, depth: int = 0) -> PlaylistNode:
    """Recursively convert a NODE element into a PlaylistFolder or Playlist."""
    attrs = _attrs_lower(element)
    name = attrs.get("name") or "Untitled"
    node_type = attrs.get("type") or FOLDER_TYPE
    node_id = _hash_id(f"{name}|{depth}|{node_type}")

    if node_type == FOLDER_TYPE:
        children = tuple(_parse_playlist_node(child, depth + 1) for child in _children(element, "NODE"))
        return PlaylistFolder(id=node_id, name=name, children=children)

    refs = []
    for track_el in _children(element, "TRACK"):
        ref = _attrs_lower(track_el).get("key", "").strip()
        if ref:
            refs.append(ref)
    return Playlist(id=node_id, name=name, track_refs=tuple(refs))


def parse_collection(xml_text: Union[str, bytes]) -> ParsedCollection:
    """
    Parse a library XML export.

    Args:
        xml_text: XML document as str or bytes

    Returns:
        ParsedCollection with tracks, TrackID lookup and playlist tree

    Raises:
        CollectionError: If the document is not well-formed XML
    """
    if isinstance(xml_text, str):
        xml_text = xml_text.encode("utf-8")

    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise CollectionError(f"Failed to parse library XML: {e}")

    parsed = ParsedCollection()

    collection = _first_child(root, "COLLECTION")
    if collection is not None:
        for track_el in _children(collection, "TRACK"):
            attrs = _attrs_lower(track_el)
            track = build_track(attrs)
            parsed.all_tracks.append(track)
            source_id = get_field(attrs, "source_id")
            if source_id:
                parsed.track_by_source_id[source_id] = track
    else:
        logger.warning("No COLLECTION element found in library XML")

    playlists_root = _first_child(root, "PLAYLISTS")
    if playlists_root is not None:
        parsed.playlists = [_parse_playlist_node(node) for node in _children(playlists_root, "NODE")]

    complete = sum(1 for t in parsed.all_tracks if t.is_complete)
    logger.info(
        f"✅ Parsed collection: {len(parsed.all_tracks)} tracks ({complete} complete), "
        f"{count_playlists(parsed.playlists)} playlists"
    )
    return parsed


def load_collection(path: Union[str, Path]) -> ParsedCollection:
    """
    Load and parse a library XML export from disk.

    Raises:
        CollectionError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise CollectionError(f"Failed to read library XML {path}: {e}")

    logger.info(f"Loading collection from {path}")
    return parse_collection(data)


def count_playlists(nodes: List[PlaylistNode]) -> int:
    """Count leaf playlists in a tree."""
    count = 0
    for node in nodes:
        if isinstance(node, Playlist):
            count += 1
        else:
            count += count_playlists(list(node.children))
    return count


def iter_playlists(
    nodes: List[PlaylistNode], path: Tuple[str, ...] = ()
) -> Iterator[Tuple[Tuple[str, ...], Playlist]]:
    """
    Walk a playlist tree depth-first.

    Yields:
        (folder path names, Playlist) for every leaf playlist
    """
    for node in nodes:
        if isinstance(node, Playlist):
            yield path, node
        else:
            yield from iter_playlists(list(node.children), path + (node.name,))


def find_playlist(nodes: List[PlaylistNode], name: str) -> Optional[Playlist]:
    """
    Find a playlist by name or by "/"-joined path (e.g. "ROOT/Sets/Warmup").

    Returns the first depth-first match, or None.
    """
    for path, playlist in iter_playlists(nodes):
        if playlist.name == name or "/".join(path + (playlist.name,)) == name:
            return playlist
    return None


def resolve_playlist_tracks(playlist: Playlist, track_by_source_id: Dict[str, Track]) -> List[Track]:
    """
    Resolve a playlist's references against the collection.

    References with no matching collection track are dropped.
    """
    tracks = [track_by_source_id[ref] for ref in playlist.track_refs if ref in track_by_source_id]

    missing = len(playlist.track_refs) - len(tracks)
    if missing:
        logger.debug(f"Playlist {playlist.name!r}: dropped {missing} unknown track references")
    return tracks


def collection_stats(tracks: List[Track]) -> Dict[str, int]:
    """Counts for a track list: total, complete, missing BPM, missing key."""
    return {
        "total": len(tracks),
        "complete": sum(1 for t in tracks if t.is_complete),
        "missing_bpm": sum(1 for t in tracks if t.bpm is None),
        "missing_key": sum(1 for t in tracks if t.camelot is None),
    }


SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<DJ_PLAYLISTS Version="1.0.0">
  <COLLECTION Entries="8">
    <TRACK TrackID="1" Name="Windowlicker" Artist="Aphex Twin" AverageBpm="92.00" Tonality="F#m" />
    <TRACK TrackID="2" Name="Szamar Madar" Artist="Venetian Snares" AverageBpm="174.00" Tonality="Dm" />
    <TRACK TrackID="3" Name="Dead Cities" Artist="The Future Sound of London" AverageBpm="98.00" Tonality="Cm" />
    <TRACK TrackID="4" Name="Theme From Q" Artist="Actress" AverageBpm="124.00" Tonality="Gm" />
    <TRACK TrackID="5" Name="Untitled 7" Artist="Burial" AverageBpm="140.00" Tonality="Bbm" />
    <TRACK TrackID="6" Name="Infolepsy" Artist="Clark" AverageBpm="128.00" Tonality="Em" />
    <TRACK TrackID="7" Name="Cascades" Artist="Objekt" AverageBpm="132.00" Tonality="Am" />
    <TRACK TrackID="8" Name="No Key Track" Artist="Andy Stott" AverageBpm="118.00" Tonality="" />
  </COLLECTION>
  <PLAYLISTS>
    <NODE Type="0" Name="ROOT" Count="2">
      <NODE Type="0" Name="Sets" Count="2">
        <NODE Type="1" Name="Late Night Warehouse" KeyType="0" Entries="4">
          <TRACK Key="1" />
          <TRACK Key="6" />
          <TRACK Key="7" />
          <TRACK Key="4" />
        </NODE>
        <NODE Type="1" Name="Ambient Excursions" KeyType="0" Entries="3">
          <TRACK Key="3" />
          <TRACK Key="5" />
          <TRACK Key="8" />
        </NODE>
      </NODE>
      <NODE Type="1" Name="All Tracks" KeyType="0" Entries="8">
        <TRACK Key="1" /><TRACK Key="2" /><TRACK Key="3" /><TRACK Key="4" />
        <TRACK Key="5" /><TRACK Key="6" /><TRACK Key="7" /><TRACK Key="8" />
      </NODE>
    </NODE>
  </PLAYLISTS>
</DJ_PLAYLISTS>
"""
