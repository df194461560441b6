"""
Compact share encoding.

Turns the changed-from-default part of the editor state into a short,
URL-safe token and back:

    compact   := settings ("|" mappings)?
    settings  := (pair ("&" pair)*)?
    pair      := <sid> "=" <value>
    mappings  := JSON array of [mods, key, action]

The compact text is UTF-8 encoded, raw-deflated, base64 encoded and made
URL-safe (``+`` -> ``-``, ``/`` -> ``_``, no padding). Setting and action
ids come from the stable share-id tables, so tokens stay readable across
versions.
"""

import base64
import binascii
import json
import logging
import re
import zlib
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .mappings import ACTION_TO_ID, ID_TO_ACTION, KeyMapping
from .schema import SETTINGS_MAP, SID_TO_KEY

logger = logging.getLogger(__name__)

Triple = Tuple[str, str, str]

# Values escape the grammar delimiters "&" and "|". A "%" is escaped only
# where it would read as one of these escapes, so any value without "&", "|"
# or a literal "%25", "%26" or "%7C" is written byte-for-byte and stays
# readable by decoders that know nothing about escaping. Values that do
# carry them decode correctly only here.
_VALUE_ESCAPES = {"&": "%26", "|": "%7C"}
_PERCENT_BEFORE_ESCAPE_RE = re.compile(r"%(?=25|26|7[Cc])")
_ESCAPE_RE = re.compile(r"%(25|26|7[Cc])")
_UNESCAPES = {"25": "%", "26": "&", "7C": "|", "7c": "|"}


class CompactDecodeError(ValueError):
    """Raised when a token cannot be turned back into compact text."""
    pass


@dataclass(frozen=True)
class RecognizedAction:
    """Catalog action, written as its numeric id."""
    aid: int


@dataclass(frozen=True)
class RawAction:
    """Action outside the catalog, written verbatim."""
    name: str


ActionRef = Union[RecognizedAction, RawAction]


def action_ref(action: str) -> ActionRef:
    aid = ACTION_TO_ID.get(action)
    if aid is not None:
        return RecognizedAction(aid)
    return RawAction(action)


def action_name(ref: ActionRef) -> str:
    if isinstance(ref, RecognizedAction):
        return ID_TO_ACTION.get(ref.aid, str(ref.aid))
    return ref.name


@dataclass
class DecodedState:
    """
    State recovered from a share token.

    Attributes:
        settings: Setting key -> value, in the order found in the token
        mappings: (mods, key, action) triples, in order
    """
    settings: Dict[str, str] = field(default_factory=OrderedDict)
    mappings: List[Triple] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.settings and not self.mappings


def _escape_value(value: str) -> str:
    value = _PERCENT_BEFORE_ESCAPE_RE.sub("%25", value)
    for char, escaped in _VALUE_ESCAPES.items():
        value = value.replace(char, escaped)
    return value


def _unescape_value(value: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _UNESCAPES[m.group(1)], value)


def encode_compact(settings: Iterable[Tuple[str, str]], mappings: Sequence) -> str:
    """
    Build the compact text.

    Args:
        settings: (key, value) pairs, normally ``store.changed_entries()``
        mappings: KeyMapping objects or (mods, key, action) triples

    Returns:
        Compact text; empty when there is nothing to share
    """
    parts = []
    for key, value in settings:
        setting = SETTINGS_MAP.get(key)
        if setting is None:
            continue
        parts.append(f"{setting.sid}={_escape_value(value)}")
    result = "&".join(parts)

    if mappings:
        rows = []
        for mapping in mappings:
            mods, key, action = mapping.triple() if isinstance(mapping, KeyMapping) else mapping
            ref = action_ref(action)
            wire = ref.aid if isinstance(ref, RecognizedAction) else ref.name
            rows.append([mods, key, wire])
        result += "|" + json.dumps(rows, separators=(",", ":"), ensure_ascii=False)

    return result


def _js_string(value) -> str:
    """Stringify a JSON value the way JavaScript's String() does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _decode_action(value) -> str:
    if isinstance(value, bool):
        return _js_string(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return action_name(RecognizedAction(value))
    return _js_string(value)


def _decode_settings(text: str) -> Dict[str, str]:
    settings: Dict[str, str] = OrderedDict()
    if not text:
        return settings
    for part in text.split("&"):
        sid_text, sep, value = part.partition("=")
        if not sep:
            continue
        try:
            sid = int(sid_text)
        except ValueError:
            logger.debug(f"Skipping pair with non-numeric id: {part!r}")
            continue
        key = SID_TO_KEY.get(sid)
        if key is None:
            logger.debug(f"Skipping unknown share id {sid}")
            continue
        settings[key] = _unescape_value(value)
    return settings


def _decode_mappings(text: str) -> List[Triple]:
    try:
        rows = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Mapping array is not valid JSON: {e}")
        return []
    if not isinstance(rows, list):
        return []

    mappings: List[Triple] = []
    for row in rows:
        if not isinstance(row, list) or len(row) < 3:
            logger.debug(f"Malformed mapping entry {row!r}, dropping mapping list")
            return []
        mappings.append((_js_string(row[0]), _js_string(row[1]), _decode_action(row[2])))
    return mappings


def decode_compact(text: str) -> DecodedState:
    """
    Parse compact text.

    Unknown ids are dropped. A malformed mapping array yields no mappings
    but keeps the settings already parsed.
    """
    settings_part, sep, mappings_part = text.partition("|")
    state = DecodedState(settings=_decode_settings(settings_part))
    if sep:
        state.mappings = _decode_mappings(mappings_part)
    return state


def compress_text(text: str) -> str:
    """Raw-deflate and URL-safe base64 encode compact text."""
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -15)
    data = compressor.compress(text.encode("utf-8")) + compressor.flush()
    encoded = base64.b64encode(data).decode("ascii")
    return encoded.replace("+", "-").replace("/", "_").rstrip("=")


def decompress_token(token: str) -> str:
    """
    Reverse ``compress_text``.

    Raises:
        CompactDecodeError: If the token is not valid base64, raw deflate
            or UTF-8
    """
    b64 = token.strip().replace("-", "+").replace("_", "/")
    b64 += "=" * (-len(b64) % 4)
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CompactDecodeError(f"Invalid base64: {e}") from e

    decompressor = zlib.decompressobj(-15)
    try:
        raw = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as e:
        raise CompactDecodeError(f"Invalid deflate stream: {e}") from e
    if not decompressor.eof:
        raise CompactDecodeError("Truncated deflate stream")

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CompactDecodeError(f"Invalid UTF-8: {e}") from e


def encode_token(settings: Iterable[Tuple[str, str]], mappings: Sequence) -> str:
    """Compact text plus compression; empty when there is nothing to share."""
    compact = encode_compact(settings, mappings)
    if not compact:
        return ""
    return compress_text(compact)


def decode_token(token: str) -> Optional[DecodedState]:
    """
    Decode a share token.

    Returns:
        Decoded state, or None if the token cannot be decompressed
    """
    if not token:
        return None
    try:
        compact = decompress_token(token)
    except CompactDecodeError as e:
        logger.info(f"Ignoring undecodable share token: {e}")
        return None
    return decode_compact(compact)
