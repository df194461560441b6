"""
Best-effort wezterm.lua importer.

This is not a Lua parser. It recognizes a handful of idioms that
configuration files commonly use and ignores everything else:

- ``config.<key> = <literal>`` for known settings
- ``config.font = wezterm.font('Family')``
- ``config.window_padding = { left = 2, right = 2, top = 0, bottom = 0 }``
- ``config.default_prog`` / ``config.harfbuzz_features`` string lists
- ``config.keys = { { key = 'c', mods = 'CTRL', action = ... }, ... }``

Each idiom has its own extraction rule returning an optional result, and
the parser applies whatever the rules found to the settings store.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .mappings import ACTION_GROUPS, DIRECTIONAL_ACTIONS, build_mods, parse_mods
from .schema import SETTINGS_MAP

logger = logging.getLogger(__name__)

# Assignments handled by dedicated rules, never by the scalar rule.
STRUCTURAL_KEYS = frozenset({
    "font",
    "window_padding",
    "default_prog",
    "harfbuzz_features",
    "keys",
})

PADDING_SIDES = ("left", "right", "top", "bottom")

_SCALAR_RE = re.compile(r'^[ \t]*config\.(\w+)[ \t]*=[ \t]*(.+?)[ \t]*$', re.MULTILINE)
_NUMBER_RE = re.compile(r'^-?\d+(\.\d+)?$', re.ASCII)
_INT_RE = re.compile(r'^\d+$', re.ASCII)
_FONT_RE = re.compile(r'\bconfig\.font\s*=\s*wezterm\.font\s*\(\s*(\'[^\']*\'|"[^"]*")')
_ALIAS_RE = re.compile(r'\blocal\s+(\w+)\s*=\s*wezterm\.action[ \t]*;?[ \t\r]*$', re.MULTILINE)
_FIELD_RE = re.compile(r'^(\w+)\s*=\s*(.+)$', re.DOTALL)
_LONG_COMMENT_RE = re.compile(r"--\[(=*)\[")

_BARE_ACTION_RE = re.compile(r'^(\w+)$')
_STRING_ARG_RE = re.compile(r'^(\w+)\s*(\'[^\']*\'|"[^"]*")$')
_PAREN_STRING_ARG_RE = re.compile(r'^(\w+)\s*\(\s*(\'[^\']*\'|"[^"]*")\s*\)$')
_INT_ARG_RE = re.compile(r'^(\w+)\s*\(\s*(-?\d+)\s*\)$', re.ASCII)
_TABLE_ARG_RE = re.compile(r'^(\w+)\s*\{')

_LUA_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"'}

Triple = Tuple[str, str, str]


# ---------------------------------------------------------------------------
# Scanning helpers
# ---------------------------------------------------------------------------

def strip_comments(text: str) -> str:
    """
    Remove Lua comments, leaving string literals intact.

    Handles ``-- line`` comments and long ``--[[ block ]]`` comments at any
    level (``--[==[ ... ]==]``). Newlines after line comments are kept so
    line-anchored rules still see one statement per line.
    """
    out = []
    i, n = 0, len(text)
    quote = None
    while i < n:
        ch = text[i]
        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == quote or ch == "\n":
                quote = None
            i += 1
            continue
        if ch in ("'", '"'):
            quote = ch
            out.append(ch)
            i += 1
            continue
        if text.startswith("--", i):
            long_comment = _LONG_COMMENT_RE.match(text, i)
            if long_comment:
                closing = "]" + long_comment.group(1) + "]"
                end = text.find(closing, long_comment.end())
                i = n if end == -1 else end + len(closing)
            else:
                end = text.find("\n", i)
                i = n if end == -1 else end
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the string literal starting at ``i``."""
    quote = text[i]
    i += 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or ch == "\n":
            return i + 1
        i += 1
    return i


def match_brace(text: str, start: int) -> int:
    """
    Find the brace closing the one at ``start``.

    Returns:
        Index of the matching ``}``, or -1 if the table never closes
    """
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch in ("'", '"'):
            i = _skip_string(text, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def split_top_level(body: str) -> List[str]:
    """Split a table body on ``,``/``;`` that are not nested or quoted."""
    items = []
    depth = 0
    current_start = 0
    i = 0
    while i < len(body):
        ch = body[i]
        if ch in ("'", '"'):
            i = _skip_string(body, i)
            continue
        if ch in "{([":
            depth += 1
        elif ch in "})]":
            depth -= 1
        elif ch in ",;" and depth == 0:
            items.append(body[current_start:i])
            current_start = i + 1
        i += 1
    items.append(body[current_start:])
    return [item.strip() for item in items if item.strip()]


def find_table(text: str, key: str) -> Optional[str]:
    """
    Body of the last ``config.<key> = { ... }`` table in the text.

    Returns:
        Text between the braces, or None if no complete table is found
    """
    body = None
    for match in re.finditer(rf'\bconfig\.{re.escape(key)}\s*=\s*\{{', text):
        open_index = match.end() - 1
        close_index = match_brace(text, open_index)
        if close_index == -1:
            logger.debug(f"Unterminated table for config.{key}")
            continue
        body = text[open_index + 1:close_index]
    return body


def unquote(expr: str) -> Optional[str]:
    """
    Decode a single- or double-quoted Lua string literal.

    Returns:
        The string value, or None if ``expr`` is not exactly one literal
    """
    expr = expr.strip()
    if len(expr) < 2 or expr[0] not in ("'", '"') or expr[-1] != expr[0]:
        return None
    quote = expr[0]
    body = expr[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            out.append(_LUA_ESCAPES.get(body[i + 1], body[i + 1]))
            i += 2
            continue
        if ch == quote:
            return None
        out.append(ch)
        i += 1
    return "".join(out)


def parse_fields(record: str) -> Dict[str, str]:
    """Split a record body into ``name -> raw expression``."""
    fields = {}
    for item in split_top_level(record):
        match = _FIELD_RE.match(item)
        if match:
            fields[match.group(1)] = match.group(2).strip()
    return fields


def parse_lua_value(raw: str) -> Optional[str]:
    """
    Convert a scalar Lua literal to the store's string form.

    Recognizes booleans, integer/decimal numbers and quoted strings;
    a trailing comma or semicolon is ignored.
    """
    s = re.sub(r'[,;]\s*$', '', raw.strip()).strip()
    if s in ("true", "false"):
        return s
    if _NUMBER_RE.match(s):
        return s
    return unquote(s)


def _normalize_expr(expr: str) -> str:
    """Drop whitespace outside strings and use single quotes throughout."""
    out = []
    quote = None
    for ch in expr:
        if quote:
            if ch == quote:
                out.append("'")
                quote = None
            else:
                out.append(ch)
        elif ch in ("'", '"'):
            quote = ch
            out.append("'")
        elif not ch.isspace():
            out.append(ch)
    return "".join(out)


_TEMPLATE_TO_ACTION = {
    _normalize_expr(action.lua): action.value
    for group in ACTION_GROUPS
    for action in group.actions
}


def find_action_aliases(text: str) -> List[str]:
    """Names bound by ``local act = wezterm.action``."""
    return _ALIAS_RE.findall(text)


def identify_action(expr: str, aliases: Tuple[str, ...] = ()) -> str:
    """
    Map a Lua action expression back to an action value.

    Returns:
        Action value, or "" when the expression is not recognized
    """
    expr = expr.strip()
    rest = None
    for prefix in ("wezterm.action.",) + tuple(f"{alias}." for alias in aliases):
        if expr.startswith(prefix):
            rest = expr[len(prefix):].strip()
            break
    if rest is None:
        return ""

    known = _TEMPLATE_TO_ACTION.get(_normalize_expr("wezterm.action." + rest))
    if known:
        return known

    match = _BARE_ACTION_RE.match(rest)
    if match:
        return match.group(1)

    match = _STRING_ARG_RE.match(rest) or _PAREN_STRING_ARG_RE.match(rest)
    if match:
        name, arg = match.group(1), unquote(match.group(2))
        if name in DIRECTIONAL_ACTIONS and arg:
            return f"{name}-{arg}"
        return name

    match = _INT_ARG_RE.match(rest)
    if match:
        return f"{match.group(1)}-{match.group(2)}"

    match = _TABLE_ARG_RE.match(rest)
    if match:
        return match.group(1)

    return ""


# ---------------------------------------------------------------------------
# Extraction rules
# ---------------------------------------------------------------------------

def extract_scalars(text: str) -> Optional[List[Tuple[str, str]]]:
    """``config.<key> = <literal>`` for known, non-structural settings."""
    found = []
    for match in _SCALAR_RE.finditer(text):
        key, raw_value = match.group(1), match.group(2)
        if key in STRUCTURAL_KEYS or key not in SETTINGS_MAP:
            continue
        value = parse_lua_value(raw_value)
        if value is None:
            logger.debug(f"Skipping config.{key}: unsupported value {raw_value!r}")
            continue
        found.append((key, value))
    return found or None


def extract_font(text: str) -> Optional[str]:
    """Family name from ``config.font = wezterm.font('...')``."""
    matches = _FONT_RE.findall(text)
    if not matches:
        return None
    family = unquote(matches[-1])
    return family or None


def extract_window_padding(text: str) -> Optional[List[Tuple[str, str]]]:
    """Integer sides of ``config.window_padding``, as store keys."""
    body = find_table(text, "window_padding")
    if body is None:
        return None
    fields = parse_fields(body)
    found = []
    for side in PADDING_SIDES:
        raw = fields.get(side, "")
        if _INT_RE.match(raw):
            found.append((f"window_padding_{side}", raw))
    return found or None


def extract_string_list(text: str, key: str) -> Optional[List[str]]:
    """Quoted string items of ``config.<key> = { ... }``."""
    body = find_table(text, key)
    if body is None:
        return None
    items = []
    for item in split_top_level(body):
        value = unquote(item)
        if value is not None:
            items.append(value)
    return items or None


def extract_key_bindings(text: str) -> Optional[List[Triple]]:
    """Binding records of ``config.keys``, in order."""
    body = find_table(text, "keys")
    if body is None:
        return None
    aliases = tuple(find_action_aliases(text))
    bindings = []
    for item in split_top_level(body):
        if not (item.startswith("{") and item.endswith("}")):
            continue
        fields = parse_fields(item[1:-1])
        key = unquote(fields.get("key", "")) or ""
        mods = build_mods(parse_mods(unquote(fields.get("mods", "")) or ""))
        action = identify_action(fields.get("action", ""), aliases)
        if key and action:
            bindings.append((mods, key, action))
        else:
            logger.debug(f"Skipping unrecognized key binding {item!r}")
    return bindings or None


@dataclass
class ExtractedConfig:
    """Everything the rules recognized, in application order."""
    settings: List[Tuple[str, str]] = field(default_factory=list)
    mappings: List[Triple] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.settings) + len(self.mappings)


def extract_config(text: str) -> ExtractedConfig:
    """Run every extraction rule over ``text``."""
    result = ExtractedConfig()
    if not text:
        return result

    # Line-anchored rules expect \n line endings
    text = strip_comments(text.replace("\r\n", "\n"))

    result.settings.extend(extract_scalars(text) or [])

    family = extract_font(text)
    if family is not None:
        result.settings.append(("font_family", family))

    result.settings.extend(extract_window_padding(text) or [])

    prog = extract_string_list(text, "default_prog")
    if prog:
        result.settings.append(("default_prog", ",".join(prog)))

    features = extract_string_list(text, "harfbuzz_features")
    if features:
        result.settings.append(("harfbuzz_features", ", ".join(features)))

    result.mappings.extend(extract_key_bindings(text) or [])
    return result


class ConfigTextParser:
    """
    Applies an imported wezterm.lua to a settings store.

    The store is not reset first; settings are applied on top of the
    current state. If any key binding is recognized, the mapping list is
    replaced as a whole.
    """

    def __init__(self, store):
        self.store = store

    def parse(self, text: str) -> int:
        """
        Parse ``text`` and apply what was recognized.

        Returns:
            Number of settings and mappings applied (0 for unrecognized input)
        """
        try:
            extracted = extract_config(text or "")
        except Exception as e:
            logger.error(f"Failed to parse config text: {e}")
            return 0

        for key, value in extracted.settings:
            self.store.set(key, value)
        if extracted.mappings:
            self.store.replace_mappings(extracted.mappings)

        logger.info(
            f"Imported {len(extracted.settings)} settings and "
            f"{len(extracted.mappings)} key bindings"
        )
        return extracted.count


def parse_config(text: str, store) -> int:
    """Parse ``text`` into ``store``; see ``ConfigTextParser.parse``."""
    return ConfigTextParser(store).parse(text)
