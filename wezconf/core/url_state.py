"""
Shared-URL state handling.

Builds ``#c=<token>`` share links from the settings store and reconciles
an incoming link with the locally held state.
"""

import logging
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs

from .codec import DecodedState, decode_token, encode_token

logger = logging.getLogger(__name__)

FRAGMENT_PARAM = "c"


class LoadOutcome(str, Enum):
    """Result of loading state from a URL."""
    NONE = "none"
    APPLIED = "applied"
    CONFLICT = "conflict"


def extract_token(url: str) -> Optional[str]:
    """
    Read the share token from a URL fragment.

    Accepts a full URL (``https://host/#c=...``) or a bare fragment
    (``#c=...``).
    """
    if not url:
        return None
    fragment = url.partition("#")[2]
    if not fragment:
        return None
    values = parse_qs(fragment, keep_blank_values=True).get(FRAGMENT_PARAM)
    if not values or not values[0]:
        return None
    return values[0]


def strip_fragment(url: str) -> str:
    return url.split("#", 1)[0]


def build_share_url(store, base_url: str) -> str:
    """
    Build a share link for the store's current state.

    Returns:
        ``base#c=<token>``, or the bare base URL when nothing differs
        from the defaults
    """
    base = strip_fragment(base_url)
    token = encode_token(store.changed_entries(), store.mappings)
    if not token:
        return base
    return f"{base}#{FRAGMENT_PARAM}={token}"


def matches_store(store, decoded: DecodedState) -> bool:
    """
    Check whether the store already holds the decoded state.

    Every decoded setting must equal the current value, and the mapping
    lists must match position by position.
    """
    for key, value in decoded.settings.items():
        if store.get(key) != value:
            return False
    current = store.mappings
    if len(current) != len(decoded.mappings):
        return False
    return all(m.triple() == tuple(d) for m, d in zip(current, decoded.mappings))


class UrlStateResolver:
    """
    Loads shared state from a URL into the settings store.

    When the store already holds different local changes, the decoded
    state is kept as pending until the user accepts or dismisses it.
    Accepting replaces the local state entirely (defaults first), unlike
    importing a config file, which applies on top of the current state.
    """

    def __init__(self, store):
        self.store = store
        self.pending: Optional[DecodedState] = None
        self.source_url: str = ""

    @property
    def has_pending(self) -> bool:
        return self.pending is not None

    def load(self, url: str) -> LoadOutcome:
        """
        Decode the state embedded in ``url`` and reconcile it.

        Returns:
            NONE if the URL carries no usable state, APPLIED if the store now
            holds it, CONFLICT if a decision is needed (store untouched)
        """
        self.source_url = url or ""
        self.pending = None

        token = extract_token(url)
        if not token:
            return LoadOutcome.NONE

        decoded = decode_token(token)
        if decoded is None or decoded.is_empty():
            logger.info("Shared URL carried no usable state")
            return LoadOutcome.NONE

        if not self.store.has_local_changes():
            self.store.load_snapshot(decoded.settings, decoded.mappings, reset_first=False)
            logger.info(
                f"Applied shared state: {len(decoded.settings)} settings, "
                f"{len(decoded.mappings)} mappings"
            )
            return LoadOutcome.APPLIED

        if matches_store(self.store, decoded):
            logger.info("Shared state matches local state")
            return LoadOutcome.APPLIED

        self.pending = decoded
        logger.info("Shared state conflicts with local changes")
        return LoadOutcome.CONFLICT

    def accept_pending(self) -> bool:
        """
        Replace the local state with the pending shared state.

        Returns:
            False if nothing was pending
        """
        if self.pending is None:
            return False
        pending, self.pending = self.pending, None
        self.store.load_snapshot(pending.settings, pending.mappings, reset_first=True)
        logger.info("Accepted shared state")
        return True

    def dismiss_pending(self):
        """Keep the local state and forget the shared one."""
        self.pending = None
        self.source_url = strip_fragment(self.source_url)
        logger.info("Dismissed shared state")
