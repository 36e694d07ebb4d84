"""
Per-input autocomplete state machine.

A session consumes three things from its form field (the current value, an
`on_value_change` callback and an `on_address_resolved` callback) and knows
nothing about the record being edited. Every failure below this boundary is
turned into fallback results or an advisory; nothing is raised to the form.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from domain.models import (
    CanonicalAddress,
    PlaceDetail,
    PlaceSuggestion,
    PointerTarget,
    SessionState,
    SourceKind,
)
from services.address_normalizer import address_from_label, normalize_place_detail
from services.place_detail_cache import get_default_place_detail_cache
from services.provider_loader import get_default_provider_loader
from services.suggestion_sources import FallbackSource, RemoteSource, select_source_kind
from settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3
FALLBACK_ADVISORY = "Address provider unavailable - showing fallback results"
DETAIL_ADVISORY = "Address details unavailable - using the selected text"


def _noop(*_args) -> None:
    return None


class AutocompleteSession:
    def __init__(
        self,
        on_value_change: Optional[Callable[[str], None]] = None,
        on_address_resolved: Optional[Callable[[CanonicalAddress], None]] = None,
        *,
        current_value: str = "",
        use_real_api: bool = True,
        remote: Optional[RemoteSource] = None,
        fallback: Optional[FallbackSource] = None,
        config: Optional[Settings] = None,
    ):
        cfg = config or default_settings
        self.on_value_change = on_value_change or _noop
        self.on_address_resolved = on_address_resolved or _noop
        self.current_value = current_value
        self.source_kind = select_source_kind(
            use_real_api and cfg.ADDRESS_LOOKUP_USE_REAL_API,
            cfg.GOOGLE_PLACES_API_KEY,
        )
        if remote is None and self.source_kind is SourceKind.REMOTE:
            remote = RemoteSource(
                get_default_provider_loader(),
                region=cfg.PLACES_REGION,
                cache=get_default_place_detail_cache(),
            )
        self.remote = remote
        self.fallback = fallback or FallbackSource()

        self.state = SessionState.IDLE
        self.suggestions: List[PlaceSuggestion] = []
        self.advisory: Optional[str] = None
        self.last_source: Optional[SourceKind] = None
        self._dismissed_value: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.SHOWING_SUGGESTIONS

    @property
    def no_results(self) -> bool:
        """Open with nothing to show ('No addresses found')."""
        return self.is_open and not self.suggestions

    def _clear(self) -> None:
        self.suggestions = []
        self.state = SessionState.IDLE

    async def handle_input(self, text: str) -> List[PlaceSuggestion]:
        """
        Record a new input value and search for it.

        Results are applied only while `text` is still the current value, so a
        slow response for an older query can't replace newer suggestions.
        """
        self.current_value = text
        self.on_value_change(text)
        self._dismissed_value = None

        if len(text) < MIN_QUERY_LENGTH:
            self.advisory = None
            self._clear()
            return []

        self.state = SessionState.SEARCHING
        self.advisory = None
        suggestions, advisory, source = await self._search(text)

        if text != self.current_value:
            logger.debug("Discarding stale suggestions for %r (current %r)", text, self.current_value)
            return suggestions
        if text == self._dismissed_value:
            logger.debug("List dismissed while searching for %r; not reopening", text)
            return suggestions

        self.suggestions = suggestions
        self.advisory = advisory
        self.last_source = source
        if advisory and not suggestions:
            self.state = SessionState.IDLE
        else:
            self.state = SessionState.SHOWING_SUGGESTIONS
        return suggestions

    async def _search(self, query: str) -> Tuple[List[PlaceSuggestion], Optional[str], SourceKind]:
        if self.source_kind is SourceKind.FALLBACK or self.remote is None:
            return self.fallback.search(query), None, SourceKind.FALLBACK
        try:
            return await self.remote.search(query), None, SourceKind.REMOTE
        except Exception as exc:
            if query == self.current_value:
                self.state = SessionState.ERROR
            logger.warning("Remote address search failed for %r, using fallback: %s", query, exc)
            return self.fallback.search(query), FALLBACK_ADVISORY, SourceKind.FALLBACK

    async def _resolve(self, suggestion: PlaceSuggestion) -> PlaceDetail:
        if suggestion.has_detail:
            return self.fallback.resolve_details(suggestion.id)
        if self.remote is None:
            raise LookupError(f"No remote source to resolve {suggestion.id}")
        self.state = SessionState.RESOLVING
        return await self.remote.resolve_details(suggestion.id)

    async def select(self, suggestion: PlaceSuggestion) -> CanonicalAddress:
        """
        Resolve a suggestion, emit its CanonicalAddress and close the list.

        If details can't be fetched the suggestion label becomes the street,
        so a selection always produces an address.
        """
        label = suggestion.label
        try:
            detail = await self._resolve(suggestion)
        except Exception as exc:
            logger.warning("Could not resolve address details for %s: %s", suggestion.id, exc)
            address = address_from_label(suggestion.label)
            self.advisory = DETAIL_ADVISORY
        else:
            address = normalize_place_detail(detail)
            label = detail.formatted_label or suggestion.label
            self.advisory = None

        self.current_value = label
        self.on_value_change(label)
        self.on_address_resolved(address)
        self.dismiss()
        return address

    def dismiss(self) -> None:
        """Close the suggestion list; the input value is left alone."""
        self._dismissed_value = self.current_value
        self._clear()

    def handle_key(self, key: str) -> None:
        if key == "Escape":
            self.dismiss()

    def handle_pointer(self, target: PointerTarget) -> None:
        if target is PointerTarget.OUTSIDE:
            self.dismiss()
