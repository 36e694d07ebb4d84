"""
Suggestion sources for address autocomplete.

There are exactly two: RemoteSource (the external provider) and
FallbackSource (a small static catalogue). They are picked per query by the
autocomplete session through `select_source_kind`, not through a shared base
class.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from domain.errors import QueryError
from domain.models import PlaceDetail, PlaceSuggestion, RawComponent, SourceKind
from services.place_detail_cache import PlaceDetailCache
from services.provider_loader import ProviderLoader

logger = logging.getLogger(__name__)


def select_source_kind(use_real_api: bool, api_key: Optional[str]) -> SourceKind:
    """Fallback-only when the real provider is switched off or has no key."""
    if not use_real_api or not api_key:
        return SourceKind.FALLBACK
    return SourceKind.REMOTE


class RemoteSource:
    kind = SourceKind.REMOTE

    def __init__(
        self,
        loader: ProviderLoader,
        region: str = "us",
        cache: Optional[PlaceDetailCache] = None,
    ):
        self.loader = loader
        self.region = region
        self.cache = cache

    async def search(self, query: str, region: Optional[str] = None) -> List[PlaceSuggestion]:
        provider = await self.loader.ensure_ready()
        return await asyncio.to_thread(provider.autocomplete, query, region or self.region)

    async def resolve_details(self, place_id: str) -> PlaceDetail:
        provider = await self.loader.ensure_ready()
        provider_name = getattr(provider, "name", "remote")
        if self.cache is not None:
            cached = await asyncio.to_thread(self.cache.get_detail, provider_name, place_id)
            if cached is not None:
                logger.debug("Place detail cache hit for %s", place_id)
                return cached

        detail = await asyncio.to_thread(provider.place_details, place_id)

        if self.cache is not None:
            await asyncio.to_thread(self.cache.put_detail, provider_name, place_id, detail)
        return detail


def _brooklyn(number: str, street: str, street_short: str, zip_code: str) -> PlaceDetail:
    return PlaceDetail.build(
        f"{number} {street}, Brooklyn, NY {zip_code}, USA",
        [
            RawComponent.of(number, number, "street_number"),
            RawComponent.of(street, street_short, "route"),
            RawComponent.of("Brooklyn", "Brooklyn", "locality", "political"),
            RawComponent.of("New York", "NY", "administrative_area_level_1", "political"),
            RawComponent.of(zip_code, zip_code, "postal_code"),
            RawComponent.of("United States", "US", "country", "political"),
        ],
    )


FALLBACK_CATALOGUE: Dict[str, PlaceDetail] = {
    "fallback_1": _brooklyn("149", "Skillman Street", "Skillman St", "11205"),
    "fallback_2": _brooklyn("195", "Division Avenue", "Division Ave", "11211"),
    "fallback_3": _brooklyn("183", "Wallabout Street", "Wallabout St", "11206"),
    "fallback_4": _brooklyn("670", "Myrtle Avenue", "Myrtle Ave", "11205"),
}


class FallbackSource:
    """
    Local catalogue with components inline, so resolving never hits the network.
    """

    kind = SourceKind.FALLBACK

    def __init__(self, catalogue: Optional[Dict[str, PlaceDetail]] = None):
        self.catalogue = dict(FALLBACK_CATALOGUE if catalogue is None else catalogue)

    @staticmethod
    def _matches(detail: PlaceDetail, needle: str) -> bool:
        if needle in detail.formatted_label.lower():
            return True
        return any(needle in c.long_name.lower() for c in detail.components)

    def search(self, query: str) -> List[PlaceSuggestion]:
        needle = query.lower()
        return [
            PlaceSuggestion(id=place_id, label=detail.formatted_label, has_detail=True)
            for place_id, detail in self.catalogue.items()
            if self._matches(detail, needle)
        ]

    def resolve_details(self, place_id: str) -> PlaceDetail:
        detail = self.catalogue.get(place_id)
        if detail is None:
            raise QueryError(f"Unknown fallback place id: {place_id}", status="NOT_FOUND")
        return detail
