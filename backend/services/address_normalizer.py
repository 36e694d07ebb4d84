"""
Normalize provider place details into a CanonicalAddress.

Providers tag address components inconsistently across regions: the city may
arrive as `locality`, `sublocality`, `postal_town` or
`administrative_area_level_3` depending on the country. The rules here are
deterministic and never raise for missing fields.
"""
from __future__ import annotations

import logging
from typing import Dict

from domain.models import CanonicalAddress, PlaceDetail

logger = logging.getLogger(__name__)

# Highest priority first.
CITY_KINDS = (
    "locality",
    "sublocality",
    "postal_town",
    "administrative_area_level_3",
)


def join_street(street_number: str, route: str) -> str:
    return " ".join(part.strip() for part in (street_number, route) if part and part.strip())


def normalize_place_detail(detail: PlaceDetail) -> CanonicalAddress:
    """
    Map a PlaceDetail to a CanonicalAddress in a single pass.

    Rules:
    - street: first `street_number` long name + first `route` long name.
    - state: first `administrative_area_level_1`, short name (e.g. 'NY').
    - zip: first `postal_code`, long name.
    - city: the first value seen for each kind in CITY_KINDS is kept, then the
      highest-priority kind wins. `locality` therefore beats a fallback kind
      even when the fallback component comes earlier in the sequence.
    """
    street_number = ""
    route = ""
    state = ""
    zip_code = ""
    city_slots: Dict[str, str] = {}

    for component in detail.components:
        kinds = component.kinds
        if "street_number" in kinds and not street_number:
            street_number = component.long_name
        if "route" in kinds and not route:
            route = component.long_name
        if "administrative_area_level_1" in kinds and not state:
            state = component.short_name
        if "postal_code" in kinds and not zip_code:
            zip_code = component.long_name
        for kind in CITY_KINDS:
            if kind in kinds and not city_slots.get(kind):
                city_slots[kind] = component.long_name

    city = next((city_slots[k] for k in CITY_KINDS if city_slots.get(k)), "")

    address = CanonicalAddress(
        street=join_street(street_number, route),
        city=city.strip(),
        state=state.strip(),
        zip=zip_code.strip(),
    )

    missing = [name for name, value in address.to_dict().items() if not value]
    if missing:
        logger.debug(
            "Normalization gap for %r: missing %s (kinds seen: %s)",
            detail.formatted_label,
            ", ".join(missing),
            sorted({k for c in detail.components for k in c.kinds}),
        )
    return address


def address_from_label(label: str) -> CanonicalAddress:
    """Degraded address for when details can't be fetched: the label is the street."""
    return CanonicalAddress(street=(label or "").strip())
