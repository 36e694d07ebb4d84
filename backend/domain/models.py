"""
Core domain models for the address lookup client.
These are framework-agnostic and shared by the sources, the normalizer,
the autocomplete session and the HTTP layer.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple


class ProviderReadiness(str, Enum):
    """Process-wide readiness of the external place-search provider."""
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"  # retriable, next ensure_ready() goes back to LOADING


class SourceKind(str, Enum):
    """Which suggestion source answered a query."""
    REMOTE = "remote"
    FALLBACK = "fallback"


class SessionState(str, Enum):
    """
    States of a single autocomplete input.

    IDLE -> SEARCHING -> SHOWING_SUGGESTIONS -> RESOLVING -> IDLE.
    ERROR is transient and always settles into SHOWING_SUGGESTIONS
    (fallback results) or IDLE (nothing to show).
    """
    IDLE = "idle"
    SEARCHING = "searching"
    SHOWING_SUGGESTIONS = "showing_suggestions"
    RESOLVING = "resolving"
    ERROR = "error"


class PointerTarget(str, Enum):
    """Where a pointer/activation event landed relative to the widget."""
    INPUT = "input"
    SUGGESTIONS = "suggestions"
    OUTSIDE = "outside"


@dataclass(frozen=True)
class PlaceSuggestion:
    """A label-only candidate returned while the user is still typing."""
    id: str
    label: str
    has_detail: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "has_detail": self.has_detail}


@dataclass(frozen=True)
class RawComponent:
    long_name: str
    short_name: str
    kinds: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, long_name: str, short_name: str, *kinds: str) -> "RawComponent":
        return cls(long_name=long_name, short_name=short_name, kinds=frozenset(kinds))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawComponent":
        """Build from the provider's {long_name, short_name, types} shape."""
        kinds = data.get("types") or data.get("kinds") or []
        return cls(
            long_name=str(data.get("long_name") or ""),
            short_name=str(data.get("short_name") or ""),
            kinds=frozenset(str(k) for k in kinds),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "long_name": self.long_name,
            "short_name": self.short_name,
            "types": sorted(self.kinds),
        }


@dataclass(frozen=True)
class PlaceDetail:
    """The fully itemized address record fetched after a suggestion is chosen."""
    formatted_label: str
    components: Tuple[RawComponent, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, formatted_label: str, components: Iterable[RawComponent]) -> "PlaceDetail":
        return cls(formatted_label=formatted_label, components=tuple(components))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlaceDetail":
        components: List[RawComponent] = []
        for item in data.get("address_components") or []:
            if isinstance(item, dict):
                components.append(RawComponent.from_dict(item))
        return cls(
            formatted_label=str(data.get("formatted_address") or ""),
            components=tuple(components),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formatted_address": self.formatted_label,
            "address_components": [c.to_dict() for c in self.components],
        }


@dataclass(frozen=True)
class CanonicalAddress:
    """The four-field normalized record consumed by all forms."""
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    @property
    def one_line(self) -> str:
        """Render as 'street, city, state zip', skipping empty parts."""
        region = " ".join(p for p in (self.state, self.zip) if p)
        return ", ".join(p for p in (self.street, self.city, region) if p)

    def to_dict(self) -> Dict[str, str]:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
        }
