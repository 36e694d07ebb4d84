"""Thin client for the Google Places web service.

Three calls only: a one-time bootstrap used to provision the provider, an
address-restricted autocomplete, and a place-details lookup. Calls are
blocking (`requests`); async callers hand them to a worker thread.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, List, Optional

import requests

from domain.errors import ProvisioningError, QueryError
from domain.models import PlaceDetail, PlaceSuggestion
from settings import settings

PLACES_BASE_URL = os.getenv("PLACES_BASE_URL", "https://maps.googleapis.com/maps/api")
PROVIDER_NAME = "google"
DETAIL_FIELDS = ("formatted_address", "address_components")

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_MIN_INTERVAL_SEC = settings.PLACES_MIN_INTERVAL


def mask_key(key: str) -> str:
    if len(key) <= 10:
        return "*" * len(key)
    return key[:10] + "..."


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < _MIN_INTERVAL_SEC:
            time.sleep(_MIN_INTERVAL_SEC - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, timeout=timeout)


class GooglePlacesProvider:
    name = PROVIDER_NAME

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: float = 5.0,
    ):
        self.api_key = api_key
        self.base_url = (base_url or PLACES_BASE_URL).rstrip("/")
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"GooglePlacesProvider(key={mask_key(self.api_key)!r}, base_url={self.base_url!r})"

    def bootstrap(self) -> None:
        """Fetch the Places library loader once; any failure is a ProvisioningError."""
        try:
            resp = _throttled_get(
                f"{self.base_url}/js",
                params={"key": self.api_key, "libraries": "places"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProvisioningError(f"Failed to load Google Maps API: {exc}") from exc
        if resp is None or resp.status_code != 200:
            status = getattr(resp, "status_code", None)
            raise ProvisioningError(
                "Failed to load Google Maps API",
                details={"http_status": status},
            )
        logger.debug("Places provider bootstrapped with key %s", mask_key(self.api_key))

    def _get_json(self, path: str, params: dict[str, Any]) -> dict:
        params = {**params, "key": self.api_key}
        try:
            resp = _throttled_get(f"{self.base_url}/{path}", params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise QueryError(f"Places request failed: {exc}") from exc
        try:
            data = resp.json()
        except ValueError as exc:
            raise QueryError(f"Places response was not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise QueryError("Places response was not an object")
        status = data.get("status")
        if status != "OK":
            raise QueryError(
                f"Places API error: {status}",
                status=status,
                details={"error_message": data.get("error_message")},
            )
        return data

    def autocomplete(self, query: str, region: str = "us") -> List[PlaceSuggestion]:
        data = self._get_json(
            "place/autocomplete/json",
            {
                "input": query,
                "types": "address",
                "components": f"country:{region}",
            },
        )
        suggestions: List[PlaceSuggestion] = []
        for prediction in data.get("predictions") or []:
            place_id = prediction.get("place_id")
            label = prediction.get("description")
            if not place_id or not label:
                continue
            suggestions.append(PlaceSuggestion(id=str(place_id), label=str(label), has_detail=False))
        logger.debug(
            "GooglePlacesProvider.autocomplete: query=%r region=%s got %d results",
            query,
            region,
            len(suggestions),
        )
        return suggestions

    def place_details(self, place_id: str) -> PlaceDetail:
        data = self._get_json(
            "place/details/json",
            {
                "place_id": place_id,
                "fields": ",".join(DETAIL_FIELDS),
            },
        )
        return PlaceDetail.from_dict(data.get("result") or {})


def provision_google_places(
    api_key: str,
    base_url: Optional[str] = None,
    timeout: float = 5.0,
) -> GooglePlacesProvider:
    """Default provisioning: build the provider and bootstrap it exactly once."""
    provider = GooglePlacesProvider(api_key, base_url=base_url, timeout=timeout)
    provider.bootstrap()
    return provider
