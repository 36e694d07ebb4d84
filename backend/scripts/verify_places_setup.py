"""Check that the Google Places key is configured and answers a sample autocomplete request.

Usage:
    python -m scripts.verify_places_setup [--query "123 Main Street"] [--api-key KEY]

Reads GOOGLE_PLACES_API_KEY from the environment (or backend/.env) unless
--api-key is given. Exits 0 when the provider returns suggestions, 1 otherwise.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env")

from domain.errors import AddressLookupError
from services.places_provider import GooglePlacesProvider, mask_key
from settings import Settings


def verify(api_key: Optional[str], query: str, region: str, timeout: float) -> bool:
    if not api_key:
        print("API key not configured")
        print("Set GOOGLE_PLACES_API_KEY in backend/.env or the environment")
        return False

    print(f"API key found: {mask_key(api_key)}")
    provider = GooglePlacesProvider(api_key, timeout=timeout)
    try:
        suggestions = provider.autocomplete(query, region)
    except AddressLookupError as exc:
        status = getattr(exc, "status", None)
        print(f"Places API error: {status or exc.message}")
        if exc.details and exc.details.get("error_message"):
            print(f"Message: {exc.details['error_message']}")
        return False

    print("Google Places API is working")
    print(f"Found {len(suggestions)} suggestions")
    if suggestions:
        print(f"Sample result: {suggestions[0].label}")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    config = Settings()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--query", default="123 Main Street", help="Probe text to autocomplete")
    parser.add_argument("--api-key", default=None, help="Override GOOGLE_PLACES_API_KEY")
    parser.add_argument("--region", default=config.PLACES_REGION, help="Country restriction (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    ok = verify(
        args.api_key or config.GOOGLE_PLACES_API_KEY,
        args.query,
        args.region,
        config.PLACES_HTTP_TIMEOUT,
    )
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
