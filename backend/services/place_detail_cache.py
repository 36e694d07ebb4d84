"""
SQLite-backed cache for resolved place details, keyed by provider and place id.
"""
from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from typing import Optional

from domain.models import PlaceDetail
from settings import settings

logger = logging.getLogger(__name__)


class PlaceDetailCache:
    def __init__(self, db_path: Optional[str] = None, default_ttl_seconds: int = 30 * 24 * 3600):
        self.db_path = db_path or settings.PLACES_DETAIL_CACHE_PATH
        self.default_ttl_seconds = default_ttl_seconds
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._init_schema()

    def _init_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS place_detail_cache (
                provider TEXT NOT NULL,
                place_id TEXT NOT NULL,
                response_json TEXT NOT NULL,
                created_at INTEGER NOT NULL,
                ttl_seconds INTEGER NOT NULL,
                PRIMARY KEY (provider, place_id)
            )
            """
        )
        self._conn.commit()

    def get_detail(self, provider: str, place_id: str) -> Optional[PlaceDetail]:
        """
        Return the cached PlaceDetail if a non-expired entry exists for key.
        """
        try:
            cur = self._conn.execute(
                """
                SELECT response_json, created_at, ttl_seconds FROM place_detail_cache
                WHERE provider=? AND place_id=?
                """,
                (provider, place_id),
            )
            row = cur.fetchone()
        except sqlite3.Error as exc:
            logger.debug("Place detail cache read failed for %s/%s: %s", provider, place_id, exc)
            return None
        if not row:
            return None
        response_json, created_at, ttl_seconds = row
        if ttl_seconds > 0 and (time.time() - created_at) > ttl_seconds:
            return None
        try:
            return PlaceDetail.from_dict(json.loads(response_json))
        except (ValueError, TypeError):
            return None

    def put_detail(
        self,
        provider: str,
        place_id: str,
        detail: PlaceDetail,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        """Store a PlaceDetail for key."""
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        try:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO place_detail_cache
                (provider, place_id, response_json, created_at, ttl_seconds)
                VALUES (?, ?, ?, ?, ?)
                """,
                (provider, place_id, json.dumps(detail.to_dict()), int(time.time()), ttl),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            logger.debug("Place detail cache write failed for %s/%s: %s", provider, place_id, exc)
            return


_default_place_detail_cache: Optional[PlaceDetailCache] = None


def get_default_place_detail_cache() -> Optional[PlaceDetailCache]:
    """The shared cache, or None when caching is disabled."""
    global _default_place_detail_cache
    if not settings.PLACES_DETAIL_CACHE_ENABLED:
        return None
    if _default_place_detail_cache is None:
        _default_place_detail_cache = PlaceDetailCache()
    return _default_place_detail_cache
