"""
Process-wide, exactly-once provisioning of the place-search provider.

Any number of autocomplete sessions may call `ensure_ready()` at the same
time; at most one provisioning attempt is ever in flight and every caller
attaches to it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from domain.errors import ConfigurationError, ProvisioningError
from domain.models import ProviderReadiness
from services.places_provider import provision_google_places
from settings import settings

logger = logging.getLogger(__name__)

# Provider already present in this process, e.g. installed by the host at
# startup or by a previous successful load.
_installed_provider: Optional[Any] = None


def install_provider(provider: Any) -> None:
    global _installed_provider
    _installed_provider = provider


def get_installed_provider() -> Optional[Any]:
    return _installed_provider


class ProviderLoader:
    def __init__(
        self,
        api_key: Optional[str],
        provision: Optional[Callable[[str], Any]] = None,
    ):
        self.api_key = api_key
        self._provision = provision or provision_google_places
        self.state = ProviderReadiness.UNLOADED
        self.provider: Optional[Any] = None
        self.last_error: Optional[BaseException] = None
        self.provision_attempts = 0
        self._pending: Optional[asyncio.Task] = None

    async def ensure_ready(self) -> Any:
        """
        Return the ready provider, provisioning it on first use.

        - READY: returns immediately.
        - LOADING: awaits the shared in-flight attempt.
        - UNLOADED / FAILED: starts exactly one attempt.

        Raises ConfigurationError (no key, nothing attempted) or
        ProvisioningError (the shared attempt failed).
        """
        if self.state is ProviderReadiness.READY and self.provider is not None:
            return self.provider

        preloaded = get_installed_provider()
        if preloaded is not None:
            self.provider = preloaded
            self.state = ProviderReadiness.READY
            return preloaded

        if self.state is ProviderReadiness.LOADING and self._pending is not None:
            return await asyncio.shield(self._pending)

        if not self.api_key:
            raise ConfigurationError("Google Places API key not configured")

        self.state = ProviderReadiness.LOADING
        self._pending = asyncio.ensure_future(self._load())
        self._pending.add_done_callback(_consume_result)
        return await asyncio.shield(self._pending)

    async def _load(self) -> Any:
        self.provision_attempts += 1
        try:
            provider = await asyncio.to_thread(self._provision, self.api_key)
        except Exception as exc:
            self.state = ProviderReadiness.FAILED
            self.last_error = exc
            self._pending = None
            logger.warning("Failed to provision places provider (attempt %d): %s", self.provision_attempts, exc)
            if isinstance(exc, ProvisioningError):
                raise
            raise ProvisioningError(f"Failed to load places provider: {exc}") from exc

        self.provider = provider
        self.last_error = None
        self.state = ProviderReadiness.READY
        self._pending = None
        install_provider(provider)
        logger.info("Places provider ready after %d attempt(s)", self.provision_attempts)
        return provider


def _consume_result(task: "asyncio.Task") -> None:
    # Every waiter may have been cancelled; mark a failure as retrieved anyway.
    if not task.cancelled():
        task.exception()


_default_provider_loader: Optional[ProviderLoader] = None


def get_default_provider_loader() -> ProviderLoader:
    global _default_provider_loader
    if _default_provider_loader is None:
        api_key = settings.GOOGLE_PLACES_API_KEY
        if not api_key:
            logger.warning(
                "GOOGLE_PLACES_API_KEY not set in environment; address lookups will use fallback data."
            )

        def _provision(key: str) -> Any:
            return provision_google_places(key, timeout=settings.PLACES_HTTP_TIMEOUT)

        _default_provider_loader = ProviderLoader(api_key, provision=_provision)
    return _default_provider_loader
