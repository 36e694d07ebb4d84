import asyncio
import gc
import time

import pytest

from domain.errors import ConfigurationError, ProvisioningError
from domain.models import ProviderReadiness
from services import provider_loader
from services.provider_loader import ProviderLoader, get_installed_provider, install_provider


class CountingProvision:
    def __init__(self, fail_times: int = 0, delay: float = 0.05):
        self.calls = 0
        self.fail_times = fail_times
        self.delay = delay

    def __call__(self, api_key: str):
        self.calls += 1
        time.sleep(self.delay)
        if self.calls <= self.fail_times:
            raise RuntimeError("script failed to load")
        return {"provider": self.calls, "key": api_key}


def test_concurrent_callers_share_one_provisioning_request():
    provision = CountingProvision()
    loader = ProviderLoader("test-key", provision=provision)

    async def scenario():
        return await asyncio.gather(*(loader.ensure_ready() for _ in range(8)))

    results = asyncio.run(scenario())

    assert provision.calls == 1
    assert loader.provision_attempts == 1
    assert all(r is results[0] for r in results)
    assert loader.state is ProviderReadiness.READY


def test_concurrent_callers_fail_together_and_can_retry():
    provision = CountingProvision(fail_times=1)
    loader = ProviderLoader("test-key", provision=provision)

    async def first_round():
        return await asyncio.gather(
            *(loader.ensure_ready() for _ in range(5)),
            return_exceptions=True,
        )

    outcomes = asyncio.run(first_round())

    assert provision.calls == 1
    assert all(isinstance(o, ProvisioningError) for o in outcomes)
    assert loader.state is ProviderReadiness.FAILED
    assert get_installed_provider() is None

    provider = asyncio.run(loader.ensure_ready())

    assert provision.calls == 2
    assert provider == {"provider": 2, "key": "test-key"}
    assert loader.state is ProviderReadiness.READY


def test_provisioning_error_from_provision_is_passed_through():
    def provision(api_key):
        raise ProvisioningError("Failed to load Google Maps API")

    loader = ProviderLoader("test-key", provision=provision)
    with pytest.raises(ProvisioningError, match="Failed to load Google Maps API"):
        asyncio.run(loader.ensure_ready())


def test_ready_resolves_without_new_requests():
    provision = CountingProvision(delay=0)
    loader = ProviderLoader("test-key", provision=provision)

    first = asyncio.run(loader.ensure_ready())
    second = asyncio.run(loader.ensure_ready())

    assert first is second
    assert provision.calls == 1


def test_missing_key_fails_fast_without_provisioning():
    provision = CountingProvision()
    loader = ProviderLoader(None, provision=provision)

    with pytest.raises(ConfigurationError):
        asyncio.run(loader.ensure_ready())

    assert provision.calls == 0
    assert loader.state is ProviderReadiness.UNLOADED


def test_preinstalled_provider_is_used_without_provisioning():
    provision = CountingProvision()
    preloaded = object()
    install_provider(preloaded)
    loader = ProviderLoader("test-key", provision=provision)

    assert asyncio.run(loader.ensure_ready()) is preloaded
    assert provision.calls == 0
    assert loader.state is ProviderReadiness.READY


def test_successful_load_installs_provider_for_other_loaders():
    provision = CountingProvision(delay=0)
    first = ProviderLoader("test-key", provision=provision)
    provider = asyncio.run(first.ensure_ready())

    second = ProviderLoader("test-key", provision=provision)
    assert asyncio.run(second.ensure_ready()) is provider
    assert provision.calls == 1


def test_default_loader_is_a_process_wide_singleton(monkeypatch):
    monkeypatch.setattr(provider_loader.settings, "GOOGLE_PLACES_API_KEY", "env-key")

    loader = provider_loader.get_default_provider_loader()

    assert loader is provider_loader.get_default_provider_loader()
    assert loader.api_key == "env-key"
    assert loader.state is ProviderReadiness.UNLOADED


def test_cancelled_waiter_does_not_cancel_shared_attempt():
    provision = CountingProvision(delay=0.1)
    loader = ProviderLoader("test-key", provision=provision)

    async def scenario():
        cancelled = asyncio.ensure_future(loader.ensure_ready())
        patient = asyncio.ensure_future(loader.ensure_ready())
        await asyncio.sleep(0.01)
        cancelled.cancel()
        provider = await patient
        return cancelled, provider

    cancelled, provider = asyncio.run(scenario())

    assert cancelled.cancelled()
    assert provider == {"provider": 1, "key": "test-key"}
    assert provision.calls == 1
    assert loader.state is ProviderReadiness.READY


def test_failed_attempt_without_waiters_reports_nothing_unretrieved():
    provision = CountingProvision(fail_times=1, delay=0.05)
    loader = ProviderLoader("test-key", provision=provision)
    reported = []

    async def scenario():
        asyncio.get_running_loop().set_exception_handler(lambda loop, ctx: reported.append(ctx))
        waiter = asyncio.ensure_future(loader.ensure_ready())
        await asyncio.sleep(0.01)
        waiter.cancel()
        await asyncio.sleep(0.2)
        del waiter
        gc.collect()
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert provision.calls == 1
    assert loader.state is ProviderReadiness.FAILED
    assert isinstance(loader.last_error, RuntimeError)
    assert not [ctx for ctx in reported if "never retrieved" in str(ctx.get("message", ""))]
