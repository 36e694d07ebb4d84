import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def reset_provider_globals(monkeypatch):
    """A successful load installs the provider process-wide; isolate tests from each other."""
    from services import provider_loader

    monkeypatch.setattr(provider_loader, "_installed_provider", None)
    monkeypatch.setattr(provider_loader, "_default_provider_loader", None)
