"""
Error taxonomy for the address lookup client.

None of these cross the AutocompleteSession boundary: the session turns them
into fallback results or an advisory message.
"""
from __future__ import annotations

from typing import Optional


class AddressLookupError(Exception):
    error = "AddressLookupError"

    def __init__(self, message: str = "", *, details: dict | None = None):
        super().__init__(message)
        self.message = message or self.error
        self.details = details


class ConfigurationError(AddressLookupError):
    """No usable credential; fatal to the remote source only."""
    error = "ConfigurationError"


class ProvisioningError(AddressLookupError):
    """The provider resource failed to load."""
    error = "ProvisioningError"


class QueryError(AddressLookupError):
    """A single search or detail call failed."""
    error = "QueryError"

    def __init__(
        self,
        message: str = "",
        *,
        status: Optional[str] = None,
        details: dict | None = None,
    ):
        super().__init__(message, details=details)
        self.status = status
