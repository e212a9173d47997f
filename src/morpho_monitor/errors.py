"""Exception taxonomy for the vault monitor."""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for all monitor failures surfaced to callers."""


class UnknownChainError(MonitorError, ValueError):
    def __init__(self, chain: str, supported: tuple[str, ...] = ()):
        self.chain = chain
        message = f"Unsupported chain '{chain}'"
        if supported:
            message += f". Supported chains: {', '.join(supported)}"
        super().__init__(message)


class InvalidThresholdError(MonitorError, ValueError):
    """Raised when a threshold is not a finite positive number."""


class DuplicateVaultError(MonitorError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Vault {address} is already being monitored")


class VaultFetchError(MonitorError):
    """Vault state could not be read or had an unexpected shape."""

    def __init__(self, address: str, chain: str, reason: str):
        self.address = address
        self.chain = chain
        self.reason = reason
        super().__init__(f"Failed to fetch vault {address} on {chain}: {reason}")


class IndexQueryError(MonitorError):
    """The position index returned an error or could not be reached."""


class StoreError(MonitorError):
    """The monitor configuration could not be persisted."""
