"""
StateReader: read-only capability over a migrated ledger snapshot.

The audit algorithms only ever see this interface, never a storage engine.
Implementations must serve one fixed point-in-time view: a reader never
observes writes made after it was constructed, and it is safe to query
from several threads at once without locking.

Contract:
- get_resource() returns None when the account simply has no such resource
- get_resource() raises ResourceDecodeError when stored bytes are corrupt
- validator_addresses() reads the active set from the core code account
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator

from ..models import CORE_CODE_ADDRESS, BalanceResource, SlowWalletResource


class ResourceKind(str, Enum):
    BALANCE = "balance"
    SLOW_WALLET = "slow_wallet"
    VALIDATOR_SET = "validator_set"


Resource = BalanceResource | SlowWalletResource | frozenset


class StateReader(ABC):
    """Point-in-time, read-only view of a migrated ledger."""

    @abstractmethod
    def get_resource(self, address: str, kind: ResourceKind) -> Resource | None:
        """Fetch and decode one resource for an account.

        Args:
            address: Canonical account address
            kind: Which resource to decode

        Returns:
            The decoded resource, or None if the account has none

        Raises:
            ResourceDecodeError: if stored bytes do not decode as `kind`
        """
        ...

    @abstractmethod
    def addresses(self) -> Iterator[str]:
        """Every account present in the view, in sorted order."""
        ...

    def validator_addresses(self) -> frozenset[str]:
        """Active validator set; empty if the view carries none."""
        val_set = self.get_resource(CORE_CODE_ADDRESS, ResourceKind.VALIDATOR_SET)
        return val_set if val_set is not None else frozenset()

    def get_balance(self, address: str) -> BalanceResource | None:
        return self.get_resource(address, ResourceKind.BALANCE)  # type: ignore[return-value]

    def get_slow_wallet(self, address: str) -> SlowWalletResource | None:
        return self.get_resource(address, ResourceKind.SLOW_WALLET)  # type: ignore[return-value]
