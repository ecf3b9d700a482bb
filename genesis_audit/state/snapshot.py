"""
Snapshot-backed StateReader implementations.

A ledger snapshot file is a JSON document:

    {
      "version": 1,
      "accounts": {
        "0x...": {"balance": {"coin": 100}, "slow_wallet": {"unlocked": 10}}
      },
      "validators": ["0x..."]
    }

Resources are stored as encoded bytes in a read-only mapping and decoded on
every read, so a corrupt resource only surfaces when (and where) it is used.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from ..errors import SnapshotLoadError
from ..models import CORE_CODE_ADDRESS, parse_address
from .reader import Resource, ResourceKind, StateReader
from .resources import decode_resource, encode_payload

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _kind_key(kind: ResourceKind | str) -> str:
    """Storage key for a resource kind given as an enum member or its value."""
    if isinstance(kind, ResourceKind):
        return kind.value
    try:
        return ResourceKind(kind).value
    except ValueError:
        raise ValueError(f"unknown resource kind {kind!r}") from None


class InMemoryStateReader(StateReader):
    """StateReader over an in-process copy of the ledger.

    The constructor encodes every payload into its own storage, so changes
    the caller makes to `accounts` afterwards are never observed.
    """

    def __init__(
        self,
        accounts: Mapping[str, Mapping[str, Any]] | None = None,
        validators: Iterable[str] | None = None,
    ):
        store: dict[tuple[str, str], bytes] = {}
        for raw_address, resources in (accounts or {}).items():
            address = parse_address(raw_address)
            if not isinstance(resources, Mapping):
                raise ValueError(f"resources for {raw_address} must be an object")
            for kind, payload in resources.items():
                if payload is None:
                    continue
                store[(address, _kind_key(kind))] = encode_payload(payload)

        if validators is not None:
            store[(CORE_CODE_ADDRESS, ResourceKind.VALIDATOR_SET.value)] = encode_payload(list(validators))

        self._store: Mapping[tuple[str, str], bytes] = MappingProxyType(store)
        self._addresses = tuple(sorted({addr for addr, _ in store}))

    def get_resource(self, address: str, kind: ResourceKind) -> Resource | None:
        raw = self._store.get((address, kind.value))
        if raw is None:
            return None
        return decode_resource(address, kind, raw)

    def addresses(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)


class SnapshotStateReader(InMemoryStateReader):
    """StateReader bound to a ledger snapshot file."""

    def __init__(
        self,
        source: Path,
        accounts: Mapping[str, Mapping[str, Any]] | None = None,
        validators: Iterable[str] | None = None,
    ):
        super().__init__(accounts, validators)
        self.source = source

    @classmethod
    def from_file(cls, path: Path) -> "SnapshotStateReader":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise SnapshotLoadError(path, e.strerror or str(e)) from e
        except json.JSONDecodeError as e:
            raise SnapshotLoadError(path, f"invalid JSON: {e.msg} at line {e.lineno}") from e

        if not isinstance(data, dict):
            raise SnapshotLoadError(path, "expected a JSON object")

        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise SnapshotLoadError(path, f"unsupported snapshot version {version!r}")

        accounts = data.get("accounts", {})
        if not isinstance(accounts, dict):
            raise SnapshotLoadError(path, "'accounts' must be an object keyed by address")

        validators = data.get("validators")
        if validators is not None and not isinstance(validators, list):
            raise SnapshotLoadError(path, "'validators' must be a list of addresses")

        try:
            reader = cls(path, accounts, validators)
        except ValueError as e:
            raise SnapshotLoadError(path, str(e)) from e

        logger.debug("loaded ledger snapshot %s with %d accounts", path, len(reader))
        return reader


def load_state_snapshot(path: Path) -> SnapshotStateReader:
    """Open a ledger snapshot file as a StateReader.

    Raises:
        SnapshotLoadError: if the file cannot be read or has the wrong shape
    """
    return SnapshotStateReader.from_file(path)
