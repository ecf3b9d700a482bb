"""Read-only access to the migrated ledger state."""

from .reader import Resource, ResourceKind, StateReader
from .resources import decode_resource, encode_payload
from .snapshot import InMemoryStateReader, SnapshotStateReader, load_state_snapshot

__all__ = [
    "Resource",
    "ResourceKind",
    "StateReader",
    "decode_resource",
    "encode_payload",
    "InMemoryStateReader",
    "SnapshotStateReader",
    "load_state_snapshot",
]
