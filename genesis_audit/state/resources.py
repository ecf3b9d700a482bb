"""Encoding and decoding of stored resource payloads."""

from __future__ import annotations

import json
from typing import Any, Callable

from ..errors import ResourceDecodeError
from ..models import BalanceResource, SlowWalletResource, check_u64, parse_address
from .reader import Resource, ResourceKind


def encode_payload(payload: Any) -> bytes:
    """Serialize a resource payload for storage.

    Raw bytes are stored as-is, which lets callers (and tests) plant
    payloads that will not decode.
    """
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


def _fields(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    return data


def _decode_balance(data: Any) -> BalanceResource:
    fields = _fields(data)
    if "coin" not in fields:
        raise ValueError("missing field 'coin'")
    return BalanceResource(coin=check_u64(fields["coin"], "coin"))


def _decode_slow_wallet(data: Any) -> SlowWalletResource:
    fields = _fields(data)
    if "unlocked" not in fields:
        raise ValueError("missing field 'unlocked'")
    return SlowWalletResource(
        unlocked=check_u64(fields["unlocked"], "unlocked"),
        transferred=check_u64(fields.get("transferred", 0), "transferred"),
    )


def _decode_validator_set(data: Any) -> frozenset[str]:
    if isinstance(data, dict):
        data = data.get("active_validators")
    if not isinstance(data, list):
        raise ValueError("expected a list of validator addresses")
    return frozenset(parse_address(a) for a in data)


_DECODERS: dict[ResourceKind, Callable[[Any], Resource]] = {
    ResourceKind.BALANCE: _decode_balance,
    ResourceKind.SLOW_WALLET: _decode_slow_wallet,
    ResourceKind.VALIDATOR_SET: _decode_validator_set,
}


def decode_resource(address: str, kind: ResourceKind, raw: bytes) -> Resource:
    """Decode stored bytes as `kind`.

    Raises:
        ResourceDecodeError: on invalid UTF-8/JSON or a schema mismatch
    """
    try:
        data = json.loads(raw.decode("utf-8"))
        return _DECODERS[kind](data)
    except (UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
        raise ResourceDecodeError(address, kind.value, str(e)) from e
