"""
Event decoding - Turn raw receipt logs into named events.

Logs are matched against the event entries of one or more ABIs by
topic[0] (keccak256 of the event signature).  Logs that match no known
event, or whose layout does not fit the matching ABI entry (an ERC-721
Transfer shares topic[0] with the ERC-20 one), are left out of the decoded
sequence; they stay in the raw receipt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from .abi import canonical_type, signature
from .rpc import _keccak256

logger = logging.getLogger(__name__)

_DYNAMIC_SUFFIXES = ("[]",)
_DYNAMIC_TYPES = ("string", "bytes")


@dataclass(frozen=True)
class Event:
    """A decoded log: event name plus named fields."""

    name: str
    args: Mapping[str, Any] = field(default_factory=dict)
    log_index: int = 0
    address: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def get(self, field_name: str, default: Any = None) -> Any:
        return self.args.get(field_name, default)


def event_topic(entry: dict[str, Any]) -> str:
    """0x-prefixed topic[0] for an event ABI entry."""
    return "0x" + _keccak256(signature(entry).encode("utf-8")).hex()


def _is_dynamic(type_str: str) -> bool:
    return (
        type_str in _DYNAMIC_TYPES
        or type_str.endswith(_DYNAMIC_SUFFIXES)
        or type_str.startswith("(")
    )


def _hex_bytes(value: str) -> bytes:
    return bytes.fromhex(value.removeprefix("0x"))


def _decode_log(entry: dict[str, Any], log: dict[str, Any]) -> Event:
    topics = log.get("topics", [])[1:]
    inputs = entry.get("inputs", [])
    indexed = [p for p in inputs if p.get("indexed")]
    plain = [p for p in inputs if not p.get("indexed")]

    args: dict[str, Any] = {}
    for param, topic in zip(indexed, topics):
        type_str = canonical_type(param)
        if _is_dynamic(type_str):
            # Dynamic indexed values are stored as their hash
            args[param["name"]] = topic
        else:
            args[param["name"]] = decode([type_str], _hex_bytes(topic))[0]

    data = log.get("data") or "0x"
    if plain:
        values = decode([canonical_type(p) for p in plain], _hex_bytes(data))
        args.update({p["name"]: v for p, v in zip(plain, values)})

    log_index = log.get("logIndex", 0)
    if isinstance(log_index, str):
        log_index = int(log_index, 16)

    return Event(
        name=entry["name"],
        args=args,
        log_index=log_index,
        address=log.get("address", ""),
    )


def decode_logs(abis: Iterable[list[dict[str, Any]]], logs: Iterable[dict[str, Any]]) -> tuple[Event, ...]:
    """
    Decode receipt logs in order.

    Args:
        abis: ABIs whose event entries are known
        logs: ``receipt["logs"]``

    Returns:
        Decoded events, in log order
    """
    by_topic: dict[str, dict[str, Any]] = {}
    for abi in abis:
        for entry in abi:
            if entry.get("type") == "event" and not entry.get("anonymous"):
                by_topic.setdefault(event_topic(entry), entry)

    events = []
    for log in logs:
        topics = log.get("topics") or []
        if not topics:
            continue
        entry = by_topic.get(topics[0].lower())
        if entry is None:
            continue
        indexed = sum(1 for p in entry.get("inputs", []) if p.get("indexed"))
        if len(topics) - 1 != indexed:
            logger.debug("skipping %s log with %d topics", entry["name"], len(topics))
            continue
        try:
            events.append(_decode_log(entry, log))
        except DecodingError as exc:
            logger.debug("skipping undecodable %s log: %s", entry["name"], exc)
    return tuple(events)


def find_event(events: Iterable[Event], name: str) -> Optional[Event]:
    """First event named ``name``, or None when the receipt has none."""
    for event in events:
        if event.name == name:
            return event
    return None
