#!/usr/bin/env python3
"""Canonical signatures and selectors for ABI functions and events.

Usage:
  abi_signature.py <abi.json>

Prints `selector  signature` for every function and event in the file.
"""

from __future__ import annotations

import sys
from pathlib import Path

from abi_model import SELECTOR_KINDS, AbiEntry, AbiIndexError, MalformedEntry, MalformedType, Parameter, load_contract
from keccak256 import event_topic, function_selector


def canonical_type(param: Parameter) -> str:
    """Type string as it appears in a canonical signature.

    Elementary types are taken verbatim. Tuples expand to their
    parenthesized component list, followed by any array suffix:
    `tuple[]` over (uint256, address) becomes `(uint256,address)[]`.
    """
    suffix = param.tuple_suffix
    if suffix is None:
        return param.type
    if not param.components:
        raise MalformedType(f"tuple parameter {param.name or '<unnamed>'!r} has no components")
    inner = ",".join(canonical_type(component) for component in param.components)
    return f"({inner}){suffix}"


def is_eligible(entry: AbiEntry) -> bool:
    # An empty `inputs` list is eligible; a missing one is not.
    return entry.kind in SELECTOR_KINDS and entry.inputs is not None and bool(entry.name)


def canonical_signature(entry: AbiEntry) -> str:
    if not entry.name:
        raise MalformedEntry(f"{entry.kind} entry has no name")
    if entry.inputs is None:
        raise MalformedEntry(f"{entry.kind} {entry.name!r} has no inputs list")
    types = ",".join(canonical_type(param) for param in entry.inputs)
    return f"{entry.name}({types})"


def selector_of(entry: AbiEntry) -> bytes:
    """4-byte selector for a function, full 32-byte topic for an event."""
    signature = canonical_signature(entry)
    if entry.kind == "function":
        return function_selector(signature)
    if entry.kind == "event":
        return event_topic(signature)
    raise MalformedEntry(f"{entry.kind} entries have no selector")


def selector_hex(entry: AbiEntry) -> str:
    return "0x" + selector_of(entry).hex()


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: abi_signature.py <abi.json>", file=sys.stderr)
        return 2
    try:
        contract = load_contract(Path(args[0]))
        rows = [(selector_hex(e), canonical_signature(e)) for e in contract.entries if is_eligible(e)]
    except AbiIndexError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for selector, signature in rows:
        print(f"{selector}  {signature}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
