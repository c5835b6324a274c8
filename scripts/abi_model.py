#!/usr/bin/env python3
"""ABI data model and the loader that turns untyped JSON into it.

Shape problems are rejected here, at load time, so the selector and
aggregation code downstream only ever sees well-formed entries.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

ENTRY_KINDS = ("function", "constructor", "event", "fallback", "receive", "error")
SELECTOR_KINDS = ("function", "event")
STATE_MUTABILITIES = ("pure", "view", "nonpayable", "payable")

CONTRACT_NAME_KEY = "$contractName"

TUPLE_TYPE_RE = re.compile(r"^tuple((?:\[[0-9]*\])*)$")


class AbiIndexError(ValueError):
    """Base class for every failure the selector index tools report."""


class InvalidJson(AbiIndexError):
    pass


class InvalidAbiShape(AbiIndexError):
    pass


class MalformedEntry(AbiIndexError):
    pass


class MalformedType(MalformedEntry):
    pass


class CorruptIndex(AbiIndexError):
    pass


@dataclass(frozen=True)
class Parameter:
    type: str
    name: str | None = None
    components: tuple[Parameter, ...] | None = None
    indexed: bool | None = None

    @property
    def tuple_suffix(self) -> str | None:
        """Array suffix of a tuple type ("" for a bare tuple), None if not a tuple."""
        match = TUPLE_TYPE_RE.match(self.type)
        return match.group(1) if match else None


@dataclass(frozen=True)
class AbiEntry:
    kind: str
    raw: dict[str, Any]
    name: str | None = None
    inputs: tuple[Parameter, ...] | None = None
    outputs: tuple[Parameter, ...] | None = None
    state_mutability: str | None = None
    anonymous: bool = False

    def tagged(self, contract: str) -> dict[str, Any]:
        """Copy of the source JSON object annotated with its contract name."""
        member = dict(self.raw)
        member[CONTRACT_NAME_KEY] = contract
        return member


@dataclass(frozen=True)
class Contract:
    name: str
    path: Path
    entries: tuple[AbiEntry, ...]
    raw: list[Any]


def contract_name(path: Path) -> str:
    """Base name with only the final extension removed."""
    return path.stem


def load_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidJson(f"{path} is not UTF-8 text: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidJson(f"Invalid JSON in {path}: {exc}") from exc


def load_contract(path: Path) -> Contract:
    """Read one ABI source file.

    Raises:
        InvalidJson: the file is not UTF-8 JSON.
        InvalidAbiShape: the top-level value is not an array.
        MalformedEntry: an entry or one of its parameters is malformed.
    """
    raw = load_json(path)
    entries = parse_abi(raw, source=str(path))
    return Contract(name=contract_name(path), path=path, entries=entries, raw=raw)


def parse_abi(raw: Any, source: str = "<abi>") -> tuple[AbiEntry, ...]:
    if not isinstance(raw, list):
        raise InvalidAbiShape(f"ABI expected array in {source}, got {type(raw).__name__}")
    return tuple(parse_entry(item, f"{source}[{index}]") for index, item in enumerate(raw))


def parse_entry(raw: Any, where: str = "entry") -> AbiEntry:
    if not isinstance(raw, dict):
        raise MalformedEntry(f"{where}: ABI entry must be an object, got {type(raw).__name__}")

    # Solidity's ABI JSON allows `type` to be omitted for functions.
    kind = raw.get("type", "function")
    if kind not in ENTRY_KINDS:
        raise MalformedEntry(f"{where}: unknown ABI entry type {kind!r}")

    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise MalformedEntry(f"{where}: `name` must be a string")

    # Descriptive only; check_abi_files.py lints the value.
    mutability = raw.get("stateMutability")

    return AbiEntry(
        kind=kind,
        raw=raw,
        name=name,
        inputs=_parse_parameter_list(raw, "inputs", where),
        outputs=_parse_parameter_list(raw, "outputs", where),
        state_mutability=mutability if isinstance(mutability, str) else None,
        anonymous=bool(raw.get("anonymous", False)),
    )


def _parse_parameter_list(raw: dict[str, Any], key: str, where: str) -> tuple[Parameter, ...] | None:
    if key not in raw or raw[key] is None:
        return None
    items = raw[key]
    if not isinstance(items, list):
        raise MalformedEntry(f"{where}: `{key}` must be an array")
    return tuple(parse_parameter(item, f"{where}.{key}[{i}]") for i, item in enumerate(items))


def parse_parameter(raw: Any, where: str = "parameter") -> Parameter:
    if not isinstance(raw, dict):
        raise MalformedEntry(f"{where}: parameter must be an object")
    type_name = raw.get("type")
    if not isinstance(type_name, str) or not type_name:
        raise MalformedEntry(f"{where}: parameter is missing a `type` string")
    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise MalformedEntry(f"{where}: parameter `name` must be a string")
    indexed = raw.get("indexed")
    return Parameter(
        type=type_name,
        name=name,
        components=_parse_parameter_list(raw, "components", where),
        indexed=indexed if isinstance(indexed, bool) else None,
    )
