#!/usr/bin/env python3
"""Lint the ABI source directory before it is indexed.

Checks JSON syntax, the top-level array shape, entry kinds, names and
inputs of functions/events, parameter types, stateMutability values,
event `indexed` usage and file naming. Every problem is reported at
once; the exit status is 1 if any were found.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

from abi_model import (
    ENTRY_KINDS,
    STATE_MUTABILITIES,
    AbiIndexError,
    InvalidJson,
    load_json,
    parse_entry,
)
from abi_signature import is_eligible, selector_of
from abi_utils import ABI_DIR, die, report_errors

ABI_SUFFIXES = {".json", ".txt", ""}
MAX_FILENAME_LENGTH = 255
MAX_INDEXED_EVENT_PARAMS = 3


def abi_source_files(abi_dir: Path) -> list[Path]:
    return sorted(
        p
        for p in abi_dir.iterdir()
        if p.is_file() and not p.name.startswith(".") and p.suffix.lower() in ABI_SUFFIXES
    )


def _check_filename(path: Path) -> list[str]:
    errors: list[str] = []
    if " " in path.name:
        errors.append(f"{path.name}: file name contains spaces")
    if len(path.name) > MAX_FILENAME_LENGTH:
        errors.append(f"{path.name}: file name longer than {MAX_FILENAME_LENGTH} characters")
    return errors


def _check_params(params: Any, where: str) -> list[str]:
    if not isinstance(params, list):
        return [f"{where}: must be an array"]
    errors: list[str] = []
    for i, param in enumerate(params):
        here = f"{where}[{i}]"
        if not isinstance(param, dict):
            errors.append(f"{here}: parameter must be an object")
            continue
        if not isinstance(param.get("type"), str):
            errors.append(f"{here}: missing `type` string")
            continue
        if param["type"].startswith("tuple"):
            if "components" not in param:
                errors.append(f"{here}: tuple parameter has no `components`")
            else:
                errors.extend(_check_params(param["components"], f"{here}.components"))
    return errors


def _check_event(entry: dict[str, Any], where: str) -> list[str]:
    inputs = entry.get("inputs")
    if not isinstance(inputs, list):
        return []
    errors: list[str] = []
    indexed = 0
    for i, param in enumerate(inputs):
        if not isinstance(param, dict) or "indexed" not in param:
            continue
        if not isinstance(param["indexed"], bool):
            errors.append(f"{where}.inputs[{i}]: `indexed` must be a boolean")
        elif param["indexed"]:
            indexed += 1
    if indexed > MAX_INDEXED_EVENT_PARAMS and not entry.get("anonymous", False):
        errors.append(f"{where}: {indexed} indexed parameters (at most {MAX_INDEXED_EVENT_PARAMS})")
    return errors


def check_entry(entry: Any, where: str) -> list[str]:
    """Return the lint findings for one raw ABI entry."""
    if not isinstance(entry, dict):
        return [f"{where}: entry must be an object"]
    errors: list[str] = []
    kind = entry.get("type", "function")
    if kind not in ENTRY_KINDS:
        return [f"{where}: invalid entry type {kind!r}"]

    if kind in ("function", "event"):
        if not isinstance(entry.get("name"), str):
            errors.append(f"{where}: {kind} is missing a `name` string")
        if "inputs" in entry:
            errors.extend(_check_params(entry["inputs"], f"{where}.inputs"))
    elif "inputs" in entry:
        errors.extend(_check_params(entry["inputs"], f"{where}.inputs"))

    if kind == "function":
        if "outputs" in entry:
            errors.extend(_check_params(entry["outputs"], f"{where}.outputs"))
        mutability = entry.get("stateMutability")
        if mutability is not None and mutability not in STATE_MUTABILITIES:
            errors.append(f"{where}: invalid stateMutability {mutability!r}")
    if kind == "event":
        errors.extend(_check_event(entry, where))

    if errors:
        return errors
    try:
        parsed = parse_entry(entry, where)
        if is_eligible(parsed):
            selector_of(parsed)
    except AbiIndexError as exc:
        errors.append(str(exc))
    return errors


def check_file(path: Path, stats: dict[str, int] | None = None) -> list[str]:
    errors = _check_filename(path)
    if path.stat().st_size == 0:
        errors.append(f"{path.name}: file is empty")
        return errors
    try:
        raw = load_json(path)
    except InvalidJson as exc:
        errors.append(f"{path.name}: {exc}")
        return errors
    if not isinstance(raw, list):
        errors.append(f"{path.name}: ABI expected array, got {type(raw).__name__}")
        return errors
    if not raw:
        errors.append(f"{path.name}: ABI array has no entries")
    for index, entry in enumerate(raw):
        errors.extend(check_entry(entry, f"{path.name}[{index}]"))
        if stats is not None and isinstance(entry, dict):
            kind = entry.get("type", "function")
            if kind in ("function", "event"):
                stats[kind] = stats.get(kind, 0) + 1
    return errors


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Lint ABI source files.")
    ap.add_argument("--abi-dir", type=Path, default=ABI_DIR)
    args = ap.parse_args(argv)

    if not args.abi_dir.is_dir():
        die(f"ABI directory not found: {args.abi_dir}")

    files = abi_source_files(args.abi_dir)
    stats: dict[str, int] = {}
    errors: list[str] = []
    for path in files:
        errors.extend(check_file(path, stats))

    print(
        f"ABI files: {len(files)}, functions: {stats.get('function', 0)}, "
        f"events: {stats.get('event', 0)}"
    )
    report_errors(errors, "ABI check failed")
    print("ABI check passed.")


if __name__ == "__main__":
    main()
