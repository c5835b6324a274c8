#!/usr/bin/env python3
"""Build the cross-contract selector index from a directory of ABI files.

Every function and event declared by the ABIs is filed under its
selector, so one group file collects the entries of every contract that
shares that signature:

  <out>/functions/0x<8 hex>.json    function selector groups
  <out>/events/0x<64 hex>.json      event topic groups
  <out>/contracts/<name>.json       copy of each processed ABI
  <out>/contracts.json              names of the contracts processed this run

Group files are read, extended and written back, so members recorded by
earlier runs are kept. The read-merge-write is not locked: only one
build may run against an output directory at a time.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from abi_model import (
    AbiEntry,
    AbiIndexError,
    Contract,
    CorruptIndex,
    InvalidJson,
    load_contract,
    load_json,
)
from abi_signature import canonical_signature, is_eligible, selector_of
from abi_utils import (
    ABI_DIR,
    CONTRACTS_SUBDIR,
    DIST_DIR,
    EVENTS_SUBDIR,
    FUNCTIONS_SUBDIR,
    MANIFEST_NAME,
    warn,
    write_json,
)


@dataclass
class BuildReport:
    contracts: list[str] = field(default_factory=list)
    failures: list[tuple[Path, str]] = field(default_factory=list)
    function_members: int = 0
    event_members: int = 0
    skipped_entries: int = 0


class SelectorIndex:
    """Append-only selector groups stored one JSON array per file."""

    def __init__(self, function_dir: Path, event_dir: Path) -> None:
        self.function_dir = function_dir
        self.event_dir = event_dir

    def ensure_dirs(self) -> None:
        self.function_dir.mkdir(parents=True, exist_ok=True)
        self.event_dir.mkdir(parents=True, exist_ok=True)

    def group_path(self, entry: AbiEntry, selector: bytes) -> Path:
        base = self.function_dir if entry.kind == "function" else self.event_dir
        return base / f"0x{selector.hex()}.json"

    def load_group(self, path: Path) -> list[Any]:
        if not path.exists():
            return []
        try:
            group = load_json(path)
        except InvalidJson as exc:
            raise CorruptIndex(f"Selector group {path} is not valid JSON: {exc}") from exc
        if not isinstance(group, list):
            raise CorruptIndex(f"Selector group {path} must be a JSON array, got {type(group).__name__}")
        return group

    def aggregate(self, contract: str, entry: AbiEntry) -> Path | None:
        """File ``entry`` under its selector; return the group path, or None if skipped."""
        if not is_eligible(entry):
            return None
        path = self.group_path(entry, selector_of(entry))
        group = self.load_group(path)
        group.append(entry.tagged(contract))
        write_json(path, group)
        return path


class ContractManifest:
    """Names of the contracts processed in the current run."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.names: list[str] = []

    def record_processed(self, name: str) -> None:
        self.names.append(name)

    def write(self) -> None:
        # Replaced wholesale: the manifest reflects this run only.
        write_json(self.path, self.names)


def list_abi_files(abi_dir: Path) -> list[Path]:
    """Regular, non-hidden files directly under ``abi_dir``, sorted by name."""
    return sorted(
        (p for p in abi_dir.iterdir() if not p.name.startswith(".") and p.is_file()),
        key=lambda p: p.name,
    )


def _check_entries(contract: Contract) -> list[AbiEntry]:
    eligible = [entry for entry in contract.entries if is_eligible(entry)]
    # Canonicalize everything before the first write so a bad entry
    # leaves no partial output behind for its file.
    for entry in eligible:
        canonical_signature(entry)
    return eligible


def build_index(
    abi_dir: Path,
    out_dir: Path,
    *,
    keep_going: bool = False,
    copy_contracts: bool = True,
    log: Callable[[str], None] | None = print,
) -> BuildReport:
    """Index every ABI file in ``abi_dir`` into ``out_dir``.

    With ``keep_going`` a file that fails to load or canonicalize is
    reported and left out of the manifest; otherwise the first failure
    propagates and no manifest is written. A corrupt existing group file
    is always fatal.
    """
    index = SelectorIndex(out_dir / FUNCTIONS_SUBDIR, out_dir / EVENTS_SUBDIR)
    index.ensure_dirs()
    contracts_dir = out_dir / CONTRACTS_SUBDIR
    if copy_contracts:
        contracts_dir.mkdir(parents=True, exist_ok=True)
    manifest = ContractManifest(out_dir / MANIFEST_NAME)
    report = BuildReport()

    for path in list_abi_files(abi_dir):
        try:
            contract = load_contract(path)
            eligible = _check_entries(contract)
        except AbiIndexError as exc:
            if not keep_going:
                raise
            warn(f"skipping {path.name}: {exc}")
            report.failures.append((path, str(exc)))
            continue

        for entry in eligible:
            index.aggregate(contract.name, entry)
            if entry.kind == "function":
                report.function_members += 1
            else:
                report.event_members += 1
        report.skipped_entries += len(contract.entries) - len(eligible)

        if copy_contracts:
            write_json(contracts_dir / f"{contract.name}.json", contract.raw)
        manifest.record_processed(contract.name)
        report.contracts.append(contract.name)
        if log is not None:
            log(f"{contract.name}: {len(eligible)} selector(s)")

    manifest.write()
    return report


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--abi-dir", type=Path, default=ABI_DIR, help="directory of ABI JSON files")
    ap.add_argument("--out-dir", type=Path, default=DIST_DIR, help="index output directory")
    ap.add_argument(
        "--keep-going",
        action="store_true",
        help="skip ABI files that fail to load instead of aborting the run",
    )
    ap.add_argument(
        "--no-contract-copies",
        dest="copy_contracts",
        action="store_false",
        help=f"do not write per-contract ABI copies under {CONTRACTS_SUBDIR}/",
    )
    ap.add_argument("--quiet", action="store_true", help="only print the summary")
    args = ap.parse_args(argv)

    if not args.abi_dir.is_dir():
        print(f"error: ABI directory not found: {args.abi_dir}", file=sys.stderr)
        return 1

    try:
        report = build_index(
            args.abi_dir,
            args.out_dir,
            keep_going=args.keep_going,
            copy_contracts=args.copy_contracts,
            log=None if args.quiet else print,
        )
    except AbiIndexError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(
        f"Indexed {len(report.contracts)} contract(s): "
        f"{report.function_members} function member(s), "
        f"{report.event_members} event member(s), "
        f"{report.skipped_entries} entries skipped."
    )
    if report.failures:
        print(f"{len(report.failures)} file(s) failed:", file=sys.stderr)
        for path, reason in report.failures:
            print(f"  - {path.name}: {reason}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
