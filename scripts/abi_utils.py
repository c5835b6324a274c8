#!/usr/bin/env python3
"""Shared paths and reporting helpers for the ABI selector tools."""

from __future__ import annotations

import json
import os
import sys
import tempfile
from pathlib import Path

# Path constants
ROOT = Path(__file__).resolve().parents[1]
ABI_DIR = ROOT / "abis"
DIST_DIR = ROOT / "dist"

# Output layout under the dist directory
FUNCTIONS_SUBDIR = "functions"
EVENTS_SUBDIR = "events"
CONTRACTS_SUBDIR = "contracts"
MANIFEST_NAME = "contracts.json"


def die(msg: str) -> None:
    """Print error message and exit with status 1.

    Args:
        msg: Error message to print.
    """
    print(f"error: {msg}", file=sys.stderr)
    raise SystemExit(1)


def warn(msg: str) -> None:
    print(f"warning: {msg}", file=sys.stderr)


def report_errors(errors: list[str], message: str) -> None:
    """Print error list to stderr and exit with code 1.

    Args:
        errors: List of error messages to report.
        message: Header message to print before error list.
    """
    if errors:
        print(f"{message}:", file=sys.stderr)
        for item in errors:
            print(f"  - {item}", file=sys.stderr)
        raise SystemExit(1)


def dump_json(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False) + "\n"


def write_json(path: Path, value: object) -> None:
    """Serialize ``value`` to ``path`` as UTF-8 JSON, replacing it atomically.

    The temp file lives in the destination directory so ``os.replace``
    never crosses a filesystem boundary. This protects readers from a
    half-written file; it does not serialize concurrent writers.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(dump_json(value))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
