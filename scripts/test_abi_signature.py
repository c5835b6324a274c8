#!/usr/bin/env python3
from __future__ import annotations

import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

SCRIPT_DIR = Path(__file__).resolve().parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

import abi_signature
from abi_model import MalformedEntry, MalformedType, parse_entry, parse_parameter
from abi_signature import canonical_signature, canonical_type, is_eligible, selector_hex, selector_of

TRANSFER_FN = {
    "type": "function",
    "name": "transfer",
    "inputs": [{"name": "to", "type": "address"}, {"name": "value", "type": "uint256"}],
    "outputs": [{"name": "", "type": "bool"}],
    "stateMutability": "nonpayable",
}

TRANSFER_EVENT = {
    "type": "event",
    "name": "Transfer",
    "inputs": [
        {"name": "from", "type": "address", "indexed": True},
        {"name": "to", "type": "address", "indexed": True},
        {"name": "value", "type": "uint256", "indexed": False},
    ],
    "anonymous": False,
}


class CanonicalTypeTests(unittest.TestCase):
    def test_elementary_type_is_verbatim(self) -> None:
        self.assertEqual(canonical_type(parse_parameter({"type": "uint256[3][]"})), "uint256[3][]")
        # Aliases are not normalized.
        self.assertEqual(canonical_type(parse_parameter({"type": "uint"})), "uint")

    def test_tuple_array_appends_suffix_after_components(self) -> None:
        param = parse_parameter(
            {
                "type": "tuple[]",
                "components": [{"name": "a", "type": "uint256"}, {"name": "b", "type": "address"}],
            }
        )
        self.assertEqual(canonical_type(param), "(uint256,address)[]")

    def test_nested_tuples(self) -> None:
        param = parse_parameter(
            {
                "type": "tuple[2][]",
                "components": [
                    {"type": "bytes32"},
                    {
                        "type": "tuple",
                        "components": [{"type": "bool"}, {"type": "string[]"}],
                    },
                ],
            }
        )
        self.assertEqual(canonical_type(param), "(bytes32,(bool,string[]))[2][]")

    def test_tuple_without_components_is_malformed(self) -> None:
        with self.assertRaises(MalformedType):
            canonical_type(parse_parameter({"name": "order", "type": "tuple"}))

    def test_tuple_with_empty_components_is_malformed(self) -> None:
        with self.assertRaises(MalformedType):
            canonical_type(parse_parameter({"type": "tuple[]", "components": []}))


class CanonicalSignatureTests(unittest.TestCase):
    def test_signature_uses_types_only(self) -> None:
        self.assertEqual(canonical_signature(parse_entry(TRANSFER_FN)), "transfer(address,uint256)")
        self.assertEqual(
            canonical_signature(parse_entry(TRANSFER_EVENT)),
            "Transfer(address,address,uint256)",
        )

    def test_no_inputs_gives_empty_parens(self) -> None:
        entry = parse_entry({"type": "function", "name": "totalSupply", "inputs": []})
        self.assertEqual(canonical_signature(entry), "totalSupply()")

    def test_tuple_inputs_are_expanded(self) -> None:
        entry = parse_entry(
            {
                "type": "function",
                "name": "fill",
                "inputs": [
                    {
                        "name": "order",
                        "type": "tuple",
                        "components": [{"type": "address"}, {"type": "uint256"}],
                    },
                    {"name": "sig", "type": "bytes"},
                ],
            }
        )
        self.assertEqual(canonical_signature(entry), "fill((address,uint256),bytes)")

    def test_missing_inputs_is_malformed(self) -> None:
        with self.assertRaises(MalformedEntry):
            canonical_signature(parse_entry({"type": "function", "name": "f"}))


class SelectorTests(unittest.TestCase):
    def test_known_function_vectors(self) -> None:
        self.assertEqual(selector_hex(parse_entry(TRANSFER_FN)), "0xa9059cbb")
        balance_of = parse_entry(
            {"type": "function", "name": "balanceOf", "inputs": [{"name": "owner", "type": "address"}]}
        )
        self.assertEqual(selector_hex(balance_of), "0x70a08231")

    def test_known_event_vectors(self) -> None:
        self.assertEqual(
            selector_hex(parse_entry(TRANSFER_EVENT)),
            "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",
        )
        approval = dict(TRANSFER_EVENT, name="Approval")
        self.assertEqual(
            selector_hex(parse_entry(approval)),
            "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925",
        )

    def test_selector_widths(self) -> None:
        self.assertEqual(len(selector_of(parse_entry(TRANSFER_FN))), 4)
        self.assertEqual(len(selector_of(parse_entry(TRANSFER_EVENT))), 32)

    def test_selector_ignores_names_indexed_and_mutability(self) -> None:
        renamed = {
            "type": "function",
            "name": "transfer",
            "inputs": [{"name": "recipient", "type": "address"}, {"type": "uint256"}],
            "outputs": [{"name": "ok", "type": "bool"}, {"type": "uint8"}],
            "stateMutability": "payable",
        }
        self.assertEqual(selector_of(parse_entry(renamed)), selector_of(parse_entry(TRANSFER_FN)))

        unindexed = dict(
            TRANSFER_EVENT,
            inputs=[{"name": n, "type": t} for n, t in (("a", "address"), ("b", "address"), ("c", "uint256"))],
        )
        self.assertEqual(selector_of(parse_entry(unindexed)), selector_of(parse_entry(TRANSFER_EVENT)))

    def test_non_selector_kinds_are_rejected(self) -> None:
        with self.assertRaises(MalformedEntry):
            selector_of(parse_entry({"type": "error", "name": "Oops", "inputs": []}))


class EligibilityTests(unittest.TestCase):
    def test_functions_and_events_with_inputs(self) -> None:
        self.assertTrue(is_eligible(parse_entry(TRANSFER_FN)))
        self.assertTrue(is_eligible(parse_entry(TRANSFER_EVENT)))

    def test_empty_inputs_counts_as_present(self) -> None:
        self.assertTrue(is_eligible(parse_entry({"type": "function", "name": "f", "inputs": []})))

    def test_missing_inputs_is_skipped(self) -> None:
        self.assertFalse(is_eligible(parse_entry({"type": "function", "name": "f"})))
        self.assertFalse(is_eligible(parse_entry({"type": "event", "name": "E"})))

    def test_other_kinds_are_skipped(self) -> None:
        for raw in (
            {"type": "constructor", "inputs": [{"type": "address"}]},
            {"type": "fallback", "stateMutability": "payable"},
            {"type": "receive", "stateMutability": "payable"},
            {"type": "error", "name": "Unauthorized", "inputs": []},
        ):
            with self.subTest(kind=raw["type"]):
                self.assertFalse(is_eligible(parse_entry(raw)))

    def test_nameless_function_is_skipped(self) -> None:
        self.assertFalse(is_eligible(parse_entry({"type": "function", "inputs": []})))


class MainTests(unittest.TestCase):
    def test_main_lists_selectors(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / "Token.json"
            path.write_text(json.dumps([TRANSFER_FN, {"type": "constructor", "inputs": []}]), encoding="utf-8")
            stdout = io.StringIO()
            with redirect_stdout(stdout):
                rc = abi_signature.main([str(path)])
        self.assertEqual(rc, 0)
        self.assertEqual(stdout.getvalue().strip(), "0xa9059cbb  transfer(address,uint256)")


if __name__ == "__main__":
    unittest.main()
