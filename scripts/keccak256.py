#!/usr/bin/env python3
"""Keccak-256 digests and the selectors derived from them.

Usage:
  keccak256.py "transfer(address,uint256)" "balanceOf(address)"
  keccak256.py --event "Transfer(address,address,uint256)"
  keccak256.py --self-test

Function selectors print as 0xXXXXXXXX, event topics as the full
32-byte digest (0x + 64 hex digits).
"""

from __future__ import annotations

import sys

RATE = 1088 // 8  # 136 bytes
DIGEST_SIZE = 32
FUNCTION_SELECTOR_SIZE = 4

# Keccak-f[1600] round constants
RC = [
    0x0000000000000001, 0x0000000000008082, 0x800000000000808A, 0x8000000080008000,
    0x000000000000808B, 0x0000000080000001, 0x8000000080008081, 0x8000000000008009,
    0x000000000000008A, 0x0000000000000088, 0x0000000080008009, 0x000000008000000A,
    0x000000008000808B, 0x800000000000008B, 0x8000000000008089, 0x8000000000008003,
    0x8000000000008002, 0x8000000000000080, 0x000000000000800A, 0x800000008000000A,
    0x8000000080008081, 0x8000000000008080, 0x0000000080000001, 0x8000000080008008,
]

# Rotation offsets, indexed [x][y]
R = [
    [0, 36, 3, 41, 18],
    [1, 44, 10, 45, 2],
    [62, 6, 43, 15, 61],
    [28, 55, 25, 21, 56],
    [27, 20, 39, 8, 14],
]

MASK64 = (1 << 64) - 1


def _rotl(x: int, n: int) -> int:
    return ((x << n) & MASK64) | (x >> (64 - n))


def keccak_f(state: list[int]) -> None:
    for rc in RC:
        # Theta
        c = [state[x] ^ state[x + 5] ^ state[x + 10] ^ state[x + 15] ^ state[x + 20] for x in range(5)]
        d = [c[(x - 1) % 5] ^ _rotl(c[(x + 1) % 5], 1) for x in range(5)]
        for x in range(5):
            for y in range(5):
                state[x + 5 * y] ^= d[x]

        # Rho + Pi
        b = [0] * 25
        for x in range(5):
            for y in range(5):
                b[y + 5 * ((2 * x + 3 * y) % 5)] = _rotl(state[x + 5 * y], R[x][y])

        # Chi
        for x in range(5):
            for y in range(5):
                state[x + 5 * y] = b[x + 5 * y] ^ ((~b[(x + 1) % 5 + 5 * y]) & b[(x + 2) % 5 + 5 * y])

        # Iota
        state[0] ^= rc


def _absorb(state: list[int], block: bytes) -> None:
    for i in range(0, RATE, 8):
        state[i // 8] ^= int.from_bytes(block[i:i + 8], byteorder="little")
    keccak_f(state)


def keccak_256(data: bytes) -> bytes:
    """Return the 32-byte Keccak-256 digest of ``data``.

    This is the original Keccak padding (0x01) used by Ethereum, not the
    NIST SHA3-256 padding (0x06), so ``hashlib.sha3_256`` is not a
    substitute.
    """
    state = [0] * 25

    offset = 0
    while offset + RATE <= len(data):
        _absorb(state, data[offset:offset + RATE])
        offset += RATE

    # Padding block is always absorbed, even for empty input or exact multiples.
    remaining = data[offset:]
    block = bytearray(RATE)
    block[:len(remaining)] = remaining
    block[len(remaining)] ^= 0x01
    block[RATE - 1] ^= 0x80
    _absorb(state, bytes(block))

    # A 32-byte digest fits inside one squeeze of the 136-byte rate.
    out = bytearray()
    for i in range(0, DIGEST_SIZE, 8):
        out += state[i // 8].to_bytes(8, byteorder="little")
    return bytes(out)


def function_selector(sig: str) -> bytes:
    return keccak_256(sig.encode("utf-8"))[:FUNCTION_SELECTOR_SIZE]


def event_topic(sig: str) -> bytes:
    return keccak_256(sig.encode("utf-8"))


def selector(sig: str) -> str:
    return "0x" + function_selector(sig).hex()


def topic(sig: str) -> str:
    return "0x" + event_topic(sig).hex()


def self_test() -> bool:
    """Check keccak_256 against known digests, selectors and event topics."""
    full_vectors = [
        (b"",
         "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"),
        (b"testing",
         "5f16f4c7f149ac4f9510d9cf8cf384038ad348b3bcdc01915f95de12df9d1b02"),
        (b"transfer(address,uint256)",
         "a9059cbb2ab09eb219583f4a59a5d0623ade346d962bcd4e46b11da047c9049b"),
        (b"balanceOf(address)",
         "70a08231b98ef4ca268c9cc3f6b4590e4bfec28280db06bb5d45e689f2a360be"),
        # ERC-20 event topics
        (b"Transfer(address,address,uint256)",
         "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"),
        (b"Approval(address,address,uint256)",
         "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"),
    ]

    # First 4 bytes only, as reported by solc --hashes
    selector_vectors = [
        (b"totalSupply()",          "18160ddd"),
        (b"approve(address,uint256)", "095ea7b3"),
        (b"allowance(address,address)", "dd62ed3e"),
        (b"transferFrom(address,address,uint256)", "23b872dd"),
        (b"transferOwnership(address)", "f2fde38b"),
    ]
    failures: list[tuple[str, str, str]] = []

    for data, expected in full_vectors:
        actual = keccak_256(data).hex()
        if actual != expected:
            failures.append((data.decode("utf-8"), expected, actual))

    for data, expected in selector_vectors:
        actual = keccak_256(data)[:FUNCTION_SELECTOR_SIZE].hex()
        if actual != expected:
            failures.append((data.decode("utf-8"), expected, actual))

    total = len(full_vectors) + len(selector_vectors)
    for label, expected, actual in failures:
        print(f"FAIL: keccak256(\"{label}\")", file=sys.stderr)
        print(f"  expected: 0x{expected}", file=sys.stderr)
        print(f"  actual:   0x{actual}", file=sys.stderr)
    if failures:
        print(f"Self-test: {total - len(failures)}/{total} passed, {len(failures)} FAILED", file=sys.stderr)
        return False
    print(f"Self-test: {total}/{total} passed")
    return True


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if args == ["--self-test"]:
        return 0 if self_test() else 1
    as_event = False
    if args and args[0] == "--event":
        as_event = True
        args = args[1:]
    if not args:
        print("Usage: keccak256.py [--self-test | [--event] <signature> ...]", file=sys.stderr)
        return 2
    for sig in args:
        print(topic(sig) if as_event else selector(sig))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
