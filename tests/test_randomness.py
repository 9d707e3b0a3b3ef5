from __future__ import annotations

import hashlib
import unittest

from escrowdraw.errors import StateError, ValidationError
from escrowdraw.escrow import (
    EntropySource,
    FixedEntropy,
    derive_random_number,
    seal_seed,
    select_winner,
    verify_seed,
)


class CommitmentTests(unittest.TestCase):
    def test_seal_is_stable_hex_digest(self) -> None:
        first = seal_seed("owner", "secret")
        self.assertEqual(first, seal_seed("owner", "secret"))
        self.assertEqual(len(first), 64)
        int(first, 16)

    def test_seal_binds_owner_and_seed(self) -> None:
        sealed = seal_seed("owner", "secret")
        self.assertNotEqual(sealed, seal_seed("other", "secret"))
        self.assertNotEqual(sealed, seal_seed("owner", "secret2"))

    def test_owner_boundary_is_unambiguous(self) -> None:
        self.assertNotEqual(seal_seed("ab", "c"), seal_seed("a", "bc"))

    def test_verify_seed(self) -> None:
        sealed = seal_seed("owner", "secret")
        self.assertTrue(verify_seed(sealed, "owner", "secret"))
        self.assertTrue(verify_seed(sealed.upper(), "owner", "secret"))
        self.assertFalse(verify_seed(sealed, "owner", "guess"))
        self.assertFalse(verify_seed(sealed, "intruder", "secret"))

    def test_non_string_seed_raises(self) -> None:
        with self.assertRaises(TypeError):
            seal_seed("owner", b"secret")  # type: ignore[arg-type]


class WinnerSelectionTests(unittest.TestCase):
    block_id = b"\x11" * 32

    def test_random_number_mixes_block_and_seed(self) -> None:
        expected = int.from_bytes(
            hashlib.sha256(self.block_id + b"seed").digest(), "big"
        )
        self.assertEqual(derive_random_number("seed", self.block_id), expected)
        self.assertNotEqual(
            derive_random_number("seed", b"\x12" * 32),
            derive_random_number("seed", self.block_id),
        )

    def test_selection_is_deterministic(self) -> None:
        slots = ["a", "b", "b", "c", "a"]
        entropy = FixedEntropy(self.block_id)
        first = select_winner("seed", slots, entropy)
        second = select_winner("seed", list(slots), FixedEntropy(self.block_id))
        self.assertEqual(first, second)
        self.assertEqual(first.index, first.random_number % len(slots))
        self.assertEqual(first.winner, slots[first.index])
        self.assertEqual(first.block_id, self.block_id)

    def test_single_slot_always_wins(self) -> None:
        for seed in ("x", "y", "z"):
            selection = select_winner(seed, ["solo"], FixedEntropy(self.block_id))
            self.assertEqual(selection.index, 0)
            self.assertEqual(selection.winner, "solo")

    def test_empty_slots_raise(self) -> None:
        with self.assertRaises(StateError):
            select_winner("seed", [], FixedEntropy(self.block_id))


class FixedEntropyTests(unittest.TestCase):
    def test_accepts_hex_with_prefix(self) -> None:
        entropy = FixedEntropy("0xABCD")
        self.assertEqual(entropy.previous_block_id(), b"\xab\xcd")
        self.assertIsInstance(entropy, EntropySource)

    def test_rejects_empty_and_malformed(self) -> None:
        with self.assertRaises(ValidationError):
            FixedEntropy(b"")
        with self.assertRaises(ValidationError):
            FixedEntropy("0xzz")


if __name__ == "__main__":
    unittest.main()
