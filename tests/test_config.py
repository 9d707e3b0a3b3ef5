import unittest

from escrowdraw.config import (
    ENV_BET_FEE,
    ENV_BET_PRICE,
    ENV_PURCHASE_RATIO,
    DrawConfig,
    load_draw_config,
)
from escrowdraw.errors import AuthorizationError, ValidationError
from escrowdraw.ownership import OwnershipCapability


class TestDrawConfig(unittest.TestCase):
    def test_slot_cost(self):
        config = DrawConfig(purchase_ratio=100, bet_price=10, bet_fee=1)
        self.assertEqual(config.slot_cost, 11)

    def test_zero_ratio_rejected(self):
        with self.assertRaises(ValidationError):
            DrawConfig(purchase_ratio=0, bet_price=10, bet_fee=1)

    def test_negative_or_non_int_rejected(self):
        with self.assertRaises(ValidationError):
            DrawConfig(purchase_ratio=1, bet_price=-1, bet_fee=0)
        with self.assertRaises(ValidationError):
            DrawConfig(purchase_ratio=1, bet_price=1.5, bet_fee=0)  # type: ignore[arg-type]

    def test_free_bets_are_allowed(self):
        config = DrawConfig(purchase_ratio=1, bet_price=0, bet_fee=0)
        self.assertEqual(config.slot_cost, 0)


class TestLoadDrawConfig(unittest.TestCase):
    def test_reads_mapping(self):
        config = load_draw_config(
            {ENV_PURCHASE_RATIO: "100", ENV_BET_PRICE: " 10 ", ENV_BET_FEE: "1"}
        )
        self.assertEqual(config, DrawConfig(100, 10, 1))

    def test_missing_variable(self):
        with self.assertRaisesRegex(ValueError, ENV_BET_FEE):
            load_draw_config({ENV_PURCHASE_RATIO: "100", ENV_BET_PRICE: "10"})

    def test_non_integer_variable(self):
        with self.assertRaises(ValueError):
            load_draw_config(
                {ENV_PURCHASE_RATIO: "1e2", ENV_BET_PRICE: "10", ENV_BET_FEE: "1"}
            )

    def test_validation_errors_are_value_errors(self):
        with self.assertRaises(ValueError):
            load_draw_config(
                {ENV_PURCHASE_RATIO: "0", ENV_BET_PRICE: "10", ENV_BET_FEE: "1"}
            )


class TestOwnershipCapability(unittest.TestCase):
    def test_require_owner(self):
        ownership = OwnershipCapability("alice")
        self.assertTrue(ownership.is_owner("alice"))
        self.assertFalse(ownership.is_owner("bob"))
        ownership.require_owner("alice")
        with self.assertRaises(AuthorizationError):
            ownership.require_owner("bob")

    def test_transfer(self):
        ownership = OwnershipCapability("alice")
        with self.assertRaises(AuthorizationError):
            ownership.transfer_ownership("bob", "bob")
        ownership.transfer_ownership("alice", "bob")
        self.assertEqual(ownership.current_owner(), "bob")
        self.assertFalse(ownership.is_owner("alice"))

    def test_empty_owner_rejected(self):
        with self.assertRaises(ValidationError):
            OwnershipCapability("")
        with self.assertRaises(TypeError):
            OwnershipCapability(None)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
