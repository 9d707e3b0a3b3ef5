import os
import unittest
from unittest.mock import patch

import requests

from escrowdraw.chain.api import ChainClient
from escrowdraw.chain.entropy import ChainBlockEntropy
from escrowdraw.chain.utils import open_session, parse_hex_quantity
from escrowdraw.escrow import EntropySource

BLOCK_HASH = "0x" + "ab" * 32


class DummyResponse:
    def __init__(self, json_data=None, error: Exception | None = None):
        self._json = json_data
        self._error = error

    def json(self):
        return self._json

    def raise_for_status(self):
        if self._error is not None:
            raise self._error


class DummySession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        return self.responses.pop(0)


def rpc_result(result):
    return DummyResponse(json_data={"jsonrpc": "2.0", "id": 1, "result": result})


class TestChainClient(unittest.TestCase):
    @patch("escrowdraw.chain.api.open_session")
    @patch("escrowdraw.chain.api.load_dotenv")
    def test_requires_rpc_url(self, mock_load_dotenv, mock_open_session):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValueError):
                ChainClient()
        mock_open_session.assert_not_called()

    @patch("escrowdraw.chain.api.open_session")
    def test_rpc_payload_and_block_number(self, mock_open_session):
        session = DummySession([rpc_result("0x1b4")])
        mock_open_session.return_value = session
        client = ChainClient(rpc_url="https://rpc.example.com/", timeout=5)

        self.assertEqual(client.rpc_url, "https://rpc.example.com")
        self.assertEqual(client.block_number(), 436)

        call = session.calls[0]
        self.assertEqual(call["url"], "https://rpc.example.com")
        self.assertEqual(call["timeout"], 5)
        self.assertEqual(call["json"]["method"], "eth_blockNumber")
        self.assertEqual(call["json"]["params"], [])
        self.assertEqual(call["json"]["jsonrpc"], "2.0")

    @patch("escrowdraw.chain.api.open_session")
    def test_latest_block_hash(self, mock_open_session):
        session = DummySession(
            [rpc_result("0x10"), rpc_result({"number": "0x10", "hash": BLOCK_HASH})]
        )
        mock_open_session.return_value = session
        client = ChainClient(rpc_url="https://rpc.example.com")

        self.assertEqual(client.latest_block_hash(), (16, BLOCK_HASH))
        self.assertEqual(session.calls[1]["json"]["params"], ["0x10", False])

    @patch("escrowdraw.chain.api.open_session")
    def test_missing_block_raises(self, mock_open_session):
        mock_open_session.return_value = DummySession([rpc_result(None)])
        client = ChainClient(rpc_url="https://rpc.example.com")
        with self.assertRaises(RuntimeError):
            client.get_block(7)
        with self.assertRaises(ValueError):
            client.get_block(-1)

    @patch("escrowdraw.chain.api.open_session")
    def test_rpc_error_field_raises(self, mock_open_session):
        response = DummyResponse(
            json_data={"jsonrpc": "2.0", "id": 1, "error": {"message": "boom"}}
        )
        mock_open_session.return_value = DummySession([response])
        client = ChainClient(rpc_url="https://rpc.example.com")
        with self.assertRaisesRegex(RuntimeError, "boom"):
            client.block_number()

    @patch("escrowdraw.chain.api.open_session")
    def test_transport_error_raises(self, mock_open_session):
        response = DummyResponse(error=requests.HTTPError("502 Bad Gateway"))
        mock_open_session.return_value = DummySession([response])
        client = ChainClient(rpc_url="https://rpc.example.com")
        with self.assertLogs("escrowdraw.chain.api", level="CRITICAL"):
            with self.assertRaises(RuntimeError):
                client.block_number()


class TestChainUtils(unittest.TestCase):
    def test_parse_hex_quantity(self):
        self.assertEqual(parse_hex_quantity("0x0"), 0)
        self.assertEqual(parse_hex_quantity("0xff"), 255)
        with self.assertRaises(ValueError):
            parse_hex_quantity("255")
        with self.assertRaises(ValueError):
            parse_hex_quantity(None)

    def test_open_session_headers(self):
        with patch.dict(os.environ, {}, clear=True):
            session = open_session()
            self.assertNotIn("Authorization", session.headers)
            self.assertEqual(session.headers["Content-Type"], "application/json")

            session = open_session(token="secret")
            self.assertEqual(session.headers["Authorization"], "Bearer secret")


class TestChainBlockEntropy(unittest.TestCase):
    def test_returns_latest_hash_bytes(self):
        class StubClient:
            def latest_block_hash(self):
                return 42, BLOCK_HASH

        entropy = ChainBlockEntropy(StubClient())
        self.assertIsInstance(entropy, EntropySource)
        self.assertEqual(entropy.previous_block_id(), b"\xab" * 32)
        self.assertEqual(entropy.last_block_number, 42)

    def test_malformed_hash_raises(self):
        class StubClient:
            def latest_block_hash(self):
                return 1, "0xnothex"

        entropy = ChainBlockEntropy(StubClient())
        with self.assertRaises(RuntimeError):
            entropy.previous_block_id()
        self.assertIsNone(entropy.last_block_number)


if __name__ == "__main__":
    unittest.main()
