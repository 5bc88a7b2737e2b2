import os
import tempfile
import unittest
from unittest.mock import Mock

from ledgerkit.context import ResolvedContext, resolve
from ledgerkit.errors import ClientError
from ledgerkit.grammar import root_command
from ledgerkit.keys import parse_privkey
from ledgerkit.matcher import CommandMatcher, InvocationLevel, MatchedInvocation
from ledgerkit.processor import (
    AmendBalance,
    build_command,
    join_h256_kv,
    process,
    read_content,
    run_invocation,
)
from ledgerkit.session import SessionConfig

ADDRESS = "0x" + "ab" * 20
KEY = "0x" + "00" * 31 + "01"
H256_A = "0x" + "0a" * 32
H256_B = "0x" + "0b" * 32
H256_C = "0x" + "0c" * 32
H256_D = "0x" + "0d" * 32


class ProcessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.matcher = CommandMatcher(root_command())
        self.session = SessionConfig(url="http://session:1337")
        self.client = Mock()

    def _process(self, argv: list[str]):
        matched = self.matcher.match(argv)
        context = resolve(matched, self.session)
        return process(matched, context, self.client)

    def test_balance_dispatches_parsed_values(self) -> None:
        self.client.amend_balance.return_value = {"hash": "0x01"}
        result = self._process(
            [
                "amend", "balance", "--address", ADDRESS, "--balance", "1000",
                "--admin-private", KEY, "--chain-id", "2", "--quota", "0x64",
            ]
        )
        self.assertTrue(result.success)
        self.assertEqual(result.data, {"hash": "0x01"})
        self.client.amend_balance.assert_called_once_with(bytes.fromhex("ab" * 20), 1000, 100)
        self.client.set_chain_id.assert_called_once_with(2)
        self.client.set_private_key.assert_called_once_with(parse_privkey(KEY, "secp256k1"))
        self.client.set_uri.assert_called_once_with("http://session:1337")
        self.client.amend_code.assert_not_called()
        self.client.amend_abi.assert_not_called()

    def test_set_h256_joins_values_in_order(self) -> None:
        self.client.amend_set_h256kv.return_value = "ok"
        self._process(
            [
                "amend", "set-h256", "--address", ADDRESS, "--admin-private", KEY,
                "--kv", H256_B, H256_A, "--kv", H256_D, H256_C,
            ]
        )
        expected = "0b" * 32 + "0a" * 32 + "0d" * 32 + "0c" * 32
        self.client.amend_set_h256kv.assert_called_once_with(bytes.fromhex("ab" * 20), expected, None)

    def test_join_keeps_duplicates(self) -> None:
        self.assertEqual(join_h256_kv(["0xaa", "0x11", "0xaa", "0x11"]), "aa11aa11")

    def test_abi_inline_content(self) -> None:
        self._process(["amend", "abi", "--address", ADDRESS, "--content", "[1]", "--admin-private", KEY])
        self.client.amend_abi.assert_called_once_with(bytes.fromhex("ab" * 20), "[1]", None)

    def test_abi_content_from_file_is_verbatim(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "abi.json")
            with open(path, "w", encoding="utf-8", newline="") as handle:
                handle.write('  [{"type": "function"}]\r\n')
            self._process(["amend", "abi", "--address", ADDRESS, "--path", path, "--admin-private", KEY])
        self.client.amend_abi.assert_called_once_with(
            bytes.fromhex("ab" * 20), '  [{"type": "function"}]\r\n', None
        )

    def test_abi_unreadable_file_skips_operation(self) -> None:
        result = self._process(
            ["amend", "abi", "--address", ADDRESS, "--path", "/nonexistent/abi.json", "--admin-private", KEY]
        )
        self.assertFalse(result.success)
        self.assertIn("/nonexistent/abi.json", result.message)
        self.client.amend_abi.assert_not_called()

    def test_get_h256_passes_parsed_height(self) -> None:
        self._process(["amend", "get-h256", "--address", ADDRESS, "--key", H256_A, "--height", "0x10"])
        self.client.amend_get_h256kv.assert_called_once_with(
            bytes.fromhex("ab" * 20), bytes.fromhex("0a" * 32), 16
        )
        self.client.set_private_key.assert_called_once_with(None)
        self.client.set_chain_id.assert_called_once_with(None)

    def test_client_error_surfaces_verbatim(self) -> None:
        self.client.amend_code.side_effect = ClientError("remote rejected: not admin")
        result = self._process(
            ["amend", "code", "--address", ADDRESS, "--content", "0x6060", "--admin-private", KEY]
        )
        self.assertFalse(result.success)
        self.assertEqual(result.message, "remote rejected: not admin")

    def test_unknown_leaf_returns_usage(self) -> None:
        matched = MatchedInvocation(
            levels=(InvocationLevel("ledgerkit"), InvocationLevel("amend"), InvocationLevel("nope"))
        )
        context = ResolvedContext(url="http://x", algorithm="secp256k1", debug=False, color=False)
        result = process(matched, context, self.client, usage="usage: amend <command>")
        self.assertFalse(result.success)
        self.assertEqual(result.message, "usage: amend <command>")
        self.assertEqual(self.client.method_calls, [])

    def test_build_command_variant(self) -> None:
        matched = self.matcher.match(
            ["amend", "balance", "--address", ADDRESS, "--balance", "0xff", "--admin-private", KEY]
        )
        self.assertEqual(
            build_command(matched),
            AmendBalance(address=bytes.fromhex("ab" * 20), balance=255),
        )


class ReadContentTests(unittest.TestCase):
    def test_inline_wins_over_path(self) -> None:
        self.assertEqual(read_content("inline", "/nonexistent"), "inline")


class RunInvocationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.matcher = CommandMatcher(root_command())
        self.client = Mock()
        self.printer = Mock()

    def test_success_prints_and_caches(self) -> None:
        session = SessionConfig()
        self.client.amend_balance.return_value = {"status": "ok"}
        matched = self.matcher.match(
            ["amend", "balance", "--address", ADDRESS, "--balance", "5", "--admin-private", KEY, "--no-color"]
        )
        result = run_invocation(matched, session, self.client, self.printer)
        self.assertTrue(result.success)
        self.printer.println.assert_called_once_with({"status": "ok"}, False)
        self.assertEqual(session.last_response, {"status": "ok"})

    def test_failure_leaves_session_untouched(self) -> None:
        session = SessionConfig(last_response="previous")
        self.client.amend_balance.side_effect = ClientError("boom")
        matched = self.matcher.match(
            ["amend", "balance", "--address", ADDRESS, "--balance", "5", "--admin-private", KEY]
        )
        result = run_invocation(matched, session, self.client, self.printer)
        self.assertFalse(result.success)
        self.assertEqual(session.last_response, "previous")
        self.printer.println.assert_not_called()

    def test_resolution_error_stops_before_client(self) -> None:
        session = SessionConfig(algorithm="ed25519")
        matched = self.matcher.match(
            ["amend", "balance", "--address", ADDRESS, "--balance", "5", "--admin-private", KEY]
        )
        result = run_invocation(matched, session, self.client, self.printer)
        self.assertFalse(result.success)
        self.assertIn("ed25519", result.message)
        self.assertEqual(self.client.method_calls, [])


if __name__ == "__main__":
    unittest.main()
