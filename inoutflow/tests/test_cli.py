"""Smoke tests for the inoutflow CLI."""

import json
import os
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from types import SimpleNamespace
from unittest import mock

from inoutflow import cli
from inoutflow.errors import ApiError

ADDRESS = "0x" + "a" * 40
OTHER = "0x" + "b" * 40


def tx(frm, to, value, is_error=False):
    return SimpleNamespace(from_address=frm, to_address=to, value=value, is_error=is_error)


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        env = mock.patch.dict(
            os.environ,
            {"INOUTFLOW_BSCSCAN_APIKEY": "KEY", "INOUTFLOW_POLYGONSCAN_APIKEY": "POLY"},
            clear=True,
        )
        env.start()
        self.addCleanup(env.stop)
        self.dotenv = mock.patch("inoutflow.config.load_dotenv").start()
        self.normal = mock.patch.object(
            cli,
            "get_list_normal_transactions",
            return_value=[tx(OTHER, ADDRESS, 3 * 10**18), tx(ADDRESS, OTHER, 10**18), tx(OTHER, ADDRESS, 5, is_error=True)],
        ).start()
        self.internal = mock.patch.object(
            cli,
            "get_list_internal_transactions",
            return_value=[tx(OTHER, ADDRESS, 5 * 10**17)],
        ).start()
        self.balance = mock.patch.object(cli, "get_balance", return_value=25 * 10**17).start()
        self.addCleanup(mock.patch.stopall)

    def _run(self, args):
        out, err = StringIO(), StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(args)
        return code, out.getvalue(), err.getvalue()

    def test_text_report(self) -> None:
        code, output, _ = self._run(["0x" + "A" * 40, "--chain", "BSC"])

        self.assertEqual(code, 0)
        self.assertIn("Found 3 transactions! (1 failed)", output)
        self.assertIn("- BNB outflow: 1 BNBs", output)
        self.assertIn("- BNB inflow: 3 BNBs", output)
        self.assertIn("- BNB balance: 2 BNBs", output)
        self.assertIn("Found 1 internal transactions!", output)
        self.assertIn("Total balance: 2.5 BNBs", output)
        self.assertIn("On-chain balance: 2.5 BNBs", output)
        config = self.normal.call_args[0][0]
        self.assertEqual(self.normal.call_args[0][1], ADDRESS)
        self.assertEqual(config.api_key, "KEY")

    def test_json_report(self) -> None:
        code, output, _ = self._run([ADDRESS, "-c", "bsc", "--json", "--include-failed"])

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["token"], "BNB")
        self.assertEqual(payload["normal"]["inflow_wei"], str(3 * 10**18 + 5))
        self.assertEqual(payload["total"]["net"], "2.500000000000000005")
        self.assertEqual(payload["balance"], "2.5")

    def test_results_cap_zero_disables_cap(self) -> None:
        self._run([ADDRESS, "-c", "bsc", "--results-cap", "0", "--page-size", "2000"])

        config = self.normal.call_args[0][0]
        self.assertIsNone(config.results_cap)
        self.assertEqual(config.page_size, 2000)

    def test_malformed_address_exits_1(self) -> None:
        code, _, err = self._run(["0x1234", "-c", "bsc"])

        self.assertEqual(code, 1)
        self.assertIn("Malformed address", err)
        self.normal.assert_not_called()

    def test_missing_api_key_exits_1(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            code, _, err = self._run([ADDRESS, "-c", "ethereum"])

        self.assertEqual(code, 1)
        self.assertIn("INOUTFLOW_ETHERSCAN_APIKEY", err)

    def test_api_error_exits_1(self) -> None:
        self.internal.side_effect = ApiError("message:NOTOK (Invalid API Key)")
        code, output, err = self._run([ADDRESS, "-c", "polygon"])

        self.assertEqual(code, 1)
        self.assertIn("Invalid API Key", err)
        self.assertEqual(output, "")
        self.assertEqual(self.normal.call_args[0][0].api_key, "POLY")
        self.balance.assert_not_called()
        self.dotenv.assert_called_once_with(".env")

    def test_unknown_chain_exits_1(self) -> None:
        code, output, err = self._run([ADDRESS, "-c", "solana"])

        self.assertEqual(code, 1)
        self.assertIn("invalid choice", err)
        self.assertEqual(output, "")
        self.normal.assert_not_called()

    def test_missing_address_exits_1(self) -> None:
        code, _, err = self._run(["-c", "bsc"])

        self.assertEqual(code, 1)
        self.assertIn("address", err)

    def test_missing_chain_exits_1(self) -> None:
        code, _, _ = self._run([ADDRESS])
        self.assertEqual(code, 1)

    def test_help_exits_0(self) -> None:
        code, output, _ = self._run(["--help"])

        self.assertEqual(code, 0)
        self.assertIn("--chain", output)


if __name__ == "__main__":
    unittest.main()
