from __future__ import annotations

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from typing import List

from shopboard import cli
from shopboard.util.tz import normalize_tz_name, resolve_tz


class TestCliContract(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.tmp = Path(self._td.name)
        self.data = self.tmp / "orders.json"
        self.cache = self.tmp / "cache.json"

    def tearDown(self) -> None:
        self._td.cleanup()

    def _run(self, *argv: str) -> str:
        base: List[str] = ["--data", str(self.data), "--cache", str(self.cache), "--tz", "UTC"]
        buf = io.StringIO()
        with redirect_stdout(buf):
            cli.main(base + list(argv))
        return buf.getvalue()

    def _doc(self) -> dict:
        return json.loads(self.data.read_text(encoding="utf-8"))

    def test_add_extend_complete_restore_delete(self) -> None:
        oid = self._run(
            "add", "--customer", "acme", "--details", "gears", "--resource", "Machine A",
            "--start", "2020-01-01T09:00", "--duration", "1:30",
        ).strip()
        rec = self._doc()["orders"][0]
        self.assertEqual(rec["id"], oid)
        self.assertEqual(rec["startTime"], 1577869200000)
        self.assertEqual(rec["dueTime"], 1577869200000 + 90 * 60000)

        self._run("extend", oid, "2")
        self.assertEqual(self._doc()["orders"][0]["duration"], 3.5)

        self._run("complete", oid, "--result", "fail")
        self.assertIn("completed/fail", self._run("list", "--completed"))
        self.assertEqual(self._run("list").strip(), "No orders.")

        self._run("restore", oid)
        self.assertIn("acme [Machine A]", self._run("list"))

        self._run("delete", oid)
        self._run("delete", oid)
        self.assertEqual(self._doc()["orders"], [])

    def test_timeline_output(self) -> None:
        self._run(
            "add", "--customer", "night", "--resource", "Machine B",
            "--start", "2020-01-01T22:00", "--duration", "4",
        )
        out = self._run("timeline", "--date", "2020-01-02")
        self.assertIn("# 2020-01-02 (resource)", out)
        self.assertIn(" 0.00h + 2.00h  night  22:00 - 02:00", out)

        out = self._run("timeline", "--date", "2020-01-01", "--group", "customer")
        self.assertIn("22.00h + 2.00h  night", out)

    def test_resources_command_updates_cache(self) -> None:
        out = self._run("resources", "--add", "Press", "--remove", "Machine A")
        self.assertIn("Press\tidle", out)
        self.assertNotIn("Machine A", out)
        self.assertEqual(json.loads(self.cache.read_text(encoding="utf-8"))["resources"], ["Machine B", "Operator C", "Press"])
        self.assertEqual(self._doc()["resources"], ["Machine B", "Operator C", "Press"])

    def test_watch_marks_overdue_once(self) -> None:
        oid = self._run(
            "add", "--customer", "late", "--resource", "Machine A",
            "--start", "2020-01-01T09:00", "--duration", "1",
        ).strip()
        out = self._run("watch", "--interval", "0", "--ticks", "3")
        self.assertEqual(out.count(oid), 1)
        self.assertTrue(self._doc()["orders"][0]["notified"])

    def test_user_errors_exit(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("extend", "missing", "1")
        self.assertIn("order not found", str(ctx.exception))

        with self.assertRaises(SystemExit) as ctx:
            self._run("add", "--customer", "x", "--resource", "A", "--duration", "abc")
        self.assertIn("valid duration", str(ctx.exception))

        with self.assertRaises(SystemExit) as ctx:
            self._run("--tz", "No/Such_Zone", "list")
        self.assertIn("Invalid --tz value", str(ctx.exception))

    def test_tz_names(self) -> None:
        self.assertEqual(normalize_tz_name(None), "local")
        self.assertEqual(normalize_tz_name(" System "), "local")
        self.assertEqual(normalize_tz_name("gmt"), "UTC")
        self.assertEqual(normalize_tz_name("Asia/Taipei"), "Asia/Taipei")
        for name in ("native", "utc0", "utc+0"):
            self.assertEqual(normalize_tz_name(name), name)
            with self.assertRaises(ValueError):
                resolve_tz(name)

    def test_requires_a_store(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["--url", "", "--data", "", "--cache", str(self.cache), "list"])
        self.assertIn("No order store configured", str(ctx.exception))


if __name__ == "__main__":
    unittest.main(verbosity=2)
