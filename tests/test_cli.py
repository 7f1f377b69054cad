import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from disease_sync.models.sync import Full, Incremental, HealthCheck, Preview, Verify
from main import parse_args

class TestParseArgs(unittest.TestCase):
    def test_no_command_is_full_sync(self):
        self.assertEqual(parse_args([]), Full())

    def test_incremental_defaults_to_24_hours(self):
        self.assertEqual(parse_args(["incremental"]), Incremental(24))

    def test_incremental_with_hours(self):
        self.assertEqual(parse_args(["incremental", "72"]), Incremental(72))

    def test_incremental_with_bad_hours_uses_default(self):
        self.assertEqual(parse_args(["incremental", "soon"]), Incremental(24))

    def test_read_only_commands(self):
        self.assertEqual(parse_args(["health"]), HealthCheck())
        self.assertEqual(parse_args(["preview"]), Preview())
        self.assertEqual(parse_args(["verify"]), Verify())

    def test_help_exits_zero(self):
        for flag in ("--help", "-h"):
            out = io.StringIO()
            with redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
                parse_args([flag])
            self.assertEqual(ctx.exception.code, 0)
            self.assertIn("Usage:", out.getvalue())

    def test_unknown_command_prints_usage_to_stderr_and_exits_one(self):
        err = io.StringIO()
        with redirect_stderr(err), self.assertRaises(SystemExit) as ctx:
            parse_args(["resync"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Unknown command: resync", err.getvalue())
        self.assertIn("Usage:", err.getvalue())

if __name__ == '__main__':
    unittest.main()
