import logging
import unittest

from remote_ssh.errors import CloseError
from remote_ssh.utils.release import close_all, close_quietly


class CloseAllTests(unittest.TestCase):
    def test_calls_every_closer_in_order(self) -> None:
        calls = []
        close_all(lambda: calls.append("a"), lambda: calls.append("b"), what="pair")
        self.assertEqual(calls, ["a", "b"])

    def test_aggregates_failures(self) -> None:
        calls = []

        def fail(message: str):
            def closer():
                calls.append(message)
                raise OSError(message)
            return closer

        with self.assertRaises(CloseError) as ctx:
            close_all(fail("first"), lambda: calls.append("middle"), fail("last"), what="trio")
        self.assertEqual(calls, ["first", "middle", "last"])
        self.assertEqual([str(e) for e in ctx.exception.errors], ["first", "last"])
        self.assertIn("close trio", str(ctx.exception))


class CloseQuietlyTests(unittest.TestCase):
    def setUp(self) -> None:
        self.log = logging.getLogger("tests.remote_ssh.release")
        self.log.setLevel(logging.DEBUG)

    def test_logs_failure(self) -> None:
        def closer():
            raise OSError("broken pipe")

        with self.assertLogs(self.log, level="ERROR") as captured:
            ok = close_quietly(closer, self.log, "thing")
        self.assertFalse(ok)
        self.assertIn("broken pipe", captured.output[0])

    def test_logs_success_at_debug(self) -> None:
        with self.assertLogs(self.log, level="DEBUG") as captured:
            ok = close_quietly(lambda: None, self.log, "thing")
        self.assertTrue(ok)
        self.assertIn("thing: closed", captured.output[0])

    def test_silent_when_logging_disabled(self) -> None:
        def closer():
            raise OSError("broken pipe")

        with self.assertNoLogs(self.log, level="DEBUG"):
            self.assertFalse(close_quietly(closer, self.log, "thing", log=False))


if __name__ == "__main__":
    unittest.main()
