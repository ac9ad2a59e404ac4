"""Tests for the retry helper."""

import unittest

from feed_sheet_sync.utils.retry import with_retry
from fakes import RecordingSleep


class FlakyOperation:
    def __init__(self, failures, result="ok"):
        self.failures = failures
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"failure {self.calls}")
        return self.result


class TestWithRetry(unittest.TestCase):
    """Test cases for with_retry."""

    def setUp(self):
        self.sleep = RecordingSleep()

    def test_first_attempt_success_does_not_sleep(self):
        operation = FlakyOperation(failures=0)
        self.assertEqual(with_retry("get spreadsheet", operation, 3, 2.0, sleep=self.sleep), "ok")
        self.assertEqual(operation.calls, 1)
        self.assertEqual(self.sleep.delays, [])

    def test_succeeds_on_third_attempt_with_exponential_delays(self):
        operation = FlakyOperation(failures=2, result=[1, 2])
        result = with_retry("write chunk 1", operation, 3, 2.0, sleep=self.sleep)

        self.assertEqual(result, [1, 2])
        self.assertEqual(operation.calls, 3)
        self.assertEqual(self.sleep.delays, [2.0, 4.0])

    def test_exhausted_attempts_raise_last_failure(self):
        operation = FlakyOperation(failures=5)
        with self.assertRaises(ConnectionError) as ctx:
            with_retry("fetch feed", operation, 3, 0.5, sleep=self.sleep)

        self.assertEqual(str(ctx.exception), "failure 3")
        self.assertEqual(operation.calls, 3)
        self.assertEqual(self.sleep.delays, [0.5, 1.0])

    def test_single_attempt_never_sleeps(self):
        operation = FlakyOperation(failures=1)
        with self.assertRaises(ConnectionError):
            with_retry("clear sheet", operation, 1, 1.0, sleep=self.sleep)
        self.assertEqual(self.sleep.delays, [])

    def test_warning_names_label_attempt_and_reason(self):
        operation = FlakyOperation(failures=1)
        with self.assertLogs("feed_sheet_sync.utils.retry", level="WARNING") as logs:
            with_retry("resize sheet", operation, 4, 1.0, sleep=self.sleep)

        self.assertEqual(len(logs.records), 1)
        message = logs.records[0].getMessage()
        self.assertIn("resize sheet", message)
        self.assertIn("1/4", message)
        self.assertIn("failure 1", message)


if __name__ == "__main__":
    unittest.main()
