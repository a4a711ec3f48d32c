import math
import unittest

from shopboard.errors import InvalidInputError
from shopboard.util.duration import (
    adjust_duration,
    format_duration,
    format_hours,
    parse_duration,
    require_duration_minutes,
)


class TestDurationContract(unittest.TestCase):
    def test_parse_decimal_and_colon_forms(self) -> None:
        self.assertEqual(parse_duration("1.5"), 90)
        self.assertEqual(parse_duration("1:30"), 90)
        self.assertEqual(parse_duration("2:05"), 125)
        self.assertEqual(parse_duration("1:"), 60)
        self.assertEqual(parse_duration("0.25"), 15)

    def test_parse_empty_is_zero_and_garbage_is_nan(self) -> None:
        self.assertEqual(parse_duration(""), 0)
        self.assertEqual(parse_duration(None), 0)
        self.assertTrue(math.isnan(parse_duration("abc")))
        self.assertTrue(math.isnan(parse_duration("1:xx")))
        self.assertTrue(math.isnan(parse_duration("1:2:3")))
        self.assertTrue(math.isnan(parse_duration("inf")))

    def test_colon_format_roundtrips_whole_minutes(self) -> None:
        for m in (0, 1, 59, 60, 61, 90, 125, 600, 1439, 6001):
            self.assertEqual(parse_duration(format_duration(m, True)), m, m)

    def test_decimal_format_truncates_and_strips_zeros(self) -> None:
        self.assertEqual(format_duration(60, False), "1")
        self.assertEqual(format_duration(90, False), "1.5")
        self.assertEqual(format_duration(100, False), "1.66")
        self.assertEqual(format_duration(15, False), "0.25")
        self.assertEqual(format_duration(-93.3, False), "-1.55")
        self.assertEqual(format_duration(-90, False), "-1.5")
        self.assertEqual(format_duration(90, True), "1:30")
        self.assertEqual(format_duration(5, True), "0:05")

    def test_adjust_keeps_notation_and_clamps(self) -> None:
        self.assertEqual(adjust_duration("1:30", 1), "2:30")
        self.assertEqual(adjust_duration("1.5", 0.5), "2")
        self.assertEqual(adjust_duration("1", -1), "0.01")
        self.assertEqual(adjust_duration("0:30", -1), "0:01")
        self.assertEqual(adjust_duration("", 1), "1")

    def test_adjust_rejects_garbage(self) -> None:
        with self.assertRaises(InvalidInputError):
            adjust_duration("soon", 1)

    def test_require_duration_rejects_zero_and_nan(self) -> None:
        self.assertEqual(require_duration_minutes("1:30"), 90)
        for bad in ("", "0", "0:00", "abc", "-1"):
            with self.assertRaises(InvalidInputError, msg=bad):
                require_duration_minutes(bad)

    def test_format_hours(self) -> None:
        self.assertEqual(format_hours(1.5), "1.5 h")
        self.assertEqual(format_hours(2.0), "2 h")


if __name__ == "__main__":
    unittest.main(verbosity=2)
