from __future__ import annotations

import os
import unittest
from datetime import timedelta
from unittest import mock

from envload.environ import MemoryEnvironment
from envload.getters import (
    get_bool,
    get_duration,
    get_int,
    get_string,
    get_strings,
    must_string,
    parse_duration,
)


class TypedGetterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.env = MemoryEnvironment(
            {
                "S": "hello",
                "I": "42",
                "I_NEG": "-7",
                "I_BAD": "4x2",
                "B": "true",
                "B_ZERO": "0",
                "B_BAD": "yes",
                "D": "250ms",
                "D_BAD": "soon",
                "LIST": "a, b ,c",
                "EMPTY": "",
            }
        )

    def test_string(self) -> None:
        self.assertEqual(get_string("S", "def", env=self.env), "hello")
        self.assertEqual(get_string("MISSING", "def", env=self.env), "def")
        self.assertEqual(get_string("EMPTY", "def", env=self.env), "def")

    def test_int(self) -> None:
        self.assertEqual(get_int("I", 0, env=self.env), 42)
        self.assertEqual(get_int("I_NEG", 0, env=self.env), -7)
        self.assertEqual(get_int("I_BAD", 7, env=self.env), 7)
        self.assertEqual(get_int("MISSING", 7, env=self.env), 7)

    def test_bool(self) -> None:
        self.assertTrue(get_bool("B", False, env=self.env))
        self.assertFalse(get_bool("B_ZERO", True, env=self.env))
        self.assertTrue(get_bool("B_BAD", True, env=self.env))
        self.assertFalse(get_bool("EMPTY", False, env=self.env))

    def test_duration(self) -> None:
        self.assertEqual(get_duration("D", timedelta(seconds=1), env=self.env), timedelta(milliseconds=250))
        self.assertEqual(get_duration("D_BAD", timedelta(seconds=2), env=self.env), timedelta(seconds=2))

    def test_strings(self) -> None:
        self.assertEqual(get_strings("LIST", ",", None, env=self.env), ["a", "b", "c"])
        self.assertEqual(get_strings("EMPTY", ",", ["x"], env=self.env), ["x"])
        self.assertIsNone(get_strings("MISSING", ",", None, env=self.env))

    def test_strings_empty_separator_splits_characters(self) -> None:
        env = MemoryEnvironment({"CHARS": "a b"})
        self.assertEqual(get_strings("CHARS", "", None, env=env), ["a", "b"])

    def test_duration_out_of_range_falls_back(self) -> None:
        env = MemoryEnvironment({"HUGE": "9999999999999h", "INF": "1" * 400 + "s"})
        self.assertEqual(get_duration("HUGE", timedelta(seconds=2), env=env), timedelta(seconds=2))
        self.assertEqual(get_duration("INF", timedelta(seconds=3), env=env), timedelta(seconds=3))

    def test_must_string(self) -> None:
        self.assertEqual(must_string("S", env=self.env), "hello")
        self.assertEqual(must_string("EMPTY", env=self.env), "")
        with self.assertRaises(SystemExit) as ctx:
            must_string("DOES_NOT_EXIST", env=self.env)
        self.assertIn("DOES_NOT_EXIST", str(ctx.exception.code))

    def test_reads_process_environment_by_default(self) -> None:
        with mock.patch.dict(os.environ, {"ENVLOAD_PORT": "8080"}):
            self.assertEqual(get_int("ENVLOAD_PORT", 0), 8080)


class ParseDurationTests(unittest.TestCase):
    def test_valid(self) -> None:
        cases = {
            "0": timedelta(0),
            "1s": timedelta(seconds=1),
            "1h30m": timedelta(hours=1, minutes=30),
            "-1.5s": timedelta(seconds=-1.5),
            "+2m": timedelta(minutes=2),
            "10us": timedelta(microseconds=10),
            "3µs": timedelta(microseconds=3),
            ".5h": timedelta(minutes=30),
        }
        for text, want in cases.items():
            with self.subTest(text=text):
                self.assertEqual(parse_duration(text), want)

    def test_invalid(self) -> None:
        for text in ("", "-", "5", "1d", "ms", "1s ", "1.s.2", "9999999999999h", "1" * 400 + "s"):
            with self.subTest(text=text):
                self.assertIsNone(parse_duration(text))


if __name__ == "__main__":
    unittest.main()
