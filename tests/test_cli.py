from __future__ import annotations

import contextlib
import io
import json
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from envload.cli import main


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.env_file = self.root / "app.env"
        self.env_file.write_text("HOST=db\nURL=postgres://${HOST}/app\nPORT=5432\nTAGS=a, b\n", encoding="utf-8")
        self.profile = self.root / "missing-profile.yaml"
        self._environ = mock.patch.dict(os.environ, {}, clear=False)
        self._environ.start()
        for key in ("HOST", "URL", "PORT", "TAGS"):
            os.environ.pop(key, None)

    def tearDown(self) -> None:
        self._environ.stop()
        logging.getLogger("envload").handlers.clear()
        self._tmp.cleanup()

    def run_cli(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(io.StringIO()):
            code = main(["--profile", str(self.profile), *argv])
        return code, out.getvalue()

    def test_show_json(self) -> None:
        code, out = self.run_cli("show", "-f", str(self.env_file), "--format", "json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["URL"], "postgres://db/app")
        self.assertEqual(os.environ["HOST"], "db")

    def test_show_no_expand_to_file(self) -> None:
        target = self.root / "out" / "merged.env"
        code, out = self.run_cli("show", "-f", str(self.env_file), "--no-expand", "--out", str(target))
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertIn("URL=postgres://${HOST}/app\n", target.read_text(encoding="utf-8"))

    def test_get_typed(self) -> None:
        self.assertEqual(self.run_cli("get", "PORT", "-f", str(self.env_file), "--type", "int"), (0, "5432\n"))
        self.assertEqual(self.run_cli("get", "TAGS", "-f", str(self.env_file), "--type", "list"), (0, "a\nb\n"))
        self.assertEqual(
            self.run_cli("get", "NOPE", "-f", str(self.env_file), "--type", "bool", "--default", "true"),
            (0, "true\n"),
        )

    def test_require(self) -> None:
        self.assertEqual(self.run_cli("require", "HOST", "PORT", "-f", str(self.env_file))[0], 0)
        with self.assertRaises(SystemExit) as ctx:
            self.run_cli("require", "HOST", "MISSING_KEY", "-f", str(self.env_file))
        self.assertIn("MISSING_KEY", str(ctx.exception.code))

    def test_unreadable_file_exits_with_error(self) -> None:
        bad = self.root / "bad.env"
        bad.write_bytes(b"X=\xff\n")
        code, _ = self.run_cli("show", "-f", str(bad))
        self.assertEqual(code, 1)

    def test_profile_supplies_files_and_options(self) -> None:
        self.profile = self.root / "envload.yaml"
        self.profile.write_text("files: [app.env]\nexpand: false\n", encoding="utf-8")
        code, out = self.run_cli("show")
        self.assertEqual(code, 0)
        self.assertIn("URL=postgres://${HOST}/app\n", out)

    def test_flags_override_only_their_own_profile_option(self) -> None:
        os.environ["HOST"] = "preset"
        self.profile = self.root / "envload.yaml"
        self.profile.write_text("files: [app.env]\noverwrite: true\n", encoding="utf-8")
        code, out = self.run_cli("show", "--no-expand")
        self.assertEqual(code, 0)
        self.assertIn("URL=postgres://${HOST}/app\n", out)
        self.assertEqual(os.environ["HOST"], "db")

    def test_invalid_profile(self) -> None:
        self.profile = self.root / "envload.yaml"
        self.profile.write_text("bogus: 1\n", encoding="utf-8")
        code, _ = self.run_cli("show")
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
