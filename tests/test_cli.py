from __future__ import annotations

import contextlib
import io
import json
import os
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

from fileutil import cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.root = Path(self.temp_dir.name)
        self.config = self.root / "config.json"
        patcher = mock.patch("fileutil.cli.configure_logging")
        self.configure_logging = patcher.start()
        self.addCleanup(patcher.stop)

    def _main(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = cli.main(["--config", str(self.config), *argv])
        return code, out.getvalue()

    def test_copy_command(self) -> None:
        (self.root / "a.txt").write_text("hello")

        code, output = self._main("copy", str(self.root / "a.txt"), str(self.root / "b.txt"))

        self.assertEqual(code, 0)
        self.assertIn("Copied", output)
        self.assertEqual((self.root / "b.txt").read_text(), "hello")

    def test_zip_dir_then_unzip(self) -> None:
        src = self.root / "src"
        (src / "sub").mkdir(parents=True)
        (src / "a.txt").write_text("hello")
        (src / "sub" / "b.txt").write_text("world")
        restore = self.root / "restore"
        restore.mkdir()

        code, output = self._main("zip-dir", str(src), str(self.root / "out.zip"))
        self.assertEqual(code, 0)
        self.assertIn("Archive created at:", output)

        code, output = self._main("unzip", str(self.root / "out.zip"), str(restore))
        self.assertEqual(code, 0)
        self.assertIn("Extracted 2 file(s)", output)
        self.assertEqual((restore / "sub" / "b.txt").read_text(), "world")

    def test_zip_file_naming_options(self) -> None:
        source = self.root / "report.txt"
        source.write_text("data")

        self._main("zip-file", str(source), str(self.root / "plain.zip"))
        self._main("zip-file", str(source), str(self.root / "named.zip"), "--arcname", "renamed.txt")
        self._main("zip-file", str(source), str(self.root / "full.zip"), "--keep-full-path")

        with zipfile.ZipFile(self.root / "plain.zip") as zf:
            self.assertEqual(zf.namelist(), ["report.txt"])
        with zipfile.ZipFile(self.root / "named.zip") as zf:
            self.assertEqual(zf.namelist(), ["renamed.txt"])
        with zipfile.ZipFile(self.root / "full.zip") as zf:
            self.assertEqual(zf.namelist(), [str(source).lstrip("/")])

    def test_keep_full_path_from_settings(self) -> None:
        self.config.write_text(json.dumps({"keep_full_path": True}), encoding="utf-8")
        source = self.root / "report.txt"
        source.write_text("data")

        code, _ = self._main("zip-file", str(source), str(self.root / "full.zip"))

        self.assertEqual(code, 0)
        with zipfile.ZipFile(self.root / "full.zip") as zf:
            self.assertEqual(zf.namelist(), [str(source).lstrip("/")])

    def test_unzip_into_file_fails(self) -> None:
        archive = self.root / "a.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("a.txt", "a")
        target = self.root / "notadir"
        target.write_text("x")

        with self.assertLogs("fileutil.cli", level="ERROR") as logs:
            code, output = self._main("unzip", str(archive), str(target))

        self.assertEqual(code, 1)
        self.assertEqual(output, "")
        self.assertIn("destination is not a directory", logs.output[0])

    def test_bad_archive_fails(self) -> None:
        bogus = self.root / "bogus.zip"
        bogus.write_text("nope")
        (self.root / "out").mkdir()

        with self.assertLogs("fileutil.cli", level="ERROR"):
            code, _ = self._main("unzip", str(bogus), str(self.root / "out"))

        self.assertEqual(code, 1)

    def test_invalid_settings_fail(self) -> None:
        self.config.write_text(json.dumps({"compression": "rar"}), encoding="utf-8")

        code, output = self._main("copy", "a", "b")

        self.assertEqual(code, 1)
        self.assertIn("Invalid settings", output)
        self.configure_logging.assert_not_called()

    def test_verbose_flag_is_forwarded(self) -> None:
        (self.root / "a.txt").write_text("a")

        self._main("-v", "copy", str(self.root / "a.txt"), str(self.root / "b.txt"))

        _, kwargs = self.configure_logging.call_args
        self.assertTrue(kwargs["verbose"])

    def test_missing_command_is_usage_error(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                cli.main([])

        self.assertEqual(cm.exception.code, 2)

    def test_out_of_range_compresslevel_fails_cleanly(self) -> None:
        self.config.write_text(json.dumps({"compresslevel": 42}), encoding="utf-8")
        source = self.root / "report.txt"
        source.write_text("data")

        code, output = self._main("zip-file", str(source), str(self.root / "out.zip"))

        self.assertEqual(code, 1)
        self.assertIn("compresslevel", output)
        self.assertFalse((self.root / "out.zip").exists())

    def test_value_error_from_operation_returns_one(self) -> None:
        (self.root / "a.txt").write_text("a")

        with mock.patch("fileutil.cli.copy_file", side_effect=ValueError("bad value")):
            with self.assertLogs("fileutil.cli", level="ERROR") as logs:
                code, _ = self._main("copy", str(self.root / "a.txt"), str(self.root / "b.txt"))

        self.assertEqual(code, 1)
        self.assertIn("bad value", logs.output[0])

    def test_zip_dir_with_epoch_timestamps(self) -> None:
        src = self.root / "src"
        src.mkdir()
        (src / "old.txt").write_text("old")
        os.utime(src / "old.txt", (0, 0))

        code, _ = self._main("zip-dir", str(src), str(self.root / "out.zip"))

        self.assertEqual(code, 0)
        with zipfile.ZipFile(self.root / "out.zip") as zf:
            self.assertEqual(zf.namelist(), ["old.txt"])


class LoggingSetupTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        self.root = Path(self.temp_dir.name)

    def test_unusable_log_file_returns_one(self) -> None:
        config = self.root / "config.json"
        config.write_text(json.dumps({"log_file": str(self.root)}), encoding="utf-8")
        (self.root / "a.txt").write_text("a")
        out = io.StringIO()

        with contextlib.redirect_stdout(out):
            code = cli.main(["--config", str(config), "copy", str(self.root / "a.txt"), str(self.root / "b.txt")])

        self.assertEqual(code, 1)
        self.assertIn("Cannot open log file", out.getvalue())
        self.assertFalse((self.root / "b.txt").exists())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
