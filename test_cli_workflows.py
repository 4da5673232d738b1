from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import time
import unittest
from pathlib import Path

from embedfs.constants import SIGNATURE
from embedfs.reader import open_container


PROGRAM = b"#!/bin/sh\necho 'host program'\nexit 0\n" + b"\x00" * 300


def _build_fixture_tree(root: Path):
    (root / "host.bin").write_bytes(PROGRAM)
    (root / "readme.txt").write_bytes(b"hello world\n" * 20)
    (root / "docs" / "notes").mkdir(parents=True)
    (root / "docs" / "guide.txt").write_bytes(b"guide")
    (root / "docs" / "notes" / "binary.bin").write_bytes(os.urandom(2048))
    (root / "docs" / "notes" / "empty.txt").write_bytes(b"")


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0, cwd: Path | None = None):
        cmd = [sys.executable, "-m", "embedfs.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\n"
                f"STDOUT:\n{proc.stdout.decode(errors='replace')}\nSTDERR:\n{proc.stderr.decode(errors='replace')}"
            )
        return proc

    def test_embed_list_cat_truncate(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_fixture_tree(root)

            self.run_cli(["embed", "host.bin", "tool.bin", "readme.txt", "docs"], cwd=root)
            tool = root / "tool.bin"
            raw = tool.read_bytes()
            self.assertTrue(raw.startswith(PROGRAM))
            self.assertEqual(raw[-20:-8], SIGNATURE)
            if os.name == "posix":
                self.assertEqual(tool.stat().st_mode & 0o777, 0o700)

            listing = self.run_cli(["list", "tool.bin"], cwd=root).stdout.decode().splitlines()
            self.assertEqual(
                listing,
                ["/readme.txt", "/docs/guide.txt", "/docs/notes/binary.bin", "/docs/notes/empty.txt"],
            )

            notes = self.run_cli(["list", "tool.bin", "/docs/notes"], cwd=root).stdout.decode().splitlines()
            self.assertEqual(notes, ["/docs/notes/binary.bin", "/docs/notes/empty.txt"])

            for name, rel in (
                ("/readme.txt", "readme.txt"),
                ("/docs/notes/binary.bin", "docs/notes/binary.bin"),
                ("/docs/notes/empty.txt", "docs/notes/empty.txt"),
            ):
                out = self.run_cli(["cat", "tool.bin", name], cwd=root).stdout
                self.assertEqual(out, (root / rel).read_bytes(), name)

            check = self.run_cli(["check", "tool.bin"], cwd=root)
            self.assertIn(b"contains embedded fs", check.stdout)

            self.run_cli(["truncate", "tool.bin", "clean.bin"], cwd=root)
            self.assertEqual((root / "clean.bin").read_bytes(), PROGRAM)
            # the source container is left untouched
            self.assertEqual(tool.read_bytes(), raw)

            check_clean = self.run_cli(["check", "clean.bin"], cwd=root)
            self.assertIn(b"doesn't contain embedded fs", check_clean.stdout)

    def test_list_long_shows_mode_size_and_mtime(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_fixture_tree(root)
            os.chmod(root / "readme.txt", 0o644)
            os.chmod(root / "docs" / "guide.txt", 0o600)
            os.utime(root / "readme.txt", (1_600_000_000, 1_600_000_000))
            self.run_cli(["embed", "host.bin", "tool.bin", "readme.txt", "docs/guide.txt", "--quiet"], cwd=root)

            lines = self.run_cli(["list", "--long", "tool.bin"], cwd=root).stdout.decode().splitlines()
            self.assertEqual(len(lines), 2)
            mode, size, mtime, name = lines[0].split("\t")
            self.assertEqual((mode, size, name), ("-rw-r--r--", "240", "/readme.txt"))
            self.assertEqual(mtime, time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(1_600_000_000)))
            mode, size, _, name = lines[1].split("\t")
            self.assertEqual((mode, size, name), ("-rw-------", "5", "/docs/guide.txt"))

    def test_embed_with_prefix(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_fixture_tree(root)
            self.run_cli(
                ["embed", "host.bin", "tool.bin", str(root / "readme.txt"), str(root / "docs"), "--prefix", "/assets", "--quiet"],
                cwd=root,
            )
            with open(root / "tool.bin", "rb") as fh:
                with open_container(fh) as fs:
                    self.assertTrue(fs.is_file_exist("/assets/readme.txt"))
                    self.assertTrue(fs.is_file_exist("/assets/docs/guide.txt"))
                    self.assertEqual(fs.offset, len(PROGRAM))

    def test_missing_input_is_skipped(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_fixture_tree(root)
            proc = self.run_cli(["embed", "host.bin", "tool.bin", "missing.txt", "readme.txt"], cwd=root)
            self.assertIn(b"Warning: can't embed <missing.txt>", proc.stderr)
            listing = self.run_cli(["list", "tool.bin"], cwd=root).stdout.decode().splitlines()
            self.assertEqual(listing, ["/readme.txt"])

    def test_errors_exit_nonzero(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_fixture_tree(root)

            proc = self.run_cli(["list", "host.bin"], cwd=root, expect=2)
            self.assertIn(b"no embedfs footprint found", proc.stderr)

            proc = self.run_cli(["truncate", "host.bin", "clean.bin"], cwd=root, expect=2)
            self.assertIn(b"Error:", proc.stderr)

            self.run_cli(["embed", "host.bin", "tool.bin", "readme.txt"], cwd=root)
            proc = self.run_cli(["cat", "tool.bin", "/nope"], cwd=root, expect=2)
            self.assertIn(b"file is not exist: /nope", proc.stderr)

            proc = self.run_cli(["list", "does-not-exist.bin"], cwd=root, expect=2)
            self.assertIn(b"Error:", proc.stderr)


if __name__ == "__main__":
    unittest.main()
