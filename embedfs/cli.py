from __future__ import annotations

import os
import sys
import stat
import time
import shutil
import argparse

from typing import List, Optional

from embedfs.constants import COPY_CHUNK_SIZE, OUTPUT_MODE
from embedfs.errors import EmbedFsError, NoExistError
from embedfs.reader import open_container
from embedfs.truncator import truncate
from embedfs.writer import create


def _safe_chmod(path: str, mode: Optional[int]) -> None:
    """Best-effort chmod that never raises.

    Args:
        path: Destination filesystem path to update.
        mode: POSIX mode to apply (e.g., 0o700). If None, no change is made.
    """
    if mode is None:
        return
    try:
        os.chmod(path, mode)
    except OSError as exc:
        print(f"Warning: failed to set mode on {path}: {exc}", file=sys.stderr)


def _copy_container(source: str, target: str) -> None:
    shutil.copyfile(source, target)
    _safe_chmod(target, OUTPUT_MODE)


def _target_name(path: str, prefix: Optional[str]) -> str:
    if prefix is None:
        return path
    return prefix + "/" + os.path.basename(os.path.normpath(path))


def cmd_embed(source: str, target: str, inputs: list[str], *, prefix: Optional[str] = None, quiet: bool = False) -> bool:
    """Copy ``source`` to ``target`` and embed files into the copy.

    Args:
        source: Container to start from (usually an executable).
        target: Output path; overwritten if it exists.
        inputs: Files or directories to embed. Files keep their own path as
            embedded name, directories are embedded recursively.
        prefix: Optional name prefix replacing the input's parent path.
        quiet: Suppress per-file progress lines.

    Returns:
        True when every input was embedded.
    """
    _copy_container(source, target)
    ok = True
    with open(target, "r+b") as fh:
        fh.seek(0, os.SEEK_END)
        embedder = create(fh)
        try:
            for path in inputs:
                name = _target_name(path, prefix)
                try:
                    if os.path.isdir(path):
                        embedder.embed_directory(path, name)
                    else:
                        embedder.embed_file(path, name)
                except OSError as exc:
                    ok = False
                    print(f"Warning: can't embed <{path}> into <{target}>: {exc}", file=sys.stderr)
                    continue
                if not quiet:
                    print(f" embedded: {path}")
        finally:
            embedder.close()
    return ok


def cmd_list(container: str, *, path: str = "/", long: bool = False) -> bool:
    """List embedded files in the order they were added.

    Args:
        container: Path to a file carrying an embedded fs.
        path: Name prefix to filter on.
        long: Also print mode, size and modification time of each entry.
    """
    with open(container, "rb") as fh:
        fs = open_container(fh)
        if not long:
            for name in fs.list_dir(path):
                print(name)
            return True
        for e in fs.list_entries(path):
            mode = stat.filemode(stat.S_IFREG | (e.mode & 0o7777))
            mtime = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(e.mtime))
            print(f"{mode}\t{e.content_length}\t{mtime}\t{e.name}")
    return True


def cmd_cat(container: str, name: str) -> bool:
    """Write the content of one embedded file to stdout."""
    with open(container, "rb") as fh:
        fs = open_container(fh)
        with fs.open_file(name) as ef:
            out = sys.stdout.buffer
            shutil.copyfileobj(ef, out, COPY_CHUNK_SIZE)
            out.flush()
    return True


def cmd_truncate(container: str, target: str) -> bool:
    """Write a copy of ``container`` with its embedded fs stripped to ``target``."""
    _copy_container(container, target)
    with open(target, "r+b") as fh:
        size = truncate(fh)
    print(f"Truncated: {target} ({size} bytes)")
    return True


def cmd_check(container: str) -> bool:
    """Report whether ``container`` carries an embedded fs.

    Returns:
        True if an embedded fs was found.
    """
    try:
        with open(container, "rb") as fh:
            open_container(fh)
    except (EmbedFsError, OSError):
        print(f"<{container}> doesn't contain embedded fs.")
        return False
    print(f"<{container}> contains embedded fs; use 'embedfs list' to list files.")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="embedfs",
        description="Embed files into the tail of a binary and read them back",
        epilog="The container keeps working as before; embedded files are read only.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_embed = sub.add_parser("embed", help="Copy a binary and embed files into the copy")
    ap_embed.add_argument("source", help="Binary to start from")
    ap_embed.add_argument("target", help="Output path")
    ap_embed.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_embed.add_argument("--prefix", help="Embedded name prefix (default: input path as given)")
    ap_embed.add_argument("--quiet", help="limit outputs to warnings only", action="store_true")

    ap_list = sub.add_parser("list", help="List embedded files")
    ap_list.add_argument("container", help="Binary with embedded fs")
    ap_list.add_argument("path", nargs="?", default="/", help="Name prefix (default: /)")
    ap_list.add_argument("--long", "-l", help="show mode, size and mtime", action="store_true")

    ap_cat = sub.add_parser("cat", help="Print contents of an embedded file to stdout")
    ap_cat.add_argument("container", help="Binary with embedded fs")
    ap_cat.add_argument("name", help="Embedded file name")

    ap_truncate = sub.add_parser("truncate", help="Write a clean copy of the binary without the embedded fs")
    ap_truncate.add_argument("container", help="Binary with embedded fs")
    ap_truncate.add_argument("target", help="Output path")

    ap_check = sub.add_parser("check", help="Check that a binary contains an embedded fs")
    ap_check.add_argument("container", help="Binary to inspect")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "embed":
            cmd_embed(args.source, args.target, args.inputs, prefix=args.prefix, quiet=args.quiet)
        elif args.cmd == "list":
            cmd_list(args.container, path=args.path, long=args.long)
        elif args.cmd == "cat":
            cmd_cat(args.container, args.name)
        elif args.cmd == "truncate":
            cmd_truncate(args.container, args.target)
        elif args.cmd == "check":
            cmd_check(args.container)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except NoExistError as e:
        print(f"Error: can't open file in embedfs: {e}", file=sys.stderr)
        sys.exit(2)
    except (EmbedFsError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
