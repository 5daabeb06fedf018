"""
cli — команда bucketfs: операции с файловой системой бакета из терминала.

Хранилище выбирается через runtime (переменные окружения BUCKETFS_*).

Примеры:
  bucketfs ls data
  bucketfs put ./report.csv data/report.csv
  bucketfs get data/report.csv ./report.csv
  bucketfs mv data/report.csv archive/report.csv
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError
from tqdm.auto import tqdm

from bucketfs.base import runtime
from bucketfs.base.filestore import BucketFs, FsError

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 1024


def _progress(total: int | None, desc: str, enabled: bool) -> tqdm:
    return tqdm(
        total=total,
        desc=desc,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
        leave=False,
        disable=not enabled,
    )


def _cmd_ls(fs: BucketFs, args: argparse.Namespace) -> int:
    for entry in fs.list(args.path):
        if entry.name == "." and not args.all:
            continue
        if args.long:
            kind = "d" if entry.is_dir else "-"
            ts = datetime.fromtimestamp(entry.mtime).strftime("%Y-%m-%d %H:%M")
            print(f"{kind} {entry.size:>12} {ts} {entry.name}")
        else:
            print(entry.name + ("/" if entry.is_dir and entry.name != "." else ""))
    return 0


def _cmd_stat(fs: BucketFs, args: argparse.Namespace) -> int:
    info = fs.stat(args.path)
    print(f"name:  {info.name}")
    print(f"type:  {'directory' if info.is_dir else 'file'}")
    print(f"size:  {info.size}")
    print(f"mtime: {info.modified.isoformat()}")
    return 0


def _cmd_cat(fs: BucketFs, args: argparse.Namespace) -> int:
    out = sys.stdout.buffer
    with fs.open_read(args.path) as f:
        while True:
            chunk = f.read(_CHUNK)
            if not chunk:
                break
            out.write(chunk)
    out.flush()
    return 0


def _cmd_get(fs: BucketFs, args: argparse.Namespace) -> int:
    info = fs.stat(args.src)
    dst = args.dst or info.name
    if os.path.isdir(dst):
        dst = os.path.join(dst, info.name)

    with fs.open_read(args.src) as f, open(dst, "wb") as out, _progress(info.size, args.src, args.progress) as bar:
        while True:
            chunk = f.read(_CHUNK)
            if not chunk:
                break
            out.write(chunk)
            bar.update(len(chunk))
    logger.info("get ok %s -> %s (%s bytes)", args.src, dst, info.size)
    return 0


def _cmd_put(fs: BucketFs, args: argparse.Namespace) -> int:
    dst = args.dst or os.path.basename(args.src)
    if fs.is_dir(dst):
        dst = f"{dst.rstrip('/')}/{os.path.basename(args.src)}"

    size = os.path.getsize(args.src)
    with open(args.src, "rb") as src, fs.open_write(dst) as f, _progress(size, dst, args.progress) as bar:
        while True:
            chunk = src.read(_CHUNK)
            if not chunk:
                break
            f.write(chunk)
            bar.update(len(chunk))
    logger.info("put ok %s -> %s (%s bytes)", args.src, dst, size)
    return 0


def _cmd_mkdir(fs: BucketFs, args: argparse.Namespace) -> int:
    if args.parents:
        fs.makedirs(args.path)
    else:
        fs.mkdir(args.path)
    return 0


def _cmd_rm(fs: BucketFs, args: argparse.Namespace) -> int:
    for path in args.paths:
        fs.remove(path)
    return 0


def _cmd_rmdir(fs: BucketFs, args: argparse.Namespace) -> int:
    for path in args.paths:
        fs.rmdir(path)
    return 0


def _cmd_mv(fs: BucketFs, args: argparse.Namespace) -> int:
    fs.rename(args.src, args.dst)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bucketfs", description="Filesystem operations over an object store bucket.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ls", help="List a directory.")
    p.add_argument("path", nargs="?", default="")
    p.add_argument("-l", "--long", action="store_true", help="Show type, size and mtime.")
    p.add_argument("-a", "--all", action="store_true", help="Include the '.' entry.")
    p.set_defaults(func=_cmd_ls)

    p = sub.add_parser("stat", help="Show file or directory metadata.")
    p.add_argument("path")
    p.set_defaults(func=_cmd_stat)

    p = sub.add_parser("cat", help="Write a file to stdout.")
    p.add_argument("path")
    p.set_defaults(func=_cmd_cat)

    p = sub.add_parser("get", help="Download a file.")
    p.add_argument("src")
    p.add_argument("dst", nargs="?", default=None)
    p.add_argument("--no-progress", dest="progress", action="store_false")
    p.set_defaults(func=_cmd_get)

    p = sub.add_parser("put", help="Upload a file.")
    p.add_argument("src")
    p.add_argument("dst", nargs="?", default=None)
    p.add_argument("--no-progress", dest="progress", action="store_false")
    p.set_defaults(func=_cmd_put)

    p = sub.add_parser("mkdir", help="Create a directory.")
    p.add_argument("path")
    p.add_argument("-p", "--parents", action="store_true", help="Create parent directories as needed.")
    p.set_defaults(func=_cmd_mkdir)

    p = sub.add_parser("rm", help="Remove files.")
    p.add_argument("paths", nargs="+")
    p.set_defaults(func=_cmd_rm)

    p = sub.add_parser("rmdir", help="Remove empty directories.")
    p.add_argument("paths", nargs="+")
    p.set_defaults(func=_cmd_rmdir)

    p = sub.add_parser("mv", help="Rename a file (copy + delete).")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=_cmd_mv)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    fs = runtime.get_filestore()
    try:
        return args.func(fs, args)
    except (FsError, OSError, BotoCoreError, ClientError) as e:
        print(f"bucketfs {args.command}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
