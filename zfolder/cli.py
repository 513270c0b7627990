"""Command-line interface for zfolder.

Packs directories into a single zstd-compressed archive, unpacks archives
back into directory trees and lists archive contents.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional

from .archive import builder, codec
from .archive.model import DEFAULT_MAX_FILES, DEFAULT_MAX_PATH_LEN, ArchiveLimits, new_archive
from .compression import zstd_utils
from .errors import ZFolderError


def _add_limit_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-path-len",
        type=int,
        default=DEFAULT_MAX_PATH_LEN,
        help=f"Maximum stored path length in bytes, at most 255 (default: {DEFAULT_MAX_PATH_LEN}).",
    )
    parser.add_argument(
        "--max-files",
        type=int,
        default=DEFAULT_MAX_FILES,
        help=f"Maximum number of files in an archive (default: {DEFAULT_MAX_FILES}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zfolder", description="Pack folders into a single zstd-compressed archive.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every file processed.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pack_parser = subparsers.add_parser("pack", help="Pack directories or files into an archive.")
    pack_parser.add_argument("--input", "-i", required=True, action="append", help="Directory or file to pack (repeatable).")
    pack_parser.add_argument("--out", "-o", required=True, help="Path of the archive to write.")
    pack_parser.add_argument(
        "--level",
        "-l",
        type=int,
        default=zstd_utils.DEFAULT_LEVEL,
        help=f"Compression level {zstd_utils.MIN_COMPRESSION} to {zstd_utils.MAX_COMPRESSION} "
        f"(default: {zstd_utils.DEFAULT_LEVEL}).",
    )
    pack_parser.add_argument("--no-recursive", action="store_true", help="Only pack the top level of each directory.")
    pack_parser.add_argument(
        "--keep-root",
        action="store_true",
        help="Store paths with the input directory prefix instead of relative to it.",
    )
    pack_parser.add_argument(
        "--no-sort",
        action="store_true",
        help="Keep filesystem enumeration order (output is then not reproducible).",
    )
    _add_limit_arguments(pack_parser)

    unpack_parser = subparsers.add_parser("unpack", help="Extract an archive into a directory.")
    unpack_parser.add_argument("--input", "-i", required=True, help="Path of the archive to read.")
    unpack_parser.add_argument("--out", "-o", required=True, help="Directory to extract into.")
    unpack_parser.add_argument("--overwrite", action="store_true", help="Extract even if the directory exists.")
    _add_limit_arguments(unpack_parser)

    list_parser = subparsers.add_parser("list", help="List the files stored in an archive.")
    list_parser.add_argument("--input", "-i", required=True, help="Path of the archive to read.")
    _add_limit_arguments(list_parser)

    return parser


def _limits_from_args(args: argparse.Namespace) -> ArchiveLimits:
    return ArchiveLimits(max_path_len=args.max_path_len, max_files=args.max_files)


def handle_pack(
    inputs: List[str],
    output_path: str,
    level: int,
    limits: ArchiveLimits,
    *,
    recursive: bool = True,
    keep_root: bool = False,
    sort: bool = True,
) -> codec.PackStats:
    archive = new_archive(limits)
    for input_path in inputs:
        if os.path.isdir(input_path):
            builder.add_directory(archive, input_path, recursive, relative=not keep_root, sort=sort)
        else:
            arcname = None if keep_root else os.path.basename(input_path)
            builder.add_file(archive, input_path, arcname=arcname)
    stats = codec.to_file(archive, output_path, level)
    print(f"Packed {stats.file_count} files into {output_path}.")
    print(f"original size:   {stats.original_size} b -- {stats.original_size // 1024} kb")
    print(f"compressed size: {stats.compressed_size} b -- {stats.compressed_size // 1024} kb")
    return stats


def handle_unpack(input_path: str, output_dir: str, overwrite: bool, limits: ArchiveLimits) -> List[str]:
    archive = codec.from_file(input_path, limits)
    written = codec.extract_to(archive, output_dir, overwrite=overwrite)
    print(f"Extracted {len(written)} files to {output_dir}.")
    return written


def handle_list(input_path: str, limits: ArchiveLimits) -> None:
    archive = codec.from_file(input_path, limits)
    for index, entry in enumerate(archive.entries):
        print(f"{index:>5}  {entry.length:>10}  {entry.path}")
    print(f"{len(archive.entries)} files, {archive.content_length} bytes")


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        limits = _limits_from_args(args)
        if args.command == "pack":
            handle_pack(
                args.input,
                args.out,
                args.level,
                limits,
                recursive=not args.no_recursive,
                keep_root=args.keep_root,
                sort=not args.no_sort,
            )
            return 0
        if args.command == "unpack":
            handle_unpack(args.input, args.out, args.overwrite, limits)
            return 0
        if args.command == "list":
            handle_list(args.input, limits)
            return 0
    except (ZFolderError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
