"""Command line interface for the fileutil helpers."""

from __future__ import annotations

import argparse
import logging
import zipfile
from pathlib import Path
from typing import Sequence

from fileutil.errors import FileUtilError
from fileutil.ops import copy_file, unzip_file, zip_dir, zip_file
from fileutil.settings import Settings, load_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

log = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Copy files and create or extract ZIP archives.")
    parser.add_argument("--config", help="Settings file to read. Defaults to config.json in the current directory.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every file that is processed.")
    commands = parser.add_subparsers(dest="command", required=True)

    copy_cmd = commands.add_parser("copy", help="Copy a single file.")
    copy_cmd.add_argument("source", help="File to read.")
    copy_cmd.add_argument("destination", help="File to create or overwrite.")

    unzip_cmd = commands.add_parser("unzip", help="Extract an archive into an existing directory.")
    unzip_cmd.add_argument("archive", help="ZIP file to extract.")
    unzip_cmd.add_argument("destination", help="Directory that receives the extracted files.")

    zip_dir_cmd = commands.add_parser("zip-dir", help="Zip every file below a directory.")
    zip_dir_cmd.add_argument("source", help="Directory to archive.")
    zip_dir_cmd.add_argument("archive", help="ZIP file to create.")

    zip_file_cmd = commands.add_parser("zip-file", help="Zip a single file.")
    zip_file_cmd.add_argument("source", help="File to archive.")
    zip_file_cmd.add_argument("archive", help="ZIP file to create.")
    naming = zip_file_cmd.add_mutually_exclusive_group()
    naming.add_argument("--arcname", help="Name to store the file under inside the archive.")
    naming.add_argument(
        "--keep-full-path",
        action="store_true",
        default=None,
        help="Store the file under the path given on the command line instead of its base name.",
    )
    return parser.parse_args(argv)


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Send log records to stderr and, when configured, to a log file."""

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, mode="a"))
    level = logging.DEBUG if verbose else settings.logging_level()
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _run(args: argparse.Namespace, settings: Settings) -> str:
    if args.command == "copy":
        destination = copy_file(Path(args.source), Path(args.destination), settings=settings)
        return f"Copied {args.source} to {destination}"

    if args.command == "unzip":
        written = unzip_file(Path(args.archive), Path(args.destination), settings=settings)
        return f"Extracted {len(written)} file(s) into {args.destination}"

    if args.command == "zip-dir":
        archive = zip_dir(Path(args.source), Path(args.archive), settings=settings)
        return f"Archive created at: {archive}"

    keep_full_path = settings.keep_full_path if args.keep_full_path is None else args.keep_full_path
    arcname = args.arcname
    if arcname is None and keep_full_path:
        arcname = args.source
    archive = zip_file(Path(args.source), Path(args.archive), arcname, settings=settings)
    return f"Archive created at: {archive}"


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ValueError as exc:
        print(f"Invalid settings: {exc}")
        return 1

    try:
        configure_logging(settings, verbose=args.verbose)
    except OSError as exc:
        print(f"Cannot open log file {settings.log_file}: {exc}")
        return 1

    try:
        summary = _run(args, settings)
    except (OSError, ValueError, zipfile.BadZipFile, FileUtilError) as exc:
        log.error("%s failed: %s", args.command, exc)
        return 1

    print(summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
