"""Copy files and move them in and out of ZIP archives."""

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterator, List

from .errors import DestinationNotDirectoryError, UnsafeEntryError
from .settings import Settings

log = logging.getLogger(__name__)

_DRIVE = re.compile(r"^[A-Za-z]:")


@dataclass(frozen=True)
class PackItem:
    """A regular file found below the packed directory."""

    path: Path
    name: str
    size: int


def _settings(settings: Settings | None) -> Settings:
    return settings if settings is not None else Settings()


def _open_archive(path: Path, settings: Settings) -> zipfile.ZipFile:
    return zipfile.ZipFile(
        path,
        "w",
        compression=settings.zip_compression(),
        compresslevel=settings.compresslevel,
        strict_timestamps=False,
    )


def _stream_entry(zf: zipfile.ZipFile, reader: BinaryIO, source: Path, name: str, settings: Settings) -> None:
    # pre-1980 mtimes are clamped instead of rejected
    info = zipfile.ZipInfo.from_file(source, name, strict_timestamps=False)
    info.compress_type = zf.compression
    # open() with a ZipInfo does not pick up the archive's level on its own
    info._compresslevel = zf.compresslevel
    with zf.open(info, "w") as writer:
        shutil.copyfileobj(reader, writer, settings.chunk_size)


def copy_file(source: Path | str, destination: Path | str, *, settings: Settings | None = None) -> Path:
    """Copy the bytes of *source* into *destination* and return the destination.

    The destination is created or truncated. A failure part way through
    leaves whatever was written so far in place. Copying a file onto itself
    raises :class:`shutil.SameFileError` instead of truncating it.
    """

    opts = _settings(settings)
    dest = Path(destination)
    log.info("Copying %s to %s", source, dest)
    with open(source, "rb") as reader:
        if dest.exists() and os.path.samefile(source, dest):
            raise shutil.SameFileError(f"{source!s} and {dest!s} are the same file")
        with open(dest, "wb") as writer:
            shutil.copyfileobj(reader, writer, opts.chunk_size)
    return dest


def _entry_target(root: Path, name: str) -> Path:
    """Return where entry *name* lands under *root*, rejecting traversal."""

    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or _DRIVE.match(normalized):
        raise UnsafeEntryError(name)

    relative = PurePosixPath(normalized)
    if ".." in relative.parts:
        raise UnsafeEntryError(name)

    target = root.joinpath(*relative.parts)
    resolved_root = root.resolve()
    resolved = target.resolve()
    if resolved != resolved_root and resolved_root not in resolved.parents:
        raise UnsafeEntryError(name)
    return target


def unzip_file(
    archive: Path | str, destination_dir: Path | str, *, settings: Settings | None = None
) -> List[Path]:
    """Extract every entry of *archive* below *destination_dir*.

    The destination must already exist and be a directory. Entries are
    written in the order the archive stores them; the first failure stops the
    extraction and leaves earlier files where they are.

    Returns
    -------
    list of Path
        The files that were written.
    """

    opts = _settings(settings)
    root = Path(destination_dir)
    if not stat.S_ISDIR(os.stat(root).st_mode):
        raise DestinationNotDirectoryError(str(root))

    log.info("Extracting %s into %s", archive, root)
    written: List[Path] = []
    with zipfile.ZipFile(archive, "r") as zf:
        for info in zf.infolist():
            try:
                target = _entry_target(root, info.filename)
            except UnsafeEntryError:
                log.warning("Refusing to extract %r from %s", info.filename, archive)
                raise

            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            if target == root:
                raise UnsafeEntryError(info.filename)

            target.parent.mkdir(parents=True, exist_ok=True)
            log.debug("Writing %s", target)
            with zf.open(info) as reader:
                with open(target, "wb") as writer:
                    shutil.copyfileobj(reader, writer, opts.chunk_size)
            written.append(target)

    log.info("Extracted %d file(s) from %s", len(written), archive)
    return written


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def _gather_entries(root: Path, skip: os.stat_result | None = None) -> Iterator[PackItem]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        current = Path(dirpath)
        for filename in sorted(filenames):
            item = current / filename
            info = os.lstat(item)
            if not stat.S_ISREG(info.st_mode):
                log.debug("Skipping non-regular file %s", item)
                continue
            if skip is not None and os.path.samestat(info, skip):
                log.debug("Skipping the archive being written: %s", item)
                continue
            yield PackItem(path=item, name=item.relative_to(root).as_posix(), size=info.st_size)


def zip_dir(source_dir: Path | str, archive: Path | str, *, settings: Settings | None = None) -> Path:
    """Create *archive* from every regular file below *source_dir*.

    Entry names are paths relative to *source_dir* using ``/`` separators.
    Directories, symlinks and other special files contribute no entry, so an
    empty directory produces an empty (but valid) archive.
    """

    opts = _settings(settings)
    src = Path(source_dir)
    if not stat.S_ISDIR(os.stat(src).st_mode):
        raise NotADirectoryError(f"Source is not a directory: {source_dir}")

    archive_path = Path(archive)
    log.info("Zipping directory %s into %s", src, archive_path)
    count = 0
    with _open_archive(archive_path, opts) as zf:
        written = os.fstat(zf.fp.fileno())
        for item in _gather_entries(src, skip=written):
            log.debug("Adding %s as %s (%d bytes)", item.path, item.name, item.size)
            with open(item.path, "rb") as reader:
                _stream_entry(zf, reader, item.path, item.name, opts)
            count += 1

    log.info("Wrote %d file(s) to %s", count, archive_path)
    return archive_path


def zip_file(
    source: Path | str,
    archive: Path | str,
    arcname: str | None = None,
    *,
    settings: Settings | None = None,
) -> Path:
    """Create *archive* holding *source* as its only entry.

    The entry is named after the base name of *source* unless *arcname* is
    given. Passing ``str(source)`` as *arcname* keeps the full path, minus
    any leading separator, which ``zipfile`` always strips.
    """

    opts = _settings(settings)
    src = Path(source)
    name = arcname if arcname is not None else src.name
    archive_path = Path(archive)
    log.info("Zipping %s into %s as %s", src, archive_path, name)
    with open(src, "rb") as reader:
        with _open_archive(archive_path, opts) as zf:
            _stream_entry(zf, reader, src, name, opts)
    return archive_path


__all__ = ["PackItem", "copy_file", "unzip_file", "zip_dir", "zip_file"]
