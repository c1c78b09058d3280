"""Exceptions raised by the file helpers."""

from __future__ import annotations


class FileUtilError(Exception):
    """Base class for errors specific to this package."""


class DestinationNotDirectoryError(FileUtilError, NotADirectoryError):
    """Raised by :func:`fileutil.ops.unzip_file` when the target is not a directory."""

    def __init__(self, path: str = "") -> None:
        super().__init__("destination is not a directory")
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"destination is not a directory: {self.path}"
        return "destination is not a directory"


class UnsafeEntryError(FileUtilError, ValueError):
    """An archive entry would be written outside the destination directory."""

    def __init__(self, entry: str) -> None:
        super().__init__(f"Illegal path in archive: {entry!r}")
        self.entry = entry


__all__ = ["DestinationNotDirectoryError", "FileUtilError", "UnsafeEntryError"]
