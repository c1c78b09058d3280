"""Helpers for copying files and packing or unpacking ZIP archives."""

from .errors import DestinationNotDirectoryError, FileUtilError, UnsafeEntryError
from .ops import copy_file, unzip_file, zip_dir, zip_file
from .settings import Settings, load_settings

__all__ = [
    "DestinationNotDirectoryError",
    "FileUtilError",
    "Settings",
    "UnsafeEntryError",
    "copy_file",
    "load_settings",
    "unzip_file",
    "zip_dir",
    "zip_file",
]
