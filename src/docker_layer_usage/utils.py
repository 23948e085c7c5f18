"""
Utility functions for reading Docker storage records and measuring folders.
"""

import logging
import os
import re
import stat
from time import monotonic
from typing import Optional

from .errors import LayerRecordError, MalformedIdentifier, SizeTimeout

logger = logging.getLogger(__name__)

# Strict "<algorithm>:<hex>" shape expected in parent records
DIGEST_PATTERN = re.compile(r"^[a-z0-9]+:[A-Za-z0-9]+$")


def read_record(path: str) -> str:
    """Read a small layerdb record file and return its stripped contents."""
    try:
        with open(path, 'r') as f:
            return f.read().strip()
    except OSError as e:
        raise LayerRecordError(f"Cannot read {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise LayerRecordError(f"Cannot decode {path}: {e}") from e


def normalize_digest(digest: str) -> str:
    """Strip an optional "<algorithm>:" prefix from a digest.

    "sha256:abc123" and "abc123" both normalize to "abc123".
    """
    value = (digest or "").strip()
    if not value:
        raise MalformedIdentifier("Empty layer identifier")

    bits = value.split(':')
    if len(bits) == 1:
        return value
    if len(bits) == 2 and bits[0] and bits[1]:
        return bits[1]
    raise MalformedIdentifier(f"The hash is wrong: {digest!r}")


def parse_digest(value: str) -> str:
    """Parse a parent record, which must be "<algorithm>:<hex>", to its bare digest."""
    value = (value or "").strip()
    if not DIGEST_PATTERN.match(value):
        raise MalformedIdentifier(f"The hash is wrong: {value!r}")
    return value.split(':', 1)[1]


def folder_size(path: str, timeout: Optional[float] = None) -> int:
    """
    Total apparent size of a folder, like `du -sb`.

    Symlinks are counted but never followed, hard-linked files are counted
    once, and entries that vanish or cannot be read mid-walk are skipped.
    """
    try:
        root_stat = os.lstat(path)
    except OSError as e:
        raise LayerRecordError(f"Cannot measure {path}: {e.strerror or e}") from e

    total = root_stat.st_size
    if not stat.S_ISDIR(root_stat.st_mode):
        return total

    deadline = monotonic() + timeout if timeout else None
    seen_inodes = set()

    def _on_error(err):
        logger.debug(f"Skipping unreadable entry while measuring {path}: {err}")

    for root, dirs, files in os.walk(path, onerror=_on_error):
        for name in dirs + files:
            if deadline is not None and monotonic() > deadline:
                raise SizeTimeout(f"Measuring {path} took longer than {timeout}s")
            try:
                st = os.lstat(os.path.join(root, name))
            except OSError as e:
                _on_error(e)
                continue
            if st.st_nlink > 1 and not stat.S_ISDIR(st.st_mode):
                key = (st.st_dev, st.st_ino)
                if key in seen_inodes:
                    continue
                seen_inodes.add(key)
            total += st.st_size

    return total


def format_size(size_bytes: Optional[int]) -> str:
    """Human-readable size; `None` means the size is unknown."""
    if size_bytes is None:
        return "unknown"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"
