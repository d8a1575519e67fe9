from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .models.errors import WriteError

"""Atomic destination files.

Writers get a temporary path next to the destination and the file is
renamed onto its final name only after the writer returns; on any failure
the temporary file is removed, so a half-written destination never becomes
visible.
"""

__all__ = [
    "DEFAULT_FILE_MODE",
    "TEMP_SUFFIX",
    "atomic_destination",
    "destination_mode",
]

TEMP_SUFFIX = ".tmp"
DEFAULT_FILE_MODE = 0o666


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def destination_mode(destination: Path) -> int:
    """Permission bits for ``destination``: kept when it exists, else ``0o666`` minus the umask."""
    try:
        return destination.stat().st_mode & 0o7777
    except FileNotFoundError:
        return DEFAULT_FILE_MODE & ~_current_umask()


@contextmanager
def atomic_destination(destination: Path) -> Iterator[Path]:
    """Yield a temp path in ``destination``'s directory; rename it into place on success.

    The renamed file keeps the permission bits of the file it replaces, or gets
    the umask-derived default for a new file. OSErrors surface as WriteError.
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=destination.parent, prefix=f".{destination.name}.", suffix=TEMP_SUFFIX
        )
        os.close(fd)
    except OSError as e:
        raise WriteError(f"cannot create destination {destination}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        yield tmp_path
        # mkstemp は 0600 で作成するため通常のファイル権限に揃える
        os.chmod(tmp_path, destination_mode(destination))
        os.replace(tmp_path, destination)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise WriteError(f"failed writing {destination}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
