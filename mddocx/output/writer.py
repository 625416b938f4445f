"""DocxWriter: atomic writes of rendered documents."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from mddocx.converter.models import WriteFailure

logger = logging.getLogger(__name__)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _target_mode(dest: Path) -> int:
    """Mode of the file being replaced, else what ``open()`` would create."""
    try:
        return stat.S_IMODE(dest.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_current_umask()


class DocxWriter:
    """Writes a document payload to disk without ever leaving a partial file.

    The payload goes to a temp file in the destination directory first and is
    moved into place with :func:`os.replace`. The result keeps the permissions
    of the file it replaces; a new file gets the umask default rather than the
    private mode of :func:`tempfile.mkstemp`.
    """

    def write(self, payload: bytes, dest: str | Path) -> Path:
        dest = Path(dest)
        tmp_name: str | None = None
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            mode = _target_mode(dest)
            fd, tmp_name = tempfile.mkstemp(
                dir=dest.parent, prefix=f".{dest.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, dest)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise WriteFailure(dest, e) from e

        logger.info("wrote %s (%d bytes)", dest, len(payload))
        return dest
