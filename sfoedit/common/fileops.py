"""File I/O for PARAM.SFO buffers.

The whole file is read into memory before decoding and written back in one
piece. Writes go to a temporary file in the destination directory which is
fsynced and then atomically swapped in with ``os.replace``, so a failed write
never leaves a half-edited SFO behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .exceptions import FileReadError, FileWriteError

logger = logging.getLogger(__name__)


def read_sfo_bytes(path: Path) -> bytearray:
    """Return the full contents of ``path`` as a mutable buffer."""
    try:
        with open(path, "rb") as f:
            data = bytearray(f.read())
    except OSError as e:
        raise FileReadError(str(path), f"Falha ao ler {path}: {e.strerror or e}") from e
    logger.debug("Read %d bytes from %s", len(data), path)
    return data


def _backup(path: Path) -> Optional[Path]:
    if not path.exists():
        return None
    bak = path.with_name(path.name + ".bak")
    shutil.copy2(str(path), str(bak))
    logger.info("Backup written: %s", bak.name)
    logger.debug("Backup full path: %s", bak)
    return bak


def write_sfo_bytes(path: Path, data: bytes, *, backup: bool = False) -> None:
    """Replace the contents of ``path`` with ``data`` atomically.

    With ``backup`` the previous contents are first copied to ``<name>.bak``.
    """
    path = Path(path)
    tmp_path = None
    try:
        if backup:
            _backup(path)

        fd, tmp_name = tempfile.mkstemp(prefix=".sfoedit_tmp_", dir=str(path.parent))
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError:
                logger.debug("fsync failed for temp file %s", tmp_path)

        if path.exists():
            shutil.copymode(str(path), str(tmp_path))
        os.replace(str(tmp_path), str(path))
        tmp_path = None
        logger.info("Wrote %d bytes: %s", len(data), path.name)
        logger.debug("Wrote full path: %s", path)
    except OSError as e:
        raise FileWriteError(str(path), f"Falha ao escrever {path}: {e.strerror or e}") from e
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.debug("Failed cleaning up tmp file %s", tmp_path)
