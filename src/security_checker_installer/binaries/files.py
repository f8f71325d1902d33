"""Filesystem helpers: directory checks, hashing and atomic placement."""
import hashlib
import hmac
import os
import tempfile
from pathlib import Path

from security_checker_installer.binaries.constants import BINARY_MODE, DIRECTORY_MODE
from security_checker_installer.errors import (
    DirectoryCreationError,
    FilesystemWriteError,
    TargetNotADirectoryError,
    TargetNotWritableError,
)
from security_checker_installer.logging import get_logger

logger = get_logger(__name__)


def ensure_bin_dir(bin_dir: Path) -> None:
    """Create the binary directory if missing and check it is writable."""
    if not bin_dir.exists():
        try:
            bin_dir.mkdir(mode=DIRECTORY_MODE)
        except OSError as e:
            raise DirectoryCreationError(str(bin_dir)) from e
        logger.debug({"event": "bin_dir_created", "path": str(bin_dir)})

    if not bin_dir.is_dir():
        raise TargetNotADirectoryError(str(bin_dir))

    if not os.access(bin_dir, os.W_OK):
        raise TargetNotWritableError(str(bin_dir))


def compute_digest(data: bytes) -> str:
    """SHA-256 hex digest of in-memory bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file."""
    sha256_hash = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                sha256_hash.update(byte_block)
    except OSError as e:
        raise FilesystemWriteError(str(path), f"could not compute sha256sum: {e}") from e
    return sha256_hash.hexdigest()


def digests_match(expected: str, actual: str) -> bool:
    """Constant-time comparison of two hex digests."""
    return hmac.compare_digest(expected.strip().lower(), actual.strip().lower())


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def touch_placeholder(path: Path) -> None:
    """Create an empty file if missing; existing content is kept."""
    try:
        path.touch(exist_ok=True)
    except OSError as e:
        raise FilesystemWriteError(str(path), str(e)) from e


def install_binary(path: Path, data: bytes) -> None:
    """Atomically replace ``path`` with ``data`` and mark it executable.

    The bytes land in a temporary file next to ``path`` which is only renamed
    over the final path once fully written and chmod'ed.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, BINARY_MODE)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise FilesystemWriteError(str(path), str(e)) from e

    logger.debug({"event": "binary_written", "path": str(path), "size": len(data)})
