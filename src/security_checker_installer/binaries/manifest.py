"""Checksum manifest parsing and release asset resolution."""
from dataclasses import dataclass
from typing import Iterator, List, Optional

from security_checker_installer.binaries.constants import RELEASE_DOWNLOAD_URL
from security_checker_installer.binaries.platforms import PlatformKey
from security_checker_installer.errors import UnsupportedPlatformError


@dataclass(frozen=True)
class ResolvedAsset:
    """Release asset selected for the current platform."""

    digest: str
    filename: str
    url: str


def normalize_line(line: str) -> str:
    """Collapse double-space separators and drop a trailing carriage return."""
    return line.rstrip("\r").replace("  ", " ")


def split_entry(line: str) -> Optional[List[str]]:
    """Split a normalized line into (digest, filename), or None if malformed."""
    fields = line.split(" ")
    if len(fields) != 2 or not all(fields):
        return None
    return fields


def iter_candidates(manifest: str, key: PlatformKey) -> Iterator[List[str]]:
    """Yield well-formed entries mentioning both platform tokens, in order."""
    for raw_line in manifest.split("\n"):
        line = normalize_line(raw_line)

        if key.os_token not in line:
            continue

        if key.arch_token not in line:
            continue

        fields = split_entry(line)
        if fields is None:
            continue

        yield fields


def resolve_asset(
    manifest: str, key: PlatformKey, base_url: str = RELEASE_DOWNLOAD_URL
) -> ResolvedAsset:
    """Pick the first manifest entry for ``key`` and build its download URL.

    Raises:
        UnsupportedPlatformError: If no line matches both tokens.
    """
    for digest, filename in iter_candidates(manifest, key):
        return ResolvedAsset(
            digest=digest,
            filename=filename,
            url=join_url(base_url, filename),
        )

    raise UnsupportedPlatformError(
        f"Unsupported os: [{key.os_name}], or unsupported architecture: [{key.arch}].",
        key.os_name,
        key.arch,
    )


def join_url(base_url: str, filename: str) -> str:
    """Append a filename to a release download base URL."""
    return f"{base_url.rstrip('/')}/{filename}"
