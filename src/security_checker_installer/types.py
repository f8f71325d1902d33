"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable


class InstallOutcome(str, Enum):
    """How an install call completed."""

    PRESENT = "present"  # fast path, no network
    VERIFIED = "verified"  # existing file matched the manifest digest
    DOWNLOADED = "downloaded"


@dataclass(frozen=True)
class InstallResult:
    """Installed checker binary"""

    path: Path
    outcome: InstallOutcome
    digest: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "outcome": self.outcome.value,
            "digest": self.digest,
            "url": self.url,
        }


@runtime_checkable
class BinaryDirectoryProvider(Protocol):
    """Host configuration exposing the binary directory setting."""

    def get_binary_directory(self) -> str:
        """Configured directory, or an empty string when unset."""
        ...
