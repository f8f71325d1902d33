"""Platform detection and mapping."""
import platform
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from security_checker_installer.binaries.constants import BINARY_NAME, WINDOWS_SUFFIX
from security_checker_installer.errors import UnsupportedPlatformError

# Runtime OS name -> manifest token
OS_TOKENS: Mapping[str, str] = MappingProxyType(
    {
        "Windows": "windows",
        "Linux": "linux",
        "Darwin": "darwin",
    }
)

# Runtime architecture name -> manifest token
ARCH_TOKENS: Mapping[str, str] = MappingProxyType(
    {
        "i386": "386",
        "x86_64": "amd64",
        "amd64": "amd64",
        "arm": "arm64",
    }
)


@dataclass(frozen=True)
class PlatformKey:
    """Runtime platform names together with their manifest tokens."""

    os_name: str
    arch: str
    os_token: str
    arch_token: str


def detect_platform() -> Tuple[str, str]:
    """Return the running (OS name, lowercased machine name)."""
    return platform.system(), platform.machine().lower()


def resolve_platform_key(
    system: Optional[str] = None, machine: Optional[str] = None
) -> PlatformKey:
    """Map an OS/architecture pair to manifest tokens.

    Args:
        system: Runtime OS name as reported by ``platform.system()``.
        machine: Lowercased machine name as reported by ``platform.machine()``.

    Returns:
        PlatformKey carrying both the native names and the tokens.

    Raises:
        UnsupportedPlatformError: If either name is missing from its table.
    """
    if system is None or machine is None:
        detected_system, detected_machine = detect_platform()
        system = detected_system if system is None else system
        machine = detected_machine if machine is None else machine

    if system not in OS_TOKENS:
        raise UnsupportedPlatformError(f"Unsupported os: [{system}].", system, machine)

    if machine not in ARCH_TOKENS:
        raise UnsupportedPlatformError(
            f"Unsupported architecture: [{machine}].", system, machine
        )

    return PlatformKey(
        os_name=system,
        arch=machine,
        os_token=OS_TOKENS[system],
        arch_token=ARCH_TOKENS[machine],
    )


def executable_suffix(system: Optional[str] = None) -> str:
    """Executable file suffix for the given OS family."""
    if system is None:
        system = platform.system()
    return WINDOWS_SUFFIX if system == "Windows" else ""


def get_binary_paths(bin_dir: Path, system: Optional[str] = None) -> Tuple[Path, Path]:
    """Return (base path, suffixed path) of the checker inside ``bin_dir``."""
    base_path = Path(bin_dir) / BINARY_NAME
    return base_path, base_path.with_name(BINARY_NAME + executable_suffix(system))


def is_platform_supported(
    system: Optional[str] = None, machine: Optional[str] = None
) -> bool:
    """Check if a platform has entries in both token tables."""
    try:
        resolve_platform_key(system, machine)
        return True
    except UnsupportedPlatformError:
        return False
