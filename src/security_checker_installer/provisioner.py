"""Verified download and installation of the checker binary."""
from pathlib import Path
from typing import Optional, Union

import aiohttp

from security_checker_installer.binaries.constants import (
    CHECKSUMS_FILENAME,
    RELEASE_DOWNLOAD_URL,
)
from security_checker_installer.binaries.fetcher import fetch_asset, fetch_manifest
from security_checker_installer.binaries.files import (
    compute_digest,
    compute_file_hash,
    digests_match,
    ensure_bin_dir,
    install_binary,
    is_executable,
    touch_placeholder,
)
from security_checker_installer.binaries.manifest import (
    ResolvedAsset,
    join_url,
    resolve_asset,
)
from security_checker_installer.binaries.platforms import (
    PlatformKey,
    detect_platform,
    get_binary_paths,
    resolve_platform_key,
)
from security_checker_installer.errors import IntegrityError
from security_checker_installer.logging import get_logger
from security_checker_installer.types import InstallOutcome, InstallResult

logger = get_logger(__name__)


async def resolve_remote_asset(
    session: aiohttp.ClientSession,
    key: PlatformKey,
    base_url: str = RELEASE_DOWNLOAD_URL,
) -> ResolvedAsset:
    """Fetch the checksum manifest and resolve the asset for ``key``."""
    manifest = await fetch_manifest(session, join_url(base_url, CHECKSUMS_FILENAME))
    asset = resolve_asset(manifest, key, base_url)

    logger.info(
        {
            "event": "asset_resolved",
            "os": key.os_token,
            "arch": key.arch_token,
            "filename": asset.filename,
            "digest": asset.digest,
        }
    )
    return asset


async def ensure_installed(
    target_dir: Union[str, Path],
    force: bool = False,
    *,
    system: Optional[str] = None,
    machine: Optional[str] = None,
    base_url: str = RELEASE_DOWNLOAD_URL,
    session: Optional[aiohttp.ClientSession] = None,
) -> InstallResult:
    """Ensure a verified, executable checker binary lives in ``target_dir``.

    Args:
        target_dir: Directory to hold the binary; created if missing.
        force: Re-resolve against the latest manifest even when a binary
            already looks present.
        system: OS name override, defaults to the running system.
        machine: Architecture override, defaults to the running machine.
        base_url: Release download base URL.
        session: Optional aiohttp session, left open for the caller.

    Returns:
        InstallResult describing the binary path and which path was taken.

    Raises:
        InstallerError: Any subclass, see ``security_checker_installer.errors``.
    """
    bin_dir = Path(target_dir)
    ensure_bin_dir(bin_dir)

    if system is None or machine is None:
        detected_system, detected_machine = detect_platform()
        system = detected_system if system is None else system
        machine = detected_machine if machine is None else machine

    base_path, binary_path = get_binary_paths(bin_dir, system)

    if (
        not force
        and base_path.exists()
        and binary_path.exists()
        and is_executable(binary_path)
    ):
        logger.debug({"event": "binary_present", "path": str(binary_path)})
        return InstallResult(path=binary_path, outcome=InstallOutcome.PRESENT)

    key = resolve_platform_key(system, machine)

    if session is None:
        async with aiohttp.ClientSession() as own_session:
            return await _provision(own_session, key, base_path, binary_path, base_url)
    return await _provision(session, key, base_path, binary_path, base_url)


async def _provision(
    session: aiohttp.ClientSession,
    key: PlatformKey,
    base_path: Path,
    binary_path: Path,
    base_url: str,
) -> InstallResult:
    asset = await resolve_remote_asset(session, key, base_url)

    touch_placeholder(base_path)
    touch_placeholder(binary_path)

    if is_executable(binary_path) and digests_match(
        asset.digest, compute_file_hash(binary_path)
    ):
        logger.info({"event": "binary_up_to_date", "path": str(binary_path)})
        return InstallResult(
            path=binary_path,
            outcome=InstallOutcome.VERIFIED,
            digest=asset.digest,
            url=asset.url,
        )

    data = await fetch_asset(session, asset.url)

    actual = compute_digest(data)
    if not digests_match(asset.digest, actual):
        logger.error(
            {
                "event": "checksum_mismatch",
                "url": asset.url,
                "expected": asset.digest,
                "actual": actual,
            }
        )
        raise IntegrityError(asset.url, asset.digest, actual)

    install_binary(binary_path, data)

    logger.info(
        {
            "event": "binary_installed",
            "path": str(binary_path),
            "filename": asset.filename,
            "digest": actual,
        }
    )
    return InstallResult(
        path=binary_path,
        outcome=InstallOutcome.DOWNLOADED,
        digest=actual,
        url=asset.url,
    )
