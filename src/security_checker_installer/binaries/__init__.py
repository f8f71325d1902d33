"""Binary resolution, download and verification."""
from security_checker_installer.binaries.platforms import (
    PlatformKey,
    resolve_platform_key,
    get_binary_paths,
)
from security_checker_installer.binaries.manifest import ResolvedAsset, resolve_asset
from security_checker_installer.binaries.fetcher import fetch_manifest, fetch_asset

__all__ = [
    "PlatformKey",
    "resolve_platform_key",
    "get_binary_paths",
    "ResolvedAsset",
    "resolve_asset",
    "fetch_manifest",
    "fetch_asset",
]
