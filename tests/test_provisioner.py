"""Tests for the verified download-and-install flow."""
import os
import stat

import aiohttp
import pytest

from conftest import BINARY_CONTENT, LINUX_ASSET, WINDOWS_ASSET, build_manifest, sha256
from security_checker_installer.errors import (
    AssetFetchError,
    DirectoryCreationError,
    IntegrityError,
    ManifestFetchError,
    TargetNotADirectoryError,
    TargetNotWritableError,
    UnsupportedPlatformError,
)
from security_checker_installer.provisioner import ensure_installed
from security_checker_installer.types import InstallOutcome

LINUX = {"system": "Linux", "machine": "x86_64"}


def mode_of(path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


@pytest.mark.asyncio
async def test_forced_install_matches_manifest_digest(tmp_path, release_host):
    """Installed bytes hash to the digest published in the manifest."""
    bin_dir = tmp_path / "bin"

    result = await ensure_installed(bin_dir, True, base_url=release_host.base_url, **LINUX)

    binary = bin_dir / "local-php-security-checker"
    assert result.path == binary
    assert result.outcome == InstallOutcome.DOWNLOADED
    assert result.url == release_host.base_url + LINUX_ASSET
    assert binary.read_bytes() == BINARY_CONTENT
    assert sha256(binary.read_bytes()) == result.digest == sha256(BINARY_CONTENT)
    assert mode_of(binary) == 0o755
    assert release_host.requests == ["checksums.txt", LINUX_ASSET]


@pytest.mark.asyncio
async def test_second_install_takes_fast_path(tmp_path, release_host):
    """A plain install after a successful one performs no network I/O."""
    first = await ensure_installed(tmp_path, False, base_url=release_host.base_url, **LINUX)
    content = first.path.read_bytes()
    release_host.requests.clear()

    second = await ensure_installed(tmp_path, False, base_url=release_host.base_url, **LINUX)

    assert first.outcome == InstallOutcome.DOWNLOADED
    assert second.outcome == InstallOutcome.PRESENT
    assert second.path.read_bytes() == content
    assert release_host.requests == []


@pytest.mark.asyncio
async def test_fast_path_does_not_check_digest(tmp_path, release_host):
    binary = tmp_path / "local-php-security-checker"
    binary.write_bytes(b"anything executable")
    binary.chmod(0o755)

    result = await ensure_installed(tmp_path, False, base_url=release_host.base_url, **LINUX)

    assert result.outcome == InstallOutcome.PRESENT
    assert binary.read_bytes() == b"anything executable"


@pytest.mark.asyncio
async def test_non_executable_binary_is_reinstalled(tmp_path, release_host):
    binary = tmp_path / "local-php-security-checker"
    binary.write_bytes(BINARY_CONTENT)
    binary.chmod(0o644)

    result = await ensure_installed(tmp_path, False, base_url=release_host.base_url, **LINUX)

    assert result.outcome == InstallOutcome.DOWNLOADED
    assert mode_of(binary) == 0o755


@pytest.mark.asyncio
async def test_forced_update_keeps_matching_binary(tmp_path, release_host):
    """force=True still skips the download when the digest already matches."""
    await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)
    release_host.requests.clear()

    result = await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)

    assert result.outcome == InstallOutcome.VERIFIED
    assert release_host.requests == ["checksums.txt"]


@pytest.mark.asyncio
async def test_forced_update_replaces_stale_binary(tmp_path, release_host):
    binary = tmp_path / "local-php-security-checker"
    binary.write_bytes(b"old release")
    binary.chmod(0o755)

    result = await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)

    assert result.outcome == InstallOutcome.DOWNLOADED
    assert binary.read_bytes() == BINARY_CONTENT
    assert mode_of(binary) == 0o755


@pytest.mark.asyncio
async def test_digest_mismatch_keeps_prior_install(tmp_path, release_host):
    binary = tmp_path / "local-php-security-checker"
    binary.write_bytes(b"previous release")
    binary.chmod(0o755)

    # Manifest announces one build, the host serves another
    release_host.publish(
        {LINUX_ASSET: b"tampered"},
        manifest=build_manifest({LINUX_ASSET: b"new release"}),
    )

    with pytest.raises(IntegrityError) as exc_info:
        await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)

    assert exc_info.value.details["expected"] == sha256(b"new release")
    assert exc_info.value.details["actual"] == sha256(b"tampered")
    assert binary.read_bytes() == b"previous release"
    assert mode_of(binary) == 0o755
    assert [p.name for p in tmp_path.iterdir()] == [binary.name]


@pytest.mark.asyncio
async def test_digest_mismatch_on_fresh_target_leaves_placeholder(tmp_path, release_host):
    release_host.publish(
        {LINUX_ASSET: b"tampered"},
        manifest=build_manifest({LINUX_ASSET: b"genuine"}),
    )

    with pytest.raises(IntegrityError):
        await ensure_installed(tmp_path, False, base_url=release_host.base_url, **LINUX)

    binary = tmp_path / "local-php-security-checker"
    assert binary.exists()
    assert binary.stat().st_size == 0
    assert not os.access(binary, os.X_OK)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "system,machine",
    [("FreeBSD", "x86_64"), ("Linux", "aarch64"), ("Darwin", "arm64")],
)
async def test_unsupported_platform_writes_nothing(tmp_path, release_host, system, machine):
    bin_dir = tmp_path / "bin"

    with pytest.raises(UnsupportedPlatformError) as exc_info:
        await ensure_installed(
            bin_dir, True, system=system, machine=machine, base_url=release_host.base_url
        )

    assert exc_info.value.details == {"os": system, "architecture": machine}
    assert bin_dir.is_dir()
    assert list(bin_dir.iterdir()) == []
    assert release_host.requests == []


@pytest.mark.asyncio
async def test_manifest_without_platform_entry(tmp_path, release_host):
    release_host.publish({WINDOWS_ASSET: b"MZ"})

    with pytest.raises(UnsupportedPlatformError, match=r"Linux.*x86_64"):
        await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_manifest_fetch_failure(tmp_path, release_host):
    release_host.files.clear()

    with pytest.raises(ManifestFetchError, match="checksums.txt"):
        await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)


@pytest.mark.asyncio
async def test_asset_fetch_failure(tmp_path, release_host):
    del release_host.files[LINUX_ASSET]

    with pytest.raises(AssetFetchError, match="status 404"):
        await ensure_installed(tmp_path, True, base_url=release_host.base_url, **LINUX)

    assert (tmp_path / "local-php-security-checker").stat().st_size == 0


@pytest.mark.asyncio
async def test_windows_layout_uses_exe_suffix(tmp_path, release_host):
    result = await ensure_installed(
        tmp_path,
        True,
        system="Windows",
        machine="amd64",
        base_url=release_host.base_url,
    )

    base = tmp_path / "local-php-security-checker"
    exe = tmp_path / "local-php-security-checker.exe"
    assert result.path == exe
    assert base.exists() and base.stat().st_size == 0
    assert exe.read_bytes() == b"MZ windows build"
    assert release_host.requests == ["checksums.txt", WINDOWS_ASSET]


@pytest.mark.asyncio
async def test_caller_session_is_left_open(tmp_path, release_host):
    async with aiohttp.ClientSession() as session:
        await ensure_installed(
            tmp_path, True, base_url=release_host.base_url, session=session, **LINUX
        )
        assert not session.closed


@pytest.mark.asyncio
async def test_target_is_a_file(tmp_path, release_host):
    target = tmp_path / "bin"
    target.write_text("not a directory")

    with pytest.raises(TargetNotADirectoryError) as exc_info:
        await ensure_installed(target, True, base_url=release_host.base_url, **LINUX)

    assert isinstance(exc_info.value, NotADirectoryError)
    assert str(target) in str(exc_info.value)


@pytest.mark.asyncio
async def test_target_cannot_be_created(tmp_path, release_host):
    target = tmp_path / "missing" / "bin"

    with pytest.raises(DirectoryCreationError, match="missing"):
        await ensure_installed(target, True, base_url=release_host.base_url, **LINUX)


@pytest.mark.asyncio
@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="root bypasses directory permissions",
)
async def test_target_not_writable(tmp_path, release_host):
    target = tmp_path / "bin"
    target.mkdir()
    target.chmod(0o555)
    try:
        with pytest.raises(TargetNotWritableError) as exc_info:
            await ensure_installed(target, True, base_url=release_host.base_url, **LINUX)
        assert isinstance(exc_info.value, PermissionError)
    finally:
        target.chmod(0o755)
