import asyncio
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

LINUX_ASSET = "local-php-security-checker_2.1.3_linux_amd64"
WINDOWS_ASSET = "local-php-security-checker_2.1.3_windows_amd64.exe"
DARWIN_ASSET = "local-php-security-checker_2.1.3_darwin_amd64"

BINARY_CONTENT = b"\x7fELF checker build linux amd64"


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def build_manifest(assets: Dict[str, bytes]) -> str:
    """Checksums file in the upstream `<sha>  <name>` layout."""
    return "".join(f"{sha256(data)}  {name}\n" for name, data in assets.items())


@dataclass
class ReleaseHost:
    """Local stand-in for the GitHub latest-release download endpoint."""

    base_url: str = ""
    files: Dict[str, bytes] = field(default_factory=dict)
    requests: List[str] = field(default_factory=list)
    delay: float = 0.0

    def publish(self, assets: Dict[str, bytes], manifest: Optional[str] = None) -> None:
        self.files = dict(assets)
        self.files["checksums.txt"] = (
            manifest if manifest is not None else build_manifest(assets)
        ).encode()


@pytest.fixture
def default_assets() -> Dict[str, bytes]:
    return {
        DARWIN_ASSET: b"darwin build",
        LINUX_ASSET: BINARY_CONTENT,
        WINDOWS_ASSET: b"MZ windows build",
    }


@pytest_asyncio.fixture
async def release_host(default_assets):
    """Serve release files from memory and record every requested name."""
    host = ReleaseHost()
    host.publish(default_assets)

    async def download(request: web.Request) -> web.Response:
        name = request.match_info["name"]
        host.requests.append(name)
        if host.delay:
            await asyncio.sleep(host.delay)
        if name not in host.files:
            raise web.HTTPNotFound()
        return web.Response(body=host.files[name])

    app = web.Application()
    app.router.add_get("/download/{name}", download)

    server = TestServer(app)
    await server.start_server()
    host.base_url = str(server.make_url("/download/"))
    try:
        yield host
    finally:
        await server.close()


@pytest.fixture(autouse=True)
def package_logger():
    """Give each test a package logger without handlers, restored afterwards."""
    logger = logging.getLogger("security_checker_installer")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    try:
        yield logger
    finally:
        logger.handlers[:] = saved[0]
        logger.setLevel(saved[1])
        logger.propagate = saved[2]
