"""Release manifest and asset downloads."""
import asyncio

import aiohttp

from security_checker_installer.errors import AssetFetchError, ManifestFetchError
from security_checker_installer.logging import get_logger

logger = get_logger(__name__)


async def fetch_manifest(session: aiohttp.ClientSession, url: str) -> str:
    """Download the checksum manifest as UTF-8 text."""
    logger.debug({"event": "fetching_manifest", "url": url})
    try:
        async with session.get(url) as response:
            if response.status != 200:
                raise ManifestFetchError(url, f"status {response.status}")
            body = await response.read()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise ManifestFetchError(url, str(e) or e.__class__.__name__) from e

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestFetchError(url, "manifest is not valid UTF-8") from e

    logger.debug({"event": "manifest_fetched", "url": url, "size": len(body)})
    return text


async def fetch_asset(session: aiohttp.ClientSession, url: str) -> bytes:
    """Download the binary asset into memory."""
    logger.info({"event": "downloading_binary", "url": url})
    try:
        async with session.get(url) as response:
            if response.status != 200:
                raise AssetFetchError(url, f"status {response.status}")

            chunks = []
            while chunk := await response.content.read(8192):
                chunks.append(chunk)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise AssetFetchError(url, str(e) or e.__class__.__name__) from e

    data = b"".join(chunks)
    logger.info({"event": "binary_downloaded", "url": url, "size": len(data)})
    return data
