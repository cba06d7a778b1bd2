"""
Handles downloading a rendered image over HTTP and writing it to disk.
"""

import asyncio
import logging
import os
from contextlib import suppress
from pathlib import Path

import aiofiles
import aiohttp

from figma_fetch.exceptions import DownloadError
from figma_fetch.models.node import DownloadResult
from figma_fetch.utils.path import create_dir, image_path_for

log = logging.getLogger(__name__)

_connection_pool: aiohttp.ClientSession | None = None
_pool_lock = asyncio.Lock()


async def get_connection_pool() -> aiohttp.ClientSession:
    """
    Gets or creates a shared aiohttp ClientSession for downloads.

    Image URLs point at a CDN and are pre-signed, so no auth headers are sent.
    """
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            return _connection_pool

        timeout = aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=90)
        _connection_pool = aiohttp.ClientSession(timeout=timeout)
        log.debug("Created image download session.")

    return _connection_pool


async def close_connection_pool() -> None:
    """Closes the shared download session."""
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            await _connection_pool.close()
            _connection_pool = None
            log.debug("Shared image download session closed.")


class Downloader:
    """Downloads a single rendered image into a target directory."""

    CHUNK_SIZE = 65536  # 64 KB

    def __init__(self, session: aiohttp.ClientSession | None = None):
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None:
            return self._session
        return await get_connection_pool()

    async def download_file(self, url: str, destination_path: Path) -> int:
        """
        Streams the body of ``url`` into ``destination_path``.

        Returns the number of bytes written. Any existing file is overwritten.
        """
        session = await self._get_session()
        bytes_written = 0
        async with session.get(url, allow_redirects=True) as response:
            response.raise_for_status()
            async with aiofiles.open(destination_path, "wb") as f:
                async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                    await f.write(chunk)
                    bytes_written += len(chunk)
        return bytes_written

    async def download_image(
        self, image_url: str, target_dir: str | Path, node_id: str
    ) -> DownloadResult:
        """
        Fetches a rendered image and saves it as ``<target_dir>/<node_id>.png``.

        The target directory is created if missing. The body is written to a
        temporary file first, so a failed download never leaves a partial image
        behind and never replaces a previously saved one.

        Raises:
            DownloadError: On network failure or any filesystem error.
        """
        target_dir = Path(target_dir)
        try:
            await asyncio.to_thread(create_dir, target_dir)
        except OSError as e:
            raise DownloadError(
                f"Could not create output directory '{target_dir}': {e}"
            ) from e

        destination_path = image_path_for(target_dir, node_id)
        partial_path = destination_path.with_name(destination_path.name + ".part")
        try:
            bytes_written = await self.download_file(image_url, partial_path)
            await asyncio.to_thread(os.replace, partial_path, destination_path)
        except aiohttp.ClientResponseError as e:
            await self._discard(partial_path)
            raise DownloadError(
                f"Image request failed with status {e.status}: {e.message}"
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            await self._discard(partial_path)
            raise DownloadError(
                f"Could not download image: {str(e) or type(e).__name__}"
            ) from e
        except OSError as e:
            await self._discard(partial_path)
            raise DownloadError(
                f"Could not write image to '{destination_path}': {e}"
            ) from e

        log.debug(f"Wrote {bytes_written} bytes to '{destination_path}'")
        return DownloadResult(saved_path=destination_path, bytes_written=bytes_written)

    @staticmethod
    async def _discard(path: Path) -> None:
        """Removes a partially written file, if one was created."""
        with suppress(OSError):
            await asyncio.to_thread(path.unlink)
