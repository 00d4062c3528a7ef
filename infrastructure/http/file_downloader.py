"""
HTTP File Downloader - Streams remote files (binaries, models) to disk.

Implements IFileDownloader interface for dependency injection.
Optimized with connection pooling and atomic placement: bytes are streamed
into a unique ``.part`` file which is renamed over the destination only
after the transfer completes.
"""

import os
import uuid
from pathlib import Path
from typing import Optional

import httpx  # type: ignore

from core.constants import (
    DOWNLOAD_CHUNK_SIZE,
    HTTP_CONNECT_TIMEOUT,
    HTTP_KEEPALIVE_EXPIRY,
    HTTP_MAX_CONNECTIONS,
    HTTP_MAX_KEEPALIVE_CONNECTIONS,
    HTTP_POOL_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_WRITE_TIMEOUT,
    PARTIAL_DOWNLOAD_SUFFIX,
)
from core.errors import TransportError
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from interfaces.file_downloader import IFileDownloader


# Connection pool limits shared across all downloads
HTTP_LIMITS = httpx.Limits(
    max_keepalive_connections=HTTP_MAX_KEEPALIVE_CONNECTIONS,
    max_connections=HTTP_MAX_CONNECTIONS,
    keepalive_expiry=HTTP_KEEPALIVE_EXPIRY,
)

HTTP_TIMEOUT = httpx.Timeout(
    connect=HTTP_CONNECT_TIMEOUT,
    read=HTTP_READ_TIMEOUT,
    write=HTTP_WRITE_TIMEOUT,
    pool=HTTP_POOL_TIMEOUT,
)


class HttpFileDownloader(IFileDownloader):
    """
    HTTP-based file downloader with connection pooling.

    Follows redirects (GitHub and Hugging Face both redirect to CDNs).
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_size_mb: Optional[int] = None,
    ):
        """
        Args:
            client: Pre-built client (tests inject one with a MockTransport)
            max_size_mb: Optional size cap; None means unlimited
        """
        self._client = client
        self._max_size_mb = max_size_mb

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                limits=HTTP_LIMITS,
                timeout=HTTP_TIMEOUT,
                follow_redirects=True,
            )
            logger.info("Created HTTP client with connection pooling")
        return self._client

    async def download(self, url: str, destination: Path) -> float:
        """
        Download file from URL to destination.

        Raises:
            TransportError: If the request fails or returns a non-2xx status
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(
            f"{destination.name}{PARTIAL_DOWNLOAD_SUFFIX}-{uuid.uuid4().hex[:8]}"
        )

        logger.info(LogMessages.HTTP_DOWNLOADING.format(url=url))

        try:
            client = await self._get_client()
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise TransportError(
                        ErrorMessages.HTTP_DOWNLOAD_FAILED.format(
                            url=url, status_code=response.status_code
                        ),
                        url=url,
                    )

                size_bytes = 0
                with open(partial, "wb") as f:
                    async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        size_bytes += len(chunk)
                        if (
                            self._max_size_mb is not None
                            and size_bytes > self._max_size_mb * 1024 * 1024
                        ):
                            raise TransportError(
                                ErrorMessages.HTTP_FILE_TOO_LARGE.format(
                                    max=self._max_size_mb
                                ),
                                url=url,
                            )

            os.replace(partial, destination)

        except httpx.HTTPError as e:
            self._discard(partial)
            raise TransportError(
                ErrorMessages.HTTP_TRANSPORT_FAILED.format(url=url, error=e), url=url
            ) from e
        except BaseException:
            self._discard(partial)
            raise

        file_size_mb = size_bytes / (1024 * 1024)
        logger.info(
            LogMessages.HTTP_DOWNLOADED.format(size=file_size_mb, destination=destination)
        )
        return file_size_mb

    @staticmethod
    def _discard(partial: Path) -> None:
        try:
            partial.unlink(missing_ok=True)
            logger.debug(f"Cleaned up partial download: {partial}")
        except OSError as e:
            logger.warning(f"Failed to cleanup partial download {partial}: {e}")

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()


# Global singleton instance
_file_downloader: Optional[HttpFileDownloader] = None


def get_file_downloader() -> HttpFileDownloader:
    """Get or create global HttpFileDownloader instance (singleton)."""
    global _file_downloader

    if _file_downloader is None:
        logger.info("Creating HttpFileDownloader instance...")
        _file_downloader = HttpFileDownloader()

    return _file_downloader
