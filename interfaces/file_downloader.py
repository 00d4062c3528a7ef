"""
File Downloader Interface - Abstract interface for downloading files from URLs.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class IFileDownloader(ABC):
    """
    Abstract interface for downloading a remote file to a local path.

    Implementations:
    - infrastructure.http.file_downloader.HttpFileDownloader
    """

    @abstractmethod
    async def download(self, url: str, destination: Path) -> float:
        """
        Download a file from URL to destination.

        The destination must never be observed half-written: on failure
        nothing is left at ``destination``.

        Args:
            url: URL to download from
            destination: Local path to save the file

        Returns:
            File size in MB

        Raises:
            TransportError: On network error or non-success status
        """
        pass
