"""
HTTP Infrastructure - HTTP client implementations.

This module provides:
- HttpFileDownloader: Async streaming downloader (implements IFileDownloader)
"""

from .file_downloader import HttpFileDownloader, get_file_downloader

__all__ = [
    "HttpFileDownloader",
    "get_file_downloader",
]
