# sources.py
# Materializes the different kinds of archive input into a single bytes buffer.
#
# Fetching is the only part of loading an archive that may wait on I/O, so the
# main entry point is async; indexing itself runs on the finished buffer.

import asyncio
import inspect
import os
import sys
from pathlib import Path
from typing import Any, Union

import httpx
import requests

from tarslayer.modules.keepers.blob import FileBlob


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_TIMEOUT = 30  # seconds, for remote archives
URL_SCHEMES = ("http://", "https://")


def is_url(value: str) -> bool:
    return value.lower().startswith(URL_SCHEMES)


async def fetch_tar_async(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Download a remote archive with httpx. HTTP errors propagate."""
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        return resp.content


async def get_array_buffer(source: Any) -> bytes:
    """
    Convert an archive source into one contiguous bytes buffer.

    Accepted sources:
    - bytes, bytearray, memoryview
    - FileBlob
    - httpx.Response
    - an object with a read() method, sync or async (e.g. an open binary file,
      an UploadFile); its result is converted again
    - a URL string (http/https), fetched with httpx
    - a filesystem path (str or os.PathLike)

    Raises:
        TypeError: for anything else.
    """
    if isinstance(source, bytes):
        return source
    if isinstance(source, (bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, FileBlob):
        return source.data
    if isinstance(source, httpx.Response):
        return await source.aread()

    read = getattr(source, "read", None)
    if callable(read):
        data = read()
        if inspect.isawaitable(data):
            data = await data
        if isinstance(data, str):
            raise TypeError("Archive sources must be opened in binary mode")
        return await get_array_buffer(data)

    if isinstance(source, str) and is_url(source):
        return await fetch_tar_async(source)
    if isinstance(source, (str, os.PathLike)):
        return await asyncio.to_thread(read_local_tar, source)

    raise TypeError(f"Unsupported archive source: {type(source).__name__}")


def download_tar(url: str, timeout: float = DEFAULT_TIMEOUT, verbose: bool = False) -> bytes:
    """
    Download a remote archive synchronously.

    Raises:
        requests.RequestException: on connection problems or HTTP error codes.
    """
    if verbose:
        print(f"[*] Downloading {url}...", file=sys.stderr)

    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()

    if verbose:
        print(f"[*] Downloaded {len(resp.content):,} bytes", file=sys.stderr)

    return resp.content


def read_local_tar(path: Union[str, os.PathLike]) -> bytes:
    """Read an archive from disk; '-' reads it from stdin."""
    if str(path) == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()
