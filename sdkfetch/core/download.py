"""
Network download manager with redirect handling and progress tracking.

This module provides the artifact downloader used by the install pipeline:
- HTTP/HTTPS downloads with TLS verification (via requests)
- Explicit 301/302 redirect handling with a bounded hop count
- A fresh DownloadSession per attempt and per redirect hop
- Per-hop timeouts
- Content-Length verification against the raw (undecoded) body bytes
- Optional retry with exponential backoff for transient failures
- Progress reporting (bytes, percentage, speed, ETA) to an optional observer

Any failure deletes the partially written file before the error propagates.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urljoin

import requests
import urllib3
from requests.exceptions import ConnectionError, RequestException, Timeout

from sdkfetch.core.exceptions import RedirectLimitError, TransportError

logger = logging.getLogger(__name__)

REDIRECT_STATUS_CODES = (301, 302)
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_CHUNK_SIZE = 8192
PROGRESS_INTERVAL = 0.5

# Archives are fetched byte-for-byte as published; digests cover the wire bytes
REQUEST_HEADERS = {"Accept-Encoding": "identity"}

ProgressCallback = Callable[["DownloadProgress"], None]


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


@dataclass
class DownloadSession:
    """
    State of a single download attempt against a single URL.

    A redirect hop never reuses a session: the downloader creates a new one
    for the relocated URL.
    """

    source_url: str
    destination: Path
    hop: int = 0
    expected_bytes: Optional[int] = None
    received_bytes: int = 0

    def discard(self):
        """Delete the partially written destination file, if any."""
        try:
            self.destination.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove partial download {self.destination}: {e}")


class Downloader:
    """
    Stream an HTTP resource to a local file.

    Example:
        >>> downloader = Downloader(timeout=30, max_redirects=5)
        >>> size = downloader.fetch(
        ...     "https://example.com/sdk.tar.gz", Path("tmp/sdk.tar.gz")
        ... )
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        retries: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Initialize downloader.

        Args:
            session: HTTP session to use (default: a new requests.Session)
            timeout: Timeout in seconds applied to every request hop
            max_redirects: Maximum number of redirect hops to follow
            retries: Extra attempts for transient failures (connection errors, 5xx)
            chunk_size: Bytes per streamed chunk
        """
        if max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")
        if retries < 0:
            raise ValueError("retries cannot be negative")

        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.retries = retries
        self.chunk_size = chunk_size

    def fetch(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Download url to destination, following redirects.

        Args:
            url: URL to download from
            destination: Local path to save the body to
            progress_callback: Optional observer for progress updates

        Returns:
            Total number of bytes written

        Raises:
            TransportError: If the download fails (status, connection,
                content-length mismatch, redirect limit)
            ValueError: If URL or destination is empty
        """
        if not url:
            raise ValueError("URL cannot be empty")

        if not destination:
            raise ValueError("Destination path cannot be empty")

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        attempts = self.retries + 1
        for attempt in range(attempts):
            try:
                return self._follow_redirects(url, destination, progress_callback)
            except TransportError as e:
                if not e.retryable or attempt == attempts - 1:
                    raise

                # Exponential backoff
                backoff_seconds = 2**attempt
                logger.warning(
                    f"Download attempt {attempt + 1} failed: {e}. "
                    f"Retrying in {backoff_seconds}s..."
                )
                time.sleep(backoff_seconds)

        # Should never reach here
        raise TransportError("Download failed for unknown reason", url=url)

    def _follow_redirects(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[ProgressCallback],
    ) -> int:
        """Run one logical download, creating a session per redirect hop."""
        current_url = url
        for hop in range(self.max_redirects + 1):
            session = DownloadSession(
                source_url=current_url, destination=destination, hop=hop
            )
            location = self._fetch_once(session, progress_callback)
            if location is None:
                return session.received_bytes

            logger.debug(f"Redirect hop {hop + 1}: {current_url} -> {location}")
            current_url = location

        raise RedirectLimitError(url, self.max_redirects)

    def _fetch_once(
        self,
        session: DownloadSession,
        progress_callback: Optional[ProgressCallback],
    ) -> Optional[str]:
        """
        Issue a single GET for the session's URL.

        Returns:
            The absolute redirect target if the server answered 301/302,
            None once the body has been written to disk
        """
        url = session.source_url
        if session.hop == 0:
            logger.info(f"Downloading from {url}")

        try:
            response = self.session.get(
                url,
                stream=True,
                timeout=self.timeout,
                allow_redirects=False,
                headers=REQUEST_HEADERS,
            )
        except (Timeout, ConnectionError) as e:
            raise TransportError(
                f"Connection to {url} failed: {e}", url=url, retryable=True
            ) from e
        except RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e

        with response:
            status = response.status_code

            if status in REDIRECT_STATUS_CODES:
                location = response.headers.get("Location")
                if not location:
                    raise TransportError(
                        f"Redirect {status} from {url} has no Location header",
                        url=url,
                        status_code=status,
                    )
                return urljoin(url, location)

            if status != 200:
                raise TransportError(
                    f"Failed to download: {status} {response.reason or ''}".rstrip(),
                    url=url,
                    status_code=status,
                    retryable=status >= 500,
                )

            content_length = response.headers.get("Content-Length")
            if content_length and content_length.isdigit():
                session.expected_bytes = int(content_length)

            try:
                self._stream_body(response, session, progress_callback)
            except (RequestException, urllib3.exceptions.HTTPError) as e:
                session.discard()
                raise TransportError(
                    f"Connection interrupted while downloading {url}: {e}",
                    url=url,
                    retryable=True,
                ) from e
            except Exception:
                session.discard()
                raise

        if (
            session.expected_bytes is not None
            and session.received_bytes != session.expected_bytes
        ):
            session.discard()
            raise TransportError(
                f"Content-Length mismatch for {url}: expected "
                f"{session.expected_bytes} bytes, received {session.received_bytes}",
                url=url,
                retryable=True,
            )

        logger.info(f"Download complete: {session.destination}")
        return None

    def _stream_body(
        self,
        response: requests.Response,
        session: DownloadSession,
        progress_callback: Optional[ProgressCallback],
    ):
        """Write the undecoded response body to disk, reporting throttled progress."""
        total_size = session.expected_bytes or 0
        start_time = time.time()
        last_progress_time = start_time

        with open(session.destination, "wb") as f:
            for chunk in response.raw.stream(self.chunk_size, decode_content=False):
                if not chunk:
                    continue

                f.write(chunk)
                session.received_bytes += len(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= PROGRESS_INTERVAL
                    or session.received_bytes == total_size
                ):
                    progress_callback(
                        _make_progress(
                            session.received_bytes, total_size, current_time - start_time
                        )
                    )
                    last_progress_time = current_time

        if progress_callback and session.received_bytes != total_size:
            # Final update when the size was unknown or never hit exactly
            progress_callback(
                _make_progress(
                    session.received_bytes, total_size, time.time() - start_time
                )
            )


def _make_progress(downloaded: int, total_size: int, elapsed: float) -> DownloadProgress:
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    eta = remaining / speed if speed > 0 else 0

    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=eta,
    )


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[ProgressCallback] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    retries: int = 0,
) -> int:
    """
    Download file from URL to destination.

    Convenience wrapper creating a one-off Downloader.

    Returns:
        Total number of bytes written

    Example:
        >>> from sdkfetch.core.download import download_file
        >>> def on_progress(progress):
        ...     print(f"Downloaded {progress.percentage:.1f}%")
        >>>
        >>> download_file(url, Path("tmp/sdk.tar.gz"), progress_callback=on_progress)
    """
    downloader = Downloader(
        timeout=timeout, max_redirects=max_redirects, retries=retries
    )
    return downloader.fetch(url, destination, progress_callback=progress_callback)


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


__all__ = [
    "DownloadProgress",
    "DownloadSession",
    "Downloader",
    "download_file",
    "format_progress",
    "REDIRECT_STATUS_CODES",
]
