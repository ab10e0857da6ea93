"""Installer download with SSL certificate handling.

Fetches a Bazel self-extracting installer and its detached signature
from the release distribution endpoint. TLS verification uses certifi's
CA bundle so standalone interpreters without a system store still work.
"""

from __future__ import annotations

import http.client
import shutil
import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import certifi

from bazelpin import __version__ as BAZELPIN_VERSION
from bazelpin.bootstrap.platform import PlatformInfo
from bazelpin.core.errors import DownloadError
from bazelpin.core.logging import get_logger

LOGGER = get_logger(__name__)

# Default base URL for Bazel releases
DEFAULT_RELEASE_BASE_URL = "https://github.com/bazelbuild/bazel/releases/download"

# Tool name used in installer filenames
DEFAULT_TOOL_NAME = "bazel"

SIGNATURE_SUFFIX = ".sig"


@dataclass(frozen=True)
class DownloadBundle:
    """An installer artifact and its detached signature.

    Both files live in the same caller-owned temporary directory.
    """

    artifact: Path
    signature: Path


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(url: str, timeout: Optional[float] = None):
    """Open a URL with proper SSL certificate verification.

    Args:
        url: The URL to open.
        timeout: Connection timeout in seconds (None for the socket default).

    Returns:
        A file-like object for reading the response.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": f"bazelpin/{BAZELPIN_VERSION}"})
    return urlopen(request, timeout=timeout, context=get_ssl_context())  # nosec B310


def download_file(url: str, dest_path: Path, timeout: Optional[float] = None) -> int:
    """Download a URL to a file with proper SSL certificate verification.

    Args:
        url: The URL to download from.
        dest_path: Path to save the downloaded file.
        timeout: Connection timeout in seconds.

    Returns:
        Number of bytes written.

    Raises:
        DownloadError: On HTTP errors, connection errors or a truncated body.
        ValueError: If the URL is not HTTPS.
    """
    LOGGER.debug(f"Downloading {url} -> {dest_path}")
    try:
        with secure_urlopen(url, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if not 200 <= status < 300:
                raise DownloadError(f"Failed to download {url}: HTTP {status}", url=url)

            expected = response.getheader("Content-Length")
            with open(dest_path, "wb") as f:
                shutil.copyfileobj(response, f)
            written = dest_path.stat().st_size

    except HTTPError as e:
        raise DownloadError(f"Failed to download {url}: HTTP {e.code} - {e.reason}", url=url) from e
    except URLError as e:
        raise DownloadError(
            f"Failed to download {url}: {e.reason}. Check your network connection.", url=url
        ) from e
    except http.client.HTTPException as e:
        # IncompleteRead on a cut-off chunked body, malformed status lines
        raise DownloadError(f"Failed to download {url}: {e!r}", url=url) from e
    except OSError as e:
        # Connection resets and local write failures
        raise DownloadError(f"Failed to download {url}: {e}", url=url) from e

    if expected is not None and expected.isdigit() and written != int(expected):
        raise DownloadError(
            f"Truncated download from {url}: got {written} of {expected} bytes", url=url
        )

    LOGGER.debug(f"Downloaded {written} bytes from {url}")
    return written


def installer_filename(tool_name: str, version: str, platform_info: PlatformInfo) -> str:
    """Return the installer filename for a release.

    Example: "bazel-0.7.0-installer-linux-x86_64.sh"
    """
    return f"{tool_name}-{version}-installer-{platform_info.suffix}.sh"


def construct_installer_url(
    version: str,
    platform_info: PlatformInfo,
    base_url: str = DEFAULT_RELEASE_BASE_URL,
    tool_name: str = DEFAULT_TOOL_NAME,
) -> str:
    """Construct the download URL for a platform-specific installer.

    Args:
        version: Release version.
        platform_info: Platform information (OS and architecture).
        base_url: Base URL for release downloads.
        tool_name: Tool name used in the filename.

    Returns:
        Full URL to the installer script.
    """
    filename = installer_filename(tool_name, version, platform_info)
    return f"{base_url.rstrip('/')}/{version}/{filename}"


@dataclass
class ArtifactFetcher:
    """Downloads installer artifacts into a caller-provided directory."""

    base_url: str = DEFAULT_RELEASE_BASE_URL
    tool_name: str = DEFAULT_TOOL_NAME
    timeout: Optional[float] = None

    def fetch(self, version: str, platform_info: PlatformInfo, dest_dir: Path) -> DownloadBundle:
        """Download the installer and its signature into ``dest_dir``.

        The signature is fetched first. Any transfer failure aborts the
        whole fetch. Files already written are left for the caller, who
        owns ``dest_dir``.

        Raises:
            DownloadError: If either transfer fails.
            ValueError: If the configured base URL is not HTTPS.
        """
        artifact_url = construct_installer_url(
            version, platform_info, base_url=self.base_url, tool_name=self.tool_name
        )
        signature_url = artifact_url + SIGNATURE_SUFFIX

        filename = installer_filename(self.tool_name, version, platform_info)
        artifact_path = dest_dir / filename
        signature_path = dest_dir / (filename + SIGNATURE_SUFFIX)

        LOGGER.info(f"Downloading {self.tool_name} {version} installer from {artifact_url}")
        download_file(signature_url, signature_path, timeout=self.timeout)
        download_file(artifact_url, artifact_path, timeout=self.timeout)

        return DownloadBundle(artifact=artifact_path, signature=signature_path)
