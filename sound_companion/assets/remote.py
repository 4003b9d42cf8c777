"""
Remote sound catalog client

The catalog is a JSON document listing every sound that should exist
locally. Two shapes are accepted:

    [{"name": "ahshit.mp3", "url": "https://.../ahshit.mp3"}, ...]
    {"sounds": [{"name": ..., "url": ...}, ...]}

"name" may be omitted, in which case the last path segment of "url" is used.
Relative URLs are resolved against the catalog URL.

The synchroniser only depends on the RemoteCatalogClient interface, so tests
and alternative sources plug in a different implementation.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Optional
from urllib.parse import urljoin

import requests

from .models import PARTIAL_SUFFIX, RemoteAssetDescriptor, RemoteListing
from ..exceptions import DownloadError
from ..utils.helpers import file_name_from_url, is_safe_file_name
from ..utils.logger import get_logger

# Called with (file_name, bytes_written, total_bytes_or_None)
DownloadProgress = Callable[[str, int, Optional[int]], None]

CHUNK_SIZE = 64 * 1024


class RemoteCatalogClient(ABC):
    """Source of truth for which sounds should exist locally"""

    @abstractmethod
    def list_remote_assets(self) -> RemoteListing:
        """
        List every sound in the remote catalog

        Must not raise: transport and parsing failures are reported as
        RemoteListing(success=False).
        """

    @abstractmethod
    def download(
        self,
        descriptor: RemoteAssetDescriptor,
        destination: Path,
        on_progress: Optional[DownloadProgress] = None
    ) -> int:
        """
        Download one sound into the destination directory

        Args:
            descriptor: Sound to fetch
            destination: Sounds directory
            on_progress: Optional incremental progress hook

        Returns:
            Number of bytes written

        Raises:
            DownloadError: If the sound could not be fetched or written
        """


class HttpCatalogClient(RemoteCatalogClient):
    """
    RemoteCatalogClient backed by a JSON catalog served over HTTP

    Args:
        catalog_url: URL of the catalog document
        timeout: Seconds to wait for the catalog listing
        user_agent: User-Agent header sent with every request
        session: Session to reuse (a new one is created when omitted)
        download_timeout: Seconds to wait for a sound download (defaults to timeout)
    """

    def __init__(
        self,
        catalog_url: str,
        timeout: int = 10,
        user_agent: str = "Sound-Companion/1.0",
        session: Optional[requests.Session] = None,
        download_timeout: Optional[int] = None
    ):
        self.catalog_url = catalog_url
        self.timeout = timeout
        self.download_timeout = download_timeout or timeout
        self.logger = get_logger(__name__)

        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})

    def list_remote_assets(self) -> RemoteListing:
        try:
            response = self.session.get(self.catalog_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Catalog request failed: {e}")
            return RemoteListing.failed(str(e))
        except ValueError as e:
            self.logger.warning(f"Catalog response is not valid JSON: {e}")
            return RemoteListing.failed(f"invalid JSON: {e}")

        entries = self._extract_entries(payload)
        if entries is None:
            self.logger.warning("Catalog response has no sound list")
            return RemoteListing.failed("no sound list in response")

        return RemoteListing(success=True, assets=self._parse_entries(entries))

    def _extract_entries(self, payload: Any) -> Optional[List[Any]]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict) and isinstance(payload.get('sounds'), list):
            return payload['sounds']
        return None

    def _parse_entries(self, entries: List[Any]) -> List[RemoteAssetDescriptor]:
        """
        Convert raw catalog entries to descriptors

        Entries without a URL, with an unsafe file name, or repeating a file
        name already seen are skipped with a warning.
        """
        descriptors = []
        seen = set()

        for entry in entries:
            if isinstance(entry, str):
                entry = {'url': entry}
            if not isinstance(entry, dict) or not entry.get('url'):
                self.logger.warning(f"Skipping catalog entry without URL: {entry!r}")
                continue

            url = urljoin(self.catalog_url, str(entry['url']))
            file_name = str(entry.get('name') or file_name_from_url(url) or '')

            if not is_safe_file_name(file_name):
                self.logger.warning(f"Skipping catalog entry with unsafe name: {file_name!r}")
                continue
            if file_name in seen:
                self.logger.warning(f"Skipping duplicate catalog entry: {file_name}")
                continue

            seen.add(file_name)
            descriptors.append(RemoteAssetDescriptor(file_name=file_name, url=url))

        return descriptors

    def download(
        self,
        descriptor: RemoteAssetDescriptor,
        destination: Path,
        on_progress: Optional[DownloadProgress] = None
    ) -> int:
        destination = Path(destination)
        target = destination / descriptor.file_name
        partial = destination / f"{descriptor.file_name}{PARTIAL_SUFFIX}"

        written = 0
        try:
            with self.session.get(descriptor.url, timeout=self.download_timeout, stream=True) as response:
                response.raise_for_status()

                total = response.headers.get('Content-Length')
                total = int(total) if total and total.isdigit() else None

                with open(partial, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if not chunk:
                            continue
                        f.write(chunk)
                        written += len(chunk)
                        if on_progress:
                            on_progress(descriptor.file_name, written, total)

            if written == 0:
                raise DownloadError(f"Empty response for {descriptor.file_name}",
                                    file_name=descriptor.file_name,
                                    details={'url': descriptor.url})

            # Only a complete file appears under its real name
            partial.replace(target)

        except (requests.exceptions.RequestException, OSError) as e:
            self._discard(partial)
            raise DownloadError(f"Failed to download {descriptor.file_name}: {e}",
                                file_name=descriptor.file_name,
                                details={'url': descriptor.url, 'original_error': e}) from e
        except DownloadError:
            self._discard(partial)
            raise

        self.logger.debug(f"Downloaded {descriptor.file_name} ({written} bytes)")
        return written

    def _discard(self, partial: Path) -> None:
        try:
            partial.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning(f"Could not remove partial download {partial}: {e}")
