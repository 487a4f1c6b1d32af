"""
Retrieval of device-description documents over HTTP.
"""
from typing import Protocol

import aiohttp
import structlog

from .exceptions import FetchError, FetchTimeoutError

logger = structlog.get_logger(__name__)


class DocumentFetcher(Protocol):
    """Anything that can turn a URI into the text of its response body."""

    async def fetch_text(self, uri: str, timeout: float) -> str:
        """Return the body at ``uri`` or raise FetchError (FetchTimeoutError on timeout)."""
        ...


class HTTPDocumentFetcher:
    """
    DocumentFetcher backed by aiohttp.ClientSession.

    The session is created lazily and closed by ``close()`` unless it was
    passed in, in which case its lifecycle is managed by the caller.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None, ssl_verify: bool = True):
        self._session = session
        self._owns_session = session is None
        self.ssl_verify = ssl_verify
        self.logger = logger.bind(component="HTTPDocumentFetcher")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self.logger.debug("Creating aiohttp session.")
            connector = aiohttp.TCPConnector(ssl=self.ssl_verify)
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
        return self._session

    async def fetch_text(self, uri: str, timeout: float) -> str:
        session = await self._get_session()
        from . import __version__

        headers = {"User-Agent": f"cast-locator/{__version__}"}
        client_timeout = aiohttp.ClientTimeout(total=timeout)

        self.logger.debug("Fetching description document", uri=uri, timeout=timeout)
        try:
            async with session.get(uri, headers=headers, timeout=client_timeout) as response:
                body = await response.text()
                if response.status >= 300:
                    self.logger.debug("Description fetch returned error status", uri=uri, status=response.status, reason=response.reason)
                    raise FetchError(f"HTTP {response.status} {response.reason} from {uri}", uri=uri, status=response.status)
                return body
        except TimeoutError as e:
            raise FetchTimeoutError(f"Request to {uri} timed out after {timeout}s.", uri=uri) from e
        except aiohttp.ClientError as e:
            raise FetchError(f"HTTP client error for {uri}: {e}", uri=uri) from e
        except UnicodeDecodeError as e:
            raise FetchError(f"Undecodable body from {uri}: {e}", uri=uri) from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self.logger.debug("aiohttp session closed.")
        self._session = None

    async def __aenter__(self) -> "HTTPDocumentFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
