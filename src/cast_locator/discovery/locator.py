"""
Discovery of DIAL cast receivers over SSDP.

One ``locate_devices`` call owns one UDP endpoint for the length of its probe
window. The probe loop keeps re-sending M-SEARCH until the deadline while a
collector task drains ``transport.messages`` into an ordered, de-duplicated
candidate list. When the window closes the endpoint is closed, the collector
is told to stop, and the candidates are confirmed one description document
at a time (or a few at a time, see ``FetchConfig.max_concurrent_fetches``).
"""
import asyncio
import math
from collections.abc import Callable, Iterable

import structlog

from ..config import Config
from ..exceptions import DescriptionParseError, FetchError
from ..fetcher import DocumentFetcher, HTTPDocumentFetcher
from ..models.device import Device
from .parser import extract_device_uri
from .transport import MulticastTransport, TransportPort
from .validator import DeviceValidator, has_description_path

logger = structlog.get_logger(__name__)

SSDP_MULTICAST_ADDRESS = "239.255.255.250"
SSDP_PORT = 1900
DEFAULT_TIMEOUT_SECONDS = 2.0

# Header spelling and the closing blank line are significant to some responders.
M_SEARCH_REQUEST = (
    "M-SEARCH * HTTP/1.1\r\n"
    f"HOST:{SSDP_MULTICAST_ADDRESS}:{SSDP_PORT}\r\n"
    "ST:ssdp:all\r\n"
    'MAN:"ssdp:discover"\r\n'
    "MX:3\r\n"
    "\r\n"
)

_END_OF_WINDOW = None


def normalize_timeout(timeout: float | None, default: float = DEFAULT_TIMEOUT_SECONDS) -> float:
    """Non-positive and non-finite timeouts become 2 seconds. None selects ``default``."""
    if timeout is None:
        timeout = default
    if not math.isfinite(timeout) or timeout <= 0:
        return DEFAULT_TIMEOUT_SECONDS
    return float(timeout)


class DeviceLocator:
    """
    Finds DIAL receivers on the local network segment.

    Args:
        app_config: Settings for the probe window, fetching, and logging.
        transport_factory: Builds a fresh TransportPort for every call.
        fetcher: Retrieves description documents. When omitted an
            HTTPDocumentFetcher is created and closed by the locator itself.
    """

    def __init__(
        self,
        app_config: Config | None = None,
        transport_factory: Callable[[], TransportPort] | None = None,
        fetcher: DocumentFetcher | None = None,
    ):
        self.app_config = app_config or Config()
        self.discovery_config = self.app_config.discovery
        self._transport_factory = transport_factory or (
            lambda: MulticastTransport(multicast_ttl=self.discovery_config.multicast_ttl)
        )
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or HTTPDocumentFetcher(ssl_verify=self.app_config.fetch.ssl_verify)
        self.validator = DeviceValidator(self.fetcher)
        self.logger = logger.bind(component="DeviceLocator")

    async def locate_devices(
        self,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[Device]:
        """
        Probe for ``timeout`` seconds and return the confirmed DIAL receivers.

        Returns an empty list when nothing qualifies. Raises TransportError if
        the UDP endpoint cannot be bound or cannot join the SSDP group; every
        other failure only drops the affected candidate. Setting
        ``cancel_event`` ends the probe window early.
        """
        timeout = normalize_timeout(timeout, self.discovery_config.timeout_seconds)
        log = self.logger.bind(timeout=timeout)
        log.info("Starting SSDP discovery")

        try:
            candidates = await self._run_probe_window(timeout, cancel_event)
            log.info("Probe window closed", candidates=len(candidates))
            devices = await self.select_confirmed_devices(candidates, timeout)
        finally:
            if self._owns_fetcher:
                await self.fetcher.close()

        log.info("SSDP discovery finished", devices=len(devices))
        return devices

    async def _run_probe_window(self, timeout: float, cancel_event: asyncio.Event | None) -> list[Device]:
        transport = self._transport_factory()
        try:
            await transport.bind(self.discovery_config.bind_address, self.discovery_config.bind_port)
            transport.join_multicast_group(SSDP_MULTICAST_ADDRESS)

            collector = asyncio.create_task(self._collect_candidates(transport.messages))
            try:
                sends = await self._probe(transport, timeout, cancel_event)
                self.logger.debug("M-SEARCH probing done", sends=sends)
            except BaseException:
                collector.cancel()
                raise
            finally:
                transport.close()
                transport.messages.put_nowait(_END_OF_WINDOW)
            return await collector
        finally:
            transport.close()

    async def _probe(self, transport: TransportPort, timeout: float, cancel_event: asyncio.Event | None) -> int:
        loop = asyncio.get_running_loop()
        interval = self.discovery_config.probe_interval_seconds
        start = loop.time()
        sends = 0
        while True:
            writer = await transport.send_to(SSDP_MULTICAST_ADDRESS, SSDP_PORT)
            writer.write(M_SEARCH_REQUEST)
            await writer.flush()
            sends += 1

            remaining = timeout - (loop.time() - start)
            if remaining <= 0 or (cancel_event is not None and cancel_event.is_set()):
                return sends
            if interval > 0:
                await asyncio.sleep(min(interval, remaining))
                if loop.time() - start >= timeout:
                    return sends

    async def _collect_candidates(self, messages: asyncio.Queue) -> list[Device]:
        candidates: dict[str, Device] = {}
        while True:
            raw_text = await messages.get()
            if raw_text is _END_OF_WINDOW:
                return list(candidates.values())
            uri = extract_device_uri(raw_text)
            if uri is None:
                self.logger.debug("Ignoring SSDP response without a usable location header")
                continue
            if uri not in candidates:
                candidates[uri] = Device(device_uri=uri)
                self.logger.debug("New candidate", uri=uri)

    async def select_confirmed_devices(self, candidates: Iterable[Device | str], timeout: float) -> list[Device]:
        """
        Confirm candidates in discovery order.

        Only URIs ending in ``/ssdp/device-desc.xml`` are fetched; everything
        that fails to fetch, parse, or match the DIAL device type is left out.
        """
        possible: list[Device] = []
        for candidate in candidates:
            device = Device(device_uri=candidate) if isinstance(candidate, str) else candidate
            if has_description_path(device.device_uri):
                possible.append(device)
            else:
                self.logger.debug("Skipping candidate outside the description path", uri=device.device_uri)

        max_concurrent = self.app_config.fetch.max_concurrent_fetches
        if max_concurrent <= 1 or len(possible) <= 1:
            results = [await self._confirm(device, timeout) for device in possible]
        else:
            semaphore = asyncio.Semaphore(max_concurrent)

            async def bounded(device: Device) -> Device | None:
                async with semaphore:
                    return await self._confirm(device, timeout)

            results = await asyncio.gather(*(bounded(device) for device in possible))

        return [device for device in results if device is not None]

    async def _confirm(self, device: Device, timeout: float) -> Device | None:
        try:
            return await self.validator.validate(device, timeout)
        except (FetchError, DescriptionParseError) as e:
            self.logger.info("Dropping candidate", uri=device.device_uri, reason=str(e), error_type=type(e).__name__)
            return None


async def locate_devices(timeout: float | None = None, app_config: Config | None = None) -> list[Device]:
    """Shortcut for ``DeviceLocator(app_config).locate_devices(timeout)``."""
    return await DeviceLocator(app_config).locate_devices(timeout)
