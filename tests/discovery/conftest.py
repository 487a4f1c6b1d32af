"""Test doubles for the UDP transport and the description-document fetcher."""
import asyncio

import pytest

from cast_locator.exceptions import FetchTimeoutError

DIAL_DESCRIPTION = """<?xml version="1.0"?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
  <specVersion><major>1</major><minor>0</minor></specVersion>
  <URLBase>http://10.0.0.5:8008</URLBase>
  <device>
    <deviceType>{device_type}</deviceType>
    <friendlyName>{friendly_name}</friendlyName>
    <manufacturer>Google Inc.</manufacturer>
    <modelName>Eureka Dongle</modelName>
    <UDN>uuid:3e1cc7c2-2d0c-4bfa-a4fe-1c1a6e7b2b0e</UDN>
  </device>
</root>
"""


def ssdp_response(location: str, header: str = "LOCATION") -> str:
    return (
        "HTTP/1.1 200 OK\r\n"
        "CACHE-CONTROL: max-age=1800\r\n"
        "EXT:\r\n"
        f"{header}: {location}\r\n"
        "SERVER: Linux/3.8.13, UPnP/1.0, Portable SDK for UPnP devices/1.6.18\r\n"
        "ST: urn:dial-multiscreen-org:service:dial:1\r\n"
        "USN: uuid:3e1cc7c2-2d0c-4bfa-a4fe-1c1a6e7b2b0e::urn:dial-multiscreen-org:service:dial:1\r\n"
        "\r\n"
    )


def dial_description(friendly_name: str, device_type: str = "urn:dial-multiscreen-org:device:dial:1") -> str:
    return DIAL_DESCRIPTION.format(device_type=device_type, friendly_name=friendly_name)


@pytest.fixture
def FakeTransport():
    """Mimics MulticastTransport. Scripted responses are queued on the first flush."""

    class Writer:
        def __init__(self, transport):
            self.transport = transport
            self._buffer = []

        def write(self, text: str) -> None:
            self._buffer.append(text)

        async def flush(self) -> None:
            self.transport.sent.append("".join(self._buffer))
            self._buffer.clear()
            if not self.transport.delivered and not self.transport.closed:
                self.transport.delivered = True
                for response in self.transport.responses:
                    self.transport.messages.put_nowait(response)
            await asyncio.sleep(0)

    class Transport:
        def __init__(self, responses=(), bind_error=None, join_error=None):
            self.messages = asyncio.Queue()
            self.responses = list(responses)
            self.bind_error = bind_error
            self.join_error = join_error
            self.bound_to = None
            self.groups = []
            self.destinations = []
            self.sent = []
            self.delivered = False
            self.closed = False
            self.close_calls = 0

        async def bind(self, local_address, local_port):
            if self.bind_error:
                raise self.bind_error
            self.bound_to = (local_address, local_port)

        def join_multicast_group(self, group_address):
            if self.join_error:
                raise self.join_error
            self.groups.append(group_address)

        async def send_to(self, address, port):
            self.destinations.append((address, port))
            return Writer(self)

        def close(self):
            self.closed = True
            self.close_calls += 1

    return Transport


@pytest.fixture
def FakeFetcher():
    """Serves description documents from a dict; exception values are raised."""

    class Fetcher:
        def __init__(self, documents=None, delay: float = 0.0):
            self.documents = documents or {}
            self.delay = delay
            self.calls = []
            self.closed = False

        async def fetch_text(self, uri, timeout):
            self.calls.append((uri, timeout))
            if self.delay:
                await asyncio.sleep(self.delay)
            document = self.documents.get(uri)
            if document is None:
                raise FetchTimeoutError(f"Request to {uri} timed out after {timeout}s.", uri=uri)
            if isinstance(document, Exception):
                raise document
            return document

        async def close(self):
            self.closed = True

    return Fetcher


@pytest.fixture(name="ssdp_response")
def ssdp_response_fixture():
    return ssdp_response


@pytest.fixture(name="dial_description")
def dial_description_fixture():
    return dial_description
