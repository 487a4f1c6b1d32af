"""
UDP multicast transport used to send M-SEARCH probes and receive SSDP responses.

Received datagrams are not dispatched to callbacks; they are decoded and put on
``transport.messages`` for whoever is draining it.
"""
import asyncio
import socket
import struct
from typing import Protocol

import structlog

from ..exceptions import TransportError

logger = structlog.get_logger(__name__)


class DatagramWriter:
    """Destination-bound writer. ``flush()`` sends everything written so far as one datagram."""

    def __init__(self, transport: asyncio.DatagramTransport, address: str, port: int):
        self._transport = transport
        self._destination = (address, port)
        self._buffer: list[str] = []
        self.logger = logger.bind(component="DatagramWriter", destination=f"{address}:{port}")

    def write(self, text: str) -> None:
        self._buffer.append(text)

    async def flush(self) -> None:
        payload = "".join(self._buffer).encode("utf-8")
        self._buffer.clear()
        if payload and not self._transport.is_closing():
            try:
                self._transport.sendto(payload, self._destination)
            except OSError as e:
                # A failed send does not end the probe window.
                self.logger.warning("Datagram send failed", error=str(e))
        # Give the receive side a turn between sends.
        await asyncio.sleep(0)

    async def __aenter__(self) -> "DatagramWriter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self._buffer:
            await self.flush()


class TransportPort(Protocol):
    """What the locator needs from a UDP endpoint."""

    messages: asyncio.Queue[str]

    async def bind(self, local_address: str, local_port: int) -> None: ...

    def join_multicast_group(self, group_address: str) -> None: ...

    async def send_to(self, address: str, port: int) -> DatagramWriter: ...

    def close(self) -> None: ...


class _SSDPReceiveProtocol(asyncio.DatagramProtocol):
    def __init__(self, messages: asyncio.Queue[str], log: structlog.BoundLogger):
        self._messages = messages
        self._log = log
        self.closed = False

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        if self.closed:
            return
        self._messages.put_nowait(data.decode("utf-8", errors="replace"))

    def error_received(self, exc: Exception) -> None:
        # Send failures and ICMP errors surface here; they do not end the probe.
        self._log.warning("Datagram error received", error=str(exc))

    def connection_lost(self, exc: Exception | None) -> None:
        self.closed = True


class MulticastTransport:
    """
    TransportPort backed by an asyncio datagram endpoint.

    Owned by exactly one discovery call: bind, join, send, close. ``close()``
    may be called any number of times.
    """

    def __init__(self, multicast_ttl: int = 2):
        self.multicast_ttl = multicast_ttl
        self.messages: asyncio.Queue[str] = asyncio.Queue()
        self._transport: asyncio.DatagramTransport | None = None
        self._protocol: _SSDPReceiveProtocol | None = None
        self.logger = logger.bind(component="MulticastTransport")

    @property
    def is_bound(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    async def bind(self, local_address: str, local_port: int) -> None:
        loop = asyncio.get_running_loop()
        try:
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: _SSDPReceiveProtocol(self.messages, self.logger),
                local_addr=(local_address, local_port),
                family=socket.AF_INET,
                reuse_port=hasattr(socket, "SO_REUSEPORT"),
            )
        except OSError as e:
            self.logger.error("Failed to bind UDP endpoint", local_address=local_address, local_port=local_port, error=str(e))
            raise TransportError(f"Cannot bind UDP endpoint {local_address}:{local_port}: {e}") from e
        self._transport = transport
        self._protocol = protocol
        self.logger.debug("UDP endpoint bound", sockname=transport.get_extra_info("sockname"))

    def join_multicast_group(self, group_address: str) -> None:
        if not self.is_bound:
            raise TransportError("Cannot join a multicast group before the endpoint is bound.")
        sock = self._transport.get_extra_info("socket")
        try:
            mreq = socket.inet_aton(group_address) + struct.pack("=I", socket.INADDR_ANY)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, struct.pack("B", self.multicast_ttl))
        except OSError as e:
            self.logger.error("Failed to join multicast group", group=group_address, error=str(e))
            raise TransportError(f"Cannot join multicast group {group_address}: {e}") from e
        self.logger.debug("Joined multicast group", group=group_address, ttl=self.multicast_ttl)

    async def send_to(self, address: str, port: int) -> DatagramWriter:
        if not self.is_bound:
            raise TransportError("Cannot send before the endpoint is bound.")
        return DatagramWriter(self._transport, address, port)

    def close(self) -> None:
        if self._protocol is not None:
            self._protocol.closed = True
        if self._transport is not None and not self._transport.is_closing():
            self._transport.close()
            self.logger.debug("UDP endpoint closed.")

    async def __aenter__(self) -> "MulticastTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
