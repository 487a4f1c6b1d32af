"""
SSDP discovery of DIAL cast receivers.

Probing and candidate collection live in ``locator``, response parsing in
``parser``, description-document checks in ``validator`` and the UDP endpoint
in ``transport``.
"""

from .locator import DeviceLocator, M_SEARCH_REQUEST, SSDP_MULTICAST_ADDRESS, SSDP_PORT, locate_devices
from .parser import extract_device_uri
from .transport import DatagramWriter, MulticastTransport, TransportPort
from .validator import DIAL_DEVICE_TYPE, DeviceValidator, has_description_path, is_dial_device_type

__all__ = [
    "DIAL_DEVICE_TYPE",
    "DatagramWriter",
    "DeviceLocator",
    "DeviceValidator",
    "M_SEARCH_REQUEST",
    "MulticastTransport",
    "SSDP_MULTICAST_ADDRESS",
    "SSDP_PORT",
    "TransportPort",
    "extract_device_uri",
    "has_description_path",
    "is_dial_device_type",
    "locate_devices",
]
