"""Cast Locator - finds DIAL media-casting receivers on the local network.

Probes the SSDP multicast group, collects the description-document URIs that
answer, and keeps only the devices whose description identifies them as DIAL
receivers.
"""

__version__ = "0.1.0"
__author__ = "Tyler Zervas"
__email__ = "tz-dev@vectorweight.com"

from .config import Config
from .discovery.locator import DeviceLocator, locate_devices
from .exceptions import TransportError
from .models.device import Device

__all__ = ["Config", "Device", "DeviceLocator", "TransportError", "locate_devices"]
