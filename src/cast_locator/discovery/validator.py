"""
Confirmation of SSDP candidates by their UPnP device-description document.
"""
from urllib.parse import urlsplit
from xml.etree import ElementTree

import structlog
from pydantic import ValidationError

from ..exceptions import DescriptionParseError, DeviceTypeMismatchError, FetchError
from ..fetcher import DocumentFetcher
from ..models.device import Device, DeviceDescription

logger = structlog.get_logger(__name__)

DIAL_DEVICE_TYPE = "urn:dial-multiscreen-org:device:dial:1"
DESCRIPTION_PATH_SUFFIX = "/ssdp/device-desc.xml"


def has_description_path(uri: str) -> bool:
    """True when the URI points at the conventional DIAL description document."""
    return urlsplit(uri).path.endswith(DESCRIPTION_PATH_SUFFIX)


def is_dial_device_type(device_type: str) -> bool:
    return device_type.lower() == DIAL_DEVICE_TYPE


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ElementTree.Element, name: str) -> ElementTree.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def parse_description(xml_text: str, uri: str | None = None) -> DeviceDescription:
    """
    Parse a UPnP description document (``<root><device>...</device></root>``).

    Namespaces are ignored so that documents with or without the
    ``urn:schemas-upnp-org:device-1-0`` default namespace both parse.
    Raises DescriptionParseError if the XML is malformed or lacks the
    deviceType/friendlyName elements.
    """
    try:
        root = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as e:
        raise DescriptionParseError(f"Malformed description XML: {e}", uri=uri) from e

    device = _child(root, "device")
    if device is None:
        raise DescriptionParseError("Description has no <device> element", uri=uri)

    fields = {}
    for name in ("deviceType", "friendlyName"):
        element = _child(device, name)
        if element is not None:
            fields[name] = (element.text or "").strip()

    try:
        return DeviceDescription.model_validate(fields)
    except ValidationError as e:
        raise DescriptionParseError(f"Description does not match the device schema: {e}", uri=uri) from e


class DeviceValidator:
    """Fetches a candidate's description document and confirms it is a DIAL receiver."""

    def __init__(self, fetcher: DocumentFetcher):
        self.fetcher = fetcher
        self.logger = logger.bind(component="DeviceValidator")

    async def validate(self, device: Device, timeout: float) -> Device:
        """
        Confirm ``device`` and fill in its friendly name.

        ``timeout`` is the discovery call's own timeout, reused for the fetch.
        Raises FetchError when the document cannot be retrieved or is empty,
        DescriptionParseError when it does not parse, and
        DeviceTypeMismatchError when it names another device type.
        """
        uri = device.device_uri
        body = await self.fetcher.fetch_text(uri, timeout)
        if not body or body.isspace():
            raise FetchError(f"Empty description document at {uri}", uri=uri)

        description = parse_description(body, uri=uri)
        if not is_dial_device_type(description.device_type):
            raise DeviceTypeMismatchError(uri, description.device_type)

        device.friendly_name = description.friendly_name
        self.logger.debug("Device confirmed", uri=uri, friendly_name=device.friendly_name)
        return device
