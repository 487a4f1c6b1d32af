"""Extraction of description-document URIs from raw SSDP responses."""

import re
from urllib.parse import urlsplit

# Header value runs to the first carriage return. Bare line feeds also end it
# since some responders terminate lines with LF only.
_LOCATION_HEADER = re.compile(r"^location:([^\r\n]*)", re.IGNORECASE | re.MULTILINE)
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")


def parse_absolute_uri(value: str) -> str | None:
    """Return ``value`` if it is an absolute URI with a host, otherwise None."""
    if not value or any(ch.isspace() for ch in value):
        return None
    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError for a non-numeric or out-of-range port
    except ValueError:
        return None
    if not _SCHEME.match(parts.scheme) or not parts.hostname:
        return None
    return value


def extract_device_uri(raw_text: str) -> str | None:
    """
    Pull the LOCATION header out of one SSDP response.

    Returns None when the response is blank, has no ``location:`` header line
    (any casing), or the header value is not an absolute URI. Other UPnP
    devices answer ``ssdp:all`` with all sorts of responses, so nothing here
    raises.
    """
    if not raw_text or raw_text.isspace():
        return None
    match = _LOCATION_HEADER.search(raw_text)
    if match is None:
        return None
    return parse_absolute_uri(match.group(1).strip())
