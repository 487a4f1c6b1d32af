"""
Exceptions raised while locating cast devices.

Only TransportError ever leaves DeviceLocator.locate_devices; the others are
raised per candidate and turned into omissions from the result.
"""


class CastLocatorError(Exception):
    """Base class for all Cast Locator errors."""
    pass

class TransportError(CastLocatorError):
    """Raised when the UDP endpoint cannot be bound or cannot join the multicast group."""
    pass

class FetchError(CastLocatorError):
    """Raised when a device-description document cannot be retrieved."""
    def __init__(self, message: str, uri: str | None = None, status: int | None = None):
        super().__init__(message)
        self.uri = uri
        self.status = status

class FetchTimeoutError(FetchError):
    """Raised when retrieving a description document exceeds its timeout."""
    pass

class DescriptionParseError(CastLocatorError):
    """Raised when a description document is not the expected XML schema."""
    def __init__(self, message: str, uri: str | None = None):
        super().__init__(message)
        self.uri = uri

class DeviceTypeMismatchError(DescriptionParseError):
    """Raised when a well-formed description names a device type other than the DIAL receiver."""
    def __init__(self, uri: str, device_type: str):
        super().__init__(f"Unexpected device type '{device_type}' at {uri}", uri=uri)
        self.device_type = device_type
