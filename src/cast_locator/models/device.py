from pydantic import Field

from .common import BasePydanticModel


class Device(BasePydanticModel):
    """A receiver seen during discovery.

    Created with only ``device_uri`` when its SSDP response is first seen;
    ``friendly_name`` is filled in once its description document confirms it.
    """
    device_uri: str = Field(..., description="Absolute URI of the device-description document. Identity key.")
    friendly_name: str = Field(default="", description="Human-readable name from the description document.")


class DeviceDescription(BasePydanticModel):
    """The two fields of a UPnP device-description document that matter here."""
    device_type: str = Field(..., min_length=1, alias="deviceType")
    friendly_name: str = Field(..., alias="friendlyName")
