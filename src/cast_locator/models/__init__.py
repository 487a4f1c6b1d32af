"""
Pydantic models for Cast Locator.
"""
from .common import BasePydanticModel
from .device import Device, DeviceDescription

__all__ = [
    "BasePydanticModel",
    "Device",
    "DeviceDescription",
]
