"""Pydantic data models for mpusb."""

from mpusb.models.config import SessionConfig
from mpusb.models.device_info import BoardInfo, I2cScanResult, PeripheralInfo

__all__ = [
    "BoardInfo",
    "I2cScanResult",
    "PeripheralInfo",
    "SessionConfig",
]
