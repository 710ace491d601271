"""Board and peripheral information models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from mpusb.constants import BoardKind


class BoardInfo(BaseModel):
    """Metadata snapshot of a USB controller board."""

    board_id: int = Field(description="Raw board type code")
    board_type: str = Field(default="Unknown", description="Board type name")
    kind: BoardKind = Field(default=BoardKind.GENERIC, description="Classified variant")
    serial: int = Field(default=0, ge=0, le=0xFF, description="Serial number (EEPROM cell 1)")
    processor_id: int = Field(default=0, description="Processor type code")
    processor_type: str = Field(default="Unknown", description="Processor name")
    processor_speed: int = Field(default=0, description="Processor clock in MHz")
    has_eeprom: bool = Field(default=False, description="Board has on-board EEPROM")
    fw_major: int = Field(default=0, description="Firmware major version")
    fw_minor: int = Field(default=0, description="Firmware minor version")
    power_devices: int | None = Field(default=None, description="Outlet count (power boards)")
    power_current: int | None = Field(default=None, description="Current rating in amps (power boards)")

    @property
    def firmware_version(self) -> str:
        return f"{self.fw_major}.{self.fw_minor:02d}"

    @property
    def serial_string(self) -> str:
        return f"{self.serial:04d}"


class PeripheralInfo(BaseModel):
    """Snapshot of an I2C peripheral found on a bus scan."""

    address: int = Field(ge=0, le=0x7F, description="7-bit I2C address")
    is_native: bool = Field(default=False, description="Answered with the mpusb magic byte")
    peripheral_id: int | None = Field(default=None, description="Type register value")
    type_name: str = ""

    @property
    def address_hex(self) -> str:
        return f"0x{self.address:02X}"


class I2cScanResult(BaseModel):
    """Result of probing a board's I2C bus."""

    probe_min: int = 0
    probe_max: int = 0
    devices: list[int] = Field(default_factory=list, description="Addresses that responded")

    @property
    def device_count(self) -> int:
        return len(self.devices)

    @property
    def devices_hex(self) -> list[str]:
        return [f"0x{addr:02X}" for addr in self.devices]
