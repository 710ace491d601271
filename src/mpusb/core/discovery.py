"""Peripheral discovery on a board's I2C bus."""

from __future__ import annotations

from collections.abc import Iterable

from mpusb.bus.channel import RegisterChannel
from mpusb.bus.registers import CommonRegs
from mpusb.constants import PERIPHERAL_MAGIC, PeripheralType
from mpusb.core.peripherals import CharacterDisplayPeripheral, I2CPeripheral
from mpusb.exceptions import BusFaultError
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)

# Type register value -> wrapper class; anything else gets the base class
PERIPHERAL_CLASSES: dict[int, type[I2CPeripheral]] = {
    PeripheralType.HD44780: CharacterDisplayPeripheral,
}


def classify_peripheral(
    channel: RegisterChannel,
    address: int,
    peripheral_id: int | None,
) -> I2CPeripheral:
    """Build the wrapper for a peripheral from its type register value.

    ``peripheral_id`` of ``None`` marks a device that responded but did
    not identify itself with the magic byte.
    """
    if peripheral_id is None:
        return I2CPeripheral(channel, address, peripheral_id=None, is_native=False)
    cls = PERIPHERAL_CLASSES.get(peripheral_id, I2CPeripheral)
    return cls(channel, address, peripheral_id=peripheral_id, is_native=True)


def probe_address(channel: RegisterChannel, address: int) -> I2CPeripheral | None:
    """Probe one bus address.

    Returns None if nothing answers. Bus faults are the normal outcome for
    empty addresses and are not propagated.
    """
    try:
        magic = channel.read(address, CommonRegs.MAGIC, 1)[0]
    except BusFaultError:
        return None

    if magic != PERIPHERAL_MAGIC:
        logger.debug("i2c_foreign_device", address=f"0x{address:02X}", magic=f"0x{magic:02X}")
        return classify_peripheral(channel, address, None)

    try:
        peripheral_id = channel.read(address, CommonRegs.TYPE, 1)[0]
    except BusFaultError:
        logger.warning("i2c_type_read_failed", address=f"0x{address:02X}")
        return None

    return classify_peripheral(channel, address, peripheral_id)


def scan_peripherals(channel: RegisterChannel, addresses: Iterable[int]) -> list[I2CPeripheral]:
    """Scan *addresses* (ascending) and return a wrapper for each responder."""
    found: list[I2CPeripheral] = []
    for address in sorted(addresses):
        peripheral = probe_address(channel, address)
        if peripheral is not None:
            found.append(peripheral)

    logger.info(
        "i2c_scan_complete",
        found=len(found),
        devices=[f"0x{p.address:02X}" for p in found],
    )
    return found
