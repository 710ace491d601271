"""Pytest configuration and shared fixtures."""

import pytest

from fakes import FakeBoard, FakeTransport
from mpusb.bus.channel import RegisterChannel
from mpusb.constants import BoardType, PeripheralType
from mpusb.core.session import Session
from mpusb.models.config import SessionConfig


@pytest.fixture
def i2c_board():
    """I2C bus board with an LCD at 0x08, a servo at 0x0C and a foreign chip at 0x0E."""
    board = FakeBoard(board_id=BoardType.I2C, serial=12)
    board.add_peripheral(0x08, peripheral_type=PeripheralType.HD44780, width=20, height=4)
    board.add_peripheral(0x0C, peripheral_type=PeripheralType.SERVO)
    board.add_peripheral(0x0E, magic=0x12)
    return board


@pytest.fixture
def power_board():
    return FakeBoard(
        board_id=BoardType.POWER,
        serial=3,
        power_devices=4,
        power_current=10,
    )


@pytest.fixture
def transport(i2c_board, power_board):
    return FakeTransport([power_board, i2c_board])


@pytest.fixture
def channel(transport, i2c_board):
    return RegisterChannel(transport, i2c_board)


@pytest.fixture
def session(transport):
    with Session(transport, SessionConfig()) as s:
        yield s
