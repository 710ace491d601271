"""Unit tests for Session enumeration, open and configuration."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from fakes import FakeBoard, FakeTransport, LockedLog
from mpusb.constants import BoardType
from mpusb.core.devices import GenericDevice, I2CBusDevice, PowerDevice
from mpusb.core.session import OpenResult, OpenStatus, Session
from mpusb.exceptions import BusFaultError, InvalidParameterError
from mpusb.models.config import SessionConfig


class TestSessionOpen:
    """Test open() result statuses."""

    def test_open_any(self, session):
        result = session.open()
        assert result.ok
        assert result.status == OpenStatus.FOUND
        assert isinstance(result.board, PowerDevice)

    def test_open_by_serial(self, session):
        result = session.open(serial=12)
        assert isinstance(result.board, I2CBusDevice)
        assert result.board.serial == 12

    def test_open_by_type(self, session):
        result = session.open(board_type=BoardType.I2C)
        assert result.board.board_id == BoardType.I2C

    def test_open_not_found(self, session):
        result = session.open(serial=99)
        assert result.status == OpenStatus.NOT_FOUND
        assert result.board is None
        assert not result

    def test_open_transport_error(self, session, transport):
        transport.open_error = BusFaultError("usb stalled")
        result = session.open()
        assert result.status == OpenStatus.TRANSPORT_ERROR
        assert result.error is transport.open_error

    def test_open_metadata_fault_releases_handle(self, session, transport, i2c_board):
        i2c_board.attribute_fault = True
        result = session.open(serial=12)
        assert result.status == OpenStatus.TRANSPORT_ERROR
        assert transport.closed == [i2c_board]

    def test_open_or_none(self, session):
        assert session.open_or_none(serial=3) is not None
        assert session.open_or_none(serial=99) is None

    def test_unexpected_errors_propagate(self):
        transport = MagicMock()
        transport.open.side_effect = RuntimeError("bug")
        with pytest.raises(RuntimeError):
            Session(transport).open()

    def test_open_result_default(self):
        result = OpenResult(OpenStatus.NOT_FOUND)
        assert result.board is None
        assert result.error is None


class TestSessionList:
    """Test enumeration caching and refresh."""

    def test_list_classifies_every_board(self, session):
        boards = session.list()
        assert [type(b) for b in boards] == [PowerDevice, I2CBusDevice]

    def test_list_cached(self, session, transport):
        first = session.list()
        second = session.list()
        assert transport.enumerate_calls == 1
        assert all(a is b for a, b in zip(first, second))

    def test_unknown_board_listed_as_generic(self, transport):
        transport.boards.append(FakeBoard(board_id=0x42, serial=77))
        boards = Session(transport).list()
        assert type(boards[-1]) is GenericDevice

    def test_faulting_board_skipped(self, transport, power_board):
        power_board.attribute_fault = True
        boards = Session(transport).list()
        assert [b.serial for b in boards] == [12]
        assert transport.closed == [power_board]

    def test_refresh(self, session, transport, i2c_board):
        bus = session.find(serial=12)[0]
        assert [p.address for p in bus.list_peripherals()] == [0x08, 0x0C, 0x0E]
        i2c_board.add_peripheral(0x0A)

        assert [p.address for p in bus.list_peripherals()] == [0x08, 0x0C, 0x0E]
        refreshed = session.refresh()
        assert transport.enumerate_calls == 2
        assert bus.is_closed
        new_bus = [b for b in refreshed if b.serial == 12][0]
        assert [p.address for p in new_bus.list_peripherals()] == [0x08, 0x0A, 0x0C, 0x0E]

    def test_find(self, session):
        assert [b.serial for b in session.find(board_type=BoardType.POWER)] == [3]
        assert [b.serial for b in session.find(serial=12)] == [12]
        assert len(session.find()) == 2
        assert session.find(serial=50) == []

    def test_close_closes_everything(self, transport, power_board, i2c_board):
        session = Session(transport)
        session.list()
        session.open(serial=12)
        session.close()
        assert transport.closed.count(i2c_board) == 1
        assert transport.closed.count(power_board) == 1


class TestSessionConfigure:
    """Test probe range configuration."""

    def test_defaults(self, session):
        assert session.probe_range == range(0x08, 0x11)

    def test_configure(self, session):
        config = session.configure(probe_min=0x0C, probe_max=0x0E)
        assert config.probe_min == 0x0C
        assert session.probe_range == range(0x0C, 0x0F)

    def test_configure_partial(self, session):
        session.configure(probe_max=0x7F)
        assert session.config.probe_min == 0x08
        assert session.config.probe_max == 0x7F

    @pytest.mark.parametrize(
        "kwargs",
        [{"probe_min": -1}, {"probe_max": 0x80}, {"probe_min": 0x10, "probe_max": 0x08}],
    )
    def test_configure_invalid(self, session, kwargs):
        with pytest.raises(InvalidParameterError):
            session.configure(**kwargs)
        assert session.probe_range == range(0x08, 0x11)

    def test_range_applies_to_next_scan(self, session):
        session.configure(probe_min=0x0C, probe_max=0x0C)
        bus = session.open(serial=12).board
        assert [p.address for p in bus.list_peripherals()] == [0x0C]

        session.configure(probe_min=0x08, probe_max=0x10)
        assert [p.address for p in bus.list_peripherals()] == [0x0C]
        assert [p.address for p in bus.rescan()] == [0x08, 0x0C, 0x0E]

    def test_independent_sessions(self, transport):
        a = Session(transport)
        b = Session(transport, SessionConfig(probe_min=0x20, probe_max=0x30))
        a.configure(probe_min=0x10)
        assert a.probe_range == range(0x10, 0x11)
        assert b.probe_range == range(0x20, 0x31)


class TestSessionDebug:
    def test_debug_forwarded(self, transport):
        session = Session(transport, SessionConfig(debug=True))
        assert transport.debug is True
        session.debug = False
        assert transport.debug is False
        assert session.debug is False


class TestSessionSharedHandles:
    """A board reached through open() and list() is one wrapper."""

    def test_open_and_list_share_wrapper(self, session):
        opened = session.open(serial=12).board
        listed = session.find(serial=12)[0]
        assert opened is listed
        assert opened.channel.lock is listed.channel.lock

    def test_list_then_open_share_wrapper(self, session):
        listed = session.find(serial=12)[0]
        assert session.open(serial=12).board is listed

    def test_close_releases_each_handle_once(self, transport, i2c_board):
        session = Session(transport)
        session.open(serial=12)
        session.list()
        session.close()
        assert transport.closed.count(i2c_board) == 1

    def test_refresh_keeps_opened_boards(self, session, transport, i2c_board):
        opened = session.open(serial=12).board
        session.list()
        assert [p.address for p in opened.list_peripherals()] == [0x08, 0x0C, 0x0E]
        i2c_board.add_peripheral(0x0A)

        refreshed = session.refresh()
        assert not opened.is_closed
        assert i2c_board not in transport.closed
        assert [b for b in refreshed if b.serial == 12] == [opened]
        assert [p.address for p in opened.list_peripherals()] == [0x08, 0x0A, 0x0C, 0x0E]

    def test_concurrent_access_through_opened_and_listed(self, i2c_board):
        transport = FakeTransport([i2c_board], delay=0.0005)
        session = Session(transport)
        opened = session.open(serial=12).board
        listed = session.find(serial=12)[0]
        lcd_a = opened.peripheral_by_address(0x08)
        lcd_b = listed.peripheral_by_address(0x08)
        errors = LockedLog()

        def width_worker():
            for value in range(30, 40):
                lcd_a.set_width(value)
                if lcd_a.get_width() != value:
                    errors.add(("width", value))

        def height_worker():
            for value in range(2, 12):
                lcd_b.set_height(value)
                if lcd_b.get_height() != value:
                    errors.add(("height", value))

        threads = [threading.Thread(target=fn) for fn in (width_worker, height_worker)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors.items == []
        assert i2c_board.peripherals[0x08].eeprom[10] == 39
        assert i2c_board.peripherals[0x08].eeprom[11] == 11
        session.close()
