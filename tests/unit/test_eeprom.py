"""Unit tests for EEPROM cell access (peripheral index/data and board cells)."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest

from fakes import FakeBoard, FakeTransport
from mpusb.bus.channel import RegisterChannel
from mpusb.core.eeprom import BoardEeprom, RegisterEeprom
from mpusb.exceptions import (
    BusFaultError,
    InvalidParameterError,
    ReservedCellError,
    UnsupportedError,
    VerificationError,
)


@pytest.fixture
def lcd(i2c_board):
    return i2c_board.peripherals[0x08]


@pytest.fixture
def reg_eeprom(channel):
    return RegisterEeprom(channel, 0x08)


class TestRegisterEeprom:
    """Test the select-index-then-transfer protocol."""

    def test_read_selects_index_then_reads_data(self, reg_eeprom, transport):
        assert reg_eeprom.read_cell(10) == bytes([20])
        assert transport.log == [
            ("write", 12, 0x08, 0x02, b"\x0a"),
            ("read", 12, 0x08, 0x03, 1),
        ]

    def test_write_selects_index_then_writes_data(self, reg_eeprom, transport, lcd):
        reg_eeprom.write_cell(10, 40)
        assert lcd.eeprom[10] == 40
        assert transport.log == [
            ("write", 12, 0x08, 0x02, b"\x0a"),
            ("write", 12, 0x08, 0x03, b"\x28"),
        ]

    def test_multi_cell_read(self, reg_eeprom):
        assert reg_eeprom.read_cell(10, 2) == bytes([20, 4])

    def test_write_reserved_cell_refused(self, reg_eeprom, transport):
        with pytest.raises(ReservedCellError):
            reg_eeprom.write_cell(1, 0x20)
        with pytest.raises(ReservedCellError):
            reg_eeprom.write_cell(0, [0xFF, 0x20])
        assert transport.log == []

    def test_invalid_cell(self, reg_eeprom):
        with pytest.raises(InvalidParameterError):
            reg_eeprom.read_cell(256)
        with pytest.raises(InvalidParameterError):
            reg_eeprom.read_cell(255, 2)

    def test_invalid_byte(self, reg_eeprom):
        with pytest.raises(InvalidParameterError):
            reg_eeprom.write_cell(10, 300)

    def test_verified_write_of_reserved_cell(self, reg_eeprom, lcd):
        reg_eeprom.write_cell_verified(1, 0x20 << 1)
        assert lcd.eeprom[1] == 0x40

    def test_verified_write_mismatch(self, reg_eeprom, lcd):
        lcd.stuck_cells.add(10)
        with pytest.raises(VerificationError) as exc_info:
            reg_eeprom.write_cell_verified(10, 99)
        assert exc_info.value.expected == bytes([99])
        assert exc_info.value.actual == bytes([20])
        assert lcd.eeprom[10] == 20

    def test_fault_propagates(self, transport, i2c_board):
        channel = RegisterChannel(transport, i2c_board)
        with pytest.raises(BusFaultError):
            RegisterEeprom(channel, 0x30).read_cell(10)

    def test_select_and_transfer_hold_lock(self):
        transport = MagicMock()
        transport.raw_read.return_value = b"\x07"
        channel = RegisterChannel(transport, "handle")
        eeprom = RegisterEeprom(channel, 0x08)
        seen = []

        def check_owned(*args):
            # Another thread must not be able to take the lock mid-sequence
            result = []
            t = threading.Thread(target=lambda: result.append(channel.lock.acquire(blocking=False)))
            t.start()
            t.join()
            seen.append(result[0])
            if result[0]:
                channel.lock.release()

        transport.raw_write.side_effect = check_owned
        eeprom.read_cell(5)
        assert seen == [False]
        assert eeprom.lock is channel.lock


class TestBoardEeprom:
    """Test EEPROM cells of the controller board itself."""

    def _make(self, **kwargs):
        board = FakeBoard(**kwargs)
        transport = FakeTransport([board])
        return board, transport, BoardEeprom(transport, board, threading.RLock(), board.has_eeprom)

    def test_read_serial_cell(self):
        board, _, eeprom = self._make(serial=42)
        assert eeprom.read_cell(1) == bytes([42])

    def test_write_and_read(self):
        board, transport, eeprom = self._make()
        eeprom.write_cell(5, [1, 2, 3])
        assert bytes(board.eeprom[5:8]) == b"\x01\x02\x03"
        assert [entry[0] for entry in transport.log] == ["eeprom_write"] * 3

    def test_no_eeprom(self):
        _, transport, eeprom = self._make(has_eeprom=False)
        assert eeprom.present is False
        with pytest.raises(UnsupportedError):
            eeprom.read_cell(5)
        assert transport.log == []

    def test_verified_write_restores_previous(self):
        board, _, eeprom = self._make(serial=7)
        board.stuck_cells.add(1)
        with pytest.raises(VerificationError):
            eeprom.write_cell_verified(1, 8)
        assert board.eeprom[1] == 7

    def test_verified_write_restores_after_partial_write(self):
        transport = MagicMock()
        cells = {2: 0x10}
        writes = []

        def write_eeprom(handle, cell, value):
            writes.append(value)
            # First write lands corrupted, later writes land as sent
            cells[cell] = 0x66 if len(writes) == 1 else value

        transport.read_eeprom.side_effect = lambda handle, cell: cells[cell]
        transport.write_eeprom.side_effect = write_eeprom
        eeprom = BoardEeprom(transport, "handle", threading.RLock())

        with pytest.raises(VerificationError) as exc_info:
            eeprom.write_cell_verified(2, 0x20)
        assert exc_info.value.actual == b"\x66"
        assert writes == [0x20, 0x10]
        assert cells[2] == 0x10

    def test_restore_failure_still_raises_verification_error(self):
        transport = MagicMock()
        reads = iter([0x10, 0x66])
        transport.read_eeprom.side_effect = lambda handle, cell: next(reads)
        transport.write_eeprom.side_effect = [None, BusFaultError("no ack")]
        eeprom = BoardEeprom(transport, "handle", threading.RLock())

        with pytest.raises(VerificationError):
            eeprom.write_cell_verified(2, 0x20)
