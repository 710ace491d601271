"""Board enumeration and session state.

A :class:`Session` replaces process-wide state: it owns the transport,
the probe configuration and the cache of classified boards. Independent
sessions (for example one per test) do not share anything.

Usage:
    with Session(transport) as session:
        result = session.open(serial=12)
        if result.ok:
            result.board.set_serial(13)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import StrEnum

from pydantic import ValidationError

from mpusb.constants import BOARD_SERIAL_ANY, BOARD_TYPE_ANY
from mpusb.core.classifier import classify_board
from mpusb.core.devices import Board, I2CBusDevice
from mpusb.exceptions import DeviceNotFoundError, InvalidParameterError, TransportError
from mpusb.models.config import SessionConfig
from mpusb.transport.base import BoardHandle, Transport
from mpusb.utils.logging import get_logger

logger = get_logger(__name__)


class OpenStatus(StrEnum):
    """Outcome of :meth:`Session.open`."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class OpenResult:
    """Result of opening a board: the board, or why there is none."""

    status: OpenStatus
    board: Board | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == OpenStatus.FOUND

    def __bool__(self) -> bool:
        return self.ok


class Session:
    """Explicit session holding probe configuration and the board cache.

    One re-entrant lock guards the configuration, the board cache and
    every peripheral scan, so a probe-range change never interleaves with
    a scan in progress.

    A handle returned by both :meth:`open` and :meth:`list` maps to the
    same board wrapper, so callers share its bus lock and the handle is
    released exactly once.
    """

    def __init__(self, transport: Transport, config: SessionConfig | None = None) -> None:
        self._transport = transport
        self._config = config if config is not None else SessionConfig()
        self._lock = threading.RLock()
        self._boards: list[Board] | None = None
        # Wrappers by id(handle): one wrapper, and so one bus lock, per handle
        self._wrappers: dict[int, Board] = {}
        self._opened: set[int] = set()
        self._transport.set_debug(self._config.debug)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def config(self) -> SessionConfig:
        with self._lock:
            return self._config

    @property
    def probe_range(self) -> range:
        with self._lock:
            return self._config.probe_range

    @property
    def debug(self) -> bool:
        return self.config.debug

    @debug.setter
    def debug(self, enabled: bool) -> None:
        with self._lock:
            self._config = self._config.with_updates(debug=bool(enabled))
            self._transport.set_debug(self._config.debug)
        logger.info("session_debug_set", enabled=bool(enabled))

    def configure(self, probe_min: int | None = None, probe_max: int | None = None) -> SessionConfig:
        """Update the peripheral probe range (inclusive bounds).

        Cached peripheral lists are kept; the new range applies to the
        next scan (first access, ``rescan()`` or :meth:`refresh`).

        Raises:
            InvalidParameterError: If a bound is outside 0x00-0x7F or
                ``probe_min`` exceeds ``probe_max``.
        """
        changes: dict[str, int] = {}
        if probe_min is not None:
            changes["probe_min"] = probe_min
        if probe_max is not None:
            changes["probe_max"] = probe_max

        with self._lock:
            try:
                self._config = self._config.with_updates(**changes)
            except ValidationError as exc:
                raise InvalidParameterError(f"Invalid probe range: {exc}") from exc
            config = self._config

        logger.info("session_configured", probe_min=config.probe_min, probe_max=config.probe_max)
        return config

    def open(self, serial: int = BOARD_SERIAL_ANY, board_type: int = BOARD_TYPE_ANY) -> OpenResult:
        """Open and classify the first board matching the filters.

        Never raises for a missing board or a link failure; the status on
        the returned :class:`OpenResult` says which one happened.
        """
        try:
            handle = self._transport.open(board_type=board_type, serial=serial)
        except DeviceNotFoundError as exc:
            logger.info("board_not_found", serial=serial, board_type=board_type)
            return OpenResult(OpenStatus.NOT_FOUND, error=exc)
        except TransportError as exc:
            logger.warning("board_open_failed", serial=serial, board_type=board_type, error=str(exc))
            return OpenResult(OpenStatus.TRANSPORT_ERROR, error=exc)

        try:
            board = self._wrap(handle)
        except TransportError as exc:
            logger.warning("board_classify_failed", serial=serial, error=str(exc))
            self._release(handle)
            return OpenResult(OpenStatus.TRANSPORT_ERROR, error=exc)

        with self._lock:
            self._opened.add(id(handle))
        logger.info("board_opened", kind=str(board.kind), serial=board.serial)
        return OpenResult(OpenStatus.FOUND, board=board)

    def open_or_none(
        self,
        serial: int = BOARD_SERIAL_ANY,
        board_type: int = BOARD_TYPE_ANY,
    ) -> Board | None:
        """Like :meth:`open`, for callers that only care whether a board came back."""
        return self.open(serial=serial, board_type=board_type).board

    def list(self) -> list[Board]:
        """Return every visible board, enumerating on the first call only."""
        with self._lock:
            if self._boards is None:
                self._boards = self._enumerate()
            return list(self._boards)

    def refresh(self) -> list[Board]:
        """Enumerate again and drop every cached peripheral list.

        Listed boards that were never returned by :meth:`open` are closed
        and replaced. Opened boards keep their handle and wrapper; their
        peripheral lists are rescanned on next access.
        """
        with self._lock:
            stale = self._boards or []
            self._boards = None
            for board in stale:
                key = id(board.handle)
                if key in self._opened and not board.is_closed:
                    continue
                self._wrappers.pop(key, None)
                self._close_board(board)
            for board in self._wrappers.values():
                if isinstance(board, I2CBusDevice):
                    board.invalidate()
            return self.list()

    def find(
        self,
        serial: int = BOARD_SERIAL_ANY,
        board_type: int = BOARD_TYPE_ANY,
    ) -> list[Board]:
        """Filter the cached board list; the ANY wildcards match everything."""
        return [
            board
            for board in self.list()
            if (serial == BOARD_SERIAL_ANY or board.serial == serial)
            and (board_type == BOARD_TYPE_ANY or board.board_id == board_type)
        ]

    def close(self) -> None:
        """Close every board this session opened or enumerated."""
        with self._lock:
            boards = list(self._wrappers.values())
            self._boards = None
            self._wrappers = {}
            self._opened = set()
        for board in boards:
            self._close_board(board)
        logger.debug("session_closed", boards=len(boards))

    def _current_probe_range(self) -> range:
        return self.probe_range

    def _enumerate(self) -> list[Board]:
        boards: list[Board] = []
        for handle in self._transport.enumerate():
            try:
                board = self._wrap(handle)
            except TransportError as exc:
                logger.warning("board_skipped", error=str(exc))
                self._release(handle)
                continue
            boards.append(board)

        logger.info(
            "enumeration_complete",
            found=len(boards),
            boards=[f"{board.kind}:{board.serial}" for board in boards],
        )
        return boards

    def _wrap(self, handle: BoardHandle) -> Board:
        """Return the live wrapper for *handle*, classifying it on first sight."""
        with self._lock:
            board = self._wrappers.get(id(handle))
            if board is None or board.is_closed:
                board = classify_board(
                    self._transport,
                    handle,
                    probe_range=self._current_probe_range,
                    scan_lock=self._lock,
                )
                self._wrappers[id(handle)] = board
            return board

    def _release(self, handle: object) -> None:
        try:
            self._transport.close(handle)
        except TransportError as exc:
            logger.warning("board_close_failed", error=str(exc))

    def _close_board(self, board: Board) -> None:
        try:
            board.close()
        except TransportError as exc:
            logger.warning("board_close_failed", serial=board.serial, error=str(exc))
