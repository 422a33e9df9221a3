"""Serial (USB CDC / UART) transport to the LED controller.

Uses ``pyserial``. WLED listens for JSON on its serial port at 115200 baud
by default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import TransportIOError
from .base import DEFAULT_POLL_TIMEOUT, READ_CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200
WRITE_TIMEOUT = 1.0  # seconds


@dataclass
class SerialSettings:
    """Port parameters the transport was opened with."""

    port: str
    baudrate: int = DEFAULT_BAUDRATE
    timeout: float = DEFAULT_POLL_TIMEOUT
    write_timeout: float = WRITE_TIMEOUT


class SerialTransport:
    """Byte transport over a serial port.

    Usage::

        transport = SerialTransport("/dev/ttyUSB0")
        transport.write(b'{"on":true}\\n')
        data = transport.poll_readable()
        transport.close()

    Raises:
        TransportIOError: If the port cannot be opened.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        write_timeout: float = WRITE_TIMEOUT,
    ) -> None:
        import serial

        self._settings = SerialSettings(
            port=port,
            baudrate=baudrate,
            timeout=timeout,
            write_timeout=write_timeout,
        )
        try:
            self._serial = serial.Serial(
                port,
                baudrate,
                timeout=timeout,
                write_timeout=write_timeout,
            )
        except (serial.SerialException, ValueError) as e:
            raise TransportIOError(f"Could not open serial port {port}: {e}") from e

        self._connected = True
        logger.info("Opened serial port %s at %d baud", port, baudrate)

    @property
    def settings(self) -> SerialSettings:
        return self._settings

    def is_connected(self) -> bool:
        return self._connected

    def write(self, data: bytes | str) -> int:
        """Write ``data`` to the port.

        Raises:
            TransportIOError: If the port is closed or the write fails.
        """
        if not self._connected:
            raise TransportIOError("Serial port is closed")
        if isinstance(data, str):
            data = data.encode("utf-8")

        try:
            written = self._serial.write(data)
            self._serial.flush()
        except Exception as e:
            self._mark_disconnected()
            raise TransportIOError(f"Serial write failed: {e}") from e

        logger.debug("TX %d bytes", len(data))
        return written if written is not None else len(data)

    def poll_readable(self, max_bytes: int = READ_CHUNK_SIZE) -> bytes:
        """Read whatever the port has buffered, up to ``max_bytes``.

        Returns ``b""`` immediately when nothing is waiting.

        Raises:
            TransportIOError: If the port is closed or the read fails.
        """
        if not self._connected:
            raise TransportIOError("Serial port is closed")

        try:
            waiting = self._serial.in_waiting
            if waiting <= 0:
                return b""
            data = self._serial.read(min(waiting, max_bytes))
        except Exception as e:
            self._mark_disconnected()
            raise TransportIOError(f"Serial read failed: {e}") from e

        if data:
            logger.debug("RX %d bytes", len(data))
        return bytes(data)

    def close(self) -> None:
        """Close the serial port."""
        if not self._connected:
            return

        try:
            self._serial.close()
        except Exception as e:
            logger.warning("Error closing serial port: %s", e)
        finally:
            self._connected = False
            logger.info("Closed serial port %s", self._settings.port)

    def _mark_disconnected(self) -> None:
        self._connected = False
        try:
            self._serial.close()
        except Exception as e:
            logger.debug("Error closing serial port after failure: %s", e)
