import logging
import typing

from ok_serial_session import _driver
from ok_serial_session import _exceptions
from ok_serial_session import _timeout_math

log = logging.getLogger("ok_serial_session.device")
data_log = logging.getLogger(log.name + ".data")


class SerialDevice:
    """
    Sole owner of one open device handle, with deadline-bounded I/O.

    Deadlines are absolute time.monotonic() values and apply to operations
    started after they are set. None (the default) means wait forever.
    """

    def __init__(
        self, driver: _driver.DeviceDriver, handle: typing.Any, name: str
    ):
        self._driver = driver
        self._handle = handle
        self._name = name
        self._closed = False
        self._read_deadline = _timeout_math.TIMEOUT_MAX
        self._write_deadline = _timeout_math.TIMEOUT_MAX

    def __repr__(self) -> str:
        state = " (closed)" if self._closed else ""
        return f"SerialDevice({self._name!r}){state}"

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def driver(self) -> _driver.DeviceDriver:
        return self._driver

    def handle(self) -> typing.Any:
        """The driver handle, if the device is still open"""

        if self._closed:
            message = "Serial port was closed"
            raise _exceptions.SerialIoClosed(message, self._name)
        return self._handle

    def fileno(self) -> int | None:
        return self._driver.fileno(self.handle())

    def close(self) -> None:
        handle = self.handle()
        self._closed = True
        log.debug("Closing %s", self._name)
        self._driver.close(handle)

    def set_read_deadline(self, deadline: float | int | None) -> None:
        self.handle()
        self._read_deadline = _or_forever(deadline)

    def set_write_deadline(self, deadline: float | int | None) -> None:
        self.handle()
        self._write_deadline = _or_forever(deadline)

    def set_deadline(self, deadline: float | int | None) -> None:
        self.set_read_deadline(deadline)
        self.set_write_deadline(deadline)

    def read(self, max: int = 65536) -> bytes:
        if max < 1:
            message = f"Bad read size (not positive): {max}"
            raise _exceptions.SerialParameterInvalid(message)

        data = self._driver.read(self.handle(), max, self._read_deadline)
        data_log.debug("%s: Read %db (max=%d)", self._name, len(data), max)
        return data

    def write(self, data: bytes) -> int:
        count = self._driver.write(self.handle(), data, self._write_deadline)
        data_log.debug("%s: Wrote %d/%db", self._name, count, len(data))
        return count

    def read_byte(self) -> int:
        data = self.read(max=1)
        if not data:
            message = "Serial read returned no data"
            raise _exceptions.SerialShortRead(message, self._name)
        return data[0]

    def write_byte(self, value: int) -> None:
        if not 0 <= value <= 255:
            message = f"Bad byte value (not 0-255): {value}"
            raise _exceptions.SerialParameterInvalid(message)
        if self.write(bytes((value,))) != 1:
            message = "Serial write accepted no data"
            raise _exceptions.SerialShortWrite(message, self._name)

    def write_str(self, text: str) -> int:
        return self.write(text.encode("latin-1"))


def _or_forever(deadline: float | int | None) -> float:
    return _timeout_math.TIMEOUT_MAX if deadline is None else float(deadline)
