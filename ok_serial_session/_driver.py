"""The narrow interface a SerialSession uses to reach the platform"""

import abc
import typing

from ok_serial_session import _attributes


class DeviceDriver(abc.ABC):
    """
    Opens serial devices and performs raw operations on their handles.

    Handles are opaque to the session; only the driver that returned a
    handle may interpret it. Deadlines are absolute time.monotonic() values
    (TIMEOUT_MAX for no deadline), and operations that outlive theirs raise
    SerialIoTimeout. Failures raise SerialDeviceException subclasses.
    """

    @abc.abstractmethod
    def open(self, path: str, *, exclusive: bool) -> typing.Any: ...

    @abc.abstractmethod
    def close(self, handle: typing.Any) -> None: ...

    @abc.abstractmethod
    def get_config(self, handle: typing.Any) -> _attributes.SerialAttributes:
        ...

    @abc.abstractmethod
    def configure(
        self, handle: typing.Any, attrs: _attributes.SerialAttributes
    ) -> None: ...

    @abc.abstractmethod
    def read(self, handle: typing.Any, max: int, deadline: float) -> bytes:
        """Returns 1..max bytes (b"" only if the device gives up silently)"""

    @abc.abstractmethod
    def write(self, handle: typing.Any, data: bytes, deadline: float) -> int:
        """Returns the number of bytes the device accepted"""

    @abc.abstractmethod
    def flush(
        self, handle: typing.Any, selector: _attributes.FlushSelector
    ) -> None: ...

    @abc.abstractmethod
    def query_waiting(
        self, handle: typing.Any, direction: _attributes.Direction
    ) -> int: ...

    @abc.abstractmethod
    def get_modem_bits(self, handle: typing.Any) -> _attributes.ModemBits: ...

    @abc.abstractmethod
    def set_modem_bit(
        self, handle: typing.Any, signal: _attributes.ModemBits, level: bool
    ) -> None: ...

    def fileno(self, handle: typing.Any) -> int | None:
        return None
