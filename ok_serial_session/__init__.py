"""
Serial session library (PySerial-based) with deadline-bounded I/O,
line framing, and prompt/response pattern waiting.
"""

from beartype.claw import beartype_this_package as _beartype_me

# ruff: noqa: E402
_beartype_me()

from ok_serial_session._attributes import (
    FlushSelector,
    ModemBits,
    Parity,
    SerialAttributes,
)

from ok_serial_session._device import SerialDevice
from ok_serial_session._driver import DeviceDriver

from ok_serial_session._exceptions import (
    ErrorKind,
    SerialDeviceException,
    SerialException,
    SerialIoClosed,
    SerialIoException,
    SerialIoTimeout,
    SerialOpenBusy,
    SerialOpenException,
    SerialParameterInvalid,
    SerialPatternInvalid,
    SerialShortRead,
    SerialShortWrite,
)

from ok_serial_session._config import SerialConfig
from ok_serial_session._lines import LineAssembler
from ok_serial_session._pyserial_driver import PySerialDriver
from ok_serial_session._session import SerialSession, SessionOptions
from ok_serial_session._timeout_math import TIMEOUT_MAX
from ok_serial_session._waiter import PatternWaiter

__all__ = [n for n in dir() if not n.startswith("_")]
