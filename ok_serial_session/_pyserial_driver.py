import dataclasses
import errno
import fcntl
import logging
import termios

import serial

from ok_serial_session import _attributes
from ok_serial_session import _driver
from ok_serial_session import _exceptions
from ok_serial_session import _timeout_math

log = logging.getLogger("ok_serial_session.driver")

READ_POLL = 1.0  # seconds per blocking read slice

_PARITY_TO_PYSERIAL = {
    "none": serial.PARITY_NONE,
    "even": serial.PARITY_EVEN,
    "odd": serial.PARITY_ODD,
}
_PARITY_FROM_PYSERIAL = {v: k for k, v in _PARITY_TO_PYSERIAL.items()}
_STOPBITS_TO_PYSERIAL = {1: serial.STOPBITS_ONE, 2: serial.STOPBITS_TWO}
_STOPBITS_FROM_PYSERIAL = {v: k for k, v in _STOPBITS_TO_PYSERIAL.items()}


@dataclasses.dataclass
class PySerialHandle:
    port: serial.SerialBase
    exclusive: bool = False
    local: bool = True
    hup: bool = True

    def __str__(self):
        return str(self.port.port)


class PySerialDriver(_driver.DeviceDriver):
    """DeviceDriver for anything serial.serial_for_url() can open"""

    def __repr__(self) -> str:
        return "PySerialDriver()"

    def open(self, path: str, *, exclusive: bool) -> PySerialHandle:
        log.debug("Opening %s", path)
        try:
            port = serial.serial_for_url(path, write_timeout=0.1)
        except OSError as ex:
            if ex.errno == errno.EBUSY:
                message = "Serial port busy (EBUSY)"
                raise _exceptions.SerialOpenBusy(message, path) from ex
            else:
                message = "Serial port open error"
                raise _exceptions.SerialOpenException(message, path) from ex
        except ValueError as ex:
            message = "Serial port URL not understood"
            raise _exceptions.SerialOpenException(message, path) from ex

        handle = PySerialHandle(port=port, exclusive=exclusive)
        if exclusive and (fd := self.fileno(handle)) is not None:
            try:
                fcntl.ioctl(fd, termios.TIOCEXCL)
                log.debug("Acquired TIOCEXCL on %s", path)
            except OSError:
                log.warning("Can't lock (TIOCEXCL) %s", path, exc_info=True)

        return handle

    def close(self, handle: PySerialHandle) -> None:
        if handle.exclusive and (fd := self.fileno(handle)) is not None:
            try:
                fcntl.ioctl(fd, termios.TIOCNXCL)
                log.debug("Released TIOCEXCL on %s", handle)
            except OSError:
                log.warning(
                    "Can't release TIOCEXCL on %s", handle, exc_info=True
                )

        try:
            handle.port.close()
        except OSError as ex:
            message, port = "Serial port close error", str(handle)
            raise _exceptions.SerialDeviceException(message, port) from ex
        log.debug("Closed %s", handle)

    def get_config(
        self, handle: PySerialHandle
    ) -> _attributes.SerialAttributes:
        settings = handle.port.get_settings()
        parity = _PARITY_FROM_PYSERIAL.get(settings["parity"])
        stop_bits = _STOPBITS_FROM_PYSERIAL.get(settings["stopbits"])
        if parity is None or stop_bits is None:
            message = (
                f"Unsupported framing (parity={settings['parity']!r}"
                f" stopbits={settings['stopbits']!r})"
            )
            raise _exceptions.SerialDeviceException(message, str(handle))

        local, hup = handle.local, handle.hup
        if (fd := self.fileno(handle)) is not None:
            try:
                cflag = termios.tcgetattr(fd)[2]
            except (OSError, termios.error) as ex:
                message = "Serial attribute read error"
                raise _exceptions.SerialDeviceException(
                    message, str(handle)
                ) from ex
            local = bool(cflag & termios.CLOCAL)
            hup = bool(cflag & termios.HUPCL)

        return _attributes.SerialAttributes(
            speed=settings["baudrate"],
            parity=parity,
            stop_bits=stop_bits,
            bits=settings["bytesize"],
            hw_flow=settings["rtscts"],
            sw_flow=settings["xonxoff"],
            local=local,
            hup=hup,
        )

    def configure(
        self, handle: PySerialHandle, attrs: _attributes.SerialAttributes
    ) -> None:
        log.debug("Configuring %s (%s)", handle, attrs)
        try:
            handle.port.apply_settings(
                {
                    "baudrate": attrs.speed,
                    "bytesize": attrs.bits,
                    "parity": _PARITY_TO_PYSERIAL[attrs.parity],
                    "stopbits": _STOPBITS_TO_PYSERIAL[attrs.stop_bits],
                    "rtscts": attrs.hw_flow,
                    "xonxoff": attrs.sw_flow,
                }
            )
            handle.local, handle.hup = attrs.local, attrs.hup
            self._apply_cflags(handle)
        except (OSError, ValueError, termios.error) as ex:
            message, port = "Serial configure error", str(handle)
            raise _exceptions.SerialDeviceException(message, port) from ex

    def read(
        self, handle: PySerialHandle, max: int, deadline: float
    ) -> bytes:
        while True:
            if (wait := _timeout_math.from_deadline(deadline)) <= 0:
                message, port = "Serial read timeout", str(handle)
                raise _exceptions.SerialIoTimeout(message, port)

            try:
                # Poll in fixed slices; only the last slice before the
                # deadline changes the port timeout
                self._use_timeout(handle, "timeout", min(wait, READ_POLL))
                # Block for at least one byte, then grab what is available
                data = handle.port.read(1)
                if data and max > 1:
                    if (waiting := handle.port.in_waiting) > 0:
                        data += handle.port.read(min(waiting, max - 1))
            except (OSError, termios.error) as ex:
                message, port = "Serial read error", str(handle)
                raise _exceptions.SerialIoException(message, port) from ex

            if data:
                return data

    def write(
        self, handle: PySerialHandle, data: bytes, deadline: float
    ) -> int:
        if (wait := _timeout_math.from_deadline(deadline)) <= 0:
            message, port = "Serial write timeout", str(handle)
            raise _exceptions.SerialIoTimeout(message, port)

        try:
            self._use_timeout(handle, "write_timeout", wait)
            count = handle.port.write(data)
        except serial.SerialTimeoutException as ex:
            message, port = "Serial write timeout", str(handle)
            raise _exceptions.SerialIoTimeout(message, port) from ex
        except (OSError, termios.error) as ex:
            message, port = "Serial write error", str(handle)
            raise _exceptions.SerialIoException(message, port) from ex

        return len(data) if count is None else count

    def flush(
        self, handle: PySerialHandle, selector: _attributes.FlushSelector
    ) -> None:
        try:
            if selector in ("input", "both"):
                handle.port.reset_input_buffer()
            if selector in ("output", "both"):
                handle.port.reset_output_buffer()
        except OSError as ex:
            message, port = f"Serial flush ({selector}) error", str(handle)
            raise _exceptions.SerialDeviceException(message, port) from ex

    def query_waiting(
        self, handle: PySerialHandle, direction: _attributes.Direction
    ) -> int:
        try:
            if direction == "input":
                return handle.port.in_waiting
            else:
                return handle.port.out_waiting
        except OSError as ex:
            message, port = f"Serial {direction} query error", str(handle)
            raise _exceptions.SerialDeviceException(message, port) from ex

    def get_modem_bits(self, handle: PySerialHandle) -> _attributes.ModemBits:
        port, bits = handle.port, _attributes.ModemBits.NONE
        try:
            for flag, level in (
                (_attributes.ModemBits.DTR, port.dtr),
                (_attributes.ModemBits.RTS, port.rts),
                (_attributes.ModemBits.CTS, port.cts),
                (_attributes.ModemBits.DSR, port.dsr),
                (_attributes.ModemBits.RI, port.ri),
                (_attributes.ModemBits.CD, port.cd),
            ):
                if level:
                    bits |= flag
        except OSError as ex:
            message, port = "Serial modem status error", str(handle)
            raise _exceptions.SerialDeviceException(message, port) from ex
        return bits

    def set_modem_bit(
        self,
        handle: PySerialHandle,
        signal: _attributes.ModemBits,
        level: bool,
    ) -> None:
        try:
            if signal == _attributes.ModemBits.DTR:
                handle.port.dtr = level
            elif signal == _attributes.ModemBits.RTS:
                handle.port.rts = level
            else:
                message = f"Only DTR or RTS can be set, not {signal!r}"
                raise _exceptions.SerialParameterInvalid(message)
        except OSError as ex:
            message, port = f"Serial {signal!r} control error", str(handle)
            raise _exceptions.SerialDeviceException(message, port) from ex

    def fileno(self, handle: PySerialHandle) -> int | None:
        try:
            return handle.port.fileno()
        except (AttributeError, OSError, ValueError):
            return None  # not backed by a file descriptor (eg. loop://)

    def _apply_cflags(self, handle: PySerialHandle) -> None:
        if (fd := self.fileno(handle)) is None:
            return
        attr = termios.tcgetattr(fd)
        cflag = attr[2] & ~(termios.CLOCAL | termios.HUPCL)
        cflag |= termios.CLOCAL if handle.local else 0
        cflag |= termios.HUPCL if handle.hup else 0
        if cflag != attr[2]:
            attr[2] = cflag
            termios.tcsetattr(fd, termios.TCSANOW, attr)

    def _use_timeout(
        self, handle: PySerialHandle, name: str, wait: float
    ) -> None:
        timeout = None if wait >= _timeout_math.TIMEOUT_MAX else wait
        if getattr(handle.port, name) != timeout:
            setattr(handle.port, name, timeout)
            # pyserial reconfiguration always turns CLOCAL back on
            if not handle.local:
                self._apply_cflags(handle)
