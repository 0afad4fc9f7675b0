import contextlib
import logging

import pydantic

from ok_serial_session import _attributes
from ok_serial_session import _config
from ok_serial_session import _device
from ok_serial_session import _driver
from ok_serial_session import _lines
from ok_serial_session import _pyserial_driver
from ok_serial_session import _timeout_math
from ok_serial_session import _waiter

log = logging.getLogger("ok_serial_session.session")


class SessionOptions(pydantic.BaseModel):
    attrs: _attributes.SerialAttributes = _attributes.SerialAttributes()
    line_ignore: str = "\r"
    line_end: str = "\n"
    exclusive: bool = True


class SerialSession(contextlib.AbstractContextManager):
    """
    An open serial device with line framing and prompt/response matching.

    The session exclusively owns the device. Once closed (explicitly or by
    leaving a 'with' block), every operation raises SerialIoClosed. Failed
    operations leave the session open; close it if the error is fatal.
    Calls block up to the relevant deadline (see set_read_deadline()) and
    one session must not be read (or written) from two threads at once.
    """

    @pydantic.validate_call(
        config=pydantic.ConfigDict(arbitrary_types_allowed=True)
    )
    def __init__(
        self,
        path: str,
        opts: SessionOptions | int = SessionOptions(),
        *,
        driver: _driver.DeviceDriver | None = None,
    ):
        if isinstance(opts, int):
            speed = _attributes.check_speed(opts)
            attrs = _attributes.SerialAttributes(speed=speed)
            opts = SessionOptions(attrs=attrs)
        if driver is None:
            driver = _pyserial_driver.PySerialDriver()

        with contextlib.ExitStack() as cleanup:
            log.debug("Opening %s (%s)", path, opts.attrs)
            handle = driver.open(path, exclusive=opts.exclusive)
            cleanup.callback(driver.close, handle)
            device = _device.SerialDevice(driver, handle, path)
            config = _config.SerialConfig(device)
            config.set_attr(opts.attrs)
            cleanup.pop_all()

        self._device = device
        self._config = config
        self._lines = _lines.LineAssembler(
            device.read_byte, ignore=opts.line_ignore, end=opts.line_end
        )
        self._waiter = _waiter.PatternWaiter(self._lines.read_line)

    def __del__(self) -> None:
        if hasattr(self, "_device") and not self._device.closed:
            self._device.close()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if not self._device.closed:
            self._device.close()

    def __repr__(self) -> str:
        return f"SerialSession({self._device.name!r})"

    @property
    def name(self) -> str:
        return self._device.name

    @property
    def closed(self) -> bool:
        return self._device.closed

    @pydantic.validate_call
    def fileno(self) -> int | None:
        return self._device.fileno()

    @pydantic.validate_call
    def close(self) -> None:
        """Releases the device; raises SerialIoClosed if already closed"""

        self._device.close()

    #
    # Deadlines
    #

    @pydantic.validate_call
    def set_deadline(self, deadline: float | int | None) -> None:
        self._device.set_deadline(deadline)

    @pydantic.validate_call
    def set_read_deadline(self, deadline: float | int | None) -> None:
        self._device.set_read_deadline(deadline)

    @pydantic.validate_call
    def set_write_deadline(self, deadline: float | int | None) -> None:
        self._device.set_write_deadline(deadline)

    @pydantic.validate_call
    def set_timeout(self, timeout: float | int | None) -> None:
        self._device.set_deadline(_timeout_math.to_deadline(timeout))

    @pydantic.validate_call
    def set_read_timeout(self, timeout: float | int | None) -> None:
        self._device.set_read_deadline(_timeout_math.to_deadline(timeout))

    @pydantic.validate_call
    def set_write_timeout(self, timeout: float | int | None) -> None:
        self._device.set_write_deadline(_timeout_math.to_deadline(timeout))

    #
    # Byte I/O
    #

    @pydantic.validate_call
    def read(self, *, max: int = 65536) -> bytes:
        return self._device.read(max=max)

    @pydantic.validate_call
    def write(self, data: bytes) -> int:
        return self._device.write(data)

    @pydantic.validate_call
    def write_str(self, text: str) -> int:
        return self._device.write_str(text)

    @pydantic.validate_call
    def read_byte(self) -> int:
        return self._device.read_byte()

    @pydantic.validate_call
    def write_byte(self, value: int) -> None:
        self._device.write_byte(value)

    #
    # Lines and patterns
    #

    @property
    def line_ignore(self) -> frozenset[str]:
        return self._lines.ignore

    @line_ignore.setter
    def line_ignore(self, chars: _lines.CharSet) -> None:
        self._lines.ignore = chars

    @property
    def line_end(self) -> frozenset[str]:
        return self._lines.end

    @line_end.setter
    def line_end(self, chars: _lines.CharSet) -> None:
        self._lines.end = chars

    @pydantic.validate_call
    def read_line(self) -> str:
        return self._lines.read_line()

    @pydantic.validate_call
    def wait_for_re(self, patterns: list[str]) -> tuple[int, str]:
        return self._waiter.wait_for_re(patterns)

    #
    # Configuration
    #

    @pydantic.validate_call
    def get_attr(self) -> _attributes.SerialAttributes:
        return self._config.get_attr()

    @pydantic.validate_call
    def set_attr(self, attrs: _attributes.SerialAttributes) -> None:
        self._config.set_attr(attrs)

    # numeric settings are checked exactly by SerialConfig (True is not 1)
    def set_speed(self, speed: int | float) -> None:
        self._config.set_speed(speed)

    @pydantic.validate_call
    def set_parity(self, parity: str) -> None:
        self._config.set_parity(parity)

    def set_stop_bits(self, stop_bits: int | float) -> None:
        self._config.set_stop_bits(stop_bits)

    def set_bits(self, bits: int | float) -> None:
        self._config.set_bits(bits)

    @pydantic.validate_call
    def set_hw_flow_ctrl(self, hw_flow: bool) -> None:
        self._config.set_hw_flow_ctrl(hw_flow)

    @pydantic.validate_call
    def set_sw_flow_ctrl(self, sw_flow: bool) -> None:
        self._config.set_sw_flow_ctrl(sw_flow)

    @pydantic.validate_call
    def set_local(self, local: bool) -> None:
        self._config.set_local(local)

    @pydantic.validate_call
    def set_hup(self, hup: bool) -> None:
        self._config.set_hup(hup)

    @pydantic.validate_call
    def flush(self, selector: str = "both") -> None:
        self._config.flush(selector)

    @pydantic.validate_call
    def in_waiting(self) -> int:
        return self._config.in_waiting()

    @pydantic.validate_call
    def out_waiting(self) -> int:
        return self._config.out_waiting()

    def get_modem_bits(self) -> _attributes.ModemBits:
        return self._config.get_modem_bits()

    def set_modem_bit(
        self, signal: _attributes.ModemBits, level: bool
    ) -> None:
        self._config.set_modem_bit(signal, level)

    def set_modem_bits(self, bits: _attributes.ModemBits) -> None:
        self._config.set_modem_bits(bits)
