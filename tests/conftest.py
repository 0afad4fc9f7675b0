import contextlib
import io
import ok_logging_setup
import os
import pty
import pytest
import typing

from ok_serial_session import _attributes
from ok_serial_session import _driver
from ok_serial_session import _exceptions
from ok_serial_session import _timeout_math

ok_logging_setup.install(
    {
        "OK_LOGGING_LEVEL": "ok_serial_session=DEBUG,WARNING",
        "OK_LOGGING_OUTPUT": "stdout",
    }
)


class PseudoTtySerial(typing.NamedTuple):
    path: str
    control: io.FileIO
    simulated: io.FileIO


@pytest.fixture
def pty_serial():
    with contextlib.ExitStack() as cleanup:
        ctrl_fd, sim_fd = pty.openpty()
        path = os.ttyname(sim_fd)
        ctrl = cleanup.enter_context(os.fdopen(ctrl_fd, "r+b", buffering=0))
        sim = cleanup.enter_context(os.fdopen(sim_fd, "r+b", buffering=0))
        yield PseudoTtySerial(path=path, control=ctrl, simulated=sim)


class FakeDriver(_driver.DeviceDriver):
    """Scripted in-memory device; runs dry (times out) when input is empty"""

    def __init__(self, incoming: bytes = b"", *, loopback: bool = False):
        self.incoming = bytearray(incoming)
        self.outgoing = bytearray()
        self.loopback = loopback
        self.attrs = _attributes.SerialAttributes(speed=115200)
        self.modem = _attributes.ModemBits.DTR | _attributes.ModemBits.RTS
        self.short_reads = 0
        self.write_limit: int | None = None
        self.calls: list[str] = []
        self.is_open = False

    def open(self, path, *, exclusive):
        self.calls.append("open")
        if path == "/dev/busy":
            raise _exceptions.SerialOpenBusy("Serial port busy (EBUSY)", path)
        self.is_open = True
        return {"path": path, "exclusive": exclusive}

    def close(self, handle):
        self.calls.append("close")
        assert self.is_open, "closed twice"
        self.is_open = False

    def get_config(self, handle):
        self.calls.append("get_config")
        return self.attrs

    def configure(self, handle, attrs):
        self.calls.append("configure")
        if attrs.speed == 50:
            raise _exceptions.SerialDeviceException("Unsupported", "fake")
        self.attrs = attrs

    def read(self, handle, max, deadline):
        self.calls.append("read")
        if _timeout_math.from_deadline(deadline) <= 0:
            raise _exceptions.SerialIoTimeout("Serial read timeout", "fake")
        if self.short_reads:
            self.short_reads -= 1
            return b""
        if not self.incoming:
            raise _exceptions.SerialIoTimeout("Serial read timeout", "fake")
        data = bytes(self.incoming[:max])
        del self.incoming[:max]
        return data

    def write(self, handle, data, deadline):
        self.calls.append("write")
        if _timeout_math.from_deadline(deadline) <= 0:
            raise _exceptions.SerialIoTimeout("Serial write timeout", "fake")
        if self.write_limit is not None:
            data = data[: self.write_limit]
        self.outgoing.extend(data)
        if self.loopback:
            self.incoming.extend(data)
        return len(data)

    def flush(self, handle, selector):
        self.calls.append(f"flush:{selector}")
        if selector in ("input", "both"):
            self.incoming.clear()
        if selector in ("output", "both"):
            self.outgoing.clear()

    def query_waiting(self, handle, direction):
        self.calls.append(f"waiting:{direction}")
        return len(self.incoming if direction == "input" else self.outgoing)

    def get_modem_bits(self, handle):
        self.calls.append("get_modem_bits")
        return self.modem

    def set_modem_bit(self, handle, signal, level):
        self.calls.append(f"set_modem_bit:{signal.name}={level}")
        self.modem = (self.modem | signal) if level else (self.modem & ~signal)


@pytest.fixture
def fake_driver():
    return FakeDriver()
