import enum
from typing import Literal

import pydantic
import serial

from ok_serial_session import _exceptions

Parity = Literal["none", "even", "odd"]
FlushSelector = Literal["input", "output", "both"]
Direction = Literal["input", "output"]

SUPPORTED_SPEEDS = frozenset(serial.Serial.BAUDRATES)


class ModemBits(enum.IntFlag):
    """Modem control and status lines"""

    NONE = 0
    DTR = enum.auto()
    RTS = enum.auto()
    CTS = enum.auto()
    DSR = enum.auto()
    RI = enum.auto()
    CD = enum.auto()


SETTABLE_MODEM_BITS = ModemBits.DTR | ModemBits.RTS


def check_speed(speed: int | float) -> int:
    if type(speed) is not int or speed not in SUPPORTED_SPEEDS:
        raise _exceptions.SerialParameterInvalid(f"Bad speed: {speed!r}")
    return speed


def check_stop_bits(stop_bits: int | float) -> int:
    if type(stop_bits) is not int or stop_bits not in (1, 2):
        message = f"Bad stop bits (not 1 or 2): {stop_bits!r}"
        raise _exceptions.SerialParameterInvalid(message)
    return stop_bits


def check_bits(bits: int | float) -> int:
    if type(bits) is not int or not 5 <= bits <= 8:
        message = f"Bad frame bits (not 5-8): {bits!r}"
        raise _exceptions.SerialParameterInvalid(message)
    return bits


def check_parity(parity: str) -> Parity:
    if parity not in ("none", "even", "odd"):
        message = f"Bad parity (not none/even/odd): {parity!r}"
        raise _exceptions.SerialParameterInvalid(message)
    return parity


def check_flush(selector: str) -> FlushSelector:
    if selector not in ("input", "output", "both"):
        message = f"Bad flush selector (not input/output/both): {selector!r}"
        raise _exceptions.SerialParameterInvalid(message)
    return selector


def check_settable(bits: ModemBits) -> ModemBits:
    if bits & ~SETTABLE_MODEM_BITS:
        message = f"Only DTR and RTS can be set, not {bits!r}"
        raise _exceptions.SerialParameterInvalid(message)
    return bits


class SerialAttributes(pydantic.BaseModel):
    """Snapshot of the line discipline applied to a serial device"""

    model_config = pydantic.ConfigDict(frozen=True)

    speed: int = 9600
    parity: Parity = "none"
    stop_bits: int = 1
    bits: int = 8
    hw_flow: bool = False
    sw_flow: bool = False
    local: bool = True
    hup: bool = True

    @pydantic.field_validator("speed")
    @classmethod
    def validate_speed(cls, speed: int) -> int:
        return check_speed(speed)

    @pydantic.field_validator("stop_bits")
    @classmethod
    def validate_stop_bits(cls, stop_bits: int) -> int:
        return check_stop_bits(stop_bits)

    @pydantic.field_validator("bits")
    @classmethod
    def validate_bits(cls, bits: int) -> int:
        return check_bits(bits)

    def __str__(self) -> str:
        frame = f"{self.bits}{self.parity[0].upper()}{self.stop_bits}"
        flow = ("/rtscts" if self.hw_flow else "") + (
            "/xonxoff" if self.sw_flow else ""
        )
        return f"{self.speed} {frame}{flow}"
