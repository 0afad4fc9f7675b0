import logging

from ok_serial_session import _attributes
from ok_serial_session import _device
from ok_serial_session import _exceptions

ModemBits = _attributes.ModemBits

log = logging.getLogger("ok_serial_session.config")


class SerialConfig:
    """
    Line discipline settings of a SerialDevice, read from and written to
    the device on every call (nothing is cached here).

    Setters validate their argument before any device access and raise
    SerialParameterInvalid for out-of-range values. Valid changes are made
    by rewriting the whole SerialAttributes snapshot through the driver.
    """

    def __init__(self, device: _device.SerialDevice):
        self._device = device

    def __repr__(self) -> str:
        return f"SerialConfig({self._device!r})"

    def get_attr(self) -> _attributes.SerialAttributes:
        return self._device.driver.get_config(self._device.handle())

    def set_attr(self, attrs: _attributes.SerialAttributes) -> None:
        log.debug("%s: Setting %s", self._device.name, attrs)
        self._device.driver.configure(self._device.handle(), attrs)

    def set_speed(self, speed: int | float) -> None:
        self._update(speed=_attributes.check_speed(speed))

    def set_parity(self, parity: str) -> None:
        self._update(parity=_attributes.check_parity(parity))

    def set_stop_bits(self, stop_bits: int | float) -> None:
        self._update(stop_bits=_attributes.check_stop_bits(stop_bits))

    def set_bits(self, bits: int | float) -> None:
        self._update(bits=_attributes.check_bits(bits))

    def set_hw_flow_ctrl(self, hw_flow: bool) -> None:
        self._update(hw_flow=hw_flow)

    def set_sw_flow_ctrl(self, sw_flow: bool) -> None:
        self._update(sw_flow=sw_flow)

    def set_local(self, local: bool) -> None:
        """In local mode, modem control lines (CD etc.) are ignored"""

        self._update(local=local)

    def set_hup(self, hup: bool) -> None:
        """With hangup off, DTR/RTS are left alone when the port closes"""

        self._update(hup=hup)

    def flush(self, selector: str) -> None:
        selector = _attributes.check_flush(selector)
        log.debug("%s: Flushing %s", self._device.name, selector)
        self._device.driver.flush(self._device.handle(), selector)

    def in_waiting(self) -> int:
        handle = self._device.handle()
        return self._device.driver.query_waiting(handle, "input")

    def out_waiting(self) -> int:
        handle = self._device.handle()
        return self._device.driver.query_waiting(handle, "output")

    def get_modem_bits(self) -> ModemBits:
        return self._device.driver.get_modem_bits(self._device.handle())

    def set_modem_bit(self, signal: ModemBits, level: bool) -> None:
        if signal not in (ModemBits.DTR, ModemBits.RTS):
            message = f"Only DTR or RTS can be set, not {signal!r}"
            raise _exceptions.SerialParameterInvalid(message)
        log.debug("%s: %s=%d", self._device.name, signal.name, level)
        self._device.driver.set_modem_bit(self._device.handle(), signal, level)

    def set_modem_bits(self, bits: ModemBits) -> None:
        """Sets DTR and RTS to match 'bits' (other lines are input-only)"""

        bits = _attributes.check_settable(bits)
        for signal in (ModemBits.DTR, ModemBits.RTS):
            self.set_modem_bit(signal, bool(bits & signal))

    def _update(self, **changes) -> None:
        attrs = self.get_attr().model_copy(update=changes)
        self.set_attr(attrs)
