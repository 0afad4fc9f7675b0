"""Unit tests for ok_serial_session._config."""

import pytest

from ok_serial_session import _attributes
from ok_serial_session import _config
from ok_serial_session import _device
from ok_serial_session import _exceptions


@pytest.fixture
def config(fake_driver):
    handle = fake_driver.open("/dev/fake", exclusive=True)
    device = _device.SerialDevice(fake_driver, handle, "/dev/fake")
    fake_driver.calls.clear()
    return _config.SerialConfig(device)


@pytest.mark.parametrize("stop_bits", [1, 2])
def test_valid_stop_bits(config, fake_driver, stop_bits):
    config.set_stop_bits(stop_bits)
    assert fake_driver.attrs.stop_bits == stop_bits
    assert fake_driver.calls == ["get_config", "configure"]


@pytest.mark.parametrize("stop_bits", [-1, 0, 3, 4, 8, 1000])
def test_invalid_stop_bits_never_touch_device(config, fake_driver, stop_bits):
    with pytest.raises(_exceptions.SerialParameterInvalid) as exc_info:
        config.set_stop_bits(stop_bits)
    assert exc_info.value.kind == _exceptions.ErrorKind.INVALID_PARAMETER
    assert fake_driver.calls == []


@pytest.mark.parametrize(
    "setter,value",
    [
        ("set_speed", 12345),
        ("set_speed", -9600),
        ("set_parity", "mark"),
        ("set_bits", 4),
        ("set_bits", 9),
    ],
)
def test_invalid_parameters_never_touch_device(
    config, fake_driver, setter, value
):
    with pytest.raises(_exceptions.SerialParameterInvalid):
        getattr(config, setter)(value)
    assert fake_driver.calls == []


def test_setters_change_one_field(config, fake_driver):
    config.set_speed(9600)
    config.set_parity("odd")
    config.set_bits(7)
    config.set_hw_flow_ctrl(True)
    config.set_sw_flow_ctrl(True)
    config.set_local(False)
    config.set_hup(False)

    assert fake_driver.attrs == _attributes.SerialAttributes(
        speed=9600,
        parity="odd",
        stop_bits=1,
        bits=7,
        hw_flow=True,
        sw_flow=True,
        local=False,
        hup=False,
    )


def test_get_attr_set_attr_round_trip(config, fake_driver):
    config.set_parity("even")
    before = config.get_attr()
    config.set_attr(config.get_attr())
    assert config.get_attr() == before


def test_save_and_restore(config, fake_driver):
    saved = config.get_attr()
    config.set_speed(300)
    config.set_bits(5)
    assert config.get_attr() != saved
    config.set_attr(saved)
    assert fake_driver.attrs == saved


def test_device_errors_propagate(config):
    with pytest.raises(_exceptions.SerialDeviceException):
        config.set_speed(50)  # FakeDriver rejects this one


def test_flush_and_waiting(config, fake_driver):
    fake_driver.incoming.extend(b"stale")
    fake_driver.outgoing.extend(b"unsent!")
    assert config.in_waiting() == 5
    assert config.out_waiting() == 7

    config.flush("input")
    assert (config.in_waiting(), config.out_waiting()) == (0, 7)
    config.flush("both")
    assert (config.in_waiting(), config.out_waiting()) == (0, 0)

    with pytest.raises(_exceptions.SerialParameterInvalid):
        config.flush("sideways")
    assert "flush:sideways" not in fake_driver.calls


def test_modem_bits(config, fake_driver):
    DTR, RTS = _attributes.ModemBits.DTR, _attributes.ModemBits.RTS
    assert config.get_modem_bits() == DTR | RTS

    config.set_modem_bit(DTR, False)
    assert config.get_modem_bits() == RTS

    config.set_modem_bits(DTR)
    assert config.get_modem_bits() == DTR

    fake_driver.calls.clear()
    with pytest.raises(_exceptions.SerialParameterInvalid):
        config.set_modem_bit(_attributes.ModemBits.CTS, True)
    with pytest.raises(_exceptions.SerialParameterInvalid):
        config.set_modem_bits(DTR | _attributes.ModemBits.RI)
    assert fake_driver.calls == []


def test_closed_device_rejects_config(config, fake_driver):
    config._device.close()
    with pytest.raises(_exceptions.SerialIoClosed):
        config.set_speed(9600)
    with pytest.raises(_exceptions.SerialIoClosed):
        config.get_attr()
    with pytest.raises(_exceptions.SerialIoClosed):
        config.in_waiting()
