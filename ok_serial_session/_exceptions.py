"""Exception hierarchy for ok_serial_session"""

import enum


class ErrorKind(enum.Enum):
    INVALID_PARAMETER = "invalid-parameter"
    DEVICE = "device-error"
    TIMEOUT = "timeout"
    CLOSED = "closed-resource"
    PATTERN = "malformed-pattern"
    SHORT_READ = "short-read"


class SerialException(OSError):
    kind = ErrorKind.DEVICE

    def __init__(
        self,
        message: str,
        port: str | None = None,
    ):
        super().__init__(f"{port}: {message}" if port else message)
        self.port = port


class SerialDeviceException(SerialException):
    pass


class SerialOpenException(SerialDeviceException):
    pass


class SerialOpenBusy(SerialOpenException):
    pass


class SerialIoException(SerialDeviceException):
    pass


class SerialIoTimeout(SerialIoException):
    kind = ErrorKind.TIMEOUT


class SerialIoClosed(SerialIoException):
    kind = ErrorKind.CLOSED


class SerialShortRead(SerialIoException):
    kind = ErrorKind.SHORT_READ


class SerialShortWrite(SerialShortRead):
    pass


class SerialParameterInvalid(ValueError):
    kind = ErrorKind.INVALID_PARAMETER


class SerialPatternInvalid(ValueError):
    kind = ErrorKind.PATTERN
