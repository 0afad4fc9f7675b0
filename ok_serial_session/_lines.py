import logging
import typing

from ok_serial_session import _exceptions

log = logging.getLogger("ok_serial_session.lines")

CharSet = str | typing.Iterable[str]


def char_set(chars: CharSet) -> frozenset[str]:
    """Normalizes a string or collection of characters into a frozenset"""

    out = frozenset(chars)
    if bad := sorted(c for c in out if len(c) != 1):
        message = f"Not single characters: {bad!r}"
        raise _exceptions.SerialParameterInvalid(message)
    return out


class LineAssembler:
    """
    Frames text lines out of a byte stream, one byte at a time.

    Bytes are taken as Latin-1 characters. Characters in 'ignore' are
    dropped; a character in 'end' completes the line (and is not part of
    it). Both sets are replaced wholesale on assignment and apply starting
    with the next byte read.
    """

    def __init__(
        self,
        read_byte: typing.Callable[[], int],
        *,
        ignore: CharSet = "\r",
        end: CharSet = "\n",
    ):
        self._read_byte = read_byte
        self._ignore = char_set(ignore)
        self._end = char_set(end)

    def __repr__(self) -> str:
        ignore, end = "".join(sorted(self._ignore)), "".join(sorted(self._end))
        return f"LineAssembler(ignore={ignore!r}, end={end!r})"

    @property
    def ignore(self) -> frozenset[str]:
        return self._ignore

    @ignore.setter
    def ignore(self, chars: CharSet) -> None:
        self._ignore = char_set(chars)

    @property
    def end(self) -> frozenset[str]:
        return self._end

    @end.setter
    def end(self, chars: CharSet) -> None:
        self._end = char_set(chars)

    def read_line(self) -> str:
        """Reads through the next end character (partial lines are dropped)"""

        chars: list[str] = []
        while True:
            ch = chr(self._read_byte())
            if ch in self._ignore:
                continue
            if ch in self._end:
                break
            chars.append(ch)

        line = "".join(chars)
        log.debug("Line: %r", line)
        return line
