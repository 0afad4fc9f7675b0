import logging
import re
import typing

from ok_serial_session import _exceptions

log = logging.getLogger("ok_serial_session.waiter")


class PatternWaiter:
    """Reads lines until one of an ordered list of regexes matches"""

    def __init__(self, read_line: typing.Callable[[], str]):
        self._read_line = read_line

    def wait_for_re(self, patterns: typing.Sequence[str]) -> tuple[int, str]:
        """
        Consumes lines until one is matched (re.search) by some pattern.

        Returns (index, line) for the first pattern in list order that
        matches; later patterns aren't tried against that line. All patterns
        are compiled before any line is read, so a bad one fails without
        consuming input. Read errors (including timeouts) propagate as-is;
        with no read deadline set, this can wait forever.
        """

        if not patterns:
            raise _exceptions.SerialPatternInvalid("No patterns to wait for")

        compiled: list[re.Pattern] = []
        for i, pattern in enumerate(patterns):
            try:
                compiled.append(re.compile(pattern))
            except re.error as ex:
                msg = f"Bad line pattern #{i}: /{pattern}/ ({ex})"
                raise _exceptions.SerialPatternInvalid(msg) from ex

        log.debug("Waiting for %s", " | ".join(f"/{p}/" for p in patterns))
        while True:
            line = self._read_line()
            for i, rx in enumerate(compiled):
                if rx.search(line):
                    log.debug("Matched /%s/ (#%d): %r", rx.pattern, i, line)
                    return i, line
            log.debug("No match: %r", line)
