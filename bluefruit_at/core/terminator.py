"""Streaming detection of the OK/ERROR reply terminator.

The device ends every reply with ``OK\\r\\n`` or ``ERROR\\r\\n``. Rather than
re-running a pattern over the whole growing buffer after each byte, the
scanner keeps only the trailing characters that could still complete a
terminator. Because it is fed after every appended character, the first
terminator anywhere in the stream is always seen at the moment it becomes
the suffix, so this is equivalent to searching the accumulated text.

Known protocol assumption: a payload line that itself ends with the literal
text ``OK`` or ``ERROR`` followed by CRLF is indistinguishable from the real
status and ends the reply early.
"""

import re
from typing import Optional

TERMINATORS = {
    "OK\r\n": "OK",
    "ERROR\r\n": "ERROR",
}

_STATUS_PATTERN = re.compile(r"(?P<status>OK|ERROR)[\r\n]+\Z")
_OK_SUFFIX_PATTERN = re.compile(r"(\r\n)*(OK)(\r\n)*\Z")


class TerminatorScanner:
    """Suffix scanner fed one character at a time.

    Example:
        >>> scanner = TerminatorScanner()
        >>> [scanner.feed(c) for c in "OK\\r\\n"]
        [None, None, None, 'OK']
    """

    WINDOW = max(len(token) for token in TERMINATORS)

    def __init__(self):
        self._tail = ""
        self.status: Optional[str] = None

    def feed(self, char: str) -> Optional[str]:
        """Append one character; return the status once a terminator completes.

        After a terminator has been seen, further input is ignored and the
        same status keeps being returned.
        """
        if self.status is not None:
            return self.status

        self._tail = (self._tail + char)[-self.WINDOW:]
        for token, status in TERMINATORS.items():
            if self._tail.endswith(token):
                self.status = status
                break
        return self.status


def extract_status(raw: str) -> Optional[str]:
    """Return 'OK' or 'ERROR' if the text ends in a status line, else None."""
    match = _STATUS_PATTERN.search(raw)
    if match:
        return match.group("status")
    return None


def strip_ok(raw: str) -> str:
    """Remove the trailing OK token and the line breaks around it.

    Leading and interior content, embedded line breaks included, is kept.

    Example:
        >>> strip_ok("value\\r\\nOK\\r\\n")
        'value'
    """
    return _OK_SUFFIX_PATTERN.sub("", raw, count=1)
