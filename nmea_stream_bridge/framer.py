# nmea_stream_bridge/framer.py

import threading
from dataclasses import dataclass
from typing import AnyStr, List, Optional, Tuple

DEFAULT_DELIMITER = "\r\n"


def reframe(
    chunk: AnyStr,
    remainder: Optional[AnyStr] = None,
    delimiter: Optional[AnyStr] = None,
    keep_delimiter: bool = False,
) -> Tuple[List[AnyStr], AnyStr]:
    """
    Split remainder + chunk into complete messages.

    Example, delimiter '\\r\\n':

      remainder 'First me', chunk 'ssage.\\r\\nSecond\\r\\nThi'
      → ['First message.', 'Second'], 'Thi'

    Empty segments (back-to-back delimiters) are dropped. The last,
    unterminated segment is returned as the new remainder; it is empty
    when the input ended on a delimiter.
    """
    if delimiter is None:
        delimiter = DEFAULT_DELIMITER if isinstance(chunk, str) else DEFAULT_DELIMITER.encode()
    if not delimiter:
        raise ValueError("delimiter must not be empty")
    if remainder is None:
        remainder = chunk[:0]

    segments = (remainder + chunk).split(delimiter)
    remainder = segments.pop()

    suffix = delimiter if keep_delimiter else delimiter[:0]
    messages = [segment + suffix for segment in segments if segment]
    return messages, remainder


@dataclass
class FramerState:
    """Per-stream framing state, carried across reframing calls."""

    remainder: Optional[AnyStr] = None


class ByteStreamFramer:
    """
    Stateful splitter for a chunked text stream.

    Responsibilities:
    - Carry the unterminated trailing fragment across calls
    - Split on a configurable delimiter
    - Reset when the underlying link is re-opened
    """

    def __init__(self, delimiter: AnyStr = DEFAULT_DELIMITER, keep_delimiter: bool = False):
        if not delimiter:
            raise ValueError("delimiter must not be empty")

        self.delimiter = delimiter
        self.keep_delimiter = keep_delimiter

        self._state = FramerState()
        self._lock = threading.Lock()

    @property
    def remainder(self) -> AnyStr:
        if self._state.remainder is None:
            return self.delimiter[:0]
        return self._state.remainder

    def reframe(self, chunk: AnyStr, delimiter: Optional[AnyStr] = None) -> List[AnyStr]:
        delimiter = delimiter or self.delimiter
        # str delimiter on a byte stream
        if isinstance(delimiter, str) and not isinstance(chunk, str):
            delimiter = delimiter.encode()

        with self._lock:
            messages, remainder = reframe(
                chunk,
                self._state.remainder,
                delimiter,
                self.keep_delimiter,
            )
            self._state = FramerState(remainder=remainder)
        return messages

    def reset(self):
        with self._lock:
            self._state = FramerState()
