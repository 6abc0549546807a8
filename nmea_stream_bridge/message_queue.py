# nmea_stream_bridge/message_queue.py

from collections import deque
from typing import Deque, Iterable, Iterator


class MessageQueue:
    """
    FIFO of complete messages awaiting classification.

    Filled and drained within the same feed() call, so it never grows
    past one chunk's worth of messages.
    """

    def __init__(self):
        self._items: Deque[str] = deque()

    def put(self, message: str):
        self._items.append(message)

    def extend(self, messages: Iterable[str]):
        self._items.extend(messages)

    def get(self) -> str:
        # IndexError when empty
        return self._items.popleft()

    def drain(self) -> Iterator[str]:
        while self._items:
            yield self._items.popleft()

    def clear(self):
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
