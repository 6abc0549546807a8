# nmea_stream_bridge/dispatcher.py

import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from .sentences import SentenceRecord, SentenceType

logger = logging.getLogger(__name__)

Callback = Callable[[Any, SentenceRecord], None]


class FrameCounter:
    """
    Monotonic count of dispatched sentences.

    Each FrameDispatcher owns one unless a counter is passed in;
    sharing one instance across dispatchers is opt-in and gives a
    process-wide count.
    """

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


class FrameDispatcher:
    """
    Synchronous per-type event fan-out.

    Responsibilities:
    - Keep an ordered subscriber list per sentence type
    - Count every record handed in, Unknown included
    - Notify typed subscribers in registration order
    - Isolate subscriber failures from each other and from the count
    """

    def __init__(self, counter: Optional[FrameCounter] = None):
        self.counter = counter if counter is not None else FrameCounter()

        # Immutable tuples, replaced on every (un)subscribe
        self._subscribers: Dict[SentenceType, Tuple[Callback, ...]] = {}
        self._lock = threading.Lock()

    @property
    def frame_count(self) -> int:
        return self.counter.value

    # =====================================================
    # SUBSCRIPTION
    # =====================================================
    def subscribe(self, sentence_type: SentenceType, callback: Callback) -> Callback:
        if sentence_type is SentenceType.UNKNOWN:
            raise ValueError("Unknown sentences are counted, not dispatched")
        if not callable(callback):
            raise TypeError("callback must be callable")

        with self._lock:
            current = self._subscribers.get(sentence_type, ())
            self._subscribers[sentence_type] = current + (callback,)
        return callback

    def unsubscribe(self, sentence_type: SentenceType, callback: Callback) -> bool:
        with self._lock:
            current = self._subscribers.get(sentence_type, ())
            if callback not in current:
                return False

            # Drop the most recent registration only
            idx = len(current) - 1 - current[::-1].index(callback)
            self._subscribers[sentence_type] = current[:idx] + current[idx + 1:]
            return True

    def on(self, sentence_type: SentenceType) -> Callable[[Callback], Callback]:
        """
        Decorator form of subscribe():

          @dispatcher.on(SentenceType.GGA)
          def handle(sender, record): ...
        """
        def register(callback: Callback) -> Callback:
            return self.subscribe(sentence_type, callback)
        return register

    def subscribers(self, sentence_type: SentenceType) -> Tuple[Callback, ...]:
        return self._subscribers.get(sentence_type, ())

    # =====================================================
    # DISPATCH
    # =====================================================
    def dispatch(self, record: SentenceRecord, sender: Any = None) -> int:
        """
        Count the record and notify its subscribers.

        Returns the number of callbacks that ran without raising.
        """
        self.counter.increment()

        sentence_type = record.sentence_type
        if sentence_type is SentenceType.UNKNOWN:
            return 0

        if sender is None:
            sender = self

        notified = 0
        for callback in self.subscribers(sentence_type):
            # Skip callbacks removed by an earlier subscriber in this round
            if callback not in self._subscribers.get(sentence_type, ()):
                continue
            try:
                callback(sender, record)
                notified += 1
            except Exception:
                logger.exception(
                    "%s subscriber %r failed", sentence_type.value, callback
                )
        return notified
