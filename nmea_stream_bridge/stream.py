# nmea_stream_bridge/stream.py

import codecs
import threading
from typing import Optional, Union

from .classifier import SentenceClassifier
from .dispatcher import Callback, FrameDispatcher
from .framer import ByteStreamFramer
from .message_queue import MessageQueue
from .parser import SentenceParser
from .protocol import split_sentences
from .sentences import SentenceType

Chunk = Union[bytes, bytearray, memoryview, str]


class NmeaStream:
    """
    Chunked NMEA stream → typed sentence events.

    Responsibilities:
    - Decode raw chunks (multi-byte characters may span chunks)
    - Reframe into complete sentences, keeping the trailing fragment
    - Classify, parse and dispatch each sentence in arrival order
    - Track received / valid / unknown / invalid frame statistics
    """

    def __init__(
        self,
        delimiter: str = "\n",
        keep_delimiter: bool = False,
        validate_checksum: bool = True,
        encoding: str = "utf-8",
        dispatcher: Optional[FrameDispatcher] = None,
    ):
        self.encoding = encoding

        self.framer = ByteStreamFramer(delimiter, keep_delimiter)
        self.queue = MessageQueue()
        self.classifier = SentenceClassifier()
        self.parser = SentenceParser(validate_checksum)
        self.dispatcher = dispatcher if dispatcher is not None else FrameDispatcher()

        self._decoder = codecs.getincrementaldecoder(encoding)(errors="ignore")
        self._lock = threading.RLock()

        # Statistics
        self.bytes_received = 0
        self.chunks_received = 0
        self.messages_framed = 0
        self.valid_frames = 0
        self.unknown_frames = 0
        self.invalid_frames = 0

    # =====================================================
    # SUBSCRIPTION
    # =====================================================
    def subscribe(self, sentence_type: SentenceType, callback: Callback) -> Callback:
        return self.dispatcher.subscribe(sentence_type, callback)

    def unsubscribe(self, sentence_type: SentenceType, callback: Callback) -> bool:
        return self.dispatcher.unsubscribe(sentence_type, callback)

    def on(self, sentence_type: SentenceType):
        return self.dispatcher.on(sentence_type)

    # =====================================================
    # STATE
    # =====================================================
    @property
    def remainder(self) -> str:
        return self.framer.remainder

    @property
    def frame_count(self) -> int:
        return self.dispatcher.frame_count

    def reset(self, stats: bool = False):
        """
        Drop partial input. Call when the link is re-opened.
        """
        with self._lock:
            self.framer.reset()
            self.queue.clear()
            self._decoder.reset()

            if stats:
                self.bytes_received = 0
                self.chunks_received = 0
                self.messages_framed = 0
                self.valid_frames = 0
                self.unknown_frames = 0
                self.invalid_frames = 0

    # =====================================================
    # PIPELINE
    # =====================================================
    def feed(self, chunk: Chunk) -> int:
        """
        Push one raw chunk through the pipeline.

        Returns the number of records dispatched (Unknown included).
        """
        with self._lock:
            if isinstance(chunk, str):
                text = chunk
                self.bytes_received += len(chunk.encode(self.encoding, errors="ignore"))
            else:
                data = bytes(chunk)
                text = self._decoder.decode(data)
                self.bytes_received += len(data)
            self.chunks_received += 1

            messages = self.framer.reframe(text)
            self.messages_framed += len(messages)
            self.queue.extend(messages)

            dispatched = 0
            for message in self.queue.drain():
                # a truncated sentence may run into the next one
                for sentence in split_sentences(message):
                    if self._process(sentence):
                        dispatched += 1
            return dispatched

    def _process(self, message: str) -> bool:
        # Empty after trimming: framing noise, not a sentence
        if not message.strip():
            return False

        sentence_type = self.classifier.classify(message)
        record = self.parser.parse(message, sentence_type)

        if record is None:
            self.invalid_frames += 1
            return False

        if sentence_type is SentenceType.UNKNOWN:
            self.unknown_frames += 1
        else:
            self.valid_frames += 1

        self.dispatcher.dispatch(record, sender=self)
        return True
