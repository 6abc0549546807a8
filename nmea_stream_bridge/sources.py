# nmea_stream_bridge/sources.py

import logging
import threading
from typing import Callable, Optional

import serial

logger = logging.getLogger(__name__)

# SPI GNSS receivers clock out 0xFF when their TX buffer is empty
SPI_IDLE_BYTE = 0xFF

ReadFn = Callable[[], bytes]
SinkFn = Callable[[bytes], object]


# =====================================================
# SERIAL
# =====================================================
def open_serial(port: str, baudrate: int = 9600, timeout_ms: int = 50) -> serial.Serial:
    ser = serial.Serial(
        port=port,
        baudrate=baudrate,
        timeout=timeout_ms / 1000.0
    )
    logger.info("Serial connected: %s @ %s", port, baudrate)
    return ser


def serial_reader(ser: serial.Serial, max_bytes: int = 1024) -> ReadFn:
    """
    Read callable draining the UART input buffer.

    Blocks for at most the port timeout when nothing is waiting.
    """
    if max_bytes < 1:
        raise ValueError("max_bytes must be >= 1")

    def read() -> bytes:
        waiting = ser.in_waiting
        return ser.read(min(waiting, max_bytes) if waiting else 1)

    return read


# =====================================================
# POLLING
# =====================================================
class PollingSource:
    """
    Background read loop feeding raw chunks into a sink.

    Responsibilities:
    - Call read() every `interval` seconds
    - Skip empty and idle-filled (SPI) buffers
    - Survive read errors with a short back-off
    - Stop before the next read once stop() is called
    """

    ERROR_BACKOFF_S = 0.1

    def __init__(
        self,
        read: ReadFn,
        sink: SinkFn,
        interval: float = 1.0,
        idle_byte: Optional[int] = SPI_IDLE_BYTE,
        name: str = "nmea-poll",
    ):
        if interval < 0:
            raise ValueError("interval must be >= 0")

        self._read = read
        self._sink = sink
        self.interval = interval
        self.idle_byte = idle_byte
        self.name = name

        self.chunks_delivered = 0
        self.read_errors = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            if not self._stop_event.is_set():
                return
            # stop() timed out: let the old loop finish its last read
            self._thread.join()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=self.name,
            daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def restart(self, interval: Optional[float] = None):
        self.stop()
        if interval is not None:
            if interval < 0:
                raise ValueError("interval must be >= 0")
            self.interval = interval
        self.start()

    def poll_once(self) -> bool:
        """
        One read → sink step. Returns True if a chunk was delivered.
        """
        raw = self._read()
        if not raw:
            return False

        # Idle fill: receiver had nothing to send
        if self.idle_byte is not None and raw[0] == self.idle_byte:
            return False

        self.chunks_delivered += 1
        self._sink(raw)
        return True

    def _run(self):
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                self.read_errors += 1
                logger.warning("RX error: %s", e)
                self._stop_event.wait(self.ERROR_BACKOFF_S)
                continue

            if self.interval:
                self._stop_event.wait(self.interval)
