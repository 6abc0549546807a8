import pytest

from nmea_stream_bridge.protocol import compute_checksum
from nmea_stream_bridge.stream import NmeaStream

GGA = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47"
GSA = "$GPGSA,A,3,04,05,,09,12,,,24,,,,,2.5,1.3,2.1*39"
RMC = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"
GSV = "$GPGSV,2,1,08,01,40,083,46,02,17,308,41,12,07,344,39,14,22,228,45*75"
GGA_NO_FIX = "$GNGGA,,,,,,0,00,99.99,,,,,,*56"
GLGSV = "$GLGSV,1,1,02,65,10,120,,66,45,300,33*64"
PUBX = "$PUBX,00,123519*12"


def with_checksum(body):
    """GPGGA,...  ->  $GPGGA,...*CS"""
    return f"${body}*{compute_checksum(body):02X}"


class Collector:
    """Records (sender, record) pairs in arrival order."""

    def __init__(self):
        self.calls = []

    def __call__(self, sender, record):
        self.calls.append((sender, record))

    @property
    def records(self):
        return [record for _, record in self.calls]


@pytest.fixture
def collector():
    return Collector()


@pytest.fixture
def stream():
    return NmeaStream()
