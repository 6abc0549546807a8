import pytest

from nmea_stream_bridge.classifier import SentenceClassifier
from nmea_stream_bridge.sentences import SentenceType, SignalOrigin, signal_origin

from conftest import GGA, GGA_NO_FIX, GLGSV, GSA, GSV, PUBX, RMC


@pytest.fixture
def classifier():
    return SentenceClassifier()


@pytest.mark.parametrize("message, expected", [
    (GGA, SentenceType.GGA),
    (GSA, SentenceType.GSA),
    (RMC, SentenceType.RMC),
    (GSV, SentenceType.GSV),
    (GGA_NO_FIX, SentenceType.GGA),
    (GLGSV, SentenceType.GSV),
    (PUBX, SentenceType.UNKNOWN),
    ("$GPZDA,201530.00,04,07,2002,00,00*60", SentenceType.UNKNOWN),
    ("$PMTKGGA,1", SentenceType.UNKNOWN),
    ("noise without sentinel", SentenceType.UNKNOWN),
    ("", SentenceType.UNKNOWN),
    ("\r\n  ", SentenceType.UNKNOWN),
])
def test_classify(classifier, message, expected):
    assert classifier.classify(message) is expected


def test_classify_trims_and_realigns(classifier):
    assert classifier.classify("\r\n" + RMC + "\r") is SentenceType.RMC
    assert classifier.classify("\x00\x00" + RMC) is SentenceType.RMC


def test_header_without_fields(classifier):
    assert classifier.header("$GPGGA*56") == "GPGGA"
    assert classifier.classify("$GPGGA") is SentenceType.GGA


@pytest.mark.parametrize("talker, origin", [
    ("GP", SignalOrigin.GPS),
    ("GL", SignalOrigin.GLONASS),
    ("GA", SignalOrigin.GALILEO),
    ("GB", SignalOrigin.BEIDOU),
    ("BD", SignalOrigin.BEIDOU),
    ("GQ", SignalOrigin.QZSS),
    ("GN", SignalOrigin.MULTI),
    ("XX", SignalOrigin.UNKNOWN),
    ("", SignalOrigin.UNKNOWN),
])
def test_signal_origin(talker, origin):
    assert signal_origin(talker) is origin
