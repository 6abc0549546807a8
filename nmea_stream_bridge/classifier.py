# nmea_stream_bridge/classifier.py

from .protocol import header_of, realign, split_envelope, talker_of
from .sentences import SentenceType

KNOWN_TYPES = {
    "GGA": SentenceType.GGA,
    "GSA": SentenceType.GSA,
    "RMC": SentenceType.RMC,
    "GSV": SentenceType.GSV,
}


class SentenceClassifier:
    """
    Header-based sentence classification.

      $GPRMC,...  → RMC   (talker 'GP')
      $GNGGA,...  → GGA   (talker 'GN')
      $PUBX,...   → UNKNOWN
    """

    def header(self, message: str) -> str:
        line = realign(message)
        if not line:
            return ""
        body, _ = split_envelope(line)
        return header_of(body)

    def classify(self, message: str) -> SentenceType:
        header = self.header(message)

        if not talker_of(header):
            return SentenceType.UNKNOWN

        return KNOWN_TYPES.get(header[2:], SentenceType.UNKNOWN)

