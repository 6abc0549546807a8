# nmea_stream_bridge/protocol.py

from typing import List, Optional, Tuple

START_SENTINEL = "$"
FIELD_DELIMITER = ","
CHECKSUM_DELIMITER = "*"


class SentenceError(ValueError):
    """A complete sentence that cannot be turned into a record."""


# ======================================================
# CHECKSUM
# ======================================================

def compute_checksum(payload: str) -> int:
    """
    XOR checksum of payload (no $, no *).
    """
    cs = 0
    for c in payload:
        cs ^= ord(c)
    return cs


# ======================================================
# ENVELOPE
# ======================================================

def realign(line: str) -> str:
    """
    Trim line noise and resync on the last '$'.

    A sentence cut short by a receiver restart leaves its head in
    front of the next one: '$GPGGA,12$GPRMC,...' → '$GPRMC,...'
    """
    line = line.strip()
    start_idx = line.rfind(START_SENTINEL)
    if start_idx > 0:
        line = line[start_idx:]
    return line


def split_envelope(line: str) -> Tuple[str, Optional[str]]:
    """
    Split a trimmed sentence into (body, checksum trailer).

      $GPRMC,...*6A  ->  ("GPRMC,...", "6A")
      $GPRMC,...     ->  ("GPRMC,...", None)
    """
    if line.startswith(START_SENTINEL):
        line = line[1:]

    body, sep, cs_part = line.rpartition(CHECKSUM_DELIMITER)
    if not sep:
        return line, None
    return body, cs_part.strip()


def verify_checksum(body: str, cs_part: Optional[str]) -> None:
    """
    Raise SentenceError if a checksum trailer is present and wrong.
    """
    if cs_part is None:
        return

    try:
        received_cs = int(cs_part, 16)
    except ValueError:
        raise SentenceError(f"bad checksum trailer {cs_part!r}")

    calc_cs = compute_checksum(body)
    if calc_cs != received_cs:
        raise SentenceError(
            f"checksum mismatch: got {received_cs:02X}, expected {calc_cs:02X}"
        )


def header_of(body: str) -> str:
    """
    Header token of a sentence body: text up to the first field delimiter.
    """
    return body.split(FIELD_DELIMITER, 1)[0].strip().upper()


def talker_of(header: str) -> str:
    """
    Talker prefix of a 5-character header ('GPGGA' → 'GP').

    Proprietary headers ('PUBX', 'PMTK001') carry no talker.
    """
    if len(header) == 5 and not header.startswith("P"):
        return header[:2]
    return ""


def decode_fields(line: str, validate_checksum: bool = True) -> List[str]:
    """
    Decode a trimmed sentence into its comma separated tokens.

    Token 0 is the header (e.g. 'GPGGA').
    """
    body, cs_part = split_envelope(line)
    if validate_checksum:
        verify_checksum(body, cs_part)

    parts = body.split(FIELD_DELIMITER)
    parts[0] = parts[0].strip().upper()
    return parts


def split_sentences(line: str) -> List[str]:
    """
    Split a framed line on every '$' start sentinel.

      '$GPGGA,12$GPRMC,...'  →  ['$GPGGA,12', '$GPRMC,...']

    Noise before the first '$' is dropped; a line without any '$'
    is returned as a single message.
    """
    line = line.strip()
    start_idx = line.find(START_SENTINEL)
    if start_idx < 0:
        return [line] if line else []

    pieces = line[start_idx + 1:].split(START_SENTINEL)
    return [START_SENTINEL + piece.strip() for piece in pieces if piece.strip()]
