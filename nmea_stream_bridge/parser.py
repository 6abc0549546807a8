# nmea_stream_bridge/parser.py

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .protocol import SentenceError, decode_fields, realign, talker_of
from .sentences import (
    FixMode,
    FixQuality,
    GGARecord,
    GSARecord,
    GSVRecord,
    RMCRecord,
    SatelliteInfo,
    SentenceRecord,
    SentenceType,
    UnknownRecord,
    signal_origin,
)
from .utils import nmea_to_degrees

logger = logging.getLogger(__name__)


# ======================================================
# FIELD HELPERS
# ======================================================

def _opt(token: str) -> Optional[str]:
    token = token.strip()
    return token or None


def _float(token: str) -> Optional[float]:
    token = _opt(token)
    if token is None:
        return None
    try:
        return float(token)
    except ValueError:
        raise SentenceError(f"bad number {token!r}")


def _int(token: str) -> Optional[int]:
    token = _opt(token)
    if token is None:
        return None
    try:
        return int(token)
    except ValueError:
        raise SentenceError(f"bad integer {token!r}")


def _required(value, name: str):
    if value is None:
        raise SentenceError(f"missing {name}")
    return value


def _choice(token: str, allowed: str, name: str) -> Optional[str]:
    token = _opt(token)
    if token is None:
        return None
    token = token.upper()
    if len(token) != 1 or token not in allowed:
        raise SentenceError(f"bad {name} {token!r}")
    return token


def _coordinate(value: str, marker: str, allowed: str, name: str) -> Tuple[Optional[float], Optional[str]]:
    """
    (ddmm.mmmm, hemisphere) → (degrees, hemisphere), both or neither.
    """
    value = _opt(value)
    marker = _choice(marker, allowed, f"{name} hemisphere")

    if value is None and marker is None:
        return None, None
    if value is None or marker is None:
        raise SentenceError(f"incomplete {name}")

    try:
        return nmea_to_degrees(value), marker
    except ValueError:
        raise SentenceError(f"bad {name} {value!r}")


def _enum(enum_cls, value: Optional[int], name: str):
    value = _required(value, name)
    try:
        return enum_cls(value)
    except ValueError:
        raise SentenceError(f"bad {name} {value!r}")


# ======================================================
# PARSER
# ======================================================

class SentenceParser:
    """
    Per-type field extraction.

    parse() returns a typed record, or None when the sentence is
    malformed (checksum, arity, numeric or enum failure). Failures
    are local to the sentence.
    """

    MIN_FIELDS = {
        SentenceType.GGA: 15,
        SentenceType.GSA: 18,
        SentenceType.RMC: 12,
        SentenceType.GSV: 4,
        SentenceType.UNKNOWN: 1,
    }

    def __init__(self, validate_checksum: bool = True):
        self.validate_checksum = validate_checksum

        self._handlers: Dict[SentenceType, Callable[..., SentenceRecord]] = {
            SentenceType.GGA: self._parse_gga,
            SentenceType.GSA: self._parse_gsa,
            SentenceType.RMC: self._parse_rmc,
            SentenceType.GSV: self._parse_gsv,
            SentenceType.UNKNOWN: self._parse_unknown,
        }

    def parse(self, message: str, sentence_type: SentenceType) -> Optional[SentenceRecord]:
        line = realign(message)
        if not line:
            return None

        try:
            parts = decode_fields(line, self.validate_checksum)
            if len(parts) < self.MIN_FIELDS[sentence_type]:
                raise SentenceError(
                    f"{len(parts)} fields, {sentence_type.value} needs "
                    f"{self.MIN_FIELDS[sentence_type]}"
                )

            header = parts[0]
            talker = talker_of(header)
            return self._handlers[sentence_type](
                parts,
                talker=talker,
                signal_origin=signal_origin(talker),
                raw=line,
            )
        except SentenceError as e:
            logger.debug("Discarded %s sentence %r: %s", sentence_type.value, line, e)
            return None

    # --------------------------------------------------

    def _parse_gga(self, parts: List[str], **common) -> GGARecord:
        latitude, lat_hemi = _coordinate(parts[2], parts[3], "NS", "latitude")
        longitude, lon_hemi = _coordinate(parts[4], parts[5], "EW", "longitude")

        return GGARecord(
            utc_time=_opt(parts[1]),
            latitude=latitude,
            latitude_hemisphere=lat_hemi,
            longitude=longitude,
            longitude_position=lon_hemi,
            fix_quality=_enum(FixQuality, _int(parts[6]), "fix quality"),
            satellites_in_use=_int(parts[7]),
            hdop=_float(parts[8]),
            altitude=_float(parts[9]),
            altitude_units=_opt(parts[10]),
            geoid_separation=_float(parts[11]),
            geoid_separation_units=_opt(parts[12]),
            dgps_age=_float(parts[13]),
            dgps_station_id=_opt(parts[14]),
            **common,
        )

    def _parse_gsa(self, parts: List[str], **common) -> GSARecord:
        prns = tuple(
            prn for prn in (_int(token) for token in parts[3:15])
            if prn is not None
        )

        return GSARecord(
            auto_2d3d=_required(_choice(parts[1], "AM", "selection mode"), "selection mode"),
            fix_mode=_enum(FixMode, _int(parts[2]), "fix mode"),
            satellite_prns=prns,
            pdop=_float(parts[15]),
            hdop=_float(parts[16]),
            vdop=_float(parts[17]),
            **common,
        )

    def _parse_rmc(self, parts: List[str], **common) -> RMCRecord:
        latitude, lat_hemi = _coordinate(parts[3], parts[4], "NS", "latitude")
        longitude, lon_hemi = _coordinate(parts[5], parts[6], "EW", "longitude")

        return RMCRecord(
            utc_time=_opt(parts[1]),
            status=_required(_choice(parts[2], "AV", "status"), "status"),
            latitude=latitude,
            latitude_hemisphere=lat_hemi,
            longitude=longitude,
            longitude_position=lon_hemi,
            speed_knots=_float(parts[7]),
            course=_float(parts[8]),
            date=_opt(parts[9]),
            magnetic_variation=_float(parts[10]),
            variation_direction=_choice(parts[11], "EW", "variation direction"),
            mode=_opt(parts[12]) if len(parts) > 12 else None,
            **common,
        )

    def _parse_gsv(self, parts: List[str], **common) -> GSVRecord:
        total = _required(_int(parts[1]), "number of messages")
        number = _required(_int(parts[2]), "message number")
        if total < 1 or not 1 <= number <= total:
            raise SentenceError(f"bad sequence {number}/{total}")

        satellites = []
        # 4 fields per satellite; a trailing NMEA 4.1 signal id is ignored
        for idx in range(4, len(parts) - 3, 4):
            prn = _int(parts[idx])
            if prn is None:
                continue
            satellites.append(SatelliteInfo(
                prn=prn,
                elevation=_int(parts[idx + 1]),
                azimuth=_int(parts[idx + 2]),
                snr=_int(parts[idx + 3]),
            ))

        return GSVRecord(
            number_of_messages=total,
            message_number=number,
            satellites_in_view=_int(parts[3]),
            satellites=tuple(satellites),
            **common,
        )

    def _parse_unknown(self, parts: List[str], **common) -> UnknownRecord:
        return UnknownRecord(
            header=parts[0],
            fields=tuple(parts[1:]),
            **common,
        )
